"""
Constraint rules for attribute values

An attribute definition carries an open ``validation`` map of rule name to
parameter, e.g. ``{"min": 1, "format": "ipv4"}``. The map is parsed once into
a tuple of ConstraintRule values when the definition is built. Unknown rule
names and parameters of the wrong shape are dropped at parse time, so they
pass silently at validation time.

Every rule is evaluated independently against the value: one attribute can
collect several errors in a single pass.
"""
import re
from dataclasses import dataclass
from enum import Enum
from numbers import Real
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

from .results import ValidationError
from .type_checks import is_number


class RuleKind(str, Enum):
    """Known constraint rule names"""
    MIN = "min"
    MAX = "max"
    MIN_LENGTH = "minLength"
    MAX_LENGTH = "maxLength"
    PATTERN = "pattern"
    FORMAT = "format"
    ENUM = "enum"


# Fixed expressions for the ``format`` rule. Names not listed here pass.
FORMAT_PATTERNS: Dict[str, "re.Pattern[str]"] = {
    "email": re.compile(r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$"),
    "ipv4": re.compile(
        r"^(?:(?:25[0-5]|2[0-4][0-9]|[01]?[0-9][0-9]?)\.){3}"
        r"(?:25[0-5]|2[0-4][0-9]|[01]?[0-9][0-9]?)$"
    ),
    "url": re.compile(r"^https?://[^\s/$.?#].[^\s]*$"),
}

FORMAT_MESSAGES = {
    "email": "Value must be a valid email address",
    "ipv4": "Value must be a valid ipv4 address",
    "url": "Value must be a valid url",
}


@dataclass(frozen=True)
class ConstraintRule:
    """One parsed entry of an attribute's validation map"""
    kind: RuleKind
    param: Any


def to_number(value: Any) -> Optional[Real]:
    """
    Numeric coercion used by ``min``/``max``.

    Integers, floats and numeric strings are all accepted, so a weakly typed
    JSON producer that sends "8" still gets range-checked. Numbers are
    returned unchanged: ints of any size compare exactly against float bounds.
    """
    if is_number(value):
        return value
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return None
    return None


def _accepts_param(kind: RuleKind, param: Any) -> bool:
    if kind in (RuleKind.MIN, RuleKind.MAX, RuleKind.MIN_LENGTH, RuleKind.MAX_LENGTH):
        return is_number(param)
    if kind in (RuleKind.PATTERN, RuleKind.FORMAT):
        return isinstance(param, str)
    if kind is RuleKind.ENUM:
        return isinstance(param, (list, tuple))
    return False


def parse_rules(validation: Optional[Mapping[str, Any]]) -> Tuple[ConstraintRule, ...]:
    """Parse a raw validation map, keeping only recognised, well-formed rules"""
    if not validation:
        return ()

    rules: List[ConstraintRule] = []
    for name, param in validation.items():
        try:
            kind = RuleKind(name)
        except ValueError:
            continue
        if not _accepts_param(kind, param):
            continue
        rules.append(ConstraintRule(kind=kind, param=param))
    return tuple(rules)


def json_equal(left: Any, right: Any) -> bool:
    """
    Deep equality with JSON semantics.

    Booleans never equal numbers (``True != 1``), while ``1 == 1.0`` holds.
    """
    if isinstance(left, bool) or isinstance(right, bool):
        return isinstance(left, bool) and isinstance(right, bool) and left == right
    if isinstance(left, dict) and isinstance(right, dict):
        return left.keys() == right.keys() and all(json_equal(left[k], right[k]) for k in left)
    if isinstance(left, (list, tuple)) and isinstance(right, (list, tuple)):
        return len(left) == len(right) and all(json_equal(a, b) for a, b in zip(left, right))
    if is_number(left) and is_number(right):
        return left == right
    return type(left) is type(right) and left == right


def _format_bound(param: Any) -> str:
    try:
        return f"{param:f}"
    except OverflowError:
        return str(param)


def _format_enum(values) -> str:
    return ", ".join(str(v) for v in values)


def _check_min(field: str, value: Any, param: Any) -> Optional[ValidationError]:
    number = to_number(value)
    if number is not None and number < param:
        return ValidationError(field=field, value=value, message=f"Value must be at least {_format_bound(param)}", rule="min")
    return None


def _check_max(field: str, value: Any, param: Any) -> Optional[ValidationError]:
    number = to_number(value)
    if number is not None and number > param:
        return ValidationError(field=field, value=value, message=f"Value must be at most {_format_bound(param)}", rule="max")
    return None


def _check_min_length(field: str, value: Any, param: Any) -> Optional[ValidationError]:
    if isinstance(value, str) and len(value) < int(param):
        return ValidationError(
            field=field,
            value=value,
            message=f"Value must be at least {int(param)} characters long",
            rule="minLength"
        )
    return None


def _check_max_length(field: str, value: Any, param: Any) -> Optional[ValidationError]:
    if isinstance(value, str) and len(value) > int(param):
        return ValidationError(
            field=field,
            value=value,
            message=f"Value must be at most {int(param)} characters long",
            rule="maxLength"
        )
    return None


def _check_pattern(field: str, value: Any, param: Any) -> Optional[ValidationError]:
    if not isinstance(value, str):
        return None
    try:
        compiled = re.compile(param)
    except re.error:
        return ValidationError(
            field=field,
            value=value,
            message=f"Invalid pattern in validation rule: {param}",
            rule="pattern"
        )
    if not compiled.search(value):
        return ValidationError(field=field, value=value, message=f"Value does not match pattern: {param}", rule="pattern")
    return None


def _check_format(field: str, value: Any, param: Any) -> Optional[ValidationError]:
    if not isinstance(value, str):
        return None
    expression = FORMAT_PATTERNS.get(param)
    if expression is None:
        # Unrecognised format names pass
        return None
    if not expression.fullmatch(value):
        return ValidationError(field=field, value=value, message=FORMAT_MESSAGES[param], rule="format")
    return None


def _check_enum(field: str, value: Any, param: Any) -> Optional[ValidationError]:
    if any(json_equal(value, allowed) for allowed in param):
        return None
    return ValidationError(
        field=field,
        value=value,
        message=f"Value must be one of: {_format_enum(param)}",
        rule="enum"
    )


RULE_CHECKERS: Dict[RuleKind, Callable[[str, Any, Any], Optional[ValidationError]]] = {
    RuleKind.MIN: _check_min,
    RuleKind.MAX: _check_max,
    RuleKind.MIN_LENGTH: _check_min_length,
    RuleKind.MAX_LENGTH: _check_max_length,
    RuleKind.PATTERN: _check_pattern,
    RuleKind.FORMAT: _check_format,
    RuleKind.ENUM: _check_enum,
}


def evaluate_rules(field: str, value: Any, rules: Tuple[ConstraintRule, ...]) -> List[ValidationError]:
    """Run every rule against ``value`` and collect all failures in rule order"""
    errors = []
    for rule in rules:
        error = RULE_CHECKERS[rule.kind](field, value, rule.param)
        if error is not None:
            errors.append(error)
    return errors
