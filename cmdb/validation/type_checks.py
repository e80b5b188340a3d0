"""
Type checks for attribute values

Each AttributeType maps to one checker. Values come straight from JSON
decoding, so the checks work on plain Python types (str, int, float, bool,
list, dict, None).
"""
import re
from datetime import datetime
from enum import Enum
from numbers import Real
from typing import Any, Callable, Dict, Optional

from .results import ValidationError


class AttributeType(str, Enum):
    """The closed set of attribute value types a schema can declare"""
    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    DATE = "date"
    ARRAY = "array"
    OBJECT = "object"

    @classmethod
    def parse(cls, name: Any) -> Optional["AttributeType"]:
        try:
            return cls(name)
        except ValueError:
            return None


# RFC 3339 first, then the fallback layouts in priority order
RFC3339_FORMATS = (
    "%Y-%m-%dT%H:%M:%S%z",
    "%Y-%m-%dT%H:%M:%S.%f%z",
)

FALLBACK_DATE_FORMATS = (
    "%Y-%m-%d",      # 2006-01-02
    "%Y/%m/%d",      # 2006/01/02
    "%m-%d-%Y",      # 01-02-2006
    "%m/%d/%Y",      # 01/02/2006
    "%B %d, %Y",     # January 2, 2006
)

# strptime %f takes at most six digits; RFC 3339 allows any precision
_EXCESS_FRACTION = re.compile(r"(\.\d{6})\d+")


def describe_type(value: Any) -> str:
    """JSON-flavoured name of a value's runtime type, for error messages"""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if is_number(value):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, (list, tuple)):
        return "array"
    if isinstance(value, dict):
        return "object"
    return type(value).__name__


def is_number(value: Any) -> bool:
    # bool is an int subclass but never a number here
    return isinstance(value, Real) and not isinstance(value, bool)


def parse_date(value: str) -> Optional[datetime]:
    """
    Parse a date string as RFC 3339, else with the fallback layouts.

    First successful parse wins. Returns None when nothing matches.
    """
    rfc3339_value = _EXCESS_FRACTION.sub(r"\1", value, count=1)
    for fmt in RFC3339_FORMATS:
        try:
            return datetime.strptime(rfc3339_value, fmt)
        except ValueError:
            continue

    for fmt in FALLBACK_DATE_FORMATS:
        try:
            return datetime.strptime(value, fmt)
        except ValueError:
            continue
    return None


def _check_string(field: str, value: Any) -> Optional[ValidationError]:
    if not isinstance(value, str):
        return ValidationError(field=field, value=value, message=f"Expected string, got {describe_type(value)}")
    return None


def _check_number(field: str, value: Any) -> Optional[ValidationError]:
    if not is_number(value):
        return ValidationError(field=field, value=value, message=f"Expected number, got {describe_type(value)}")
    return None


def _check_boolean(field: str, value: Any) -> Optional[ValidationError]:
    if not isinstance(value, bool):
        return ValidationError(field=field, value=value, message=f"Expected boolean, got {describe_type(value)}")
    return None


def _check_date(field: str, value: Any) -> Optional[ValidationError]:
    if not isinstance(value, str):
        return ValidationError(field=field, value=value, message=f"Expected date string, got {describe_type(value)}")
    if parse_date(value) is None:
        return ValidationError(
            field=field,
            value=value,
            message="Invalid date format, expected ISO 8601 or common date format"
        )
    return None


def _check_array(field: str, value: Any) -> Optional[ValidationError]:
    if not isinstance(value, (list, tuple)):
        return ValidationError(field=field, value=value, message=f"Expected array, got {describe_type(value)}")
    return None


def _check_object(field: str, value: Any) -> Optional[ValidationError]:
    if not isinstance(value, dict):
        return ValidationError(field=field, value=value, message=f"Expected object, got {describe_type(value)}")
    return None


TYPE_CHECKERS: Dict[AttributeType, Callable[[str, Any], Optional[ValidationError]]] = {
    AttributeType.STRING: _check_string,
    AttributeType.NUMBER: _check_number,
    AttributeType.BOOLEAN: _check_boolean,
    AttributeType.DATE: _check_date,
    AttributeType.ARRAY: _check_array,
    AttributeType.OBJECT: _check_object,
}


def check_type(field: str, value: Any, expected_type: str) -> Optional[ValidationError]:
    """
    Check that ``value`` matches ``expected_type``.

    An unknown type name is reported as an error too: it means the schema is
    corrupt, not that the payload is wrong.
    """
    attr_type = AttributeType.parse(expected_type)
    if attr_type is None:
        return ValidationError(field=field, value=value, message=f"Unknown type: {expected_type}")
    return TYPE_CHECKERS[attr_type](field, value)
