"""
Attribute and schema-definition validation

Three pure operations over a TypeSchema:

- ``validate_attributes`` judges an attribute payload against a schema
- ``validate_definition`` judges a schema before it is saved
- ``apply_defaults`` fills absent attributes from declared defaults

None of them touch shared state. SchemaValidator bundles them for injection
into services and request handlers.
"""
import copy
import json
from typing import Any, Dict, Mapping, Optional, Tuple, Union

from .models import TypeSchema
from .results import ValidationError, ValidationResult
from .rules import evaluate_rules
from .type_checks import AttributeType, check_type

Payload = Union[None, str, bytes, Mapping[str, Any]]

MALFORMED_PAYLOAD_MESSAGE = "Invalid JSON in attributes"

# Sentinel for undecodable JSON, distinct from a decoded null
_MALFORMED = object()


def parse_payload(payload: Payload) -> Tuple[Optional[Dict[str, Any]], Optional[ValidationError]]:
    """
    Turn a raw payload into a dict.

    Accepts a mapping, or JSON text that decodes to an object. Empty input and
    JSON ``null`` mean "no attributes". Anything else is malformed and comes
    back as a single error.
    """
    if payload is None:
        return {}, None
    if isinstance(payload, Mapping):
        return dict(payload), None

    if isinstance(payload, (str, bytes)):
        text = payload.decode("utf-8", errors="replace") if isinstance(payload, bytes) else payload
        if not text.strip():
            return {}, None
        try:
            decoded = json.loads(text)
        except ValueError:
            decoded = _MALFORMED
        if decoded is None:
            return {}, None
        if isinstance(decoded, dict):
            return decoded, None

    return None, ValidationError(field="attributes", value=payload, message=MALFORMED_PAYLOAD_MESSAGE)


def validate_attributes(payload: Payload, schema: TypeSchema) -> ValidationResult:
    """
    Validate an attribute payload against a schema.

    Errors follow schema declaration order. A type mismatch stops rule
    evaluation for that attribute only. Keys the schema does not declare
    become warnings, in payload key order, after all errors.
    """
    result = ValidationResult()

    data, malformed = parse_payload(payload)
    if malformed is not None:
        result.add_error(malformed)
        return result

    for attribute in schema.attributes:
        if attribute.name not in data:
            if attribute.required:
                result.add_error(ValidationError(
                    field=attribute.name,
                    value=None,
                    message=f"Required attribute '{attribute.name}' is missing",
                ))
            continue

        value = data[attribute.name]
        type_error = check_type(attribute.name, value, attribute.type)
        if type_error is not None:
            result.add_error(type_error)
            continue

        for error in evaluate_rules(attribute.name, value, attribute.rules):
            result.add_error(error)

    declared = set(schema.attribute_names)
    for key, value in data.items():
        if key not in declared:
            result.add_warning(ValidationError(
                field=key,
                value=value,
                message=f"Attribute '{key}' is not defined in schema",
            ))

    return result


def validate_definition(schema: TypeSchema) -> ValidationResult:
    """Check a schema definition itself; every problem is collected"""
    result = ValidationResult()

    if not schema.name or not schema.name.strip():
        result.add_error(ValidationError(field="name", value=schema.name, message="Schema name cannot be empty"))

    seen = set()
    for index, attribute in enumerate(schema.attributes):
        prefix = f"attributes[{index}]"

        if not attribute.name or not attribute.name.strip():
            result.add_error(ValidationError(
                field=f"{prefix}.name",
                value=attribute.name,
                message="Attribute name cannot be empty",
            ))

        if attribute.name in seen:
            result.add_error(ValidationError(
                field=f"{prefix}.name",
                value=attribute.name,
                message=f"Duplicate attribute name: {attribute.name}",
            ))
        seen.add(attribute.name)

        if AttributeType.parse(attribute.type) is None:
            result.add_error(ValidationError(
                field=f"{prefix}.type",
                value=attribute.type,
                message=f"Invalid attribute type: {attribute.type}",
            ))
            continue

        # Defaults are type-checked only; constraint rules do not apply
        if attribute.has_default:
            default_error = check_type("default", attribute.default, attribute.type)
            if default_error is not None:
                result.add_error(ValidationError(
                    field=f"{prefix}.default",
                    value=attribute.default,
                    message=f"Default value type mismatch: {default_error.message}",
                ))

    return result


def apply_defaults(payload: Mapping[str, Any], schema: TypeSchema) -> Dict[str, Any]:
    """
    Return a copy of ``payload`` with declared defaults filled in.

    Present values are never replaced, even invalid ones. Applying twice gives
    the same result as applying once.
    """
    result = dict(payload or {})
    for attribute in schema.attributes:
        if attribute.name not in result and attribute.has_default:
            result[attribute.name] = copy.deepcopy(attribute.default)
    return result


class SchemaValidator:
    """
    Stateless facade over the validation functions.

    Holds no data, so one instance can be shared by every request.
    """

    def validate(self, payload: Payload, schema: TypeSchema) -> ValidationResult:
        return validate_attributes(payload, schema)

    def validate_definition(self, schema: TypeSchema) -> ValidationResult:
        return validate_definition(schema)

    def apply_defaults(self, payload: Mapping[str, Any], schema: TypeSchema) -> Dict[str, Any]:
        return apply_defaults(payload, schema)

    def parse_payload(self, payload: Payload):
        return parse_payload(payload)
