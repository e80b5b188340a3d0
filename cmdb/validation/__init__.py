"""
Runtime schema validation for CI and relationship attributes
"""
from .models import AttributeDefinition, TypeSchema
from .results import ValidationError, ValidationResult
from .rules import ConstraintRule, RuleKind, parse_rules
from .type_checks import AttributeType, check_type
from .validator import (
    SchemaValidator,
    apply_defaults,
    parse_payload,
    validate_attributes,
    validate_definition,
)

__all__ = [
    # Data model
    'AttributeType',
    'AttributeDefinition',
    'TypeSchema',
    'ValidationError',
    'ValidationResult',

    # Constraint rules
    'ConstraintRule',
    'RuleKind',
    'parse_rules',

    # Operations
    'check_type',
    'parse_payload',
    'validate_attributes',
    'validate_definition',
    'apply_defaults',
    'SchemaValidator',
]
