"""
Domain exceptions for CMDB writes

Every failure the services raise derives from CMDBError. None of them are
transient, so nothing here is retried; the HTTP layer maps each class to a
status code.

Usage:
    from cmdb.services.exceptions import (
        CMDBError,
        SchemaNotFound,
        AttributeValidationFailed,
    )
"""
from typing import Any, Dict, Optional

from ..validation import ValidationResult


class CMDBError(Exception):
    """Base exception for all CMDB service operations"""

    error_code = "cmdb_error"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(message={self.message})"


class EntityNotFound(CMDBError):
    """A CI or relationship does not exist (or was soft-deleted)"""

    error_code = "not_found"

    def __init__(self, entity: str, entity_id: str):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} not found", details={"id": entity_id})


class SchemaNotFound(CMDBError):
    """No active schema resolves for the requested type name or id"""

    error_code = "schema_not_found"

    def __init__(self, kind: str, reference: str):
        self.kind = kind
        self.reference = reference
        super().__init__(f"{kind} schema '{reference}' not found", details={"kind": kind, "reference": reference})


class SchemaNameConflict(CMDBError):
    """An active schema of the same kind already uses the name"""

    error_code = "schema_name_conflict"

    def __init__(self, kind: str, name: str):
        self.kind = kind
        self.name = name
        super().__init__(f"{kind} schema '{name}' already exists", details={"kind": kind, "name": name})


class InvalidRelationship(CMDBError):
    """A relationship request that is structurally wrong, e.g. a self-reference"""

    error_code = "invalid_relationship"


class RelationshipIntegrityConflict(CMDBError):
    """The relationship would directly contradict an existing reverse edge"""

    error_code = "integrity_conflict"
    MESSAGE = "Circular dependency detected"

    def __init__(self, source_id: str, target_id: str, relationship_type: str):
        super().__init__(
            self.MESSAGE,
            details={"source_ci_id": source_id, "target_ci_id": target_id, "type": relationship_type},
        )


class _ResultCarryingError(CMDBError):
    """Carries the complete ValidationResult that caused the rejection"""

    def __init__(self, message: str, result: ValidationResult):
        self.result = result
        super().__init__(message)


class SchemaDefinitionInvalid(_ResultCarryingError):
    """A schema definition failed definition checks"""

    error_code = "invalid_schema"

    def __init__(self, result: ValidationResult):
        super().__init__("Schema definition validation failed", result)


class AttributeValidationFailed(_ResultCarryingError):
    """An attribute payload failed validation against its schema"""

    error_code = "validation_failed"

    def __init__(self, result: ValidationResult):
        super().__init__("Attribute validation failed", result)
