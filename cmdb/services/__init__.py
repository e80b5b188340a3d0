"""
CMDB services: write orchestration, schema management, integrity and audit
"""
from .audit import AuditAction, AuditEntity, record_audit
from .ci_service import CIService
from .exceptions import (
    AttributeValidationFailed,
    CMDBError,
    EntityNotFound,
    InvalidRelationship,
    RelationshipIntegrityConflict,
    SchemaDefinitionInvalid,
    SchemaNameConflict,
    SchemaNotFound,
)
from .integrity import would_conflict
from .relationship_service import RelationshipService
from .schema_service import SchemaKind, SchemaService
from .templates import CI_TYPE_TEMPLATES, RELATIONSHIP_TYPE_TEMPLATES, clone_template

__all__ = [
    # Orchestrators
    'CIService',
    'RelationshipService',
    'SchemaService',
    'SchemaKind',
    # Integrity
    'would_conflict',
    # Templates
    'CI_TYPE_TEMPLATES',
    'RELATIONSHIP_TYPE_TEMPLATES',
    'clone_template',
    # Audit
    'AuditAction',
    'AuditEntity',
    'record_audit',
    # Exceptions
    'CMDBError',
    'EntityNotFound',
    'SchemaNotFound',
    'SchemaNameConflict',
    'SchemaDefinitionInvalid',
    'AttributeValidationFailed',
    'RelationshipIntegrityConflict',
    'InvalidRelationship',
]
