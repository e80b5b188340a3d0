"""
Relationship writes and queries

Create runs:

    check endpoints -> resolve schema -> integrity check -> validate -> apply defaults -> persist

Any stage can reject the write; nothing is stored until every stage passed.
"""
from datetime import datetime
from typing import Any, Dict, Optional, Tuple

from sqlalchemy.orm import Session

from ..database.models import CIRelationship, ConfigurationItem
from ..database.utils import transaction
from ..utils.logger import setup_logger
from ..validation import SchemaValidator, ValidationResult
from .audit import AuditAction, AuditEntity, record_audit
from .ci_service import validate_against_schema
from .exceptions import (
    AttributeValidationFailed,
    EntityNotFound,
    InvalidRelationship,
    RelationshipIntegrityConflict,
)
from .integrity import would_conflict
from .schema_service import SchemaKind, SchemaService

logger = setup_logger(__name__)

RELATIONSHIP_FIELDS = ("type", "description", "is_active")


class RelationshipService:
    """Write orchestrator and queries for CI relationships"""

    def __init__(
        self,
        db: Session,
        validator: Optional[SchemaValidator] = None,
        schemas: Optional[SchemaService] = None
    ):
        self.db = db
        self.validator = validator or SchemaValidator()
        self.schemas = schemas or SchemaService(db, self.validator)

    def _require_ci(self, ci_id: str, role: str) -> ConfigurationItem:
        ci = (
            self.db.query(ConfigurationItem)
            .filter(ConfigurationItem.id == ci_id, ConfigurationItem.is_deleted.is_(False))
            .first()
        )
        if ci is None:
            raise EntityNotFound(f"{role} CI", ci_id)
        return ci

    def _check_integrity(self, source_id: str, target_id: str, relationship_type: str) -> None:
        if would_conflict(self.db, source_id, target_id, relationship_type):
            logger.warning(
                f"Rejected relationship {source_id} -[{relationship_type}]-> {target_id}: reverse edge exists"
            )
            raise RelationshipIntegrityConflict(source_id, target_id, relationship_type)

    def get(self, relationship_id: str) -> CIRelationship:
        relationship = self.db.get(CIRelationship, relationship_id)
        if relationship is None:
            raise EntityNotFound("Relationship", relationship_id)
        return relationship

    def create(self, data: Dict[str, Any], user: Optional[str] = None) -> Tuple[CIRelationship, ValidationResult]:
        """
        Create a relationship between two existing CIs.

        Raises:
            EntityNotFound: source or target CI does not exist
            InvalidRelationship: source and target are the same CI
            SchemaNotFound: no active relationship-type schema for ``data["type"]``
            RelationshipIntegrityConflict: the reverse edge of the same type exists
            AttributeValidationFailed: the payload has errors
        """
        source_id = data["source_ci_id"]
        target_id = data["target_ci_id"]
        relationship_type = data["type"]

        self._require_ci(source_id, "Source")
        self._require_ci(target_id, "Target")
        if source_id == target_id:
            raise InvalidRelationship("Source and target CI cannot be the same", details={"ci_id": source_id})

        schema = self.schemas.resolve(SchemaKind.RELATIONSHIP_TYPE, relationship_type)
        self._check_integrity(source_id, target_id, relationship_type)

        try:
            attributes, result = validate_against_schema(self.validator, data.get("attributes"), schema)
        except AttributeValidationFailed as e:
            logger.warning(
                f"Rejected relationship attributes for type '{relationship_type}': {len(e.result.errors)} error(s)"
            )
            raise

        relationship = CIRelationship(
            source_ci_id=source_id,
            target_ci_id=target_id,
            type=relationship_type,
            description=data.get("description"),
            attributes=attributes,
            created_by=user,
            updated_by=user,
        )
        with transaction(self.db):
            self.db.add(relationship)
            self.db.flush()
            record_audit(
                self.db, AuditEntity.RELATIONSHIP, relationship.id, AuditAction.CREATE,
                changed_by=user,
                details={"source_ci_id": source_id, "target_ci_id": target_id, "type": relationship_type},
            )

        logger.info(f"Created relationship {source_id} -[{relationship_type}]-> {target_id} ({relationship.id})")
        return relationship, result

    def update(
        self,
        relationship_id: str,
        changes: Dict[str, Any],
        user: Optional[str] = None
    ) -> Tuple[CIRelationship, ValidationResult]:
        """
        Merge caller-supplied fields and re-run validation.

        The integrity check runs again when the type changes or when an
        inactive relationship is reactivated.
        """
        relationship = self.get(relationship_id)

        relationship_type = changes.get("type") or relationship.type
        schema = self.schemas.resolve(SchemaKind.RELATIONSHIP_TYPE, relationship_type)
        reactivating = changes.get("is_active") is True and not relationship.is_active
        if relationship_type != relationship.type or reactivating:
            self._check_integrity(relationship.source_ci_id, relationship.target_ci_id, relationship_type)

        payload = changes["attributes"] if "attributes" in changes else relationship.attributes
        try:
            attributes, result = validate_against_schema(self.validator, payload, schema)
        except AttributeValidationFailed as e:
            logger.warning(f"Rejected relationship update {relationship_id}: {len(e.result.errors)} error(s)")
            raise

        with transaction(self.db):
            for field in RELATIONSHIP_FIELDS:
                if field in changes and changes[field] is not None:
                    setattr(relationship, field, changes[field])
            relationship.attributes = attributes
            relationship.updated_by = user
            relationship.updated_at = datetime.utcnow()
            record_audit(
                self.db, AuditEntity.RELATIONSHIP, relationship.id, AuditAction.UPDATE,
                changed_by=user, details={"fields": sorted(changes)},
            )

        logger.info(f"Updated relationship {relationship.id}")
        return relationship, result

    def delete(self, relationship_id: str, user: Optional[str] = None) -> None:
        """Hard delete"""
        relationship = self.get(relationship_id)

        with transaction(self.db):
            record_audit(
                self.db, AuditEntity.RELATIONSHIP, relationship.id, AuditAction.DELETE,
                changed_by=user,
                details={
                    "source_ci_id": relationship.source_ci_id,
                    "target_ci_id": relationship.target_ci_id,
                    "type": relationship.type,
                },
            )
            self.db.delete(relationship)

        logger.info(f"Deleted relationship {relationship_id}")
