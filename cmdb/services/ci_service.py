"""
Configuration item writes and queries

Create and update run one pipeline:

    resolve schema -> validate attributes -> apply defaults -> persist

Validation sees the caller's payload as sent, so "required" means supplied
by the caller. Defaults only shape what is stored.
"""
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import or_
from sqlalchemy.orm import Session

from ..database.models import CIRelationship, ConfigurationItem
from ..database.utils import paginate, transaction
from ..utils.logger import setup_logger
from ..utils.pagination import PaginationParams
from ..validation import SchemaValidator, TypeSchema, ValidationResult
from .audit import AuditAction, AuditEntity, record_audit
from .exceptions import AttributeValidationFailed, EntityNotFound
from .schema_service import SchemaKind, SchemaService

logger = setup_logger(__name__)

# Columns the list endpoint may sort by
SORTABLE_FIELDS = {
    "name": ConfigurationItem.name,
    "type": ConfigurationItem.type,
    "status": ConfigurationItem.status,
    "criticality": ConfigurationItem.criticality,
    "owner": ConfigurationItem.owner,
    "location": ConfigurationItem.location,
    "created_at": ConfigurationItem.created_at,
    "updated_at": ConfigurationItem.updated_at,
}

# Scalar columns a caller may set directly
CI_FIELDS = (
    "name",
    "type",
    "description",
    "status",
    "criticality",
    "owner",
    "location",
    "tags",
    "install_date",
    "warranty_expiry",
    "last_updated",
    "last_scanned",
)


def validate_against_schema(
    validator: SchemaValidator,
    payload: Any,
    schema: TypeSchema
) -> Tuple[Dict[str, Any], ValidationResult]:
    """
    Validate ``payload`` and return the defaulted attributes to store.

    Raises:
        AttributeValidationFailed: with the complete result, when any error was found
    """
    result = validator.validate(payload, schema)
    if not result.is_valid:
        raise AttributeValidationFailed(result)

    data, _ = validator.parse_payload(payload)
    return validator.apply_defaults(data, schema), result


class CIService:
    """Write orchestrator and queries for configuration items"""

    def __init__(
        self,
        db: Session,
        validator: Optional[SchemaValidator] = None,
        schemas: Optional[SchemaService] = None
    ):
        self.db = db
        self.validator = validator or SchemaValidator()
        self.schemas = schemas or SchemaService(db, self.validator)

    def _validate(self, payload: Any, ci_type: str) -> Tuple[Dict[str, Any], ValidationResult]:
        schema = self.schemas.resolve(SchemaKind.CI_TYPE, ci_type)
        try:
            return validate_against_schema(self.validator, payload, schema)
        except AttributeValidationFailed as e:
            logger.warning(f"Rejected CI attributes for type '{ci_type}': {len(e.result.errors)} error(s)")
            raise

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get(self, ci_id: str) -> ConfigurationItem:
        ci = (
            self.db.query(ConfigurationItem)
            .filter(ConfigurationItem.id == ci_id, ConfigurationItem.is_deleted.is_(False))
            .first()
        )
        if ci is None:
            raise EntityNotFound("Configuration item", ci_id)
        return ci

    def list(
        self,
        pagination: PaginationParams,
        search: Optional[str] = None,
        filters: Optional[Dict[str, Optional[str]]] = None,
        sort_by: Optional[str] = None,
        sort_order: str = "desc"
    ) -> Tuple[List[ConfigurationItem], int]:
        """
        Page through CIs that are not soft-deleted.

        ``filters`` maps a column name (type, status, criticality, owner,
        location) to an exact value. ``search`` is a case-insensitive
        substring match over name, type, description, owner and location.
        Unknown ``sort_by`` values fall back to newest first.
        """
        query = self.db.query(ConfigurationItem).filter(ConfigurationItem.is_deleted.is_(False))

        for column, value in (filters or {}).items():
            if value:
                query = query.filter(getattr(ConfigurationItem, column) == value)

        if search:
            pattern = f"%{search}%"
            query = query.filter(or_(
                ConfigurationItem.name.ilike(pattern),
                ConfigurationItem.type.ilike(pattern),
                ConfigurationItem.description.ilike(pattern),
                ConfigurationItem.owner.ilike(pattern),
                ConfigurationItem.location.ilike(pattern),
            ))

        column = SORTABLE_FIELDS.get(sort_by)
        if column is None:
            query = query.order_by(ConfigurationItem.created_at.desc(), ConfigurationItem.id)
        elif sort_order == "asc":
            query = query.order_by(column.asc(), ConfigurationItem.id)
        else:
            query = query.order_by(column.desc(), ConfigurationItem.id)

        return paginate(query, pagination)

    def relationships(self, ci_id: str) -> List[CIRelationship]:
        """Active relationships in which the CI is source or target"""
        self.get(ci_id)
        return (
            self.db.query(CIRelationship)
            .filter(
                or_(CIRelationship.source_ci_id == ci_id, CIRelationship.target_ci_id == ci_id),
                CIRelationship.is_active.is_(True),
            )
            .order_by(CIRelationship.created_at.asc())
            .all()
        )

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def create(self, data: Dict[str, Any], user: Optional[str] = None) -> Tuple[ConfigurationItem, ValidationResult]:
        """
        Create a CI after validating its attributes against its type's schema.

        Raises:
            SchemaNotFound: no active CI-type schema named ``data["type"]``
            AttributeValidationFailed: the payload has errors; nothing is written
        """
        attributes, result = self._validate(data.get("attributes"), data["type"])

        ci = ConfigurationItem(
            **{field: data[field] for field in CI_FIELDS if data.get(field) is not None},
            attributes=attributes,
            created_by=user,
            updated_by=user,
        )
        with transaction(self.db):
            self.db.add(ci)
            self.db.flush()
            record_audit(
                self.db, AuditEntity.CI, ci.id, AuditAction.CREATE,
                changed_by=user, details={"name": ci.name, "type": ci.type},
            )

        logger.info(f"Created CI '{ci.name}' ({ci.id}) of type '{ci.type}'")
        return ci, result

    def update(
        self,
        ci_id: str,
        changes: Dict[str, Any],
        user: Optional[str] = None
    ) -> Tuple[ConfigurationItem, ValidationResult]:
        """
        Merge caller-supplied fields into a CI and re-run the write pipeline.

        Supplied ``attributes`` replace the stored payload; otherwise the
        stored payload is re-validated against the (possibly new) type.
        """
        ci = self.get(ci_id)

        ci_type = changes.get("type") or ci.type
        payload = changes["attributes"] if "attributes" in changes else ci.attributes
        attributes, result = self._validate(payload, ci_type)

        with transaction(self.db):
            for field in CI_FIELDS:
                if field in changes and changes[field] is not None:
                    setattr(ci, field, changes[field])
            ci.attributes = attributes
            ci.updated_by = user
            ci.updated_at = datetime.utcnow()
            record_audit(
                self.db, AuditEntity.CI, ci.id, AuditAction.UPDATE,
                changed_by=user, details={"fields": sorted(changes)},
            )

        logger.info(f"Updated CI '{ci.name}' ({ci.id})")
        return ci, result

    def delete(self, ci_id: str, user: Optional[str] = None) -> None:
        """Soft delete; the row stays but is never listed or resolved again"""
        ci = self.get(ci_id)

        with transaction(self.db):
            ci.is_deleted = True
            ci.is_active = False
            ci.updated_by = user
            record_audit(self.db, AuditEntity.CI, ci.id, AuditAction.DELETE, changed_by=user)

        logger.info(f"Deleted CI '{ci.name}' ({ci.id})")
