"""
Schema management and resolution

Schemas are stored per kind (CI types, relationship types) and resolved by
name among the active ones. Deleting a schema retires it; a retired schema
no longer resolves but stays readable by id.
"""
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple, Type, Union

from sqlalchemy.orm import Session

from ..database.models import CITypeSchema, RelationshipTypeSchema
from ..database.utils import paginate, transaction
from ..utils.logger import setup_logger
from ..utils.pagination import PaginationParams
from ..validation import SchemaValidator, TypeSchema
from .audit import AuditAction, AuditEntity, record_audit
from .exceptions import SchemaDefinitionInvalid, SchemaNameConflict, SchemaNotFound
from .templates import CI_TYPE_TEMPLATES, RELATIONSHIP_TYPE_TEMPLATES, clone_template

logger = setup_logger(__name__)

SchemaRecord = Union[CITypeSchema, RelationshipTypeSchema]


class SchemaKind(str, Enum):
    """The two stored schema kinds, named as they appear in URLs"""
    CI_TYPE = "ci-types"
    RELATIONSHIP_TYPE = "relationship-types"

    @property
    def model(self) -> Type[SchemaRecord]:
        return CITypeSchema if self is SchemaKind.CI_TYPE else RelationshipTypeSchema

    @property
    def label(self) -> str:
        return "CI type" if self is SchemaKind.CI_TYPE else "Relationship type"

    @property
    def audit_entity(self) -> str:
        if self is SchemaKind.CI_TYPE:
            return AuditEntity.CI_TYPE_SCHEMA
        return AuditEntity.RELATIONSHIP_TYPE_SCHEMA

    @property
    def templates(self) -> Dict[str, TypeSchema]:
        return CI_TYPE_TEMPLATES if self is SchemaKind.CI_TYPE else RELATIONSHIP_TYPE_TEMPLATES


def to_type_schema(record: SchemaRecord) -> TypeSchema:
    return TypeSchema.model_validate(record)


def _dump_attributes(schema: TypeSchema) -> List[Dict[str, Any]]:
    return [attribute.model_dump() for attribute in schema.attributes]


class SchemaService:
    """CRUD, retirement and name resolution for type schemas"""

    def __init__(self, db: Session, validator: Optional[SchemaValidator] = None):
        self.db = db
        self.validator = validator or SchemaValidator()

    # ------------------------------------------------------------------
    # Resolution
    # ------------------------------------------------------------------

    def _find_active(self, kind: SchemaKind, name: str) -> Optional[SchemaRecord]:
        model = kind.model
        return (
            self.db.query(model)
            .filter(model.name == name, model.is_active.is_(True))
            .first()
        )

    def resolve(self, kind: SchemaKind, name: str) -> TypeSchema:
        """
        Resolve the active schema of ``kind`` named ``name``.

        Raises:
            SchemaNotFound: no active schema has that name
        """
        record = self._find_active(kind, name)
        if record is None:
            raise SchemaNotFound(kind.label, name)
        return to_type_schema(record)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get(self, kind: SchemaKind, schema_id: str) -> SchemaRecord:
        record = self.db.get(kind.model, schema_id)
        if record is None:
            raise SchemaNotFound(kind.label, schema_id)
        return record

    def list(
        self,
        kind: SchemaKind,
        pagination: PaginationParams,
        include_inactive: bool = False
    ) -> Tuple[List[SchemaRecord], int]:
        model = kind.model
        query = self.db.query(model)
        if not include_inactive:
            query = query.filter(model.is_active.is_(True))
        return paginate(query.order_by(model.name.asc(), model.created_at.asc()), pagination)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def _check_definition(self, schema: TypeSchema) -> None:
        result = self.validator.validate_definition(schema)
        if not result.is_valid:
            logger.warning(f"Rejected schema definition '{schema.name}': {len(result.errors)} error(s)")
            raise SchemaDefinitionInvalid(result)

    def _check_name_available(self, kind: SchemaKind, name: str, exclude_id: Optional[str] = None) -> None:
        existing = self._find_active(kind, name)
        if existing is not None and existing.id != exclude_id:
            raise SchemaNameConflict(kind.label, name)

    def create(self, kind: SchemaKind, schema: TypeSchema, user: Optional[str] = None) -> SchemaRecord:
        """
        Validate and store a new schema.

        Raises:
            SchemaDefinitionInvalid: the definition failed checks
            SchemaNameConflict: an active schema of this kind has the name
        """
        self._check_definition(schema)
        self._check_name_available(kind, schema.name)

        record = kind.model(
            name=schema.name,
            description=schema.description,
            attributes=_dump_attributes(schema),
            is_active=True,
            created_by=user,
            updated_by=user,
        )
        with transaction(self.db):
            self.db.add(record)
            self.db.flush()
            record_audit(
                self.db, kind.audit_entity, record.id, AuditAction.CREATE,
                changed_by=user, details={"name": record.name},
            )

        logger.info(f"Created {kind.label} schema '{record.name}' ({record.id})")
        return record

    def update(
        self,
        kind: SchemaKind,
        schema_id: str,
        changes: Dict[str, Any],
        user: Optional[str] = None
    ) -> SchemaRecord:
        """
        Merge ``changes`` into a stored schema and re-check the definition.

        A non-empty ``attributes`` list replaces the stored list wholesale.
        """
        record = self.get(kind, schema_id)

        merged = to_type_schema(record)
        updates: Dict[str, Any] = {}
        if changes.get("name") is not None:
            updates["name"] = changes["name"]
        if changes.get("description") is not None:
            updates["description"] = changes["description"]
        if changes.get("attributes"):
            updates["attributes"] = changes["attributes"]
        merged = TypeSchema.model_validate({**merged.model_dump(), **updates})

        self._check_definition(merged)
        if record.is_active and merged.name != record.name:
            self._check_name_available(kind, merged.name, exclude_id=record.id)

        with transaction(self.db):
            record.name = merged.name
            record.description = merged.description
            record.attributes = _dump_attributes(merged)
            record.updated_by = user
            record_audit(
                self.db, kind.audit_entity, record.id, AuditAction.UPDATE,
                changed_by=user, details={"fields": sorted(updates)},
            )

        logger.info(f"Updated {kind.label} schema '{record.name}' ({record.id})")
        return record

    def retire(self, kind: SchemaKind, schema_id: str, user: Optional[str] = None) -> SchemaRecord:
        """Mark a schema inactive; entities keep their data but the type no longer resolves"""
        record = self.get(kind, schema_id)

        with transaction(self.db):
            record.is_active = False
            record.updated_by = user
            record_audit(
                self.db, kind.audit_entity, record.id, AuditAction.RETIRE,
                changed_by=user, details={"name": record.name},
            )

        logger.info(f"Retired {kind.label} schema '{record.name}' ({record.id})")
        return record

    def create_from_template(
        self,
        kind: SchemaKind,
        template_name: str,
        name: Optional[str] = None,
        description: Optional[str] = None,
        user: Optional[str] = None
    ) -> SchemaRecord:
        """
        Store a copy of a built-in template as a new schema.

        ``name`` and ``description`` override the template's own values.
        """
        schema = clone_template(kind.templates, template_name)
        if schema is None:
            raise SchemaNotFound(f"{kind.label} template", template_name)

        overrides = {}
        if name:
            overrides["name"] = name
        if description:
            overrides["description"] = description
        if overrides:
            schema = schema.model_copy(update=overrides)

        return self.create(kind, schema, user=user)
