"""
SQLAlchemy models for configuration items, relationships and type schemas
"""
import uuid
from datetime import datetime

from sqlalchemy import Column, String, Boolean, DateTime, Text, ForeignKey, JSON, Index, CheckConstraint
from sqlalchemy.orm import DeclarativeBase, relationship


class Base(DeclarativeBase):
    pass


def _new_id() -> str:
    return str(uuid.uuid4())


class CIStatus:
    """Lifecycle states of a configuration item"""
    ACTIVE = "active"
    INACTIVE = "inactive"
    MAINTENANCE = "maintenance"
    RETIRED = "retired"
    FIX_REQUIRED = "fix_required"

    ALL = (ACTIVE, INACTIVE, MAINTENANCE, RETIRED, FIX_REQUIRED)


class CICriticality:
    """Business criticality of a configuration item"""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

    ALL = (LOW, MEDIUM, HIGH, CRITICAL)


class ConfigurationItem(Base):
    """A tracked asset whose attributes are described by a CI-type schema"""
    __tablename__ = 'configuration_items'

    id = Column(String(36), primary_key=True, default=_new_id)
    name = Column(String(255), nullable=False, index=True)
    type = Column(String(100), nullable=False, index=True)  # CI-type schema name
    description = Column(Text)
    status = Column(String(50), nullable=False, default=CIStatus.ACTIVE, index=True)
    criticality = Column(String(50), nullable=False, default=CICriticality.MEDIUM, index=True)
    owner = Column(String(255))
    location = Column(String(255))
    attributes = Column(JSON, nullable=False, default=dict)  # Validated, defaulted payload
    tags = Column(JSON, nullable=False, default=list)

    install_date = Column(DateTime)
    warranty_expiry = Column(DateTime)
    last_updated = Column(DateTime)
    last_scanned = Column(DateTime)

    is_active = Column(Boolean, default=True, nullable=False)
    is_deleted = Column(Boolean, default=False, nullable=False, index=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)
    created_by = Column(String(255))
    updated_by = Column(String(255))

    outgoing_relationships = relationship(
        "CIRelationship",
        foreign_keys="CIRelationship.source_ci_id",
        back_populates="source_ci",
    )
    incoming_relationships = relationship(
        "CIRelationship",
        foreign_keys="CIRelationship.target_ci_id",
        back_populates="target_ci",
    )

    __table_args__ = (
        Index('idx_ci_type_status', 'type', 'status'),
        Index('idx_ci_deleted_created', 'is_deleted', 'created_at'),
    )

    def __repr__(self):
        return f"<ConfigurationItem(id='{self.id}', name='{self.name}', type='{self.type}')>"


class CIRelationship(Base):
    """A typed, directed edge between two configuration items"""
    __tablename__ = 'ci_relationships'

    id = Column(String(36), primary_key=True, default=_new_id)
    source_ci_id = Column(String(36), ForeignKey('configuration_items.id'), nullable=False, index=True)
    target_ci_id = Column(String(36), ForeignKey('configuration_items.id'), nullable=False, index=True)
    type = Column(String(100), nullable=False, index=True)  # Relationship-type schema name
    description = Column(Text)
    attributes = Column(JSON, nullable=False, default=dict)
    is_active = Column(Boolean, default=True, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)
    created_by = Column(String(255))
    updated_by = Column(String(255))

    source_ci = relationship("ConfigurationItem", foreign_keys=[source_ci_id], back_populates="outgoing_relationships")
    target_ci = relationship("ConfigurationItem", foreign_keys=[target_ci_id], back_populates="incoming_relationships")

    __table_args__ = (
        # Reverse-edge lookup used by the integrity check
        Index('idx_rel_source_target_type', 'source_ci_id', 'target_ci_id', 'type', 'is_active'),
        CheckConstraint('source_ci_id <> target_ci_id', name='ck_rel_no_self_reference'),
    )

    def __repr__(self):
        return (
            f"<CIRelationship(id='{self.id}', {self.source_ci_id} -[{self.type}]-> {self.target_ci_id})>"
        )


class _TypeSchemaColumns:
    """Columns shared by both stored schema kinds"""
    id = Column(String(36), primary_key=True, default=_new_id)
    name = Column(String(100), nullable=False, index=True)
    description = Column(Text)
    attributes = Column(JSON, nullable=False, default=list)  # List of attribute definitions
    is_active = Column(Boolean, default=True, nullable=False, index=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)
    created_by = Column(String(255))
    updated_by = Column(String(255))


class CITypeSchema(_TypeSchemaColumns, Base):
    """Attribute schema for configuration items of one type"""
    __tablename__ = 'ci_type_schemas'

    def __repr__(self):
        return f"<CITypeSchema(id='{self.id}', name='{self.name}', active={self.is_active})>"


class RelationshipTypeSchema(_TypeSchemaColumns, Base):
    """Attribute schema for relationships of one type"""
    __tablename__ = 'relationship_type_schemas'

    def __repr__(self):
        return f"<RelationshipTypeSchema(id='{self.id}', name='{self.name}', active={self.is_active})>"


class AuditLog(Base):
    """
    Audit trail for writes to CIs, relationships and schemas

    Rows are added in the same session as the change they describe, so they
    commit or roll back together with it.
    """
    __tablename__ = 'audit_logs'

    id = Column(String(36), primary_key=True, default=_new_id)
    entity_type = Column(String(50), nullable=False, index=True)
    entity_id = Column(String(36), nullable=False, index=True)
    action = Column(String(20), nullable=False, index=True)
    changed_by = Column(String(255))
    changed_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)
    details = Column(JSON)

    __table_args__ = (
        Index('idx_audit_entity_time', 'entity_type', 'entity_id', 'changed_at'),
    )

    def __repr__(self):
        return f"<AuditLog(id='{self.id}', {self.action} {self.entity_type}:{self.entity_id})>"
