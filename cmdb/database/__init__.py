"""
Persistence for configuration items, relationships and type schemas

Main exports:
- Base: SQLAlchemy declarative base for all models
- Models: ConfigurationItem, CIRelationship, CITypeSchema, RelationshipTypeSchema, AuditLog
- Session management: get_db (FastAPI dependency), transaction (commit/rollback scope)
- Initialization: configure_database, init_db
"""

from .models import (
    Base,
    CIStatus,
    CICriticality,
    ConfigurationItem,
    CIRelationship,
    CITypeSchema,
    RelationshipTypeSchema,
    AuditLog,
)
from .database import (
    check_connection,
    close_db_connections,
    configure_database,
    create_db_engine,
    get_db,
    get_engine,
    init_db,
)
from .utils import paginate, transaction

__all__ = [
    # Base
    'Base',  # SQLAlchemy declarative base
    # Models
    'CIStatus',
    'CICriticality',
    'ConfigurationItem',
    'CIRelationship',
    'CITypeSchema',
    'RelationshipTypeSchema',
    'AuditLog',
    # Engine and sessions
    'configure_database',
    'create_db_engine',
    'get_engine',
    'get_db',  # FastAPI dependency
    'check_connection',
    'close_db_connections',
    # Initialization
    'init_db',
    # Utilities
    'paginate',
    'transaction',
]
