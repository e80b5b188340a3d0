"""
API Dependencies
Provides shared dependencies for FastAPI routers using proper dependency injection
"""
from typing import Optional

from fastapi import Depends, Header
from sqlalchemy.orm import Session

from cmdb.database import get_db
from cmdb.services import CIService, RelationshipService, SchemaService
from cmdb.utils.config import Config, load_config
from cmdb.utils.logger import setup_logger
from cmdb.validation import SchemaValidator

logger = setup_logger(__name__)


# ============================================
# APPLICATION STATE (Singleton Pattern)
# ============================================

class AppState:
    """Application state holder for singleton instances"""
    _config: Optional[Config] = None
    _validator: Optional[SchemaValidator] = None

    @classmethod
    def get_config(cls) -> Config:
        """Get or create config singleton"""
        if cls._config is None:
            cls._config = load_config()
            logger.info("[OK] Configuration loaded")
        return cls._config

    @classmethod
    def set_config(cls, config: Config) -> None:
        cls._config = config

    @classmethod
    def get_validator(cls) -> SchemaValidator:
        """The validator holds no state, so one instance serves every request"""
        if cls._validator is None:
            cls._validator = SchemaValidator()
        return cls._validator


# ============================================
# DEPENDENCY FUNCTIONS
# ============================================

def get_config() -> Config:
    return AppState.get_config()


def get_validator() -> SchemaValidator:
    return AppState.get_validator()


def get_current_user(x_user_id: Optional[str] = Header(default=None)) -> Optional[str]:
    """
    Caller identity recorded in audit fields.

    Taken from the X-User-Id header as-is; no authentication is performed.
    """
    return x_user_id or None


def get_schema_service(
    db: Session = Depends(get_db),
    validator: SchemaValidator = Depends(get_validator)
) -> SchemaService:
    return SchemaService(db, validator)


def get_ci_service(
    db: Session = Depends(get_db),
    validator: SchemaValidator = Depends(get_validator)
) -> CIService:
    return CIService(db, validator)


def get_relationship_service(
    db: Session = Depends(get_db),
    validator: SchemaValidator = Depends(get_validator)
) -> RelationshipService:
    return RelationshipService(db, validator)
