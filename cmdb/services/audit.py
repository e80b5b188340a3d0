"""
Audit trail for CMDB writes

Each write adds one AuditLog row to the caller's session. The row is not
committed here; it commits with the change it describes.
"""
from typing import Any, Dict, Optional

from sqlalchemy.orm import Session

from ..database.models import AuditLog
from ..utils.logger import setup_logger

logger = setup_logger(__name__)


class AuditAction:
    """Standard audit actions"""
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    RETIRE = "retire"


class AuditEntity:
    """Entity types recorded in the audit trail"""
    CI = "configuration_item"
    RELATIONSHIP = "relationship"
    CI_TYPE_SCHEMA = "ci_type_schema"
    RELATIONSHIP_TYPE_SCHEMA = "relationship_type_schema"


def record_audit(
    db: Session,
    entity_type: str,
    entity_id: str,
    action: str,
    changed_by: Optional[str] = None,
    details: Optional[Dict[str, Any]] = None,
) -> AuditLog:
    """
    Add an audit entry for a write

    Args:
        db: Session holding the change being audited
        entity_type: One of the AuditEntity constants
        entity_id: Id of the written entity
        action: One of the AuditAction constants
        changed_by: Caller identity, if known
        details: Extra JSON-serialisable context

    Returns:
        The pending AuditLog row
    """
    entry = AuditLog(
        entity_type=entity_type,
        entity_id=entity_id,
        action=action,
        changed_by=changed_by,
        details=details or None,
    )
    db.add(entry)

    logger.debug(f"[AUDIT] {action} {entity_type}:{entity_id} by={changed_by or 'anonymous'}")
    return entry
