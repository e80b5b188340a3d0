"""
Relationship integrity check

Only the direct reverse edge is detected: A -[t]-> B conflicts with an
existing active B -[t]-> A of the same type. Longer cycles are not traversed.

The check and the following insert are not atomic. Two opposite requests
racing each other can both pass.
"""
from sqlalchemy.orm import Session

from ..database.models import CIRelationship


def would_conflict(db: Session, source_id: str, target_id: str, relationship_type: str) -> bool:
    """True iff an active relationship (target_id -> source_id, same type) exists"""
    reverse = (
        db.query(CIRelationship.id)
        .filter(
            CIRelationship.source_ci_id == target_id,
            CIRelationship.target_ci_id == source_id,
            CIRelationship.type == relationship_type,
            CIRelationship.is_active.is_(True),
        )
        .first()
    )
    return reverse is not None
