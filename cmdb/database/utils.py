"""
Database utilities shared by the service layer
"""
from contextlib import contextmanager
from typing import List, Tuple

from sqlalchemy.orm import Query, Session

from ..utils.pagination import PaginationParams


# ============================================================================
# TRANSACTION HELPERS
# ============================================================================

@contextmanager
def transaction(db: Session):
    """
    Context manager for database transactions.

    Commits on success, rolls back and re-raises on error.

    Usage:
        with transaction(db):
            db.add(ConfigurationItem(name='web-01', type='server'))
    """
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise


# ============================================================================
# QUERY HELPERS
# ============================================================================

def paginate(query: Query, pagination: PaginationParams) -> Tuple[List, int]:
    """
    Apply offset/limit to an ordered query.

    Returns the page of rows and the total row count before paging.
    """
    total = query.order_by(None).count()
    items = query.offset(pagination.offset).limit(pagination.limit).all()
    return items, total
