"""
Health and Status Endpoints
"""
import time
from datetime import datetime
from typing import Any, Dict

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

import cmdb
from cmdb.database import check_connection, get_db
from cmdb.utils.logger import setup_logger

logger = setup_logger(__name__)
router = APIRouter(tags=["health"])

# Track API start time for uptime calculation
API_START_TIME = time.time()


@router.get("/health")
def health_check(db: Session = Depends(get_db)) -> Dict[str, Any]:
    """
    Health check with a database round-trip

    Returns:
        Service status; "degraded" when the database does not answer
    """
    health_status = {
        "status": "healthy",
        "version": cmdb.__version__,
        "timestamp": datetime.now().isoformat(),
        "uptime_seconds": int(time.time() - API_START_TIME),
        "dependencies": {}
    }

    if check_connection(db):
        health_status["dependencies"]["database"] = {"status": "ok"}
    else:
        health_status["status"] = "degraded"
        health_status["dependencies"]["database"] = {"status": "error"}

    return health_status
