"""Home & Readiness: the API root and a database-backed readiness probe.

Invariants:
    - GET {prefix} always returns 200 if the process is up
    - GET {prefix}/health/ready returns 503 if the database is unreachable
"""

import logging
from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from tasklink.infrastructure import database
from tasklink.schemas.envelope import envelope

logger = logging.getLogger(__name__)
router = APIRouter(tags=["health"])


@router.get("", status_code=status.HTTP_200_OK)
async def home():
    """Liveness: the API is up."""
    return {"message": "API is up"}


@router.get("/health/ready")
async def readiness_check():
    """Readiness: includes database connectivity."""
    manager = database.db_manager
    db_ok = await manager.health_check() if manager else False
    if not db_ok:
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content=envelope("Database unavailable"),
        )
    return envelope("Ready", {"database": "healthy"})
