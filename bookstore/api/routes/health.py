"""Health & Readiness Probes - liveness and readiness endpoints for container orchestration.

Invariants:
    - GET /health always returns 200 if process is up (liveness)
    - GET /health/ready returns 503 unless lifecycle is ready and both stores answer
"""

import logging

from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/health", tags=["health"])


@router.get("", status_code=status.HTTP_200_OK)
async def health_check(request: Request):
    """Basic liveness probe. Returns 200 if the process is up."""
    lifecycle = request.app.state.lifecycle
    return {
        "status": "healthy",
        "service": "bookstore-api",
        "lifecycle": lifecycle.state.value,
    }


@router.get("/ready")
async def readiness_check(request: Request):
    """Readiness probe: lifecycle state plus database and document-store connectivity."""
    state = request.app.state
    db_ok = await state.db.health_check()
    mongo = getattr(state, "mongo", None)
    mongo_ok = await mongo.health_check() if mongo is not None else True
    checks = {
        "lifecycle": "ready" if state.lifecycle.is_ready else state.lifecycle.state.value,
        "database": "healthy" if db_ok else "unavailable",
        "document_store": "healthy" if mongo_ok else "unavailable",
    }
    if not (state.lifecycle.is_ready and db_ok and mongo_ok):
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "not_ready", "checks": checks},
        )
    return {"status": "ready", "checks": checks}
