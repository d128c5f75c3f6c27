"""Health check route used by deployment verification."""

from datetime import datetime, timezone

from fastapi import APIRouter, Request

from ...config.environment import ENVIRONMENT_NAME, PORT

router = APIRouter(tags=["health"])

@router.get("/health")
async def health_check(request: Request):
    """Process status, environment, port, timestamp and database availability."""
    database = request.app.state.database
    if database is None:
        database_status = "not configured"
    elif database.available is False:
        database_status = "unavailable"
    elif database.available:
        database_status = "connected"
    else:
        database_status = "unknown"

    return {
        "status": "ok",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "environment": ENVIRONMENT_NAME,
        "port": PORT,
        "database": database_status,
    }
