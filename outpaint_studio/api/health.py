"""Health check endpoint."""

from fastapi import APIRouter, Request
from datetime import datetime, timezone

router = APIRouter()


@router.get("/")
async def health_check():
    """Basic health check endpoint."""
    return {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "service": "outpaint-studio",
        "version": "1.0.0",
    }


@router.get("/ready")
async def readiness_check(request: Request):
    """Ready once the workflow has been wired up at startup."""
    workflow = getattr(request.app.state, "workflow", None)
    return {
        "ready": workflow is not None,
        "active_sessions": len(workflow.store) if workflow else 0,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
