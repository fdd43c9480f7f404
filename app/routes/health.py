"""
Module routes/health.py
Role:
- Liveness endpoints (`/api/health`, `/api/test`) used by the deployment checks.
"""
from datetime import datetime, timezone

from fastapi import APIRouter, Request

from app.config.settings import settings

router = APIRouter(prefix="/api", tags=["health"])


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


@router.get("/health")
async def health():
    return {"status": "healthy", "service": settings.APP_NAME, "timestamp": _now_iso()}


@router.get("/test")
async def api_test(request: Request):
    """Echo of the request line, to check routing end to end."""
    return {
        "message": "API is working!",
        "timestamp": _now_iso(),
        "method": request.method,
        "url": request.url.path,
        "success": True,
    }
