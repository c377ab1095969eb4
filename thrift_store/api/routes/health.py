from fastapi import APIRouter, Depends

from thrift_store.api.dependencies import get_session_store
from thrift_store.application.interfaces.session_store import SessionStore
from thrift_store.config import settings

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check(store: SessionStore = Depends(get_session_store)) -> dict:  # type: ignore[type-arg]
    """Liveness + configuration check; no outbound calls are made."""
    gemini_status = "configured" if settings.gemini_api_key else "missing api key"
    session = store.current

    return {
        "status": "healthy" if settings.gemini_api_key else "degraded",
        "backend_api_url": settings.backend_api_url,
        "gemini": gemini_status,
        "authenticated": bool(session and session.is_authenticated),
    }
