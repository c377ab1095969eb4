import structlog
from fastapi import APIRouter, Depends, HTTPException, status

from thrift_store.api.dependencies import get_auth_client, get_session_store
from thrift_store.api.schemas.auth_schemas import LoginRequest, RegisterRequest, SessionResponse
from thrift_store.application.interfaces.session_store import SessionStore
from thrift_store.infrastructure.external_services.auth_client import AuthClient, AuthError

logger = structlog.get_logger(__name__)
router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", response_model=SessionResponse)
async def register(
    body: RegisterRequest,
    client: AuthClient = Depends(get_auth_client),
) -> SessionResponse:
    try:
        session = await client.register(body.username, body.email, body.password)
    except AuthError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return SessionResponse(authenticated=True, user=session.user)


@router.post("/login", response_model=SessionResponse)
async def login(
    body: LoginRequest,
    client: AuthClient = Depends(get_auth_client),
) -> SessionResponse:
    try:
        session = await client.login(body.email, body.password)
    except AuthError as exc:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(exc)) from exc
    return SessionResponse(authenticated=True, user=session.user)


@router.post("/logout", response_model=SessionResponse)
async def logout(client: AuthClient = Depends(get_auth_client)) -> SessionResponse:
    client.logout()
    return SessionResponse(authenticated=False)


@router.get("/me", response_model=SessionResponse)
async def current_user(store: SessionStore = Depends(get_session_store)) -> SessionResponse:
    session = store.current
    if session is None or not session.is_authenticated:
        return SessionResponse(authenticated=False)
    return SessionResponse(authenticated=True, user=session.user)
