"""HTTP client for the thrift store backend auth API."""
from typing import Any

import httpx
import structlog

from thrift_store.application.interfaces.session_store import Session, SessionStore
from thrift_store.config import settings

logger = structlog.get_logger(__name__)


class AuthError(Exception):
    pass


class AuthClient:
    """Registers and signs users in, keeping the resulting session in the store."""

    def __init__(
        self,
        session_store: SessionStore,
        base_url: str = settings.backend_api_url,
        timeout: float | None = settings.http_timeout_seconds,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._session_store = session_store
        self._base_url = f"{base_url.rstrip('/')}/api/auth"
        self._timeout = timeout
        self._transport = transport

    async def register(self, username: str, email: str, password: str) -> Session:
        """POST /api/auth/register → {"success": true, "user": {...}, "token": "..."}"""
        return await self._authenticate(
            "/register",
            {"username": username, "email": email, "password": password},
            fallback_message="Registration failed",
        )

    async def login(self, email: str, password: str) -> Session:
        """POST /api/auth/login"""
        return await self._authenticate(
            "/login",
            {"email": email, "password": password},
            fallback_message="Login failed",
        )

    def logout(self) -> None:
        self._session_store.clear()
        logger.info("user_logged_out")

    async def _authenticate(
        self, path: str, payload: dict[str, Any], fallback_message: str
    ) -> Session:
        async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
            try:
                response = await client.post(f"{self._base_url}{path}", json=payload)
                response.raise_for_status()
                body = response.json()
            except httpx.HTTPStatusError as exc:
                message = fallback_message
                try:
                    message = exc.response.json().get("message") or fallback_message
                except (ValueError, AttributeError):
                    pass
                logger.warning(
                    "auth_request_rejected",
                    path=path,
                    status_code=exc.response.status_code,
                )
                raise AuthError(message) from exc
            except httpx.RequestError as exc:
                logger.error("auth_connection_failed", path=path, error=str(exc))
                raise AuthError(f"{fallback_message}: {exc}") from exc
            except ValueError as exc:
                raise AuthError(fallback_message) from exc

        if not isinstance(body, dict) or not body.get("success"):
            message = body.get("message") if isinstance(body, dict) else None
            raise AuthError(message or fallback_message)

        session = Session(user=body.get("user") or {}, token=body.get("token"))
        self._session_store.set(session)
        logger.info("user_authenticated", path=path, user_id=session.user.get("id"))
        return session
