"""HTTP client for the thrift store backend product API and pre-signed storage uploads."""
from typing import Any

import httpx
import structlog

from thrift_store.application.interfaces.product_api import (
    ProductApi,
    ProductApiError,
    SigningError,
    StorageUploadError,
    SubmissionError,
)
from thrift_store.application.interfaces.session_store import SessionStore
from thrift_store.config import settings
from thrift_store.domain.entities.upload import PresignedUploadTarget

logger = structlog.get_logger(__name__)


def _backend_message(response: httpx.Response) -> str:
    """Best-effort extraction of the backend's error message."""
    try:
        body = response.json()
    except ValueError:
        return response.text
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return response.text


class ProductApiClient(ProductApi):
    """Thin HTTP wrapper around /api/product and direct-to-storage uploads."""

    def __init__(
        self,
        base_url: str = settings.backend_api_url,
        session_store: SessionStore | None = None,
        timeout: float | None = settings.http_timeout_seconds,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._session_store = session_store
        self._timeout = timeout
        self._transport = transport

    @property
    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        token = self._session_store.token if self._session_store else None
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self._timeout, transport=self._transport)

    # ---- Listing pipeline ---------------------------------------------------

    async def get_presigned_targets(
        self, files: list[tuple[str, str]]
    ) -> list[PresignedUploadTarget]:
        """
        POST /api/product/pre-signed-urls → {"signedUrls": [{"uploadUrl": ..., "publicUrl": ...}]}
        """
        payload = {"filenames": [{"name": name, "type": content_type} for name, content_type in files]}

        async with self._client() as client:
            try:
                response = await client.post(
                    f"{self._base_url}/api/product/pre-signed-urls",
                    json=payload,
                    headers=self._headers,
                )
                response.raise_for_status()
                body = response.json()
            except httpx.HTTPStatusError as exc:
                logger.error(
                    "presign_request_failed",
                    status_code=exc.response.status_code,
                    response=exc.response.text,
                )
                raise SigningError(
                    f"Backend returned {exc.response.status_code}: {_backend_message(exc.response)}"
                ) from exc
            except httpx.RequestError as exc:
                logger.error("presign_connection_failed", error=str(exc))
                raise SigningError(f"Failed to reach backend: {exc}") from exc
            except ValueError as exc:
                raise SigningError("Backend returned a non-JSON signing response") from exc

        signed = body.get("signedUrls") if isinstance(body, dict) else None
        if not isinstance(signed, list):
            raise SigningError("Backend response is missing signedUrls")
        try:
            return [
                PresignedUploadTarget(upload_url=item["uploadUrl"], public_url=item["publicUrl"])
                for item in signed
            ]
        except (KeyError, TypeError) as exc:
            raise SigningError(f"Malformed upload target in signing response: {exc}") from exc

    async def upload_file(self, upload_url: str, data: bytes, content_type: str) -> None:
        """PUT <uploadUrl> with the raw bytes; no auth headers go to storage."""
        async with self._client() as client:
            try:
                response = await client.put(
                    upload_url,
                    content=data,
                    headers={"Content-Type": content_type},
                )
                response.raise_for_status()
            except httpx.HTTPStatusError as exc:
                raise StorageUploadError(
                    f"Storage returned {exc.response.status_code}"
                ) from exc
            except httpx.RequestError as exc:
                raise StorageUploadError(f"Failed to reach storage: {exc}") from exc

    async def create_product(self, payload: dict[str, Any]) -> dict[str, Any]:
        """POST /api/product → {"success": true, "data": {...}}"""
        return await self._send_listing("POST", f"{self._base_url}/api/product", payload)

    async def update_product(self, product_id: str, payload: dict[str, Any]) -> dict[str, Any]:
        """PUT /api/product/{id}"""
        return await self._send_listing(
            "PUT", f"{self._base_url}/api/product/{product_id}", payload
        )

    async def _send_listing(self, method: str, url: str, payload: dict[str, Any]) -> dict[str, Any]:
        async with self._client() as client:
            try:
                response = await client.request(method, url, json=payload, headers=self._headers)
                response.raise_for_status()
                body = response.json()
            except httpx.HTTPStatusError as exc:
                logger.error(
                    "listing_request_failed",
                    method=method,
                    status_code=exc.response.status_code,
                    response=exc.response.text,
                )
                raise SubmissionError(_backend_message(exc.response)) from exc
            except httpx.RequestError as exc:
                logger.error("listing_connection_failed", method=method, error=str(exc))
                raise SubmissionError(f"Failed to reach backend: {exc}") from exc
            except ValueError as exc:
                raise SubmissionError("Backend returned a non-JSON response") from exc

        if not isinstance(body, dict):
            raise SubmissionError("Backend returned an unexpected response")
        if body.get("success") is False:
            raise SubmissionError(str(body.get("message") or "Backend rejected the listing"))
        return body

    # ---- Retrieval ----------------------------------------------------------

    async def list_products(self, **params: Any) -> dict[str, Any]:
        """GET /api/product?page&limit (also sort/order for the home page rails)."""
        return await self._get(f"{self._base_url}/api/product", params=params)

    async def get_product(self, product_id: str) -> dict[str, Any]:
        """GET /api/product/{id}; unwraps a {"success", "data"} envelope when present."""
        body = await self._get(f"{self._base_url}/api/product/{product_id}")
        if "success" in body and isinstance(body.get("data"), dict):
            return body["data"]
        return body

    async def my_products(self) -> dict[str, Any]:
        """GET /api/user/product → the signed-in seller's listings."""
        body = await self._get(f"{self._base_url}/api/user/product")
        return body

    async def _get(self, url: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
        async with self._client() as client:
            try:
                response = await client.get(url, params=params, headers=self._headers)
                response.raise_for_status()
                body = response.json()
            except httpx.HTTPStatusError as exc:
                logger.error(
                    "product_fetch_failed",
                    url=url,
                    status_code=exc.response.status_code,
                )
                raise ProductApiError(
                    f"Backend returned {exc.response.status_code}: {_backend_message(exc.response)}"
                ) from exc
            except httpx.RequestError as exc:
                raise ProductApiError(f"Failed to reach backend: {exc}") from exc
            except ValueError as exc:
                raise ProductApiError("Backend returned a non-JSON response") from exc

        if isinstance(body, list):
            return {"success": True, "data": body}
        if not isinstance(body, dict):
            raise ProductApiError("Backend returned an unexpected response")
        return body
