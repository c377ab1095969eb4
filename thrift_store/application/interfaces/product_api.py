from abc import ABC, abstractmethod
from typing import Any

from thrift_store.domain.entities.upload import PresignedUploadTarget


class ProductApiError(Exception):
    """A product retrieval call failed."""


class SigningError(Exception):
    """The backend could not issue pre-signed upload targets."""


class StorageUploadError(Exception):
    """A single direct-to-storage upload failed."""


class SubmissionError(Exception):
    """The backend rejected or failed to store a listing."""


class ProductApi(ABC):
    """Port for the thrift store backend product endpoints and direct storage uploads."""

    @abstractmethod
    async def get_presigned_targets(
        self, files: list[tuple[str, str]]
    ) -> list[PresignedUploadTarget]:
        """POST /api/product/pre-signed-urls with (name, content_type) pairs."""
        ...

    @abstractmethod
    async def upload_file(self, upload_url: str, data: bytes, content_type: str) -> None:
        """PUT the raw bytes to a pre-signed upload URL."""
        ...

    @abstractmethod
    async def create_product(self, payload: dict[str, Any]) -> dict[str, Any]:
        ...

    @abstractmethod
    async def update_product(self, product_id: str, payload: dict[str, Any]) -> dict[str, Any]:
        ...

    @abstractmethod
    async def list_products(self, **params: Any) -> dict[str, Any]:
        ...

    @abstractmethod
    async def get_product(self, product_id: str) -> dict[str, Any]:
        ...

    @abstractmethod
    async def my_products(self) -> dict[str, Any]:
        ...
