import structlog

from thrift_store.application.interfaces.product_api import ProductApi
from thrift_store.domain.entities.draft_listing import DraftListing

logger = structlog.get_logger(__name__)


class ListingSubmitter:
    """Sends the finished draft to the backend as a create or update."""

    def __init__(self, api: ProductApi) -> None:
        self._api = api

    async def submit(self, draft: DraftListing, image_urls: list[str]) -> str:
        """Persist the draft with `image_urls` as its images; return the product id."""
        payload = draft.to_payload(image_urls)

        if draft.product_id is not None:
            response = await self._api.update_product(draft.product_id, payload)
        else:
            response = await self._api.create_product(payload)

        data = response.get("data")
        if not isinstance(data, dict):
            data = {}
        product_id = str(data.get("_id") or data.get("id") or draft.product_id or "")
        logger.info(
            "listing_persisted",
            draft_id=str(draft.id),
            product_id=product_id,
            updated=draft.product_id is not None,
            image_count=len(image_urls),
        )
        return product_id
