from dataclasses import dataclass

import structlog

from thrift_store.application.interfaces.draft_repository import DraftRepository
from thrift_store.application.interfaces.product_api import ProductApi, ProductApiError
from thrift_store.domain.entities.draft_listing import (
    MAX_IMAGES,
    DraftListing,
    ImageLimitExceededError,
)

logger = structlog.get_logger(__name__)


@dataclass
class StartListingEditInput:
    product_id: str


class StartListingEdit:
    """Use case: open a published listing as a draft so it can be updated."""

    def __init__(
        self,
        draft_repo: DraftRepository,
        product_api: ProductApi,
        max_images: int = MAX_IMAGES,
    ) -> None:
        self._draft_repo = draft_repo
        self._product_api = product_api
        self._max_images = max_images

    async def execute(self, input_data: StartListingEditInput) -> DraftListing:
        product = await self._product_api.get_product(input_data.product_id)
        try:
            draft = DraftListing.from_existing_product(
                input_data.product_id, product, max_images=self._max_images
            )
        except (ImageLimitExceededError, ValueError) as exc:
            logger.error(
                "listing_edit_unusable_product",
                product_id=input_data.product_id,
                error=str(exc),
            )
            raise ProductApiError(
                f"Product {input_data.product_id} cannot be edited: {exc}"
            ) from exc
        await self._draft_repo.save(draft)

        logger.info(
            "listing_edit_started",
            draft_id=str(draft.id),
            product_id=input_data.product_id,
            image_count=len(draft.images),
        )
        return draft
