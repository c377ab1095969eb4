import asyncio

import structlog

from thrift_store.application.interfaces.product_api import ProductApi, SigningError
from thrift_store.domain.entities.image_reference import ImageReference
from thrift_store.domain.entities.upload import (
    AllSucceeded,
    PartialFailure,
    PresignedUploadTarget,
    UploadFailure,
    UploadOutcome,
)

logger = structlog.get_logger(__name__)


class UploadCoordinator:
    """
    Moves image bytes straight from the draft to storage.

    One batched signing call yields a target per file (same order), then
    every file is PUT to its own target concurrently. Per-file failures do
    not cancel siblings; they are collected into a PartialFailure.
    """

    def __init__(self, api: ProductApi) -> None:
        self._api = api

    async def request_targets(self, images: list[ImageReference]) -> list[PresignedUploadTarget]:
        if not images:
            return []

        files = [(image.filename, image.content_type) for image in images]
        targets = await self._api.get_presigned_targets(files)

        if len(targets) != len(images):
            logger.error(
                "presigned_target_count_mismatch",
                requested=len(images),
                received=len(targets),
            )
            raise SigningError(
                f"Requested {len(images)} upload targets but received {len(targets)}"
            )

        logger.info("presigned_targets_issued", count=len(targets))
        return targets

    async def upload_all(
        self, images: list[ImageReference], targets: list[PresignedUploadTarget]
    ) -> UploadOutcome:
        if len(images) != len(targets):
            raise ValueError("images and targets must be positionally aligned")

        results = await asyncio.gather(
            *(self._upload_one(image, target) for image, target in zip(images, targets))
        )

        succeeded = tuple(r for r in results if isinstance(r, str))
        failed = tuple(r for r in results if isinstance(r, UploadFailure))
        if failed:
            logger.warning(
                "upload_batch_incomplete",
                succeeded=len(succeeded),
                failed=[f.filename for f in failed],
            )
            return PartialFailure(succeeded=succeeded, failed=failed)

        logger.info("upload_batch_complete", count=len(succeeded))
        return AllSucceeded(public_urls=succeeded)

    async def _upload_one(
        self, image: ImageReference, target: PresignedUploadTarget
    ) -> str | UploadFailure:
        try:
            await self._api.upload_file(target.upload_url, image.data, image.content_type)
        except Exception as exc:
            logger.exception("image_upload_failed", filename=image.filename)
            return UploadFailure(filename=image.filename, reason=str(exc))
        return target.public_url
