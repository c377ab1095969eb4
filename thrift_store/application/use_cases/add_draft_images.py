from dataclasses import dataclass, field
from uuid import UUID

import structlog

from thrift_store.application.coordinators.validation_coordinator import (
    ImageValidationCoordinator,
)
from thrift_store.application.interfaces.draft_repository import DraftRepository
from thrift_store.domain.entities.image_reference import ImageReference

logger = structlog.get_logger(__name__)


@dataclass
class NewImage:
    filename: str
    content_type: str
    data: bytes


@dataclass
class AddDraftImagesInput:
    draft_id: UUID
    files: list[NewImage]


@dataclass
class AddDraftImagesOutput:
    draft_id: UUID
    admitted_ids: list[UUID] = field(default_factory=list)
    rejected_filenames: list[str] = field(default_factory=list)
    rejection_message: str | None = None
    image_count: int = 0


class AddDraftImages:
    """
    Use case: admit new photos into a draft after the AI check.

    The batch is all or nothing: if any photo is rejected (or cannot be
    checked) none of them is added.
    """

    def __init__(
        self,
        draft_repo: DraftRepository,
        validation: ImageValidationCoordinator,
    ) -> None:
        self._draft_repo = draft_repo
        self._validation = validation

    async def execute(self, input_data: AddDraftImagesInput) -> AddDraftImagesOutput:
        draft = await self._draft_repo.get_or_raise(input_data.draft_id)

        # Over the limit: refuse before spending any AI calls
        draft.check_image_capacity(len(input_data.files))

        candidates = [
            ImageReference.from_upload(f.filename, f.content_type, f.data)
            for f in input_data.files
        ]
        if not candidates:
            return AddDraftImagesOutput(draft_id=draft.id, image_count=len(draft.images))

        category = draft.category.value if draft.category else ""
        batch = await self._validation.validate_all(candidates, draft.title, category)

        if not batch.all_accepted:
            for verdict in batch.failures:
                verdict.image.mark_rejected(verdict.reason)
            logger.info(
                "draft_images_rejected",
                draft_id=str(draft.id),
                rejected=[v.image.filename for v in batch.failures],
            )
            return AddDraftImagesOutput(
                draft_id=draft.id,
                rejected_filenames=[v.image.filename for v in batch.failures],
                rejection_message=(
                    f"Some images were rejected:\n{batch.summary()}\n\n"
                    "Please upload appropriate product images only."
                ),
                image_count=len(draft.images),
            )

        for image in candidates:
            image.mark_validated()
        draft.add_images(candidates)
        await self._draft_repo.save(draft)

        logger.info(
            "draft_images_added",
            draft_id=str(draft.id),
            added=len(candidates),
            total=len(draft.images),
        )
        return AddDraftImagesOutput(
            draft_id=draft.id,
            admitted_ids=[image.id for image in candidates],
            image_count=len(draft.images),
        )
