from dataclasses import dataclass, field
from uuid import UUID

import structlog

from thrift_store.application.coordinators.listing_submitter import ListingSubmitter
from thrift_store.application.coordinators.upload_coordinator import UploadCoordinator
from thrift_store.application.coordinators.validation_coordinator import (
    ImageValidationCoordinator,
)
from thrift_store.application.interfaces.draft_repository import DraftRepository
from thrift_store.application.interfaces.event_publisher import EventPublisher
from thrift_store.application.interfaces.product_api import SigningError, SubmissionError
from thrift_store.domain.entities.draft_listing import DraftListing
from thrift_store.domain.entities.upload import PartialFailure
from thrift_store.domain.enums.submission_state import SubmissionState

logger = structlog.get_logger(__name__)

REJECTED_IMAGES_MESSAGE = (
    "Some images appear to be invalid or don't match the product description. "
    "Please review and update your images."
)
GENERIC_FAILURE_MESSAGE = "Failed to submit listing. Please try again."


class ImagesRejectedError(Exception):
    def __init__(self, summary: str) -> None:
        self.summary = summary
        super().__init__(f"{REJECTED_IMAGES_MESSAGE}\n{summary}")


class UploadError(Exception):
    def __init__(self, failed_filenames: list[str]) -> None:
        self.failed_filenames = failed_filenames
        super().__init__(f"Failed to upload: {', '.join(failed_filenames)}")


_PIPELINE_ERRORS = (ImagesRejectedError, SigningError, UploadError, SubmissionError)


@dataclass
class SubmitListingInput:
    draft_id: UUID


@dataclass
class SubmitListingOutput:
    draft_id: UUID
    state: SubmissionState
    product_id: str | None = None
    image_urls: list[str] = field(default_factory=list)
    error_type: str | None = None
    error_message: str | None = None


class SubmitListing:
    """
    Use case: run the submit action for a draft.

    IDLE → VALIDATING → UPLOADING → SUBMITTING → DONE, with every stage
    failing into FAILED through the same handler. Validation, signing,
    upload and create are strictly sequential; a stage only starts once the
    previous one fully succeeded.
    """

    def __init__(
        self,
        draft_repo: DraftRepository,
        validation: ImageValidationCoordinator,
        uploads: UploadCoordinator,
        submitter: ListingSubmitter,
        event_publisher: EventPublisher,
    ) -> None:
        self._draft_repo = draft_repo
        self._validation = validation
        self._uploads = uploads
        self._submitter = submitter
        self._event_publisher = event_publisher

    async def execute(self, input_data: SubmitListingInput) -> SubmitListingOutput:
        draft = await self._draft_repo.get_or_raise(input_data.draft_id)

        # Refusals (in progress, incomplete) raise here before any stage runs
        draft.begin_submission()
        await self._draft_repo.save(draft)

        error: Exception | None = None
        image_urls: list[str] = []
        try:
            await self._validate(draft)
            draft.transition_to(SubmissionState.UPLOADING)

            await self._upload(draft)
            draft.transition_to(SubmissionState.SUBMITTING)

            image_urls = [image.public_url or "" for image in draft.images]
            product_id = await self._submitter.submit(draft, image_urls)
            draft.complete(product_id, image_urls)
        except _PIPELINE_ERRORS as exc:
            error = exc
            logger.warning(
                "listing_submission_failed",
                draft_id=str(draft.id),
                stage=draft.submission_state.value,
                error_type=type(exc).__name__,
                error=str(exc),
            )
            draft.fail(str(exc))
        except Exception:
            logger.exception(
                "listing_submission_crashed",
                draft_id=str(draft.id),
                stage=draft.submission_state.value,
            )
            draft.fail(GENERIC_FAILURE_MESSAGE)
            raise
        finally:
            await self._draft_repo.save(draft)
            await self._event_publisher.publish_many(draft.collect_events())

        if error is not None:
            return SubmitListingOutput(
                draft_id=draft.id,
                state=draft.submission_state,
                error_type=type(error).__name__,
                error_message=draft.submission_error,
            )

        logger.info(
            "listing_submitted",
            draft_id=str(draft.id),
            product_id=draft.submitted_product_id,
            image_count=len(image_urls),
        )
        return SubmitListingOutput(
            draft_id=draft.id,
            state=draft.submission_state,
            product_id=draft.submitted_product_id,
            image_urls=image_urls,
        )

    async def _validate(self, draft: DraftListing) -> None:
        pending = [image for image in draft.images if image.needs_upload]
        if not pending:
            return

        category = draft.category.value if draft.category else ""
        batch = await self._validation.validate_all(pending, draft.title, category)

        for verdict in batch.failures:
            verdict.image.attach_rejection(verdict.reason)
        if not batch.all_accepted:
            raise ImagesRejectedError(batch.summary())

        for image in pending:
            image.mark_validated()

    async def _upload(self, draft: DraftListing) -> None:
        pending = [image for image in draft.images if image.needs_upload]
        if not pending:
            return

        targets = await self._uploads.request_targets(pending)
        outcome = await self._uploads.upload_all(pending, targets)
        if isinstance(outcome, PartialFailure):
            raise UploadError(outcome.failed_filenames)

        for image, public_url in zip(pending, outcome.public_urls):
            image.mark_uploaded(public_url)
