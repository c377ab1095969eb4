"""Unit tests for application use cases; external services are mocked."""
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest

from thrift_store.application.coordinators.listing_submitter import ListingSubmitter
from thrift_store.application.coordinators.upload_coordinator import UploadCoordinator
from thrift_store.application.coordinators.validation_coordinator import (
    ImageValidationCoordinator,
)
from thrift_store.application.interfaces.draft_repository import DraftNotFoundError
from thrift_store.application.interfaces.image_validator import ImageValidator
from thrift_store.application.interfaces.product_api import (
    ProductApiError,
    SigningError,
    SubmissionError,
)
from thrift_store.application.use_cases.add_draft_images import (
    AddDraftImages,
    AddDraftImagesInput,
    NewImage,
)
from thrift_store.application.use_cases.analyze_draft import AnalyzeDraft, AnalyzeDraftInput
from thrift_store.application.use_cases.start_listing_edit import (
    StartListingEdit,
    StartListingEditInput,
)
from thrift_store.application.use_cases.submit_listing import (
    REJECTED_IMAGES_MESSAGE,
    SubmitListing,
    SubmitListingInput,
)
from thrift_store.domain.entities.draft_listing import (
    DraftIncompleteError,
    DraftListing,
    ImageLimitExceededError,
    SubmissionInProgressError,
)
from thrift_store.domain.entities.image_reference import ImageReference
from thrift_store.domain.entities.upload import PresignedUploadTarget
from thrift_store.domain.entities.validation import ProductAnalysis, ValidationResult
from thrift_store.domain.enums.image_state import ImageState
from thrift_store.domain.enums.listing_enums import Category, Condition, ContactMethod
from thrift_store.domain.enums.submission_state import SubmissionState
from thrift_store.domain.events.domain_events import ListingSubmittedEvent
from thrift_store.infrastructure.persistence.in_memory_draft_repository import (
    InMemoryDraftRepository,
)


class FakeValidator(ImageValidator):
    """Accepts every image except those named in `rejections`."""

    def __init__(
        self,
        rejections: dict[str, str] | None = None,
        analysis: ProductAnalysis | None = None,
    ) -> None:
        self.rejections = rejections or {}
        self.analysis = analysis
        self.validated: list[str] = []
        self.analyzed: list[str] = []

    async def validate(self, image: ImageReference, title: str, category: str) -> ValidationResult:
        self.validated.append(image.filename)
        if image.filename in self.rejections:
            return ValidationResult(accepted=False, message=self.rejections[image.filename])
        return ValidationResult(accepted=True, message="Looks like a genuine product photo")

    async def analyze(self, image: ImageReference) -> ProductAnalysis:
        self.analyzed.append(image.filename)
        assert self.analysis is not None
        return self.analysis


def _make_api() -> MagicMock:
    api = MagicMock()

    async def presign(files: list[tuple[str, str]]) -> list[PresignedUploadTarget]:
        return [
            PresignedUploadTarget(
                upload_url=f"https://storage.example.com/put/{i}",
                public_url=f"https://cdn.example.com/pub{i + 1}",
            )
            for i, _ in enumerate(files)
        ]

    api.get_presigned_targets = AsyncMock(side_effect=presign)
    api.upload_file = AsyncMock()
    api.create_product = AsyncMock(return_value={"success": True, "data": {"_id": "p-1"}})
    api.update_product = AsyncMock(return_value={"success": True, "data": {"_id": "p-1"}})
    api.get_product = AsyncMock()
    return api


def _make_publisher() -> MagicMock:
    pub = MagicMock()
    pub.publish_many = AsyncMock()
    return pub


def _make_draft(*filenames: str) -> DraftListing:
    draft = DraftListing(
        title="Hero Sprint cycle",
        description="21 gears, new tyres",
        category=Category.CYCLES,
        condition=Condition.GOOD,
        price=Decimal("3000"),
        contact_method=ContactMethod.EMAIL,
        email="seller@college.edu",
    )
    draft.images.extend(
        ImageReference.from_upload(name, "image/jpeg", name.encode()) for name in filenames
    )
    return draft


def _make_submit(
    repo: InMemoryDraftRepository,
    validator: ImageValidator,
    api: MagicMock,
    publisher: MagicMock | None = None,
) -> SubmitListing:
    return SubmitListing(
        repo,
        ImageValidationCoordinator(validator),
        UploadCoordinator(api),
        ListingSubmitter(api),
        publisher or _make_publisher(),
    )


class TestSubmitListing:
    @pytest.mark.asyncio
    async def test_two_accepted_images_create_one_listing(self) -> None:
        repo = InMemoryDraftRepository()
        draft = _make_draft("front.jpg", "back.jpg")
        await repo.save(draft)
        api = _make_api()
        publisher = _make_publisher()

        result = await _make_submit(repo, FakeValidator(), api, publisher).execute(
            SubmitListingInput(draft_id=draft.id)
        )

        assert result.state == SubmissionState.DONE
        assert result.product_id == "p-1"
        assert result.image_urls == ["https://cdn.example.com/pub1", "https://cdn.example.com/pub2"]
        api.get_presigned_targets.assert_awaited_once()
        assert api.upload_file.await_count == 2
        api.create_product.assert_awaited_once()
        payload = api.create_product.await_args.args[0]
        assert payload["images"] == ["https://cdn.example.com/pub1", "https://cdn.example.com/pub2"]
        assert all(image.state == ImageState.UPLOADED for image in draft.images)

        events = publisher.publish_many.await_args.args[0]
        states = [e.to_state for e in events if hasattr(e, "to_state")]
        assert states == [
            SubmissionState.VALIDATING,
            SubmissionState.UPLOADING,
            SubmissionState.SUBMITTING,
            SubmissionState.DONE,
        ]
        assert isinstance(events[-1], ListingSubmittedEvent)

    @pytest.mark.asyncio
    async def test_rejected_image_stops_before_any_upload(self) -> None:
        repo = InMemoryDraftRepository()
        draft = _make_draft("selfie.jpg", "cycle.jpg")
        await repo.save(draft)
        api = _make_api()
        validator = FakeValidator(rejections={"selfie.jpg": "contains a person"})

        result = await _make_submit(repo, validator, api).execute(
            SubmitListingInput(draft_id=draft.id)
        )

        assert result.state == SubmissionState.FAILED
        assert result.error_type == "ImagesRejectedError"
        assert REJECTED_IMAGES_MESSAGE in (result.error_message or "")
        assert sorted(validator.validated) == ["cycle.jpg", "selfie.jpg"]
        api.get_presigned_targets.assert_not_awaited()
        api.upload_file.assert_not_awaited()
        api.create_product.assert_not_awaited()

        assert [i.filename for i in draft.images] == ["selfie.jpg", "cycle.jpg"]
        assert draft.images[0].rejection_message == "contains a person"
        assert draft.images[1].rejection_message is None
        assert draft.submission_state == SubmissionState.FAILED

    @pytest.mark.asyncio
    async def test_signing_failure_skips_uploads(self) -> None:
        repo = InMemoryDraftRepository()
        draft = _make_draft("a.jpg")
        await repo.save(draft)
        api = _make_api()
        api.get_presigned_targets = AsyncMock(side_effect=SigningError("Backend returned 500"))

        result = await _make_submit(repo, FakeValidator(), api).execute(
            SubmitListingInput(draft_id=draft.id)
        )

        assert result.state == SubmissionState.FAILED
        assert result.error_type == "SigningError"
        api.upload_file.assert_not_awaited()
        api.create_product.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_partial_upload_failure_does_not_create(self) -> None:
        repo = InMemoryDraftRepository()
        draft = _make_draft("a.jpg", "b.jpg")
        await repo.save(draft)
        api = _make_api()

        async def flaky_upload(url: str, data: bytes, content_type: str) -> None:
            if data == b"b.jpg":
                raise ConnectionError("reset by peer")

        api.upload_file = AsyncMock(side_effect=flaky_upload)

        result = await _make_submit(repo, FakeValidator(), api).execute(
            SubmitListingInput(draft_id=draft.id)
        )

        assert result.state == SubmissionState.FAILED
        assert result.error_type == "UploadError"
        assert "b.jpg" in (result.error_message or "")
        api.create_product.assert_not_awaited()
        assert all(image.needs_upload for image in draft.images)

    @pytest.mark.asyncio
    async def test_backend_rejection_fails_submit(self) -> None:
        repo = InMemoryDraftRepository()
        draft = _make_draft()
        await repo.save(draft)
        api = _make_api()
        api.create_product = AsyncMock(side_effect=SubmissionError("Title is required"))

        result = await _make_submit(repo, FakeValidator(), api).execute(
            SubmitListingInput(draft_id=draft.id)
        )

        assert result.state == SubmissionState.FAILED
        assert result.error_message == "Title is required"
        assert draft.submission_error == "Title is required"

    @pytest.mark.asyncio
    async def test_no_images_skips_signing_and_creates(self) -> None:
        repo = InMemoryDraftRepository()
        draft = _make_draft()
        await repo.save(draft)
        api = _make_api()

        result = await _make_submit(repo, FakeValidator(), api).execute(
            SubmitListingInput(draft_id=draft.id)
        )

        assert result.state == SubmissionState.DONE
        api.get_presigned_targets.assert_not_awaited()
        assert api.create_product.await_args.args[0]["images"] == []

    @pytest.mark.asyncio
    async def test_resubmit_after_done_creates_again(self) -> None:
        repo = InMemoryDraftRepository()
        draft = _make_draft("a.jpg")
        await repo.save(draft)
        api = _make_api()
        validator = FakeValidator()
        use_case = _make_submit(repo, validator, api)

        await use_case.execute(SubmitListingInput(draft_id=draft.id))
        second = await use_case.execute(SubmitListingInput(draft_id=draft.id))

        assert second.state == SubmissionState.DONE
        assert api.create_product.await_count == 2
        api.update_product.assert_not_awaited()
        # Already uploaded images are neither re-validated nor re-uploaded
        assert validator.validated == ["a.jpg"]
        assert api.upload_file.await_count == 1

    @pytest.mark.asyncio
    async def test_retry_after_failure_runs_again(self) -> None:
        repo = InMemoryDraftRepository()
        draft = _make_draft("a.jpg")
        await repo.save(draft)
        api = _make_api()
        api.get_presigned_targets = AsyncMock(side_effect=SigningError("down"))
        use_case = _make_submit(repo, FakeValidator(), api)
        await use_case.execute(SubmitListingInput(draft_id=draft.id))

        api.get_presigned_targets = AsyncMock(
            return_value=[
                PresignedUploadTarget(
                    upload_url="https://storage.example.com/put/0",
                    public_url="https://cdn.example.com/pub1",
                )
            ]
        )
        result = await use_case.execute(SubmitListingInput(draft_id=draft.id))

        assert result.state == SubmissionState.DONE
        assert draft.submission_error is None

    @pytest.mark.asyncio
    async def test_in_flight_submit_is_refused(self) -> None:
        repo = InMemoryDraftRepository()
        draft = _make_draft("a.jpg")
        draft.begin_submission()
        await repo.save(draft)
        api = _make_api()

        with pytest.raises(SubmissionInProgressError):
            await _make_submit(repo, FakeValidator(), api).execute(
                SubmitListingInput(draft_id=draft.id)
            )
        api.get_presigned_targets.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_incomplete_draft_is_refused(self) -> None:
        repo = InMemoryDraftRepository()
        draft = _make_draft()
        draft.email = ""
        await repo.save(draft)

        with pytest.raises(DraftIncompleteError):
            await _make_submit(repo, FakeValidator(), _make_api()).execute(
                SubmitListingInput(draft_id=draft.id)
            )
        assert draft.submission_state == SubmissionState.IDLE

    @pytest.mark.asyncio
    async def test_unexpected_error_fails_draft_and_propagates(self) -> None:
        repo = InMemoryDraftRepository()
        draft = _make_draft()
        await repo.save(draft)
        api = _make_api()
        api.create_product = AsyncMock(side_effect=RuntimeError("bug"))

        with pytest.raises(RuntimeError):
            await _make_submit(repo, FakeValidator(), api).execute(
                SubmitListingInput(draft_id=draft.id)
            )
        assert draft.submission_state == SubmissionState.FAILED

    @pytest.mark.asyncio
    async def test_missing_draft_raises(self) -> None:
        with pytest.raises(DraftNotFoundError):
            await _make_submit(InMemoryDraftRepository(), FakeValidator(), _make_api()).execute(
                SubmitListingInput(draft_id=uuid4())
            )


class TestAddDraftImages:
    @pytest.mark.asyncio
    async def test_accepted_batch_is_added(self) -> None:
        repo = InMemoryDraftRepository()
        draft = _make_draft()
        await repo.save(draft)
        use_case = AddDraftImages(repo, ImageValidationCoordinator(FakeValidator()))

        result = await use_case.execute(
            AddDraftImagesInput(
                draft_id=draft.id,
                files=[NewImage("a.jpg", "image/jpeg", b"a"), NewImage("b.jpg", "image/jpeg", b"b")],
            )
        )

        assert result.image_count == 2
        assert result.rejection_message is None
        assert len(result.admitted_ids) == 2
        assert all(image.state == ImageState.VALIDATED for image in draft.images)

    @pytest.mark.asyncio
    async def test_any_rejection_admits_nothing(self) -> None:
        repo = InMemoryDraftRepository()
        draft = _make_draft()
        await repo.save(draft)
        validator = FakeValidator(rejections={"meme.png": "not a product photo"})
        use_case = AddDraftImages(repo, ImageValidationCoordinator(validator))

        result = await use_case.execute(
            AddDraftImagesInput(
                draft_id=draft.id,
                files=[NewImage("a.jpg", "image/jpeg", b"a"), NewImage("meme.png", "image/png", b"m")],
            )
        )

        assert draft.images == []
        assert result.rejected_filenames == ["meme.png"]
        assert result.rejection_message is not None
        assert "meme.png: not a product photo" in result.rejection_message

    @pytest.mark.asyncio
    async def test_over_limit_refused_without_ai_calls(self) -> None:
        repo = InMemoryDraftRepository()
        draft = _make_draft("1.jpg", "2.jpg", "3.jpg", "4.jpg")
        await repo.save(draft)
        validator = FakeValidator()
        use_case = AddDraftImages(repo, ImageValidationCoordinator(validator))

        with pytest.raises(ImageLimitExceededError):
            await use_case.execute(
                AddDraftImagesInput(
                    draft_id=draft.id,
                    files=[NewImage("5.jpg", "image/jpeg", b"5"), NewImage("6.jpg", "image/jpeg", b"6")],
                )
            )
        assert validator.validated == []
        assert len(draft.images) == 4


class TestAnalyzeDraft:
    @pytest.mark.asyncio
    async def test_genuine_analysis_fills_draft(self) -> None:
        repo = InMemoryDraftRepository()
        draft = DraftListing()
        draft.images.append(ImageReference.from_upload("calc.jpg", "image/jpeg", b"c"))
        await repo.save(draft)
        validator = FakeValidator(
            analysis=ProductAnalysis(
                is_genuine=True,
                validation_message="ok",
                title="Casio fx-991EX",
                description="Scientific calculator",
                category=Category.ELECTRONICS,
                condition=Condition.LIKE_NEW,
                estimated_price=Decimal("650"),
            )
        )

        result = await AnalyzeDraft(repo, validator).execute(AnalyzeDraftInput(draft_id=draft.id))

        assert result.applied is True
        assert draft.title == "Casio fx-991EX"
        assert draft.category == Category.ELECTRONICS
        assert draft.price == Decimal("650")

    @pytest.mark.asyncio
    async def test_non_genuine_analysis_leaves_draft(self) -> None:
        repo = InMemoryDraftRepository()
        draft = DraftListing(title="My title")
        draft.images.append(ImageReference.from_upload("x.jpg", "image/jpeg", b"x"))
        await repo.save(draft)
        validator = FakeValidator(
            analysis=ProductAnalysis(
                is_genuine=False,
                validation_message="stock photo",
                title="Something else",
            )
        )

        result = await AnalyzeDraft(repo, validator).execute(AnalyzeDraftInput(draft_id=draft.id))

        assert result.applied is False
        assert draft.title == "My title"

    @pytest.mark.asyncio
    async def test_requires_a_local_image(self) -> None:
        repo = InMemoryDraftRepository()
        draft = DraftListing()
        draft.images.append(ImageReference.from_public_url("https://cdn.example.com/a.jpg"))
        await repo.save(draft)

        with pytest.raises(DraftIncompleteError):
            await AnalyzeDraft(repo, FakeValidator()).execute(AnalyzeDraftInput(draft_id=draft.id))


class TestStartListingEdit:
    @pytest.mark.asyncio
    async def test_loads_product_into_draft(self) -> None:
        repo = InMemoryDraftRepository()
        api = _make_api()
        api.get_product = AsyncMock(
            return_value={
                "title": "Hostel kettle",
                "category": "hostel",
                "condition": "fair",
                "price": 400,
                "contactMethod": "both",
                "phone": "9876543210",
                "email": "seller@college.edu",
                "images": ["https://cdn.example.com/kettle.jpg"],
            }
        )

        draft = await StartListingEdit(repo, api).execute(StartListingEditInput(product_id="p-7"))

        api.get_product.assert_awaited_once_with("p-7")
        assert draft.product_id == "p-7"
        assert draft.category == Category.HOSTEL_ESSENTIALS
        assert await repo.get_by_id(draft.id) is draft

    @pytest.mark.asyncio
    async def test_submitting_edit_updates_existing_product(self) -> None:
        repo = InMemoryDraftRepository()
        api = _make_api()
        api.get_product = AsyncMock(
            return_value={
                "title": "Hostel kettle",
                "category": "hostel",
                "condition": "fair",
                "contactMethod": "phone",
                "phone": "9876543210",
                "images": ["https://cdn.example.com/kettle.jpg"],
            }
        )
        draft = await StartListingEdit(repo, api).execute(StartListingEditInput(product_id="p-7"))

        result = await _make_submit(repo, FakeValidator(), api).execute(
            SubmitListingInput(draft_id=draft.id)
        )

        assert result.state == SubmissionState.DONE
        api.update_product.assert_awaited_once()
        product_id, payload = api.update_product.await_args.args
        assert product_id == "p-7"
        assert payload["images"] == ["https://cdn.example.com/kettle.jpg"]
        api.get_presigned_targets.assert_not_awaited()
        api.create_product.assert_not_awaited()


class TestStartListingEditRejectsUnusableProducts:
    @pytest.mark.asyncio
    async def test_too_many_images_is_api_error(self) -> None:
        repo = InMemoryDraftRepository()
        api = _make_api()
        api.get_product = AsyncMock(
            return_value={"images": [f"https://cdn.example.com/{i}.jpg" for i in range(6)]}
        )

        with pytest.raises(ProductApiError):
            await StartListingEdit(repo, api).execute(StartListingEditInput(product_id="p-7"))

    @pytest.mark.asyncio
    async def test_bad_price_is_api_error(self) -> None:
        api = _make_api()
        api.get_product = AsyncMock(return_value={"title": "Kettle", "price": "n/a"})

        with pytest.raises(ProductApiError):
            await StartListingEdit(InMemoryDraftRepository(), api).execute(
                StartListingEditInput(product_id="p-7")
            )

    @pytest.mark.asyncio
    async def test_uses_configured_image_limit(self) -> None:
        repo = InMemoryDraftRepository()
        api = _make_api()
        api.get_product = AsyncMock(return_value={"images": ["https://cdn.example.com/1.jpg"]})

        draft = await StartListingEdit(repo, api, max_images=3).execute(
            StartListingEditInput(product_id="p-7")
        )

        assert draft.max_images == 3
