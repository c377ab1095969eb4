from uuid import UUID

import structlog
from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status

from thrift_store.api.dependencies import (
    get_add_images_use_case,
    get_analyze_use_case,
    get_draft_repo,
    get_start_edit_use_case,
    get_submit_use_case,
)
from thrift_store.api.schemas.draft_schemas import (
    AddImagesResponse,
    AnalysisResponse,
    DraftFieldsRequest,
    DraftResponse,
    SubmitResponse,
)
from thrift_store.application.interfaces.draft_repository import DraftNotFoundError, DraftRepository
from thrift_store.application.interfaces.image_validator import (
    ValidationParseError,
    ValidationServiceError,
)
from thrift_store.application.interfaces.product_api import ProductApiError
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
from thrift_store.application.use_cases.submit_listing import SubmitListing, SubmitListingInput
from thrift_store.config import settings
from thrift_store.domain.entities.draft_listing import (
    DraftIncompleteError,
    DraftListing,
    ImageLimitExceededError,
    SubmissionInProgressError,
)
from thrift_store.domain.entities.image_reference import ImageReferenceError
from thrift_store.domain.state_machine.submission_state_machine import InvalidStateTransitionError

logger = structlog.get_logger(__name__)
router = APIRouter(prefix="/drafts", tags=["drafts"])


def _to_response(draft: DraftListing) -> DraftResponse:
    return DraftResponse.model_validate(draft)


async def _load(draft_id: UUID, repo: DraftRepository) -> DraftListing:
    try:
        return await repo.get_or_raise(draft_id)
    except DraftNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc


@router.post("", response_model=DraftResponse, status_code=status.HTTP_201_CREATED)
async def create_draft(
    body: DraftFieldsRequest,
    repo: DraftRepository = Depends(get_draft_repo),
) -> DraftResponse:
    """Start a new, empty listing draft."""
    draft = DraftListing(max_images=settings.max_images_per_listing)
    draft.update_fields(**body.model_dump(exclude_none=True))
    await repo.save(draft)
    logger.info("draft_created", draft_id=str(draft.id))
    return _to_response(draft)


@router.post(
    "/from-product/{product_id}",
    response_model=DraftResponse,
    status_code=status.HTTP_201_CREATED,
)
async def edit_published_listing(
    product_id: str,
    use_case: StartListingEdit = Depends(get_start_edit_use_case),
) -> DraftResponse:
    """Open an already-published listing as a draft for updating."""
    try:
        draft = await use_case.execute(StartListingEditInput(product_id=product_id))
    except ProductApiError as exc:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc)) from exc
    return _to_response(draft)


@router.get("/{draft_id}", response_model=DraftResponse)
async def get_draft(
    draft_id: UUID,
    repo: DraftRepository = Depends(get_draft_repo),
) -> DraftResponse:
    return _to_response(await _load(draft_id, repo))


@router.patch("/{draft_id}", response_model=DraftResponse)
async def update_draft(
    draft_id: UUID,
    body: DraftFieldsRequest,
    repo: DraftRepository = Depends(get_draft_repo),
) -> DraftResponse:
    draft = await _load(draft_id, repo)
    try:
        draft.update_fields(**body.model_dump(exclude_unset=True))
    except SubmissionInProgressError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)
        ) from exc
    await repo.save(draft)
    return _to_response(draft)


@router.delete("/{draft_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_draft(
    draft_id: UUID,
    repo: DraftRepository = Depends(get_draft_repo),
) -> None:
    if not await repo.delete(draft_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Draft {draft_id} not found.")


@router.post("/{draft_id}/images", response_model=AddImagesResponse)
async def add_images(
    draft_id: UUID,
    files: list[UploadFile] = File(...),
    use_case: AddDraftImages = Depends(get_add_images_use_case),
) -> AddImagesResponse:
    """
    Check new photos with the AI validator and attach them if all pass.

    A rejected batch is a normal outcome: 200 with `rejection_message` set.
    """
    new_images = [
        NewImage(
            filename=upload.filename or "image",
            content_type=upload.content_type or "application/octet-stream",
            data=await upload.read(),
        )
        for upload in files
    ]
    try:
        result = await use_case.execute(AddDraftImagesInput(draft_id=draft_id, files=new_images))
    except DraftNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except ImageLimitExceededError as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)
        ) from exc
    except SubmissionInProgressError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc

    return AddImagesResponse(
        draft_id=result.draft_id,
        admitted_ids=result.admitted_ids,
        rejected_filenames=result.rejected_filenames,
        rejection_message=result.rejection_message,
        image_count=result.image_count,
    )


@router.delete("/{draft_id}/images/{index}", response_model=DraftResponse)
async def remove_image(
    draft_id: UUID,
    index: int,
    repo: DraftRepository = Depends(get_draft_repo),
) -> DraftResponse:
    draft = await _load(draft_id, repo)
    try:
        draft.remove_image(index)
    except ImageReferenceError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except SubmissionInProgressError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    await repo.save(draft)
    return _to_response(draft)


@router.post("/{draft_id}/analyze", response_model=AnalysisResponse)
async def analyze_draft(
    draft_id: UUID,
    use_case: AnalyzeDraft = Depends(get_analyze_use_case),
) -> AnalysisResponse:
    """Fill in the draft from its cover photo ("Analyze with AI")."""
    try:
        result = await use_case.execute(AnalyzeDraftInput(draft_id=draft_id))
    except DraftNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except DraftIncompleteError as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="Please upload at least one image to analyze",
        ) from exc
    except SubmissionInProgressError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    except (ValidationServiceError, ValidationParseError) as exc:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Failed to analyze image. Please try again or fill in details manually.",
        ) from exc

    analysis = result.analysis
    return AnalysisResponse(
        draft_id=result.draft_id,
        applied=result.applied,
        is_genuine=analysis.is_genuine,
        validation_message=analysis.validation_message,
        title=analysis.title,
        description=analysis.description,
        category=analysis.category,
        condition=analysis.condition,
        estimated_price=analysis.estimated_price,
    )


@router.post("/{draft_id}/submit", response_model=SubmitResponse)
async def submit_draft(
    draft_id: UUID,
    use_case: SubmitListing = Depends(get_submit_use_case),
) -> SubmitResponse:
    """
    Validate, upload and publish the draft.

    Pipeline failures come back as 200 with state FAILED and the error;
    requests that cannot start a submit at all are 4xx.
    """
    try:
        result = await use_case.execute(SubmitListingInput(draft_id=draft_id))
    except DraftNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except DraftIncompleteError as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)
        ) from exc
    except (SubmissionInProgressError, InvalidStateTransitionError) as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc

    return SubmitResponse(
        draft_id=result.draft_id,
        state=result.state,
        product_id=result.product_id,
        image_urls=result.image_urls,
        error_type=result.error_type,
        error_message=result.error_message,
    )
