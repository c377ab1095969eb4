from dataclasses import dataclass
from uuid import UUID

import structlog

from thrift_store.application.interfaces.draft_repository import DraftRepository
from thrift_store.application.interfaces.image_validator import ImageValidator
from thrift_store.domain.entities.draft_listing import DraftIncompleteError
from thrift_store.domain.entities.validation import ProductAnalysis

logger = structlog.get_logger(__name__)


@dataclass
class AnalyzeDraftInput:
    draft_id: UUID


@dataclass
class AnalyzeDraftOutput:
    draft_id: UUID
    analysis: ProductAnalysis
    applied: bool


class AnalyzeDraft:
    """Use case: auto-fill a draft's details from its cover photo."""

    def __init__(self, draft_repo: DraftRepository, validator: ImageValidator) -> None:
        self._draft_repo = draft_repo
        self._validator = validator

    async def execute(self, input_data: AnalyzeDraftInput) -> AnalyzeDraftOutput:
        draft = await self._draft_repo.get_or_raise(input_data.draft_id)

        # Photos carried over from a published listing have no local bytes
        image = next((i for i in draft.images if i.data), None)
        if image is None:
            raise DraftIncompleteError(["images"])

        analysis = await self._validator.analyze(image)

        if analysis.is_genuine:
            draft.apply_analysis(analysis)
            await self._draft_repo.save(draft)

        logger.info(
            "draft_analyzed",
            draft_id=str(draft.id),
            filename=image.filename,
            applied=analysis.is_genuine,
        )
        return AnalyzeDraftOutput(
            draft_id=draft.id,
            analysis=analysis,
            applied=analysis.is_genuine,
        )
