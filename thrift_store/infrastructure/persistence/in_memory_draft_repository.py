from uuid import UUID

from thrift_store.application.interfaces.draft_repository import DraftRepository
from thrift_store.domain.entities.draft_listing import DraftListing


class InMemoryDraftRepository(DraftRepository):
    """Drafts live only as long as the process; nothing is written to disk."""

    def __init__(self) -> None:
        self._drafts: dict[UUID, DraftListing] = {}

    async def save(self, draft: DraftListing) -> None:
        self._drafts[draft.id] = draft

    async def get_by_id(self, draft_id: UUID) -> DraftListing | None:
        return self._drafts.get(draft_id)

    async def delete(self, draft_id: UUID) -> bool:
        return self._drafts.pop(draft_id, None) is not None
