from abc import ABC, abstractmethod
from uuid import UUID

from thrift_store.domain.entities.draft_listing import DraftListing


class DraftNotFoundError(Exception):
    def __init__(self, draft_id: UUID) -> None:
        self.draft_id = draft_id
        super().__init__(f"Draft {draft_id} not found.")


class DraftRepository(ABC):
    """Port for holding draft listings while the seller edits them."""

    @abstractmethod
    async def save(self, draft: DraftListing) -> None:
        ...

    @abstractmethod
    async def get_by_id(self, draft_id: UUID) -> DraftListing | None:
        ...

    @abstractmethod
    async def delete(self, draft_id: UUID) -> bool:
        """Return True if a draft was removed."""
        ...

    async def get_or_raise(self, draft_id: UUID) -> DraftListing:
        draft = await self.get_by_id(draft_id)
        if draft is None:
            raise DraftNotFoundError(draft_id)
        return draft
