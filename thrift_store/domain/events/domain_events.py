from dataclasses import dataclass, field
from datetime import datetime, timezone
from uuid import UUID, uuid4

from thrift_store.domain.enums.submission_state import SubmissionState


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class DomainEvent:
    """Base class for all domain events."""

    event_id: UUID = field(default_factory=uuid4)
    occurred_at: datetime = field(default_factory=_utcnow)


@dataclass(frozen=True)
class SubmissionStateChangedEvent(DomainEvent):
    """Published whenever the submit action of a draft changes state."""

    draft_id: UUID = field(default_factory=uuid4)
    from_state: SubmissionState = SubmissionState.IDLE
    to_state: SubmissionState = SubmissionState.IDLE
    error_message: str | None = None


@dataclass(frozen=True)
class ListingSubmittedEvent(DomainEvent):
    """Published when the backend has accepted a created or updated listing."""

    draft_id: UUID = field(default_factory=uuid4)
    product_id: str = ""
    image_urls: tuple[str, ...] = ()
    updated: bool = False
