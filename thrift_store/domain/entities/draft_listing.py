from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Any
from uuid import UUID, uuid4

from thrift_store.domain.entities.image_reference import ImageReference, ImageReferenceError
from thrift_store.domain.entities.validation import ProductAnalysis
from thrift_store.domain.enums.image_state import ImageState
from thrift_store.domain.enums.listing_enums import Category, Condition, ContactMethod, SaleType
from thrift_store.domain.enums.submission_state import SubmissionState
from thrift_store.domain.events.domain_events import (
    DomainEvent,
    ListingSubmittedEvent,
    SubmissionStateChangedEvent,
)
from thrift_store.domain.state_machine.submission_state_machine import SubmissionStateMachine

MAX_IMAGES = 5

_SALE_TYPES = frozenset(s.value for s in SaleType)
_CONTACT_METHODS = frozenset(c.value for c in ContactMethod)

_state_machine = SubmissionStateMachine()


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ImageLimitExceededError(Exception):
    def __init__(self, current: int, adding: int, limit: int) -> None:
        self.current = current
        self.adding = adding
        self.limit = limit
        super().__init__(
            f"You can only upload up to {limit} images "
            f"({current} attached, {adding} more requested)."
        )


class DraftIncompleteError(Exception):
    def __init__(self, missing: list[str]) -> None:
        self.missing = missing
        super().__init__(f"Draft is missing required fields: {', '.join(missing)}")


class SubmissionInProgressError(Exception):
    def __init__(self, draft_id: UUID, state: SubmissionState) -> None:
        self.draft_id = draft_id
        self.state = state
        super().__init__(f"Draft {draft_id} is already being submitted ({state.value}).")


EDITABLE_FIELDS = frozenset(
    {
        "title",
        "description",
        "category",
        "condition",
        "sale_type",
        "price",
        "contact_method",
        "phone",
        "email",
        "meeting_location",
    }
)

# Fields where None means "not chosen yet"
CLEARABLE_FIELDS = frozenset({"category", "condition", "contact_method"})


def _to_price(value: Any) -> Decimal:
    try:
        price = Decimal(str(value))
    except InvalidOperation as exc:
        raise ValueError(f"price must be a number, got {value!r}") from exc
    if not price.is_finite() or price < 0:
        raise ValueError("price must be non-negative")
    return price


@dataclass
class DraftListing:
    """
    The in-memory, not-yet-persisted listing a seller is filling in.

    Owns its images and the state of the submit action. Emits domain events
    on submit transitions; callers are responsible for collecting and
    publishing them.
    """

    # Identity
    id: UUID = field(default_factory=uuid4)

    # Set when the draft edits an already-published listing
    product_id: str | None = None

    # Backend id returned by the most recent successful submit
    submitted_product_id: str | None = None

    # Listing details
    title: str = ""
    description: str = ""
    category: Category | None = None
    condition: Condition | None = None
    sale_type: SaleType = SaleType.FIXED_PRICE
    price: Decimal = Decimal("0")

    # Contact
    contact_method: ContactMethod | None = None
    phone: str = ""
    email: str = ""
    meeting_location: str = ""

    images: list[ImageReference] = field(default_factory=list)
    max_images: int = MAX_IMAGES

    # Submit action
    submission_state: SubmissionState = SubmissionState.IDLE
    submission_error: str | None = None

    created_at: datetime = field(default_factory=_utcnow)
    updated_at: datetime = field(default_factory=_utcnow)

    _events: list[DomainEvent] = field(default_factory=list, repr=False, compare=False)

    def __post_init__(self) -> None:
        if self.price < 0:
            raise ValueError("price must be non-negative")
        if len(self.images) > self.max_images:
            raise ImageLimitExceededError(0, len(self.images), self.max_images)

    # -------------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------------

    @classmethod
    def from_existing_product(
        cls, product_id: str, data: dict[str, Any], max_images: int = MAX_IMAGES
    ) -> "DraftListing":
        """
        Build an editable draft from a product record returned by the backend.

        Raises ValueError for an unusable price and ImageLimitExceededError
        when the product carries more images than the draft may hold.
        """
        sale_type = data.get("saletype")
        contact = data.get("contactMethod")
        return cls(
            product_id=product_id,
            title=data.get("title") or "",
            description=data.get("description") or "",
            category=Category.from_label(data.get("category") or ""),
            condition=Condition.from_label(data.get("condition") or ""),
            sale_type=SaleType(sale_type) if sale_type in _SALE_TYPES else SaleType.FIXED_PRICE,
            price=_to_price(data.get("price") or 0),
            contact_method=ContactMethod(contact) if contact in _CONTACT_METHODS else None,
            phone=data.get("phone") or "",
            email=data.get("email") or "",
            meeting_location=data.get("meetingLocation") or "",
            images=[ImageReference.from_public_url(url) for url in data.get("images", []) if url],
            max_images=max_images,
        )

    # -------------------------------------------------------------------------
    # Form editing
    # -------------------------------------------------------------------------

    def update_fields(self, **changes: Any) -> None:
        self._ensure_not_submitting()
        unknown = set(changes) - EDITABLE_FIELDS
        if unknown:
            raise ValueError(f"Unknown draft fields: {sorted(unknown)}")
        nulled = sorted(n for n, v in changes.items() if v is None and n not in CLEARABLE_FIELDS)
        if nulled:
            raise ValueError(f"Fields cannot be cleared: {nulled}")
        if "price" in changes:
            changes["price"] = _to_price(changes["price"])
        for name, value in changes.items():
            setattr(self, name, value)
        self.updated_at = _utcnow()

    def check_image_capacity(self, adding: int) -> None:
        """Raise ImageLimitExceededError if `adding` more images would overflow the draft."""
        if len(self.images) + adding > self.max_images:
            raise ImageLimitExceededError(len(self.images), adding, self.max_images)

    def add_images(self, images: list[ImageReference]) -> None:
        """Admit validated images; all or nothing."""
        self._ensure_not_submitting()
        self.check_image_capacity(len(images))
        for image in images:
            if image.state != ImageState.VALIDATED:
                raise ImageReferenceError(
                    f"Only validated images can be added (got {image.filename} in {image.state.value})"
                )
        self.images.extend(images)
        self.updated_at = _utcnow()

    def remove_image(self, index: int) -> ImageReference:
        self._ensure_not_submitting()
        if not 0 <= index < len(self.images):
            raise ImageReferenceError(f"No image at position {index}")
        removed = self.images.pop(index)
        self.updated_at = _utcnow()
        return removed

    def apply_analysis(self, analysis: ProductAnalysis) -> None:
        """Fill form fields from an AI analysis; unknown values leave fields unchanged."""
        self._ensure_not_submitting()
        if analysis.title:
            self.title = analysis.title
        if analysis.description:
            self.description = analysis.description
        if analysis.category is not None:
            self.category = analysis.category
        if analysis.condition is not None:
            self.condition = analysis.condition
        if analysis.estimated_price > 0:
            self.price = analysis.estimated_price
        self.updated_at = _utcnow()

    def _ensure_not_submitting(self) -> None:
        if self.submission_state.is_in_flight:
            raise SubmissionInProgressError(self.id, self.submission_state)

    # -------------------------------------------------------------------------
    # Submit readiness
    # -------------------------------------------------------------------------

    def missing_fields(self) -> list[str]:
        missing: list[str] = []
        if not self.title.strip():
            missing.append("title")
        if self.category is None:
            missing.append("category")
        if self.condition is None:
            missing.append("condition")
        if self.contact_method is None:
            missing.append("contact_method")
        else:
            if self.contact_method.requires_phone and not self.phone.strip():
                missing.append("phone")
            if self.contact_method.requires_email and not self.email.strip():
                missing.append("email")
        return missing

    def ensure_ready_for_submit(self) -> None:
        missing = self.missing_fields()
        if missing:
            raise DraftIncompleteError(missing)

    def to_payload(self, image_urls: list[str]) -> dict[str, Any]:
        """Backend JSON body for create/update; `image_urls` are sent as given."""
        return {
            "title": self.title,
            "description": self.description,
            "category": self.category.value if self.category else "",
            "condition": self.condition.value if self.condition else "",
            "saletype": self.sale_type.value,
            "price": float(self.price),
            "contactMethod": self.contact_method.value if self.contact_method else "",
            "phone": self.phone,
            "email": self.email,
            "meetingLocation": self.meeting_location,
            "images": list(image_urls),
        }

    # -------------------------------------------------------------------------
    # Submit state transitions
    # -------------------------------------------------------------------------

    def begin_submission(self) -> None:
        """Start a user-initiated submit, resetting a previous settled attempt."""
        if self.submission_state.is_in_flight:
            raise SubmissionInProgressError(self.id, self.submission_state)
        self.ensure_ready_for_submit()
        if self.submission_state.is_settled:
            self.transition_to(SubmissionState.IDLE)
        self.submission_error = None
        for image in self.images:
            image.clear_rejection()
        self.transition_to(SubmissionState.VALIDATING)

    def transition_to(self, new_state: SubmissionState, error_message: str | None = None) -> None:
        """Validate and apply a submit transition, recording the domain event."""
        _state_machine.validate_transition(self.submission_state, new_state)

        old_state = self.submission_state
        self.submission_state = new_state
        self.updated_at = _utcnow()
        if new_state == SubmissionState.FAILED:
            self.submission_error = error_message

        self._events.append(
            SubmissionStateChangedEvent(
                draft_id=self.id,
                from_state=old_state,
                to_state=new_state,
                error_message=error_message,
            )
        )

    def fail(self, message: str) -> None:
        self.transition_to(SubmissionState.FAILED, error_message=message)

    def complete(self, product_id: str, image_urls: list[str]) -> None:
        updated = self.product_id is not None
        self.transition_to(SubmissionState.DONE)
        self.submitted_product_id = product_id
        self._events.append(
            ListingSubmittedEvent(
                draft_id=self.id,
                product_id=product_id,
                image_urls=tuple(image_urls),
                updated=updated,
            )
        )

    # -------------------------------------------------------------------------
    # Event collection
    # -------------------------------------------------------------------------

    def collect_events(self) -> list[DomainEvent]:
        """Return pending events and clear the internal buffer."""
        events = list(self._events)
        self._events.clear()
        return events
