from dataclasses import dataclass, field
from decimal import Decimal

from thrift_store.domain.enums.listing_enums import Category, Condition


@dataclass(frozen=True)
class ValidationResult:
    """The AI service's judgment on whether an image is an acceptable product photo."""

    accepted: bool
    message: str
    suggested_category: str | None = None
    suggested_title: str | None = None
    issues: tuple[str, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class ProductAnalysis:
    """Listing details suggested by the AI service from a product photo."""

    is_genuine: bool
    validation_message: str
    title: str = ""
    description: str = ""
    category: Category | None = None
    condition: Condition | None = None
    estimated_price: Decimal = Decimal("0")
