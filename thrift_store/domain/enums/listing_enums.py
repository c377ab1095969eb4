from enum import Enum


class Category(str, Enum):
    """Listing categories, valued by their backend wire representation."""

    BOOKS = "books"
    ELECTRONICS = "electronics"
    CYCLES = "cycles"
    HOSTEL_ESSENTIALS = "hostel"
    PROJECTS = "projects"
    OTHER = "other"

    @classmethod
    def from_label(cls, label: str) -> "Category | None":
        normalized = label.strip().lower()
        if normalized == "hostel essentials":
            return cls.HOSTEL_ESSENTIALS
        for category in cls:
            if category.value == normalized:
                return category
        return None


class Condition(str, Enum):
    LIKE_NEW = "like new"
    GOOD = "good"
    FAIR = "fair"
    POOR = "poor"

    @classmethod
    def from_label(cls, label: str) -> "Condition | None":
        """Accept both "like new" and "like_new" spellings."""
        normalized = label.strip().lower().replace("_", " ")
        for condition in cls:
            if condition.value == normalized:
                return condition
        return None


class SaleType(str, Enum):
    FIXED_PRICE = "fixed price"
    AUCTION = "auction"
    OPEN_TO_OFFERS = "open to offers"


class ContactMethod(str, Enum):
    PHONE = "phone"
    EMAIL = "email"
    BOTH = "both"

    @property
    def requires_phone(self) -> bool:
        return self in (ContactMethod.PHONE, ContactMethod.BOTH)

    @property
    def requires_email(self) -> bool:
        return self in (ContactMethod.EMAIL, ContactMethod.BOTH)
