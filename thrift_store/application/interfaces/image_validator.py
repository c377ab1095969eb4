from abc import ABC, abstractmethod

from thrift_store.domain.entities.image_reference import ImageReference
from thrift_store.domain.entities.validation import ProductAnalysis, ValidationResult


class ValidationServiceError(Exception):
    """The AI service could not be reached or failed to answer."""


class ValidationParseError(Exception):
    """The AI service answered with something that is not a usable JSON verdict."""


class ImageValidator(ABC):
    """Port for the vision model that vets and describes product photos."""

    @abstractmethod
    async def validate(
        self, image: ImageReference, title: str, category: str
    ) -> ValidationResult:
        """
        Judge whether `image` is an acceptable photo for a listing with the
        given title and category.

        Raises ValidationServiceError or ValidationParseError.
        """
        ...

    @abstractmethod
    async def analyze(self, image: ImageReference) -> ProductAnalysis:
        """Suggest listing details from a single photo."""
        ...
