import asyncio
from dataclasses import dataclass

import structlog

from thrift_store.application.interfaces.image_validator import (
    ImageValidator,
    ValidationParseError,
    ValidationServiceError,
)
from thrift_store.domain.entities.image_reference import ImageReference
from thrift_store.domain.entities.validation import ValidationResult

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class ImageVerdict:
    image: ImageReference
    result: ValidationResult | None = None
    error: Exception | None = None

    @property
    def accepted(self) -> bool:
        return self.error is None and self.result is not None and self.result.accepted

    @property
    def reason(self) -> str:
        if isinstance(self.error, ValidationParseError):
            return "the validation response could not be read"
        if self.error is not None:
            return "the validation service is unavailable"
        if self.result is None:
            return "the image was not checked"
        return self.result.message


@dataclass(frozen=True)
class BatchValidation:
    verdicts: tuple[ImageVerdict, ...]

    @property
    def all_accepted(self) -> bool:
        return all(verdict.accepted for verdict in self.verdicts)

    @property
    def failures(self) -> list[ImageVerdict]:
        return [verdict for verdict in self.verdicts if not verdict.accepted]

    def summary(self) -> str:
        """One line per failing image."""
        return "\n".join(f"{v.image.filename}: {v.reason}" for v in self.failures)


class ImageValidationCoordinator:
    """Fans image checks out to the validator and collects every verdict."""

    def __init__(self, validator: ImageValidator) -> None:
        self._validator = validator

    async def validate_all(
        self, images: list[ImageReference], title: str, category: str
    ) -> BatchValidation:
        outcomes = await asyncio.gather(
            *(self._validator.validate(image, title, category) for image in images),
            return_exceptions=True,
        )

        verdicts: list[ImageVerdict] = []
        for image, outcome in zip(images, outcomes):
            if isinstance(outcome, (ValidationServiceError, ValidationParseError)):
                logger.warning(
                    "image_validation_failed",
                    filename=image.filename,
                    error=str(outcome),
                )
                verdicts.append(ImageVerdict(image=image, error=outcome))
            elif isinstance(outcome, BaseException):
                raise outcome
            else:
                verdicts.append(ImageVerdict(image=image, result=outcome))

        batch = BatchValidation(verdicts=tuple(verdicts))
        logger.info(
            "images_validated",
            count=len(images),
            rejected=len(batch.failures),
        )
        return batch
