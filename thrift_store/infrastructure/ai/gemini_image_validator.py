"""Image validation and auto-fill backed by Google Gemini."""
import structlog
from google import genai
from google.genai import types

from thrift_store.application.interfaces.image_validator import (
    ImageValidator,
    ValidationParseError,
    ValidationServiceError,
)
from thrift_store.config import settings
from thrift_store.domain.entities.image_reference import ImageReference
from thrift_store.domain.entities.validation import ProductAnalysis, ValidationResult
from thrift_store.infrastructure.ai.prompts import ANALYSIS_PROMPT, build_validation_prompt
from thrift_store.infrastructure.ai.reply_parser import (
    ParseFailure,
    parse_analysis_reply,
    parse_validation_reply,
)

logger = structlog.get_logger(__name__)

# Characters of an unreadable reply kept in the log
REPLY_LOG_LIMIT = 500


class GeminiImageValidator(ImageValidator):
    """One Gemini call per image; no caching, no retries."""

    def __init__(
        self,
        api_key: str = settings.gemini_api_key,
        model: str = settings.gemini_model,
        client: genai.Client | None = None,
    ) -> None:
        self._api_key = api_key
        self._model = model
        self._client = client

    @property
    def client(self) -> genai.Client:
        # Built on first use so the app can start without a key configured
        if self._client is None:
            try:
                self._client = genai.Client(api_key=self._api_key)
            except Exception as exc:
                raise ValidationServiceError(f"Gemini client unavailable: {exc}") from exc
        return self._client

    async def validate(
        self, image: ImageReference, title: str, category: str
    ) -> ValidationResult:
        text = await self._generate(build_validation_prompt(title, category), image)
        parsed = parse_validation_reply(text)
        if isinstance(parsed, ParseFailure):
            logger.error(
                "gemini_validation_unparseable",
                filename=image.filename,
                reason=parsed.reason,
                reply=parsed.raw_text[:REPLY_LOG_LIMIT],
            )
            raise ValidationParseError(f"Failed to parse AI validation response: {parsed.reason}")

        logger.info(
            "gemini_validation_complete",
            filename=image.filename,
            accepted=parsed.value.accepted,
            issues=list(parsed.value.issues),
        )
        return parsed.value

    async def analyze(self, image: ImageReference) -> ProductAnalysis:
        text = await self._generate(ANALYSIS_PROMPT, image)
        parsed = parse_analysis_reply(text)
        if isinstance(parsed, ParseFailure):
            logger.error(
                "gemini_analysis_unparseable",
                filename=image.filename,
                reason=parsed.reason,
                reply=parsed.raw_text[:REPLY_LOG_LIMIT],
            )
            raise ValidationParseError(f"Failed to parse AI response: {parsed.reason}")

        logger.info(
            "gemini_analysis_complete",
            filename=image.filename,
            is_genuine=parsed.value.is_genuine,
        )
        return parsed.value

    async def _generate(self, prompt: str, image: ImageReference) -> str:
        try:
            response = await self.client.aio.models.generate_content(
                model=self._model,
                contents=[
                    prompt,
                    types.Part.from_bytes(data=image.data, mime_type=image.content_type),
                ],
            )
        except ValidationServiceError:
            raise
        except Exception as exc:
            logger.error(
                "gemini_request_failed",
                filename=image.filename,
                model=self._model,
                error=str(exc),
            )
            raise ValidationServiceError(f"Gemini request failed: {exc}") from exc

        text = response.text
        if not text:
            raise ValidationParseError("AI service returned an empty response")
        return text
