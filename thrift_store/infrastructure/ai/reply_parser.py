"""
Parsing of free-text replies from the vision model.

The model is asked for JSON only, but replies routinely arrive wrapped in
markdown fences or prose. Everything here treats the reply as untrusted:
pull out the first balanced JSON object, check it against a strict schema,
and hand back either ParsedReply or ParseFailure. Nothing in this module
raises on bad input.
"""
import json
from dataclasses import dataclass
from decimal import Decimal
from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field, StrictBool, ValidationError

from thrift_store.domain.entities.validation import ProductAnalysis, ValidationResult
from thrift_store.domain.enums.listing_enums import Category, Condition

T = TypeVar("T")


@dataclass(frozen=True)
class ParsedReply(Generic[T]):
    value: T


@dataclass(frozen=True)
class ParseFailure:
    reason: str
    raw_text: str = ""


class ValidationReply(BaseModel):
    model_config = ConfigDict(extra="ignore")

    isGenuine: StrictBool
    validationMessage: str = ""
    suggestedCategory: str | None = None
    suggestedTitle: str | None = None
    issues: list[str] = Field(default_factory=list)


class AnalysisReply(BaseModel):
    model_config = ConfigDict(extra="ignore")

    isGenuine: StrictBool
    validationMessage: str = ""
    title: str = ""
    description: str = ""
    category: str = ""
    condition: str = ""
    estimatedPrice: float = Field(default=0, ge=0)


def extract_json_object(text: str) -> str | None:
    """Return the first balanced {...} substring of `text`, or None.

    Braces inside JSON string literals (including escaped quotes) do not
    count towards the balance.
    """
    start = text.find("{")
    while start != -1:
        depth = 0
        in_string = False
        escaped = False
        for pos in range(start, len(text)):
            char = text[pos]
            if in_string:
                if escaped:
                    escaped = False
                elif char == "\\":
                    escaped = True
                elif char == '"':
                    in_string = False
                continue
            if char == '"':
                in_string = True
            elif char == "{":
                depth += 1
            elif char == "}":
                depth -= 1
                if depth == 0:
                    return text[start : pos + 1]
        # Unbalanced from this brace onwards; try the next opening brace
        start = text.find("{", start + 1)
    return None


def _load_object(text: str) -> dict | ParseFailure:  # type: ignore[type-arg]
    candidate = extract_json_object(text)
    if candidate is None:
        return ParseFailure(reason="no JSON object in reply", raw_text=text)
    try:
        decoded = json.loads(candidate)
    except json.JSONDecodeError as exc:
        return ParseFailure(reason=f"invalid JSON: {exc.msg}", raw_text=text)
    return decoded


def _schema_failure(exc: ValidationError, text: str) -> ParseFailure:
    fields = ", ".join(".".join(str(p) for p in err["loc"]) or "<root>" for err in exc.errors())
    return ParseFailure(reason=f"reply does not match schema ({fields})", raw_text=text)


def parse_validation_reply(text: str) -> ParsedReply[ValidationResult] | ParseFailure:
    decoded = _load_object(text)
    if isinstance(decoded, ParseFailure):
        return decoded
    try:
        reply = ValidationReply.model_validate(decoded)
    except ValidationError as exc:
        return _schema_failure(exc, text)

    return ParsedReply(
        ValidationResult(
            accepted=reply.isGenuine,
            message=reply.validationMessage,
            suggested_category=reply.suggestedCategory or None,
            suggested_title=reply.suggestedTitle or None,
            issues=tuple(reply.issues),
        )
    )


def parse_analysis_reply(text: str) -> ParsedReply[ProductAnalysis] | ParseFailure:
    decoded = _load_object(text)
    if isinstance(decoded, ParseFailure):
        return decoded
    try:
        reply = AnalysisReply.model_validate(decoded)
    except ValidationError as exc:
        return _schema_failure(exc, text)

    return ParsedReply(
        ProductAnalysis(
            is_genuine=reply.isGenuine,
            validation_message=reply.validationMessage,
            title=reply.title,
            description=reply.description,
            category=Category.from_label(reply.category),
            condition=Condition.from_label(reply.condition),
            estimated_price=Decimal(str(reply.estimatedPrice)),
        )
    )
