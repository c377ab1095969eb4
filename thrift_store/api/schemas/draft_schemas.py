from datetime import datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, Field

from thrift_store.domain.enums.image_state import ImageState
from thrift_store.domain.enums.listing_enums import Category, Condition, ContactMethod, SaleType
from thrift_store.domain.enums.submission_state import SubmissionState


class DraftFieldsRequest(BaseModel):
    """Form fields; on PATCH only the fields present in the body are changed."""

    title: str | None = None
    description: str | None = None
    category: Category | None = None
    condition: Condition | None = None
    sale_type: SaleType | None = None
    price: Decimal | None = Field(default=None, ge=0)
    contact_method: ContactMethod | None = None
    phone: str | None = None
    email: str | None = None
    meeting_location: str | None = None


class ImageResponse(BaseModel):
    id: UUID
    filename: str
    content_type: str
    state: ImageState
    public_url: str | None = None
    rejection_message: str | None = None

    model_config = {"from_attributes": True}


class DraftResponse(BaseModel):
    id: UUID
    product_id: str | None = None
    submitted_product_id: str | None = None
    title: str
    description: str
    category: Category | None = None
    condition: Condition | None = None
    sale_type: SaleType
    price: Decimal
    contact_method: ContactMethod | None = None
    phone: str
    email: str
    meeting_location: str
    images: list[ImageResponse]
    max_images: int
    submission_state: SubmissionState
    submission_error: str | None = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class AddImagesResponse(BaseModel):
    draft_id: UUID
    admitted_ids: list[UUID]
    rejected_filenames: list[str]
    rejection_message: str | None = None
    image_count: int


class AnalysisResponse(BaseModel):
    draft_id: UUID
    applied: bool
    is_genuine: bool
    validation_message: str
    title: str
    description: str
    category: Category | None = None
    condition: Condition | None = None
    estimated_price: Decimal


class SubmitResponse(BaseModel):
    draft_id: UUID
    state: SubmissionState
    product_id: str | None = None
    image_urls: list[str]
    error_type: str | None = None
    error_message: str | None = None
