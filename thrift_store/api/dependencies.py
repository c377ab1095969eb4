"""
FastAPI dependency injection wiring.

Each dependency function returns a fully-constructed object with its
collaborators injected, keeping the route handlers thin. Process-wide
singletons (draft repository, session store) live on `app.state`.
"""
from fastapi import Depends, Request

from thrift_store.application.coordinators.listing_submitter import ListingSubmitter
from thrift_store.application.coordinators.upload_coordinator import UploadCoordinator
from thrift_store.application.coordinators.validation_coordinator import (
    ImageValidationCoordinator,
)
from thrift_store.application.interfaces.draft_repository import DraftRepository
from thrift_store.application.interfaces.event_publisher import EventPublisher
from thrift_store.application.interfaces.image_validator import ImageValidator
from thrift_store.application.interfaces.product_api import ProductApi
from thrift_store.application.interfaces.session_store import SessionStore
from thrift_store.application.use_cases.add_draft_images import AddDraftImages
from thrift_store.application.use_cases.analyze_draft import AnalyzeDraft
from thrift_store.application.use_cases.start_listing_edit import StartListingEdit
from thrift_store.application.use_cases.submit_listing import SubmitListing
from thrift_store.config import settings
from thrift_store.infrastructure.ai.gemini_image_validator import GeminiImageValidator
from thrift_store.infrastructure.external_services.auth_client import AuthClient
from thrift_store.infrastructure.external_services.product_api_client import ProductApiClient
from thrift_store.infrastructure.messaging.logging_publisher import LoggingEventPublisher


# ---- Low-level dependencies ------------------------------------------------

def get_draft_repo(request: Request) -> DraftRepository:
    return request.app.state.draft_repo


def get_session_store(request: Request) -> SessionStore:
    return request.app.state.session_store


def get_product_api(session_store: SessionStore = Depends(get_session_store)) -> ProductApi:
    return ProductApiClient(session_store=session_store)


def get_image_validator() -> ImageValidator:
    return GeminiImageValidator()


def get_event_publisher() -> EventPublisher:
    return LoggingEventPublisher()


def get_auth_client(session_store: SessionStore = Depends(get_session_store)) -> AuthClient:
    return AuthClient(session_store)


# ---- Use-case dependencies -------------------------------------------------

def get_add_images_use_case(
    draft_repo: DraftRepository = Depends(get_draft_repo),
    validator: ImageValidator = Depends(get_image_validator),
) -> AddDraftImages:
    return AddDraftImages(draft_repo, ImageValidationCoordinator(validator))


def get_analyze_use_case(
    draft_repo: DraftRepository = Depends(get_draft_repo),
    validator: ImageValidator = Depends(get_image_validator),
) -> AnalyzeDraft:
    return AnalyzeDraft(draft_repo, validator)


def get_start_edit_use_case(
    draft_repo: DraftRepository = Depends(get_draft_repo),
    product_api: ProductApi = Depends(get_product_api),
) -> StartListingEdit:
    return StartListingEdit(draft_repo, product_api, settings.max_images_per_listing)


def get_submit_use_case(
    draft_repo: DraftRepository = Depends(get_draft_repo),
    validator: ImageValidator = Depends(get_image_validator),
    product_api: ProductApi = Depends(get_product_api),
    event_publisher: EventPublisher = Depends(get_event_publisher),
) -> SubmitListing:
    return SubmitListing(
        draft_repo,
        ImageValidationCoordinator(validator),
        UploadCoordinator(product_api),
        ListingSubmitter(product_api),
        event_publisher,
    )
