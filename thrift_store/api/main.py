"""FastAPI application entry point."""
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from thrift_store.api.routes import auth, drafts, health, products
from thrift_store.config import configure_logging
from thrift_store.infrastructure.persistence.in_memory_draft_repository import (
    InMemoryDraftRepository,
)
from thrift_store.infrastructure.session.file_session_store import FileSessionStore

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    configure_logging()
    session = app.state.session_store.hydrate()
    logger.info("thrift_store_starting", authenticated=bool(session and session.is_authenticated))
    yield
    logger.info("thrift_store_stopping")


def create_app() -> FastAPI:
    app = FastAPI(
        title="Thrift Store",
        description="Listing pipeline for the student thrift store marketplace.",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    app.state.draft_repo = InMemoryDraftRepository()
    app.state.session_store = FileSessionStore()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(health.router)
    app.include_router(drafts.router)
    app.include_router(products.router)
    app.include_router(auth.router)

    return app


app = create_app()
