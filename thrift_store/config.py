import logging

import structlog
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="THRIFT_",
    )

    # Thrift store backend (products + auth)
    backend_api_url: str = "https://thrift-store-backend-u1vz.onrender.com"

    # Gemini vision model used for image validation and auto-fill
    gemini_api_key: str = ""
    gemini_model: str = "gemini-2.5-flash"

    # None disables the timeout entirely
    http_timeout_seconds: float | None = 30.0

    max_images_per_listing: int = 5

    # Persisted credentials (user + token), hydrated on startup
    session_file: str = ".thrift_session.json"

    log_level: str = "INFO"


settings = Settings()


def configure_logging(level: str = settings.log_level) -> None:
    """Set the structlog filtering level from configuration."""
    structlog.configure(
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.getLevelName(level.upper())
        ),
    )
