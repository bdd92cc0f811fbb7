"""Settings + logging for the subtitle editing pipeline."""

from pathlib import Path

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load .env file from the project root
PROJECT_DIR = Path(__file__).resolve().parent.parent
load_dotenv(dotenv_path=PROJECT_DIR / ".env")


class Settings(BaseSettings):
    """Essential settings for the generation adapter, orchestrators and logging."""

    model_config = SettingsConfigDict(extra="ignore")

    # Environment + logging
    log_level: str = "INFO"

    # Credentials
    openai_api_key: str = Field(
        default="",
        description="API key for the generation backend",
    )

    # Model configuration (one model per request variant)
    correction_model: str = "gpt-4.1-mini"
    enhancement_model: str = "gpt-4.1"
    regeneration_model: str = "gpt-4.1"
    style_model: str = "gpt-4.1"
    reasoning_effort: str = "medium"

    correction_temperature: float = Field(default=0.2, ge=0.0, le=1.0)
    enhancement_temperature: float = Field(default=0.7, ge=0.0, le=1.0)
    regeneration_temperature: float = Field(default=0.3, ge=0.0, le=1.0)
    style_temperature: float = Field(default=0.6, ge=0.0, le=1.0)

    # Batching
    chunk_max_chars: int = Field(
        default=5000,
        ge=1,
        description="Maximum characters per raw text chunk (correction workflow)",
    )
    enhancement_batch_size: int = Field(
        default=20,
        ge=1,
        le=100,
        description="Blocks per enhancement request",
    )
    range_window: int = Field(
        default=20,
        ge=1,
        description="Width of the default processing range",
    )

    # Rate limiting
    rate_limit_per_minute: int = Field(default=50, ge=1, le=300)
    rate_limit_retries: int = Field(default=2, ge=0, le=10)
    rate_limit_backoff_cap_seconds: float = Field(default=30.0, ge=0.0)

    # Response validation
    style_sample_max_chars: int = Field(default=500, ge=1)
    length_ratio_min: float = Field(default=0.5, ge=0.0)
    length_ratio_max: float = Field(default=2.0, ge=1.0)

    # File boundary
    max_file_size_mb: int = Field(default=50, ge=1, le=500)

    def to_public_dict(self) -> dict:
        """Return settings that are safe to log (no credentials)."""
        data = self.model_dump()
        data["openai_api_key"] = "***" if self.openai_api_key else ""
        return data


settings = Settings()


def configure_structlog() -> None:
    """Simple logging setup."""
    import logging
    import sys

    import structlog

    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        stream=sys.stdout,
        format="%(message)s",
        force=True,
    )

    structlog.configure(
        processors=[
            structlog.processors.TimeStamper(fmt="%H:%M:%S"),
            structlog.stdlib.add_log_level,
            structlog.dev.ConsoleRenderer(colors=True),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
