"""Configuration management for HLA."""

from pathlib import Path

from pydantic import Field, SecretStr
from pydantic import ValidationError as PydanticValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from hla.core.constants import DEFAULT_API_URL, APIConstants, CacheConstants, TUIConstants
from hla.exceptions import ConfigurationError


class Config(BaseSettings):
    """Application configuration."""

    api_url: str = Field(default=DEFAULT_API_URL, alias="HLA_API_URL", description="Hockey league backend base URL")
    access_token: SecretStr | None = Field(
        default=None,
        alias="HLA_ACCESS_TOKEN",
        description="Bearer token (overrides the stored login session)",
    )
    request_timeout: float = Field(
        default=APIConstants.REQUEST_TIMEOUT,
        alias="HLA_REQUEST_TIMEOUT",
        description="Per-request timeout in seconds",
    )

    # Query layer
    page_size: int = Field(
        default=APIConstants.DEFAULT_PAGE_SIZE,
        alias="HLA_PAGE_SIZE",
        gt=0,
        le=APIConstants.MAX_PAGE_SIZE,
        description="Default rows per page",
    )
    stale_time: float = Field(
        default=CacheConstants.STALE_TIME,
        alias="HLA_STALE_TIME",
        ge=0,
        description="Seconds a cached page is served without refetching",
    )
    gc_time: float = Field(
        default=CacheConstants.GC_TIME,
        alias="HLA_GC_TIME",
        ge=0,
        description="Seconds after which an unused cached page is evicted",
    )
    search_debounce_ms: int = Field(
        default=TUIConstants.SEARCH_DEBOUNCE_MS,
        alias="HLA_SEARCH_DEBOUNCE_MS",
        ge=0,
        description="Quiet period before a typed search term is committed",
    )

    session_dir: Path = Field(
        default_factory=lambda: Path.home() / ".hla" / "session",
        alias="HLA_SESSION_DIR",
        description="Directory holding the stored login session",
    )

    model_config = SettingsConfigDict(
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        populate_by_name=True,
    )

    @property
    def search_debounce_seconds(self) -> float:
        """Debounce delay in seconds."""
        return self.search_debounce_ms / 1000


def load_config() -> Config:
    """Load configuration from environment and .env file.

    Raises:
        ConfigurationError: An HLA_* value is malformed or out of range
    """
    try:
        return Config()
    except PydanticValidationError as e:
        error = e.errors()[0]
        name = ".".join(str(part) for part in error["loc"])
        raise ConfigurationError(f"Invalid configuration value for {name}: {error['msg']}") from e
