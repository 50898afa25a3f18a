"""
Application configuration

Settings are read from the process environment (and a local .env file when
present). UPS identity fields default to empty so the package imports
without credentials; require_ups() turns their absence into a fatal
ConfigurationError at startup.
"""
import logging
from functools import lru_cache
from typing import Any, Dict, List

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from shiprates.core.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_HTTP_TIMEOUT_MS = 10000
DEFAULT_TOKEN_REFRESH_BUFFER_SECONDS = 60


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # App
    APP_NAME: str = "shiprates"
    ENVIRONMENT: str = "production"
    LOG_LEVEL: str = "INFO"

    # UPS
    UPS_CLIENT_ID: str = ""
    UPS_CLIENT_SECRET: str = ""
    UPS_API_BASE_URL: str = ""

    # HTTP timeout in milliseconds, applied to every carrier call
    HTTP_TIMEOUT: int = DEFAULT_HTTP_TIMEOUT_MS

    # Seconds before nominal expiry at which a cached token is refreshed
    TOKEN_REFRESH_BUFFER: int = DEFAULT_TOKEN_REFRESH_BUFFER_SECONDS

    @field_validator("UPS_API_BASE_URL", mode="before")
    @classmethod
    def strip_trailing_slash(cls, v):
        if isinstance(v, str):
            return v.strip().rstrip("/")
        return v

    @field_validator("HTTP_TIMEOUT")
    @classmethod
    def validate_http_timeout(cls, v):
        if v <= 0:
            raise ValueError("HTTP_TIMEOUT must be a positive number of milliseconds")
        return v

    @field_validator("TOKEN_REFRESH_BUFFER")
    @classmethod
    def validate_refresh_buffer(cls, v):
        if v < 0:
            raise ValueError("TOKEN_REFRESH_BUFFER cannot be negative")
        return v

    @field_validator("LOG_LEVEL")
    @classmethod
    def normalize_log_level(cls, v):
        return v.upper()

    def missing_ups_fields(self) -> List[str]:
        """Names of the required UPS variables that are not set."""
        required = {
            "UPS_CLIENT_ID": self.UPS_CLIENT_ID,
            "UPS_CLIENT_SECRET": self.UPS_CLIENT_SECRET,
            "UPS_API_BASE_URL": self.UPS_API_BASE_URL,
        }
        return [name for name, value in required.items() if not value]

    @property
    def ups_configured(self) -> bool:
        return not self.missing_ups_fields()

    def require_ups(self) -> None:
        """Fail fast when UPS credentials are incomplete."""
        missing = self.missing_ups_fields()
        if missing:
            raise ConfigurationError(
                f"Missing required UPS configuration. Set: {', '.join(missing)}",
                details={"missing": missing},
            )

    def carrier_config(self) -> Dict[str, Any]:
        """
        Build CarrierFactory input from the environment.

        Carriers without any configured field are left out so the factory
        skips them. A partially configured carrier is a startup error.
        """
        config: Dict[str, Any] = {}

        if len(self.missing_ups_fields()) < 3:
            self.require_ups()
            config["ups"] = {
                "client_id": self.UPS_CLIENT_ID,
                "client_secret": self.UPS_CLIENT_SECRET,
                "api_base_url": self.UPS_API_BASE_URL,
                "http_timeout_ms": self.HTTP_TIMEOUT,
                "token_refresh_buffer": self.TOKEN_REFRESH_BUFFER,
            }

        return config


@lru_cache()
def get_settings() -> Settings:
    return Settings()
