"""Settings for the API server and scripts, via pydantic-settings.

Sources in priority order: init kwargs, the OS keychain (Plaid secrets
only), environment variables, then ``.env``.
"""

from typing import Any

from pydantic import field_validator
from pydantic.fields import FieldInfo
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict

from services.credential_manager import CREDENTIAL_KEYS, get_credential


class KeychainSettingsSource(PydanticBaseSettingsSource):
    """Settings source that reads Plaid secrets out of the keychain.

    Fields outside ``CREDENTIAL_KEYS`` are never looked up, and a missing
    secret is left out so environment variables and ``.env`` still apply.
    """

    def get_field_value(
        self, field: FieldInfo, field_name: str
    ) -> tuple[Any, str, bool]:
        key = field_name.upper()
        value = get_credential(key) if key in CREDENTIAL_KEYS else None
        return value, field_name, False

    def __call__(self) -> dict[str, Any]:
        found: dict[str, Any] = {}
        for field_name, field_info in self.settings_cls.model_fields.items():
            value, name, _ = self.get_field_value(field_info, field_name)
            if value is not None:
                found[name] = value
        return found


class Settings(BaseSettings):
    """Runtime configuration; see the module docstring for source order."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,
            KeychainSettingsSource(settings_cls),
            env_settings,
            dotenv_settings,
            file_secret_settings,
        )

    # Database
    DATABASE_URL: str = "sqlite:///./finance.db"

    # Plaid credentials
    PLAID_CLIENT_ID: str = ""
    PLAID_SECRET: str = ""
    PLAID_ENVIRONMENT: str = "sandbox"
    PLAID_REDIRECT_URI: str = ""  # Only sent to Plaid when non-blank (OAuth flow)
    PLAID_CLIENT_NAME: str = "Personal Finance Tracker"
    PLAID_REQUEST_TIMEOUT: float = 30.0

    # Transaction sync: wait for Plaid to materialize the first page
    SYNC_EMPTY_PAGE_RETRY_DELAY: float = 2.0
    SYNC_EMPTY_PAGE_MAX_RETRIES: int = 15

    # CORS
    FRONTEND_URL: str = "http://localhost:3000"

    @field_validator("LOG_LEVEL", mode="before")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate and normalize LOG_LEVEL to an uppercase Python logging level."""
        valid = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in valid:
            raise ValueError(f"LOG_LEVEL must be one of {valid}, got {v!r}")
        return v.upper()

    @field_validator("SYNC_EMPTY_PAGE_MAX_RETRIES")
    @classmethod
    def validate_max_retries(cls, v: int) -> int:
        """The empty-first-page wait must stay bounded."""
        if v < 0:
            raise ValueError("SYNC_EMPTY_PAGE_MAX_RETRIES must be >= 0")
        return v

    # App settings
    ENVIRONMENT: str = "development"
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"


settings = Settings()
