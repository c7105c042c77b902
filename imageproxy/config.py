from typing import Literal, Optional

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration for the image proxy."""

    #----------------------------------------------------------
    # Upstream API settings
    #----------------------------------------------------------
    gemini_api_key: Optional[SecretStr] = Field(
        default=None,
        validation_alias="GEMINI_API_KEY",
        description="API key for authenticating with the Gemini API.",
    )

    gemini_model: str = Field(
        default="gemini-2.5-flash-image-preview",
        description="Gemini model used for image generation.",
    )

    gemini_api_base_url: str = Field(
        default="https://generativelanguage.googleapis.com/v1beta",
        description="Base URL of the Gemini REST API.",
    )

    api_key_transport: Literal["header", "query"] = Field(
        default="header",
        description="Send the API key as the x-goog-api-key header or as the `key` query parameter.",
    )

    request_timeout_seconds: float = Field(
        default=60.0,
        gt=0,
        description="Timeout applied to the upstream generateContent call.",
    )

    #----------------------------------------------------------
    # Inbound request settings
    #----------------------------------------------------------
    max_body_bytes: int = Field(
        default=10 * 1024 * 1024,
        gt=0,
        description="Largest request body accepted; base64 images can be large.",
    )

    model_config = SettingsConfigDict(
        env_prefix="IMAGEPROXY_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    @property
    def api_key(self) -> Optional[str]:
        if self.gemini_api_key is None:
            return None
        return self.gemini_api_key.get_secret_value() or None


def get_settings() -> Settings:
    """Build settings from the current environment; resolved on every request."""
    return Settings()  # type: ignore[call-arg]
