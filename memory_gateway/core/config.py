"""
Application configuration loaded from environment variables.

Uses pydantic-settings for type-safe env var parsing with automatic
.env file loading. Provider keys are optional: a missing key disables
only that provider's branch, it never stops the service from starting.

To extend: add new fields here and document them in .env.example.
See https://docs.pydantic.dev/latest/concepts/pydantic_settings/
"""

from typing import Optional

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_FRONTEND_URL = "https://lykinsai-1.onrender.com"


class Settings(BaseSettings):
    # ─── Core ──────────────────────────────────────────────────────
    # NODE_ENV is kept as the primary name so the same .env works for the
    # frontend build and this service.
    environment: str = Field(
        default="production",
        validation_alias=AliasChoices("NODE_ENV", "ENVIRONMENT"),
    )
    debug: bool = False
    host: str = "0.0.0.0"
    port: int = 3001

    # ─── CORS ──────────────────────────────────────────────────────
    # Origins echoed back verbatim. Any http://localhost:* origin is also
    # accepted; everything else receives frontend_url.
    frontend_url: str = DEFAULT_FRONTEND_URL
    cors_allowed_origins_str: str = (
        "http://localhost:5173,http://localhost:5174,http://localhost:5175,"
        "https://lykinsai-1.onrender.com,https://www.lykinsai-1.onrender.com"
    )

    @property
    def cors_allowed_origins(self) -> list[str]:
        return [o.strip() for o in self.cors_allowed_origins_str.split(",") if o.strip()]

    # ─── AI providers ──────────────────────────────────────────────
    openai_api_key: Optional[str] = None
    anthropic_api_key: Optional[str] = None
    google_api_key: Optional[str] = None   # Gemini (Generative Language API)
    xai_api_key: Optional[str] = None

    # ─── YouTube Data API v3 ───────────────────────────────────────
    youtube_api_key: Optional[str] = None

    # ─── Social connections ────────────────────────────────────────
    pinterest_client_id: Optional[str] = None
    pinterest_client_secret: Optional[str] = None
    instagram_client_id: Optional[str] = None
    instagram_client_secret: Optional[str] = None

    # ─── Outbound HTTP ─────────────────────────────────────────────
    http_timeout_seconds: float = 60.0

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",  # Don't fail on unknown env vars
    )

    @property
    def is_development(self) -> bool:
        return self.environment == "development"

    def provider_status(self) -> dict[str, bool]:
        """Which upstream integrations have credentials configured."""
        return {
            "openai": bool(self.openai_api_key),
            "anthropic": bool(self.anthropic_api_key),
            "google": bool(self.google_api_key),
            "xai": bool(self.xai_api_key),
            "youtube": bool(self.youtube_api_key),
        }


# Module-level singleton — import this everywhere instead of instantiating Settings()
settings = Settings()


def get_settings() -> Settings:
    """FastAPI dependency returning the process-wide settings.

    Tests swap configurations with app.dependency_overrides[get_settings].
    """
    return settings
