# app/core/config.py
from functools import lru_cache
from typing import Literal

from pydantic import ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from app.core.errors import ConfigurationError


class Settings(BaseSettings):
    """
    Centralized application settings loaded from environment.

    Required env vars (.env):
      - SUPABASE_URL
      - SUPABASE_KEY (anon / public key)

    Everything else has a default suitable for local development.
    """

    PROJECT_NAME: str = "Yazbox Storefront"
    API_V1_STR: str = "/api/v1"
    LOG_LEVEL: str = "INFO"

    # Supabase
    SUPABASE_URL: str
    SUPABASE_KEY: str

    # Object storage buckets
    PRODUCT_IMAGE_BUCKET: str = "product-images"
    SELLER_LOGO_BUCKET: str = "seller-logos"

    # Local persistence for the browser-side state
    LOCAL_STORAGE_DIR: str = ".local_storage"
    CART_STORAGE_KEY: str = "yazbox-cart"

    # Profile fetch after sign-in / sign-up
    PROFILE_FETCH_ATTEMPTS: int = 3
    PROFILE_RETRY_DELAY: float = 0.5
    PROFILE_RETRY_BACKOFF: Literal["fixed", "linear"] = "fixed"

    TOAST_TTL_SECONDS: float = 5.0

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


def load_settings(**overrides) -> Settings:
    """
    Build settings and fail fast if the backend credentials are missing.

    Raises:
        ConfigurationError: SUPABASE_URL / SUPABASE_KEY absent or blank.
    """
    try:
        settings = Settings(**overrides)
    except ValidationError as e:
        missing = [".".join(str(p) for p in err["loc"]) for err in e.errors()]
        raise ConfigurationError(
            f"Invalid or missing configuration: {', '.join(missing)}"
        ) from e

    if not settings.SUPABASE_URL.strip() or not settings.SUPABASE_KEY.strip():
        raise ConfigurationError("SUPABASE_URL and SUPABASE_KEY must not be empty")
    return settings


@lru_cache
def get_settings() -> Settings:
    """
    Cached settings loader.
    Ensures we don't re-parse .env on every import / request.
    """
    return load_settings()
