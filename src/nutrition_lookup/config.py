"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

from nutrition_lookup.domain.foods import FoodSource

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    openfoodfacts_base_url: str = "https://world.openfoodfacts.org"
    livsmedelsverket_base_url: str = (
        "https://dataportal.livsmedelsverket.se/livsmedel/api/v1"
    )
    fatsecret_base_url: str = "https://platform.fatsecret.com/rest/server.api"
    fatsecret_token_url: str = "https://oauth.fatsecret.com/connect/token"
    fatsecret_client_id: str | None = None
    fatsecret_client_secret: str | None = None
    user_agent: str = "NutritionLookup/1.0 (food search; contact: support@upanddown.app)"
    provider_timeout_seconds: float = 10.0
    catalogue_timeout_seconds: float = 60.0
    preload_catalogue: bool = True
    search_page_size: int = 30
    max_results: int = 50
    debounce_seconds: float = 0.2
    primary_provider: str = FoodSource.OPEN_FOOD_FACTS.value
    fallback_provider: str | None = FoodSource.LIVSMEDELSVERKET.value
    search_cache_ttl_seconds: int = 300
    search_cache_max_entries: int = 512
    admin_token: str | None = None
    debug: bool = False
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )

    @property
    def fatsecret_enabled(self) -> bool:
        return bool(self.fatsecret_client_id and self.fatsecret_client_secret)


def parse_provider_name(raw: str | None) -> FoodSource | None:
    """Parse a provider name from env; blank or ``none`` disables the slot."""
    if raw is None:
        return None
    cleaned = raw.strip().lower()
    if cleaned in {"", "none"}:
        return None
    try:
        return FoodSource(cleaned)
    except ValueError as exc:
        choices = ", ".join(source.value for source in FoodSource)
        raise ValueError(f"Unknown provider {raw!r}; expected one of: {choices}") from exc
