"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from nutrition_lookup.adapters.fatsecret_client import HttpxFatSecretClient
from nutrition_lookup.adapters.livsmedelsverket_client import (
    HttpxLivsmedelsverketClient,
)
from nutrition_lookup.adapters.openfoodfacts_client import HttpxOpenFoodFactsClient
from nutrition_lookup.config import Settings, parse_provider_name
from nutrition_lookup.domain.foods import FoodSource
from nutrition_lookup.services.barcode import BarcodeLookupService
from nutrition_lookup.services.cache import Cache, InMemoryCache
from nutrition_lookup.services.controller import DebouncedSearchController
from nutrition_lookup.services.providers import TextSearchClient, build_provider
from nutrition_lookup.services.search import FoodSearchService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    cache: Cache
    search_service: FoodSearchService
    barcode_service: BarcodeLookupService
    warm_up: Callable[[], Awaitable[None]]
    close_resources: Callable[[], Awaitable[None]]

    def new_search_controller(self) -> DebouncedSearchController:
        """Create a controller for one interactive client."""
        return DebouncedSearchController(
            search_service=self.search_service,
            barcode_service=self.barcode_service,
            debounce_seconds=self.settings.debounce_seconds,
        )


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    timeout = resolved_settings.provider_timeout_seconds
    user_agent = resolved_settings.user_agent

    available = {FoodSource.OPEN_FOOD_FACTS, FoodSource.LIVSMEDELSVERKET}
    if resolved_settings.fatsecret_enabled:
        available.add(FoodSource.FATSECRET)
    primary_source = parse_provider_name(resolved_settings.primary_provider)
    if primary_source is None or primary_source not in available:
        raise ValueError(
            f"Primary provider {resolved_settings.primary_provider!r} is not available"
        )
    fallback_source = parse_provider_name(resolved_settings.fallback_provider)
    if fallback_source is not None and fallback_source not in available:
        raise ValueError(
            f"Fallback provider {resolved_settings.fallback_provider!r} is not available"
        )

    open_food_facts_client = HttpxOpenFoodFactsClient.create(
        base_url=resolved_settings.openfoodfacts_base_url,
        user_agent=user_agent,
        timeout_seconds=timeout,
    )
    livsmedelsverket_client = HttpxLivsmedelsverketClient.create(
        base_url=resolved_settings.livsmedelsverket_base_url,
        user_agent=user_agent,
        timeout_seconds=timeout,
    )
    clients: dict[FoodSource, TextSearchClient] = {
        FoodSource.OPEN_FOOD_FACTS: open_food_facts_client,
        FoodSource.LIVSMEDELSVERKET: livsmedelsverket_client,
    }
    fatsecret_client: HttpxFatSecretClient | None = None
    if resolved_settings.fatsecret_enabled:
        fatsecret_client = HttpxFatSecretClient.create(
            client_id=resolved_settings.fatsecret_client_id or "",
            client_secret=resolved_settings.fatsecret_client_secret or "",
            base_url=resolved_settings.fatsecret_base_url,
            token_url=resolved_settings.fatsecret_token_url,
            user_agent=user_agent,
            timeout_seconds=timeout,
        )
        clients[FoodSource.FATSECRET] = fatsecret_client

    cache = InMemoryCache(max_entries=resolved_settings.search_cache_max_entries)
    search_service = FoodSearchService(
        primary=build_provider(primary_source, clients[primary_source]),
        fallback=(
            build_provider(fallback_source, clients[fallback_source])
            if fallback_source is not None and fallback_source != primary_source
            else None
        ),
        cache=cache,
        max_results=resolved_settings.max_results,
        page_size=resolved_settings.search_page_size,
        timeout_seconds=timeout,
        cache_ttl_seconds=resolved_settings.search_cache_ttl_seconds,
        debug=resolved_settings.debug,
    )
    barcode_service = BarcodeLookupService(
        client=open_food_facts_client, timeout_seconds=timeout
    )
    uses_livsmedelsverket = FoodSource.LIVSMEDELSVERKET in {
        primary_source,
        fallback_source,
    }

    async def warm_up() -> None:
        if uses_livsmedelsverket and resolved_settings.preload_catalogue:
            await livsmedelsverket_client.load_catalogue(
                timeout_seconds=resolved_settings.catalogue_timeout_seconds
            )

    async def close_resources() -> None:
        await open_food_facts_client.close()
        await livsmedelsverket_client.close()
        if fatsecret_client is not None:
            await fatsecret_client.close()

    return AppContainer(
        settings=resolved_settings,
        cache=cache,
        search_service=search_service,
        barcode_service=barcode_service,
        warm_up=warm_up,
        close_resources=close_resources,
    )
