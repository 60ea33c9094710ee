"""Shared test fixtures."""

import asyncio
from dataclasses import dataclass, field

import pytest

from nutrition_lookup.adapters.provider_models import RawRecord
from nutrition_lookup.config import Settings
from nutrition_lookup.containers import AppContainer
from nutrition_lookup.domain.foods import FoodItem, FoodSource
from nutrition_lookup.services.barcode import BarcodeClient, BarcodeLookupService
from nutrition_lookup.services.cache import InMemoryCache
from nutrition_lookup.services.providers import FoodProvider
from nutrition_lookup.services.search import FoodSearchService


def make_food(
    name: str,
    source: FoodSource = FoodSource.OPEN_FOOD_FACTS,
    food_id: str | None = None,
    **kwargs: object,
) -> FoodItem:
    """Build a food item with a provider-prefixed id derived from the name."""
    return FoodItem(
        id=food_id or f"{source.id_prefix}_{name.lower()}",
        name=name,
        source=source,
        **kwargs,
    )


@dataclass
class FakeProvider(FoodProvider):
    """Provider returning canned items, or raising a canned error."""

    source: FoodSource
    items: list[FoodItem] = field(default_factory=list)
    error: Exception | None = None
    delay_seconds: float = 0.0
    calls: list[str] = field(default_factory=list)

    async def search(self, query: str, max_results: int) -> list[FoodItem]:
        self.calls.append(query)
        if self.delay_seconds:
            await asyncio.sleep(self.delay_seconds)
        if self.error is not None:
            raise self.error
        return list(self.items)


@dataclass
class FakeTextClient:
    """Text-search client returning raw provider records."""

    records: list[RawRecord] = field(default_factory=list)
    queries: list[str] = field(default_factory=list)

    async def search_by_text(self, query: str, max_results: int) -> list[RawRecord]:
        self.queries.append(query)
        return list(self.records)


@dataclass
class FakeBarcodeClient(BarcodeClient):
    """Barcode client backed by a dict of raw Open Food Facts products."""

    products: dict[str, RawRecord] = field(default_factory=dict)
    error: Exception | None = None
    delay_seconds: float = 0.0
    calls: list[str] = field(default_factory=list)

    async def lookup_by_barcode(self, code: str) -> RawRecord | None:
        self.calls.append(code)
        if self.delay_seconds:
            await asyncio.sleep(self.delay_seconds)
        if self.error is not None:
            raise self.error
        return self.products.get(code)


MILK_PRODUCT: RawRecord = {
    "code": "7310865004703",
    "product_name": "Mellanmjölk",
    "brands": "Arla",
    "categories_tags": ["en:dairies", "en:milks"],
    "nutriments": {"energy-kcal_100g": 46, "proteins_100g": 3.5},
    "serving_quantity": 250,
    "nutriscore_grade": "b",
    "nova_group": 1,
}


@pytest.fixture
def settings() -> Settings:
    return Settings(
        admin_token="admin-token",
        debounce_seconds=0.01,
        preload_catalogue=False,
    )


@pytest.fixture
def primary_provider() -> FakeProvider:
    return FakeProvider(
        source=FoodSource.OPEN_FOOD_FACTS,
        items=[
            make_food("Havremjölk"),
            make_food("Mjölkchoklad"),
            make_food("Mjölk"),
        ],
    )


@pytest.fixture
def fallback_provider() -> FakeProvider:
    return FakeProvider(
        source=FoodSource.LIVSMEDELSVERKET,
        items=[make_food("Mjölk 3%", source=FoodSource.LIVSMEDELSVERKET)],
    )


@pytest.fixture
def barcode_client() -> FakeBarcodeClient:
    return FakeBarcodeClient(products={MILK_PRODUCT["code"]: MILK_PRODUCT})


@pytest.fixture
def container(
    settings: Settings,
    primary_provider: FakeProvider,
    fallback_provider: FakeProvider,
    barcode_client: FakeBarcodeClient,
) -> AppContainer:
    cache = InMemoryCache()
    search_service = FoodSearchService(
        primary=primary_provider,
        fallback=fallback_provider,
        cache=cache,
        timeout_seconds=1.0,
    )

    async def noop() -> None:
        return None

    return AppContainer(
        settings=settings,
        cache=cache,
        search_service=search_service,
        barcode_service=BarcodeLookupService(barcode_client, timeout_seconds=1.0),
        warm_up=noop,
        close_resources=noop,
    )
