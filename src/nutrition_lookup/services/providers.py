"""Food providers: a text-search client paired with its normalizer."""

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Protocol

from nutrition_lookup.adapters.provider_models import RawRecord
from nutrition_lookup.domain.foods import FoodItem, FoodSource
from nutrition_lookup.services.normalizers import (
    normalize_fatsecret,
    normalize_livsmedelsverket,
    normalize_open_food_facts,
)


class TextSearchClient(Protocol):
    """Any adapter able to run a raw text search."""

    async def search_by_text(self, query: str, max_results: int) -> list[RawRecord]:
        """Return raw provider records for a query."""


class FoodProvider(Protocol):
    """Source of canonical food records for a text query."""

    source: FoodSource

    async def search(self, query: str, max_results: int) -> list[FoodItem]:
        """Return normalized (unranked) items for a query."""


@dataclass
class NormalizingProvider(FoodProvider):
    """Provider that normalizes raw client records, dropping unusable ones."""

    source: FoodSource
    client: TextSearchClient
    normalize: Callable[[Mapping[str, object]], FoodItem | None]

    async def search(self, query: str, max_results: int) -> list[FoodItem]:
        raw_records = await self.client.search_by_text(query, max_results)
        items = []
        for raw in raw_records:
            item = self.normalize(raw)
            if item is not None:
                items.append(item)
        return items


_NORMALIZERS = {
    FoodSource.OPEN_FOOD_FACTS: normalize_open_food_facts,
    FoodSource.LIVSMEDELSVERKET: normalize_livsmedelsverket,
    FoodSource.FATSECRET: normalize_fatsecret,
}


def build_provider(source: FoodSource, client: TextSearchClient) -> NormalizingProvider:
    """Pair a client with the normalizer for its provider."""
    return NormalizingProvider(
        source=source, client=client, normalize=_NORMALIZERS[source]
    )
