"""Open Food Facts API client."""

import logging
from dataclasses import dataclass
from typing import Protocol

import httpx

from nutrition_lookup.adapters.http import default_headers, fetch_json
from nutrition_lookup.adapters.provider_models import (
    RawRecord,
    decode_open_food_facts_product,
    decode_open_food_facts_search,
)
from nutrition_lookup.errors import ProviderDecodeError

PROVIDER = "openfoodfacts"
PRODUCT_FIELDS = (
    "code,product_name,brands,categories_tags,nutriments,image_front_url,"
    "serving_size,serving_quantity,nutriscore_grade,nova_group"
)

_logger = logging.getLogger(__name__)


class OpenFoodFactsClient(Protocol):
    """Interface for Open Food Facts interactions."""

    async def search_by_text(self, query: str, max_results: int) -> list[RawRecord]:
        """Search products by free text and return raw product records."""

    async def lookup_by_barcode(self, code: str) -> RawRecord | None:
        """Return the raw product for a barcode, or None when it is unknown."""


@dataclass
class HttpxOpenFoodFactsClient(OpenFoodFactsClient):
    """HTTPX-backed Open Food Facts client."""

    base_url: str
    http_client: httpx.AsyncClient
    timeout_seconds: float = 10.0

    @classmethod
    def create(
        cls, base_url: str, user_agent: str, timeout_seconds: float = 10.0
    ) -> "HttpxOpenFoodFactsClient":
        """Create a client with a managed httpx session."""
        return cls(
            base_url=base_url,
            http_client=httpx.AsyncClient(headers=default_headers(user_agent)),
            timeout_seconds=timeout_seconds,
        )

    async def search_by_text(self, query: str, max_results: int) -> list[RawRecord]:
        """Search products via ``cgi/search.pl``."""
        _, payload = await fetch_json(
            self.http_client,
            PROVIDER,
            "GET",
            f"{self.base_url}/cgi/search.pl",
            timeout=self.timeout_seconds,
            params={
                "search_terms": query,
                "search_simple": 1,
                "action": "process",
                "json": 1,
                "page_size": max_results,
                "fields": PRODUCT_FIELDS,
            },
        )
        result = decode_open_food_facts_search(payload)
        if not result.ok or result.value is None:
            raise ProviderDecodeError(PROVIDER, result.error or "empty decode")
        if result.tier != "strict":
            _logger.info("Open Food Facts search decoded leniently: query=%s", query)
        return result.value

    async def lookup_by_barcode(self, code: str) -> RawRecord | None:
        """Look a product up via ``api/v2/product/{code}``.

        The service answers unknown barcodes with ``status: 0``, sometimes on a
        404, which is reported as ``None`` rather than an error.
        """
        _, payload = await fetch_json(
            self.http_client,
            PROVIDER,
            "GET",
            f"{self.base_url}/api/v2/product/{code}",
            timeout=self.timeout_seconds,
            allowed_statuses=(httpx.codes.NOT_FOUND,),
            params={"fields": PRODUCT_FIELDS},
        )
        result = decode_open_food_facts_product(payload)
        if not result.ok:
            raise ProviderDecodeError(PROVIDER, result.error or "empty decode")
        return result.value

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()
