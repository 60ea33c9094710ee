"""Text search across providers with a fixed fallback order."""

import asyncio
import logging
from dataclasses import dataclass, replace

from nutrition_lookup.domain.foods import FoodItem
from nutrition_lookup.domain.search import SearchOutcome
from nutrition_lookup.errors import ProviderError
from nutrition_lookup.services.cache import Cache
from nutrition_lookup.services.providers import FoodProvider
from nutrition_lookup.services.ranking import MAX_RESULTS, rank_foods

_logger = logging.getLogger(__name__)


@dataclass
class FoodSearchService:
    """Ask the primary provider, fall back to the secondary one, never merge.

    A provider counts as failed when it raises, times out or returns no usable
    items. Only the answering provider's items are ranked and returned.
    """

    primary: FoodProvider
    fallback: FoodProvider | None
    cache: Cache
    max_results: int = MAX_RESULTS
    page_size: int = 30
    timeout_seconds: float = 10.0
    cache_ttl_seconds: int = 300
    debug: bool = False

    async def search(self, query: str) -> SearchOutcome:
        """Return ranked items for ``query``; empty when every provider failed."""
        term = query.strip()
        if not term:
            return SearchOutcome(query=query)

        cache_key = f"search:{term.lower()}:{self.max_results}"
        cached = self.cache.get(cache_key)
        if isinstance(cached, SearchOutcome):
            return replace(cached, query=query, from_cache=True)

        for provider in self.providers:
            items = await self._search_provider(provider, term)
            if not items:
                continue
            outcome = SearchOutcome(
                query=query,
                items=rank_foods(items, term, self.max_results),
                source=provider.source,
            )
            self.cache.set(cache_key, outcome, ttl_seconds=self.cache_ttl_seconds)
            _logger.info(
                "Food search answered: query=%s source=%s results=%s",
                term,
                provider.source,
                len(outcome.items),
            )
            return outcome

        _logger.info("Food search found nothing in any provider: query=%s", term)
        return SearchOutcome(query=query)

    @property
    def providers(self) -> list[FoodProvider]:
        """Providers in the order they are consulted."""
        if self.fallback is None:
            return [self.primary]
        return [self.primary, self.fallback]

    async def _search_provider(
        self, provider: FoodProvider, term: str
    ) -> list[FoodItem]:
        try:
            async with asyncio.timeout(self.timeout_seconds):
                items = await provider.search(term, self.page_size)
        except TimeoutError:
            _logger.warning(
                "Food search %s timed out after %ss: query=%s",
                provider.source,
                self.timeout_seconds,
                term,
            )
            return []
        except ProviderError as exc:
            _logger.warning(
                "Food search %s failed (status=%s): %s",
                provider.source,
                exc.status_code or "n/a",
                exc,
            )
            return []
        except Exception:
            _logger.exception("Food search %s raised unexpectedly", provider.source)
            return []
        if self.debug:
            _logger.info(
                "Food search %s returned %s items: query=%s",
                provider.source,
                len(items),
                term,
            )
        return items
