"""Livsmedelsverket (Swedish Food Agency) catalogue client.

The public API has no text search, so the catalogue is downloaded once per
client and filtered locally.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Protocol

import httpx

from nutrition_lookup.adapters.http import default_headers, fetch_json
from nutrition_lookup.adapters.provider_models import (
    RawRecord,
    decode_livsmedelsverket,
)
from nutrition_lookup.errors import ProviderDecodeError

PROVIDER = "livsmedelsverket"
CATALOGUE_PARAMS = {"offset": 0, "limit": 3000, "sppirak": "false"}

_logger = logging.getLogger(__name__)


class LivsmedelsverketClient(Protocol):
    """Interface for Livsmedelsverket interactions."""

    async def search_by_text(self, query: str, max_results: int) -> list[RawRecord]:
        """Return catalogue entries whose name or main group contains the query."""


@dataclass
class HttpxLivsmedelsverketClient(LivsmedelsverketClient):
    """HTTPX-backed Livsmedelsverket client with a memoised catalogue."""

    base_url: str
    http_client: httpx.AsyncClient
    timeout_seconds: float = 10.0
    _catalogue: list[RawRecord] | None = field(default=None, init=False, repr=False)
    _lock: asyncio.Lock = field(default_factory=asyncio.Lock, init=False, repr=False)

    @classmethod
    def create(
        cls, base_url: str, user_agent: str, timeout_seconds: float = 10.0
    ) -> "HttpxLivsmedelsverketClient":
        """Create a client with a managed httpx session."""
        return cls(
            base_url=base_url,
            http_client=httpx.AsyncClient(headers=default_headers(user_agent)),
            timeout_seconds=timeout_seconds,
        )

    async def search_by_text(self, query: str, max_results: int) -> list[RawRecord]:
        """Filter the catalogue by name or main group, case-insensitively."""
        catalogue = await self.load_catalogue()
        needle = query.strip().lower()
        matches = [
            entry
            for entry in catalogue
            if needle in str(entry.get("namn", "")).lower()
            or needle in str(entry.get("huvudgrupp") or "").lower()
        ]
        return matches[:max_results]

    async def load_catalogue(self, timeout_seconds: float | None = None) -> list[RawRecord]:
        """Download the catalogue on first use and reuse it afterwards."""
        if self._catalogue is not None:
            return self._catalogue
        async with self._lock:
            if self._catalogue is None:
                self._catalogue = await self._fetch_catalogue(
                    timeout_seconds or self.timeout_seconds
                )
                _logger.info(
                    "Loaded Livsmedelsverket catalogue: foods=%s", len(self._catalogue)
                )
        return self._catalogue

    async def _fetch_catalogue(self, timeout: float) -> list[RawRecord]:
        _, payload = await fetch_json(
            self.http_client,
            PROVIDER,
            "GET",
            f"{self.base_url}/livsmedel",
            timeout=timeout,
            params=CATALOGUE_PARAMS,
        )
        result = decode_livsmedelsverket(payload)
        if not result.ok or result.value is None:
            raise ProviderDecodeError(PROVIDER, result.error or "empty decode")
        return result.value

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()
