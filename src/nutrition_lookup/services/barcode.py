"""Single-shot barcode lookup."""

import asyncio
import logging
from dataclasses import dataclass
from typing import Protocol

from nutrition_lookup.adapters.provider_models import RawRecord
from nutrition_lookup.domain.search import BarcodeLookup, BarcodeStatus
from nutrition_lookup.errors import ProviderError
from nutrition_lookup.services.normalizers import normalize_open_food_facts

VALID_BARCODE_LENGTHS = frozenset({8, 12, 13, 14})

_logger = logging.getLogger(__name__)


class BarcodeClient(Protocol):
    """Adapter exposing an exact barcode lookup."""

    async def lookup_by_barcode(self, code: str) -> RawRecord | None:
        """Return the raw product, or None when the provider does not know it."""


def is_valid_barcode(code: str) -> bool:
    """EAN-8, UPC-A, EAN-13 and GTIN-14 codes are accepted."""
    return code.isascii() and code.isdigit() and len(code) in VALID_BARCODE_LENGTHS


@dataclass
class BarcodeLookupService:
    """Look a barcode up in one designated provider, without fallback."""

    client: BarcodeClient
    timeout_seconds: float = 10.0

    async def lookup(self, code: str) -> BarcodeLookup:
        """Resolve ``code`` to a food; never raises for provider failures."""
        cleaned = code.strip()
        if not is_valid_barcode(cleaned):
            return BarcodeLookup(
                code=cleaned,
                status=BarcodeStatus.INVALID,
                error="barcode must be 8, 12, 13 or 14 digits",
            )
        try:
            async with asyncio.timeout(self.timeout_seconds):
                raw = await self.client.lookup_by_barcode(cleaned)
        except TimeoutError:
            _logger.warning("Barcode lookup timed out: code=%s", cleaned)
            return BarcodeLookup(
                code=cleaned, status=BarcodeStatus.FAILED, error="timed out"
            )
        except ProviderError as exc:
            _logger.warning("Barcode lookup failed: code=%s error=%s", cleaned, exc)
            return BarcodeLookup(
                code=cleaned, status=BarcodeStatus.FAILED, error=str(exc)
            )

        item = normalize_open_food_facts(raw) if raw is not None else None
        if item is None:
            _logger.info("Barcode not found: code=%s", cleaned)
            return BarcodeLookup(code=cleaned, status=BarcodeStatus.NOT_FOUND)
        return BarcodeLookup(code=cleaned, status=BarcodeStatus.FOUND, item=item)
