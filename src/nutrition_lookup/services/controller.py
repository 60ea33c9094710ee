"""Debounced, cancellable search controller for keystroke-driven input.

Every query change cancels the previous debounce timer and in-flight search
and starts a new task that captures the query it was created for. A finished
task publishes only while its captured query still equals the latest query
and it is still the controller's current task, so a slow, superseded search
can never overwrite a newer result.
"""

import asyncio
import logging
from collections.abc import Callable
from typing import Protocol

from nutrition_lookup.domain.foods import FoodItem, FoodSource
from nutrition_lookup.domain.search import (
    BarcodeLookup,
    SearchOutcome,
    SearchSnapshot,
    SearchState,
)

DEFAULT_DEBOUNCE_SECONDS = 0.2

Subscriber = Callable[[SearchSnapshot], None]

_logger = logging.getLogger(__name__)


class TextSearch(Protocol):
    """Text search entry point used by the controller."""

    async def search(self, query: str) -> SearchOutcome:
        """Return ranked items for a query."""


class BarcodeLookupProtocol(Protocol):
    """Barcode lookup entry point used by the controller."""

    async def lookup(self, code: str) -> BarcodeLookup:
        """Resolve a barcode."""


class DebouncedSearchController:
    """Owns search state for one interactive client."""

    def __init__(
        self,
        search_service: TextSearch,
        barcode_service: BarcodeLookupProtocol,
        debounce_seconds: float = DEFAULT_DEBOUNCE_SECONDS,
    ) -> None:
        self.search_service = search_service
        self.barcode_service = barcode_service
        self.debounce_seconds = debounce_seconds
        self.state = SearchState.IDLE
        self.query = ""
        self.results: list[FoodItem] = []
        self.is_loading = False
        self.source: FoodSource | None = None
        self.last_barcode: BarcodeLookup | None = None
        self._task: asyncio.Task[None] | None = None
        self._subscribers: list[Subscriber] = []

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Register a callback for state changes; returns an unsubscribe hook."""
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def snapshot(self) -> SearchSnapshot:
        """Current observable state."""
        return SearchSnapshot(
            state=self.state,
            query=self.query,
            results=list(self.results),
            is_loading=self.is_loading,
            source=self.source,
            barcode=self.last_barcode,
        )

    def on_query_changed(self, text: str) -> None:
        """Handle a keystroke. Must be called from the running event loop."""
        self.query = text
        self._cancel_pending()
        if not text.strip():
            self.state = SearchState.IDLE
            self.results = []
            self.source = None
            self.is_loading = False
            self._publish()
            return
        self.state = SearchState.PENDING
        self._task = asyncio.get_running_loop().create_task(
            self._debounced_search(text)
        )

    async def on_barcode_scanned(self, code: str) -> BarcodeLookup:
        """Look a barcode up immediately, bypassing debounce and fallback."""
        lookup = await self.barcode_service.lookup(code)
        self.last_barcode = lookup
        self._publish()
        return lookup

    async def wait_idle(self) -> None:
        """Wait until no search task is pending or running."""
        while self._task is not None and not self._task.done():
            await asyncio.wait({self._task})

    def close(self) -> None:
        """Cancel outstanding work."""
        self._cancel_pending()
        self.is_loading = False

    async def _debounced_search(self, snapshot: str) -> None:
        await asyncio.sleep(self.debounce_seconds)
        if snapshot != self.query:
            return

        self.state = SearchState.SEARCHING
        self.is_loading = True
        self._publish()
        try:
            outcome = await self.search_service.search(snapshot)
        except Exception:
            _logger.exception("Search failed: query=%s", snapshot)
            outcome = SearchOutcome(query=snapshot)

        if snapshot != self.query or asyncio.current_task() is not self._task:
            _logger.info("Dropped stale search result: query=%s", snapshot)
            return
        self.results = outcome.items
        self.source = outcome.source
        self.state = SearchState.SETTLED
        self.is_loading = False
        self._publish()

    def _cancel_pending(self) -> None:
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None

    def _publish(self) -> None:
        snapshot = self.snapshot()
        for callback in list(self._subscribers):
            try:
                callback(snapshot)
            except Exception:
                _logger.exception("Search subscriber failed")
