"""Search state and outcome models."""

from dataclasses import dataclass, field
from enum import StrEnum

from nutrition_lookup.domain.foods import FoodItem, FoodSource


class SearchState(StrEnum):
    """Lifecycle of the interactive search box."""

    IDLE = "idle"
    PENDING = "pending"
    SEARCHING = "searching"
    SETTLED = "settled"


class BarcodeStatus(StrEnum):
    """Outcome classes of a barcode lookup."""

    FOUND = "found"
    NOT_FOUND = "not_found"
    FAILED = "failed"
    INVALID = "invalid"


@dataclass(frozen=True)
class SearchOutcome:
    """Ranked items from the provider that answered a text search."""

    query: str
    items: list[FoodItem] = field(default_factory=list)
    source: FoodSource | None = None
    from_cache: bool = False


@dataclass(frozen=True)
class BarcodeLookup:
    """Result of a single barcode lookup."""

    code: str
    status: BarcodeStatus
    item: FoodItem | None = None
    error: str | None = None

    @property
    def found(self) -> bool:
        return self.status is BarcodeStatus.FOUND


@dataclass(frozen=True)
class SearchSnapshot:
    """Observable view of the search controller after a change."""

    state: SearchState
    query: str
    results: list[FoodItem]
    is_loading: bool
    source: FoodSource | None = None
    barcode: BarcodeLookup | None = None
