"""Pydantic models for the HTTP and websocket surface."""

from pydantic import BaseModel, ConfigDict

from nutrition_lookup.domain.foods import FoodSource, NutriScore
from nutrition_lookup.domain.search import BarcodeStatus, SearchState


class FoodItemModel(BaseModel):
    """Canonical food record."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    display_name: str
    source: FoodSource
    brand: str | None = None
    category: str | None = None
    calories: float | None = None
    protein: float | None = None
    carbs: float | None = None
    fat: float | None = None
    sugars: float | None = None
    fiber: float | None = None
    salt: float | None = None
    barcode: str | None = None
    image_url: str | None = None
    serving_size: str
    serving_quantity: float | None = None
    nutri_score: NutriScore | None = None
    nova_group: int | None = None


class SearchResponse(BaseModel):
    """Ranked text search result."""

    model_config = ConfigDict(from_attributes=True)

    query: str
    source: FoodSource | None = None
    from_cache: bool = False
    items: list[FoodItemModel]


class BarcodeLookupModel(BaseModel):
    """Barcode lookup outcome."""

    model_config = ConfigDict(from_attributes=True)

    code: str
    status: BarcodeStatus
    item: FoodItemModel | None = None
    error: str | None = None


class SearchSnapshotModel(BaseModel):
    """State pushed to live search clients."""

    model_config = ConfigDict(from_attributes=True)

    state: SearchState
    query: str
    is_loading: bool
    source: FoodSource | None = None
    results: list[FoodItemModel]
    barcode: BarcodeLookupModel | None = None


class LiveSearchMessage(BaseModel):
    """Frame sent by a live search client: a query change or a scanned code."""

    query: str | None = None
    barcode: str | None = None
