"""Provider payload models and the strict-then-lenient decode pipeline.

Each provider body is decoded twice at most: first against a strict pydantic
schema, and only when that fails by walking the generic JSON tree key by key.
Both tiers return a ``DecodeResult`` holding plain record dicts, which the
normalizers turn into ``FoodItem`` objects.
"""

from collections.abc import Callable
from dataclasses import dataclass
from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

T = TypeVar("T")

RawRecord = dict[str, object]

OPEN_FOOD_FACTS_PRODUCT_KEYS = (
    "code",
    "product_name",
    "brands",
    "categories_tags",
    "nutriments",
    "image_front_url",
    "image_url",
    "serving_size",
    "serving_quantity",
    "nutriscore_grade",
    "nova_group",
)


@dataclass(frozen=True)
class DecodeResult(Generic[T]):
    """Value produced by one decode tier, or the reason it failed."""

    value: T | None = None
    error: str | None = None
    tier: str = "strict"

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: T, tier: str) -> "DecodeResult[T]":
        return cls(value=value, tier=tier)

    @classmethod
    def failure(cls, error: str, tier: str) -> "DecodeResult[T]":
        return cls(error=error, tier=tier)


def decode_with_fallback(
    payload: object,
    strict: Callable[[object], DecodeResult[T]],
    lenient: Callable[[object], DecodeResult[T]],
) -> DecodeResult[T]:
    """Run the strict tier and fall back to the lenient one on failure."""
    result = strict(payload)
    if result.ok:
        return result
    fallback = lenient(payload)
    if fallback.ok:
        return fallback
    return DecodeResult.failure(f"{result.error}; {fallback.error}", tier="lenient")


class _StrictModel(BaseModel):
    model_config = ConfigDict(strict=True, extra="ignore", populate_by_name=True)


class OpenFoodFactsNutriments(_StrictModel):
    """Nutriments block; the same nutrient can appear under several keys."""

    model_config = ConfigDict(strict=True, extra="allow", populate_by_name=True)

    energy_kcal_100g: float | None = Field(default=None, alias="energy-kcal_100g")
    energy_kcal: float | None = Field(default=None, alias="energy-kcal")
    energy_100g: float | None = None
    proteins_100g: float | None = None
    proteins: float | None = None
    carbohydrates_100g: float | None = None
    carbohydrates: float | None = None
    fat_100g: float | None = None
    fat: float | None = None
    sugars_100g: float | None = None
    sugars: float | None = None
    fiber_100g: float | None = None
    fiber: float | None = None
    salt_100g: float | None = None
    salt: float | None = None


class OpenFoodFactsProduct(_StrictModel):
    """Product as returned by search and barcode endpoints."""

    code: str | None = None
    product_name: str | None = None
    brands: str | None = None
    categories_tags: list[str] | None = None
    nutriments: OpenFoodFactsNutriments | None = None
    image_front_url: str | None = None
    image_url: str | None = None
    serving_size: str | None = None
    serving_quantity: float | None = None
    nutriscore_grade: str | None = None
    nova_group: int | None = None


class OpenFoodFactsSearchResponse(_StrictModel):
    """Body of the ``cgi/search.pl`` endpoint."""

    count: int | None = None
    page: int | None = None
    page_size: int | None = None
    products: list[OpenFoodFactsProduct] | None = None


class OpenFoodFactsProductResponse(_StrictModel):
    """Body of the ``api/v2/product/{code}`` endpoint."""

    code: str | None = None
    status: int | None = None
    status_verbose: str | None = None
    product: OpenFoodFactsProduct | None = None


class LivsmedelsverketFood(_StrictModel):
    """One entry of the Livsmedelsverket food catalogue."""

    model_config = ConfigDict(strict=True, extra="allow", populate_by_name=True)

    nummer: int
    namn: str
    huvudgrupp: str | None = None


class LivsmedelsverketListResponse(_StrictModel):
    """Wrapped catalogue body."""

    livsmedel: list[LivsmedelsverketFood]


class FatSecretFood(_StrictModel):
    """Food entry of a ``foods.search`` response."""

    food_id: str
    food_name: str
    brand_name: str | None = None
    food_description: str | None = None
    food_type: str | None = None


class FatSecretFoods(_StrictModel):
    """``foods`` block; ``food`` is an object when only one result matched."""

    food: list[FatSecretFood] | FatSecretFood | None = None


class FatSecretSearchResponse(_StrictModel):
    """Body of ``foods.search``."""

    foods: FatSecretFoods


_LIVSMEDELSVERKET_LIST = TypeAdapter(list[LivsmedelsverketFood])


def _dump(model: BaseModel) -> RawRecord:
    return model.model_dump(by_alias=True, exclude_none=True)


def decode_open_food_facts_search_strict(payload: object) -> DecodeResult[list[RawRecord]]:
    """Decode a search body against the strict schema."""
    try:
        response = OpenFoodFactsSearchResponse.model_validate(payload)
    except ValidationError as exc:
        return DecodeResult.failure(f"strict decode failed: {exc.error_count()} errors", "strict")
    return DecodeResult.success([_dump(p) for p in response.products or []], "strict")


def extract_open_food_facts_search_lenient(
    payload: object,
) -> DecodeResult[list[RawRecord]]:
    """Pick known product keys out of whatever JSON tree arrived."""
    if not isinstance(payload, dict):
        return DecodeResult.failure("body is not an object", "lenient")
    products = payload.get("products")
    if not isinstance(products, list):
        return DecodeResult.failure("missing products array", "lenient")
    records = [
        _pick_keys(product, OPEN_FOOD_FACTS_PRODUCT_KEYS)
        for product in products
        if isinstance(product, dict)
    ]
    return DecodeResult.success(records, "lenient")


def decode_open_food_facts_search(payload: object) -> DecodeResult[list[RawRecord]]:
    """Decode a search body, strict first."""
    return decode_with_fallback(
        payload,
        decode_open_food_facts_search_strict,
        extract_open_food_facts_search_lenient,
    )


def decode_open_food_facts_product_strict(payload: object) -> DecodeResult[RawRecord | None]:
    """Decode a barcode body; ``None`` value means the product is unknown."""
    try:
        response = OpenFoodFactsProductResponse.model_validate(payload)
    except ValidationError as exc:
        return DecodeResult.failure(f"strict decode failed: {exc.error_count()} errors", "strict")
    if response.status != 1 or response.product is None:
        return DecodeResult.success(None, "strict")
    return DecodeResult.success(_dump(response.product), "strict")


def extract_open_food_facts_product_lenient(
    payload: object,
) -> DecodeResult[RawRecord | None]:
    if not isinstance(payload, dict):
        return DecodeResult.failure("body is not an object", "lenient")
    status = payload.get("status")
    product = payload.get("product")
    if str(status) != "1" or not isinstance(product, dict):
        return DecodeResult.success(None, "lenient")
    return DecodeResult.success(
        _pick_keys(product, OPEN_FOOD_FACTS_PRODUCT_KEYS), "lenient"
    )


def decode_open_food_facts_product(payload: object) -> DecodeResult[RawRecord | None]:
    """Decode a barcode body, strict first."""
    return decode_with_fallback(
        payload,
        decode_open_food_facts_product_strict,
        extract_open_food_facts_product_lenient,
    )


def decode_livsmedelsverket_strict(payload: object) -> DecodeResult[list[RawRecord]]:
    """Decode the catalogue as a bare list, then as a ``livsmedel`` wrapper."""
    try:
        foods = _LIVSMEDELSVERKET_LIST.validate_python(payload)
    except ValidationError:
        try:
            foods = LivsmedelsverketListResponse.model_validate(payload).livsmedel
        except ValidationError as exc:
            return DecodeResult.failure(
                f"strict decode failed: {exc.error_count()} errors", "strict"
            )
    return DecodeResult.success([_dump(food) for food in foods], "strict")


def extract_livsmedelsverket_lenient(payload: object) -> DecodeResult[list[RawRecord]]:
    entries = payload.get("livsmedel") if isinstance(payload, dict) else payload
    if not isinstance(entries, list):
        return DecodeResult.failure("missing livsmedel array", "lenient")
    return DecodeResult.success(
        [entry for entry in entries if isinstance(entry, dict)], "lenient"
    )


def decode_livsmedelsverket(payload: object) -> DecodeResult[list[RawRecord]]:
    """Decode the catalogue, strict first."""
    return decode_with_fallback(
        payload, decode_livsmedelsverket_strict, extract_livsmedelsverket_lenient
    )


def decode_fatsecret_search_strict(payload: object) -> DecodeResult[list[RawRecord]]:
    try:
        response = FatSecretSearchResponse.model_validate(payload)
    except ValidationError as exc:
        return DecodeResult.failure(f"strict decode failed: {exc.error_count()} errors", "strict")
    food = response.foods.food
    if food is None:
        return DecodeResult.success([], "strict")
    foods = food if isinstance(food, list) else [food]
    return DecodeResult.success([_dump(item) for item in foods], "strict")


def extract_fatsecret_search_lenient(payload: object) -> DecodeResult[list[RawRecord]]:
    if not isinstance(payload, dict):
        return DecodeResult.failure("body is not an object", "lenient")
    foods = payload.get("foods")
    if not isinstance(foods, dict):
        return DecodeResult.failure("missing foods object", "lenient")
    food = foods.get("food")
    if isinstance(food, dict):
        return DecodeResult.success([food], "lenient")
    if isinstance(food, list):
        return DecodeResult.success(
            [item for item in food if isinstance(item, dict)], "lenient"
        )
    return DecodeResult.success([], "lenient")


def decode_fatsecret_search(payload: object) -> DecodeResult[list[RawRecord]]:
    """Decode a ``foods.search`` body, strict first."""
    return decode_with_fallback(
        payload, decode_fatsecret_search_strict, extract_fatsecret_search_lenient
    )


def _pick_keys(record: dict, keys: tuple[str, ...]) -> RawRecord:
    return {key: record[key] for key in keys if record.get(key) is not None}
