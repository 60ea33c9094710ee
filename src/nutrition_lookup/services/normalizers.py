"""Provider-specific schema normalizers.

Every normalizer maps one raw provider record to a ``FoodItem`` or ``None``.
They never raise for structurally valid JSON: missing or malformed optional
fields become ``None`` and records without a usable name are dropped.

Where a provider reports a value under several keys, the keys are listed in
priority order and the first present one wins.
"""

import math
import re
import uuid
from collections.abc import Mapping, Sequence

from nutrition_lookup.domain.foods import FoodItem, FoodSource, NutriScore

KJ_PER_KCAL = 4.184
DEFAULT_SERVING_SIZE = "100g"
DEFAULT_SERVING_QUANTITY = 100.0
CATEGORY_TAG_PREFIX = "en:"

OFF_ENERGY_KCAL_KEYS = ("energy-kcal_100g", "energy-kcal")
OFF_ENERGY_KJ_KEY = "energy_100g"
OFF_PROTEIN_KEYS = ("proteins_100g", "proteins")
OFF_CARBS_KEYS = ("carbohydrates_100g", "carbohydrates")
OFF_FAT_KEYS = ("fat_100g", "fat")
OFF_SUGARS_KEYS = ("sugars_100g", "sugars")
OFF_FIBER_KEYS = ("fiber_100g", "fiber")
OFF_SALT_KEYS = ("salt_100g", "salt")
OFF_IMAGE_KEYS = ("image_front_url", "image_url")

_FATSECRET_SERVING = re.compile(r"Per (?P<serving>.+?) -")
_FATSECRET_LABELS = {
    "calories": ("Calories", "Kalorier"),
    "fat": ("Fat", "Fett"),
    "carbs": ("Carbs", "Kolh"),
    "protein": ("Protein", "Prot"),
}


def normalize_open_food_facts(raw: Mapping[str, object]) -> FoodItem | None:
    """Normalize an Open Food Facts product."""
    name = _clean_text(raw.get("product_name"))
    if name is None:
        return None
    nutriments = raw.get("nutriments")
    if not isinstance(nutriments, Mapping):
        nutriments = {}

    code = _clean_text(raw.get("code"))
    serving_quantity = to_float(raw.get("serving_quantity"))
    return FoodItem(
        id=_prefixed_id(FoodSource.OPEN_FOOD_FACTS, code),
        name=name,
        source=FoodSource.OPEN_FOOD_FACTS,
        brand=_clean_text(raw.get("brands")),
        category=humanize_category_tag(raw.get("categories_tags")),
        calories=serving_calories(open_food_facts_energy(nutriments), serving_quantity),
        protein=first_present(nutriments, OFF_PROTEIN_KEYS),
        carbs=first_present(nutriments, OFF_CARBS_KEYS),
        fat=first_present(nutriments, OFF_FAT_KEYS),
        sugars=first_present(nutriments, OFF_SUGARS_KEYS),
        fiber=first_present(nutriments, OFF_FIBER_KEYS),
        salt=first_present(nutriments, OFF_SALT_KEYS),
        barcode=code,
        image_url=_first_text(raw, OFF_IMAGE_KEYS),
        serving_size=_clean_text(raw.get("serving_size")) or DEFAULT_SERVING_SIZE,
        serving_quantity=(
            serving_quantity
            if serving_quantity is not None
            else DEFAULT_SERVING_QUANTITY
        ),
        nutri_score=parse_nutri_score(raw.get("nutriscore_grade")),
        nova_group=parse_nova_group(raw.get("nova_group")),
    )


def normalize_livsmedelsverket(raw: Mapping[str, object]) -> FoodItem | None:
    """Normalize a Livsmedelsverket catalogue entry (values per 100 g)."""
    name = _clean_text(raw.get("namn"))
    if name is None:
        return None
    number = _clean_text(raw.get("nummer"))
    return FoodItem(
        id=_prefixed_id(FoodSource.LIVSMEDELSVERKET, number),
        name=name,
        source=FoodSource.LIVSMEDELSVERKET,
        category=_clean_text(raw.get("huvudgrupp")),
        calories=to_float(raw.get("energi_kcal")),
        protein=to_float(raw.get("protein")),
        carbs=to_float(raw.get("kolhydrater")),
        fat=to_float(raw.get("fett")),
        sugars=to_float(raw.get("socker")),
        fiber=to_float(raw.get("fiber")),
        serving_size=DEFAULT_SERVING_SIZE,
        serving_quantity=DEFAULT_SERVING_QUANTITY,
    )


def normalize_fatsecret(raw: Mapping[str, object]) -> FoodItem | None:
    """Normalize a FatSecret ``foods.search`` entry.

    Nutrition only comes embedded in ``food_description``, e.g.
    ``"Per 100g - Calories: 250kcal | Fat: 10.00g | Carbs: 30.00g | Protein: 8.00g"``.
    """
    name = _clean_text(raw.get("food_name"))
    if name is None:
        return None
    food_id = _clean_text(raw.get("food_id"))
    description = _clean_text(raw.get("food_description")) or ""
    values = parse_fatsecret_description(description)
    match = _FATSECRET_SERVING.search(description)
    serving_size = match.group("serving") if match else DEFAULT_SERVING_SIZE
    return FoodItem(
        id=_prefixed_id(FoodSource.FATSECRET, food_id),
        name=name,
        source=FoodSource.FATSECRET,
        brand=_clean_text(raw.get("brand_name")),
        calories=values.get("calories"),
        protein=values.get("protein"),
        carbs=values.get("carbs"),
        fat=values.get("fat"),
        serving_size=serving_size,
        serving_quantity=_grams_from_serving(serving_size),
    )


def parse_fatsecret_description(description: str) -> dict[str, float]:
    """Extract labelled nutrient values from a FatSecret description."""
    values: dict[str, float] = {}
    for field, labels in _FATSECRET_LABELS.items():
        for label in labels:
            match = re.search(rf"\b{label}: ?([0-9]+(?:[.,][0-9]+)?)", description)
            if match:
                values[field] = float(match.group(1).replace(",", "."))
                break
    return values


def first_present(record: Mapping[str, object], keys: Sequence[str]) -> float | None:
    """Return the first key in ``keys`` that holds a usable number."""
    for key in keys:
        value = to_float(record.get(key))
        if value is not None:
            return value
    return None


def open_food_facts_energy(nutriments: Mapping[str, object]) -> float | None:
    """Per-100 kcal, preferring kcal keys over the kJ-based ``energy_100g``."""
    kcal = first_present(nutriments, OFF_ENERGY_KCAL_KEYS)
    if kcal is not None:
        return kcal
    kilojoules = to_float(nutriments.get(OFF_ENERGY_KJ_KEY))
    if kilojoules is None:
        return None
    return kilojoules / KJ_PER_KCAL


def serving_calories(
    per_100: float | None, serving_quantity: float | None
) -> float | None:
    """Scale per-100 calories to the declared serving when it is positive."""
    if per_100 is None:
        return None
    if serving_quantity is not None and serving_quantity > 0:
        return per_100 * serving_quantity / 100
    return per_100


def humanize_category_tag(tags: object) -> str | None:
    """Turn ``["en:plant-based-foods", ...]`` into ``"Plant Based Foods"``."""
    if isinstance(tags, list | tuple):
        tag = tags[0] if tags else None
    else:
        tag = tags
    text = _clean_text(tag)
    if text is None:
        return None
    if text.startswith(CATEGORY_TAG_PREFIX):
        text = text[len(CATEGORY_TAG_PREFIX) :]
    label = text.replace("-", " ").strip()
    return label.title() or None


def parse_nutri_score(value: object) -> NutriScore | None:
    text = _clean_text(value)
    if text is None:
        return None
    try:
        return NutriScore(text.upper())
    except ValueError:
        return None


def parse_nova_group(value: object) -> int | None:
    number = to_float(value)
    if number is None or not number.is_integer():
        return None
    group = int(number)
    return group if 1 <= group <= 4 else None


def to_float(value: object) -> float | None:
    """Coerce a JSON number or numeric string to float."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int | float):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip().replace(",", "."))
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None


def _grams_from_serving(serving: str) -> float | None:
    match = re.fullmatch(r"([0-9]+(?:[.,][0-9]+)?)\s*(g|ml)", serving.strip())
    if match is None:
        return None
    return float(match.group(1).replace(",", "."))


def _first_text(record: Mapping[str, object], keys: Sequence[str]) -> str | None:
    for key in keys:
        text = _clean_text(record.get(key))
        if text is not None:
            return text
    return None


def _clean_text(value: object) -> str | None:
    if isinstance(value, int) and not isinstance(value, bool):
        value = str(value)
    if not isinstance(value, str):
        return None
    text = value.strip()
    return text or None


def _prefixed_id(source: FoodSource, native_id: str | None) -> str:
    """Records without a native id get a random one, never their name."""
    return f"{source.id_prefix}_{native_id or uuid.uuid4().hex}"
