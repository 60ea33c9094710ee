"""Tests for provider schema normalizers."""

import pytest

from nutrition_lookup.domain.foods import FoodSource, NutriScore
from nutrition_lookup.services.normalizers import (
    humanize_category_tag,
    normalize_fatsecret,
    normalize_livsmedelsverket,
    normalize_open_food_facts,
    parse_fatsecret_description,
    serving_calories,
    to_float,
)


@pytest.mark.parametrize(
    "raw",
    [
        {},
        {"code": "123", "nutriments": {"energy-kcal_100g": 100}},
        {"product_name": ""},
        {"product_name": "   "},
        {"product_name": None, "brands": "Arla"},
        {"product_name": ["not", "a", "name"]},
    ],
)
def test_open_food_facts_without_name_is_dropped(raw) -> None:
    assert normalize_open_food_facts(raw) is None


def test_open_food_facts_maps_all_fields() -> None:
    item = normalize_open_food_facts(
        {
            "code": "7310865004703",
            "product_name": " Mellanmjölk ",
            "brands": "Arla",
            "categories_tags": ["en:plant-based-foods-and-beverages", "en:milks"],
            "nutriments": {
                "energy-kcal_100g": 46,
                "proteins_100g": 3.5,
                "carbohydrates_100g": 4.8,
                "fat_100g": 1.5,
                "sugars_100g": 4.8,
                "salt_100g": 0.1,
            },
            "image_front_url": "https://images.example/front.jpg",
            "image_url": "https://images.example/any.jpg",
            "serving_size": "250 ml",
            "serving_quantity": 250,
            "nutriscore_grade": "b",
            "nova_group": 1,
        }
    )

    assert item is not None
    assert item.id == "off_7310865004703"
    assert item.name == "Mellanmjölk"
    assert item.source is FoodSource.OPEN_FOOD_FACTS
    assert item.brand == "Arla"
    assert item.category == "Plant Based Foods And Beverages"
    assert item.calories == pytest.approx(115.0)
    assert item.protein == 3.5
    assert item.carbs == 4.8
    assert item.fat == 1.5
    assert item.sugars == 4.8
    assert item.fiber is None
    assert item.salt == 0.1
    assert item.barcode == "7310865004703"
    assert item.image_url == "https://images.example/front.jpg"
    assert item.serving_size == "250 ml"
    assert item.serving_quantity == 250
    assert item.nutri_score is NutriScore.B
    assert item.nova_group == 1


def test_open_food_facts_prefers_current_energy_key_over_legacy() -> None:
    item = normalize_open_food_facts(
        {
            "product_name": "Knäckebröd",
            "nutriments": {"energy-kcal_100g": 340, "energy-kcal": 999},
        }
    )

    assert item is not None
    assert item.calories == 340


def test_open_food_facts_uses_legacy_energy_key_when_current_missing() -> None:
    item = normalize_open_food_facts(
        {
            "product_name": "Knäckebröd",
            "nutriments": {"energy-kcal": 333, "energy_100g": 1400},
        }
    )

    assert item is not None
    assert item.calories == 333


def test_open_food_facts_converts_kilojoule_energy() -> None:
    item = normalize_open_food_facts(
        {"product_name": "Knäckebröd", "nutriments": {"energy_100g": 418.4}}
    )

    assert item is not None
    assert item.calories == pytest.approx(100.0)


def test_open_food_facts_macro_aliases_pick_first_present() -> None:
    item = normalize_open_food_facts(
        {
            "product_name": "Yoghurt",
            "nutriments": {
                "proteins": 9,
                "carbohydrates_100g": 3,
                "carbohydrates": 30,
                "fat": "2,5",
            },
        }
    )

    assert item is not None
    assert item.protein == 9
    assert item.carbs == 3
    assert item.fat == 2.5


def test_serving_math_scales_per_100_value() -> None:
    item = normalize_open_food_facts(
        {
            "product_name": "Pasta",
            "nutriments": {"energy-kcal_100g": 200},
            "serving_quantity": 150,
        }
    )

    assert item is not None
    assert item.calories == 300


@pytest.mark.parametrize("serving_quantity", [0, -10, None, "abc"])
def test_serving_math_keeps_per_100_value_without_positive_serving(
    serving_quantity,
) -> None:
    raw = {"product_name": "Pasta", "nutriments": {"energy-kcal_100g": 200}}
    if serving_quantity is not None:
        raw["serving_quantity"] = serving_quantity

    item = normalize_open_food_facts(raw)

    assert item is not None
    assert item.calories == 200


def test_serving_calories_without_energy_is_none() -> None:
    assert serving_calories(None, 150) is None


def test_open_food_facts_tolerates_malformed_optionals() -> None:
    item = normalize_open_food_facts(
        {
            "product_name": "Mystery",
            "nutriments": "not-an-object",
            "categories_tags": [],
            "nutriscore_grade": "z",
            "nova_group": 9,
            "serving_quantity": "150",
        }
    )

    assert item is not None
    assert item.id.startswith("off_")
    assert item.id != "off_Mystery"
    assert item.calories is None
    assert item.protein is None
    assert item.category is None
    assert item.nutri_score is None
    assert item.nova_group is None
    assert item.serving_quantity == 150
    assert item.serving_size == "100g"


@pytest.mark.parametrize(
    ("tags", "expected"),
    [
        (["en:breakfast-cereals", "en:cereals"], "Breakfast Cereals"),
        ("en:dairies", "Dairies"),
        (["sv:mejeriprodukter"], "Sv:Mejeriprodukter"),
        ([], None),
        (None, None),
        (["en:"], None),
    ],
)
def test_humanize_category_tag(tags, expected) -> None:
    assert humanize_category_tag(tags) == expected


def test_livsmedelsverket_entry() -> None:
    item = normalize_livsmedelsverket(
        {"nummer": 1, "namn": "Mjölk fett 3%", "huvudgrupp": "Mejeriprodukter"}
    )

    assert item is not None
    assert item.id == "lv_1"
    assert item.source is FoodSource.LIVSMEDELSVERKET
    assert item.category == "Mejeriprodukter"
    assert item.calories is None
    assert item.serving_size == "100g"
    assert item.serving_quantity == 100


def test_livsmedelsverket_entry_with_nutrition() -> None:
    item = normalize_livsmedelsverket(
        {
            "nummer": 12,
            "namn": "Havregryn",
            "energi_kcal": 370,
            "kolhydrater": 58.7,
            "protein": 13.5,
            "fett": 7,
        }
    )

    assert item is not None
    assert (item.calories, item.carbs, item.protein, item.fat) == (370, 58.7, 13.5, 7)


def test_livsmedelsverket_without_name_is_dropped() -> None:
    assert normalize_livsmedelsverket({"nummer": 3, "namn": ""}) is None


def test_fatsecret_entry_parses_description() -> None:
    item = normalize_fatsecret(
        {
            "food_id": "33691",
            "food_name": "Banana",
            "brand_name": "Chiquita",
            "food_description": (
                "Per 100g - Calories: 89kcal | Fat: 0.33g | Carbs: 22.84g | "
                "Protein: 1.09g"
            ),
        }
    )

    assert item is not None
    assert item.id == "fs_33691"
    assert item.display_name == "Banana (Chiquita)"
    assert item.calories == 89
    assert item.fat == 0.33
    assert item.carbs == 22.84
    assert item.protein == 1.09
    assert item.serving_size == "100g"
    assert item.serving_quantity == 100


def test_fatsecret_swedish_description() -> None:
    values = parse_fatsecret_description(
        "Per 1 portion - Kalorier: 120kcal | Fett: 3,5g | Kolh: 20g | Prot: 4g"
    )

    assert values == {"calories": 120, "fat": 3.5, "carbs": 20, "protein": 4}


def test_fatsecret_without_description_keeps_defaults() -> None:
    item = normalize_fatsecret({"food_id": "1", "food_name": "Water"})

    assert item is not None
    assert item.calories is None
    assert item.serving_size == "100g"


def test_fatsecret_non_gram_serving_has_no_quantity() -> None:
    item = normalize_fatsecret(
        {
            "food_id": "2",
            "food_name": "Apple",
            "food_description": "Per 1 medium - Calories: 72kcal",
        }
    )

    assert item is not None
    assert item.serving_size == "1 medium"
    assert item.serving_quantity is None


@pytest.mark.parametrize(
    ("value", "expected"),
    [(1, 1.0), (2.5, 2.5), ("3,5", 3.5), (" 4 ", 4.0), ("", None), ("nan", None), (True, None), (None, None)],
)
def test_to_float(value, expected) -> None:
    assert to_float(value) == expected


def test_records_without_native_ids_keep_distinct_ids() -> None:
    arla = normalize_open_food_facts({"product_name": "Mjölk", "brands": "Arla"})
    skane = normalize_open_food_facts(
        {"product_name": "Mjölk", "brands": "Skånemejerier"}
    )
    unnumbered = normalize_livsmedelsverket({"namn": "Mjölk"})
    unidentified = normalize_fatsecret({"food_name": "Mjölk"})

    assert arla is not None and skane is not None
    assert arla.id != skane.id
    assert unnumbered is not None and unnumbered.id.startswith("lv_")
    assert unidentified is not None and unidentified.id.startswith("fs_")
    assert "Mjölk" not in {arla.id, skane.id, unnumbered.id, unidentified.id}
