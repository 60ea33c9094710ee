"""Canonical food records shared by every provider."""

from dataclasses import dataclass
from enum import StrEnum


class FoodSource(StrEnum):
    """Provider that produced a food record."""

    OPEN_FOOD_FACTS = "openfoodfacts"
    LIVSMEDELSVERKET = "livsmedelsverket"
    FATSECRET = "fatsecret"

    @property
    def id_prefix(self) -> str:
        """Namespace prepended to native ids from this provider."""
        return _ID_PREFIXES[self]


_ID_PREFIXES = {
    FoodSource.OPEN_FOOD_FACTS: "off",
    FoodSource.LIVSMEDELSVERKET: "lv",
    FoodSource.FATSECRET: "fs",
}


class NutriScore(StrEnum):
    """Nutri-Score grade passed through from the provider."""

    A = "A"
    B = "B"
    C = "C"
    D = "D"
    E = "E"


@dataclass(frozen=True)
class MacroProfile:
    """Macronutrients for a chosen serving."""

    calories: float
    protein_g: float
    carbs_g: float
    fat_g: float


@dataclass(frozen=True)
class FoodItem:
    """Provider-independent food record.

    Calories are per declared serving when the provider gave a serving
    quantity, otherwise per 100 units. Protein, carbs and fat are per 100 units.
    """

    id: str
    name: str
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
    serving_size: str = "100g"
    serving_quantity: float | None = 100.0
    nutri_score: NutriScore | None = None
    nova_group: int | None = None

    @property
    def display_name(self) -> str:
        """Name with the brand appended, when known."""
        if self.brand:
            return f"{self.name} ({self.brand})"
        return self.name

    def scaled(self, multiplier: float) -> MacroProfile:
        """Return macros multiplied by a user-chosen serving multiplier."""
        return MacroProfile(
            calories=(self.calories or 0.0) * multiplier,
            protein_g=(self.protein or 0.0) * multiplier,
            carbs_g=(self.carbs or 0.0) * multiplier,
            fat_g=(self.fat or 0.0) * multiplier,
        )
