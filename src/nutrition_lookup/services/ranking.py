"""Relevance ranking of normalized search results."""

from collections.abc import Iterable

from nutrition_lookup.domain.foods import FoodItem

MAX_RESULTS = 50


def rank_foods(
    items: Iterable[FoodItem], query: str, limit: int = MAX_RESULTS
) -> list[FoodItem]:
    """Order items by exact match, then prefix match, then name.

    Names and the query are compared casefolded and the sort is stable, so
    items with equal names keep their provider order. Later items sharing an
    id are dropped.
    """
    needle = query.strip().casefold()
    unique: dict[str, FoodItem] = {}
    for item in items:
        unique.setdefault(item.id, item)

    def sort_key(item: FoodItem) -> tuple[bool, bool, str]:
        name = item.name.casefold()
        return (name != needle, not name.startswith(needle), name)

    ranked = sorted(unique.values(), key=sort_key)
    return ranked[: max(limit, 0)]
