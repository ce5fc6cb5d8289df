# toppings.py
"""Topping selection rules for bowl customization.

Complements are grouped by category and each category has a cap. Caps are
enforced when a topping is selected, so a selection set can never hold more
than the cap allows.
"""
from collections import OrderedDict
from decimal import Decimal
from typing import Iterable, List

import schemas

CATEGORY_LIMITS = {
    "fruit": 2,
    "topping": 1,
    "extra": 4,
}


class ToppingLimitExceeded(ValueError):
    def __init__(self, category: str, count: int):
        self.category = category
        self.count = count
        super().__init__(
            f"Category '{category}' allows at most {CATEGORY_LIMITS[category]} selections, got {count}"
        )


def _limit_for(category: str) -> int:
    try:
        return CATEGORY_LIMITS[category]
    except KeyError:
        raise ValueError(f"Unknown topping category: {category}")


class ToppingSelection:
    """Selection set keyed by topping id, in selection order."""

    def __init__(self):
        self._selected = OrderedDict()

    def select(self, topping) -> bool:
        """Toggle a topping.

        Returns True when the topping was added, False when it was removed or
        when its category is already full.
        """
        limit = _limit_for(topping.category)
        if topping.id in self._selected:
            del self._selected[topping.id]
            return False
        if self.category_count(topping.category) >= limit:
            return False
        self._selected[topping.id] = schemas.ToppingSnapshot(
            id=topping.id,
            name=topping.name,
            price=topping.price,
            quantity=1,
            category=topping.category,
        )
        return True

    def category_count(self, category: str) -> int:
        return sum(s.quantity for s in self._selected.values() if s.category == category)

    def can_add_more(self, category: str) -> bool:
        return self.category_count(category) < _limit_for(category)

    def is_selected(self, topping_id: str) -> bool:
        return topping_id in self._selected

    def snapshots(self) -> List[schemas.ToppingSnapshot]:
        return list(self._selected.values())

    def total(self) -> Decimal:
        return sum((Decimal(s.price) * s.quantity for s in self._selected.values()), Decimal("0"))

    def __len__(self):
        return len(self._selected)


def validate_topping_selection(snapshots: Iterable[schemas.ToppingSnapshot]) -> None:
    """Re-check category caps on a submitted selection."""
    counts = {}
    for snapshot in snapshots:
        _limit_for(snapshot.category)
        counts[snapshot.category] = counts.get(snapshot.category, 0) + snapshot.quantity
    for category, count in counts.items():
        if count > CATEGORY_LIMITS[category]:
            raise ToppingLimitExceeded(category, count)
