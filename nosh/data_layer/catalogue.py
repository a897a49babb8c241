"""Abstract lookups the nutrient aggregator depends on.

The aggregator programs only against :class:`Catalogue` and
:class:`JournalStore`; where records come from (files on disk, an
in-memory dict in tests) is the implementation's business.
"""

from abc import ABC, abstractmethod
from datetime import date
from typing import Dict, Iterable, Optional

from nosh.data_layer.models import CatalogueRecord, FoodRecord, Journal, RecipeRecord


class Catalogue(ABC):
    """Read-only collection of all foods and recipes."""

    @abstractmethod
    def get(self, key: str) -> Optional[CatalogueRecord]:
        """Return the food or recipe for *key*.

        Foods take precedence over recipes with the same key.

        Returns:
            FoodRecord, RecipeRecord, or ``None`` if nothing has that key.
        """
        ...


class JournalStore(ABC):
    """Source of per-day journals."""

    @abstractmethod
    def load_journal(self, day: date) -> Optional[Journal]:
        """Return the journal for *day*, or ``None`` if none was recorded."""
        ...


class OverlayCatalogue(Catalogue):
    """Catalogue that answers from pending records before a base catalogue.

    Used to validate an edited record against everything else before it
    is saved.
    """

    def __init__(self, base: Catalogue, pending: Iterable[CatalogueRecord]) -> None:
        self._base = base
        self._pending: Dict[str, CatalogueRecord] = {record.key: record for record in pending}

    def get(self, key: str) -> Optional[CatalogueRecord]:
        if key in self._pending:
            return self._pending[key]
        return self._base.get(key)


class InMemoryCatalogue(Catalogue, JournalStore):
    """Catalogue and journal store backed by plain dictionaries."""

    def __init__(
        self,
        foods: Iterable[FoodRecord] = (),
        recipes: Iterable[RecipeRecord] = (),
        journals: Iterable[Journal] = (),
    ) -> None:
        self._foods: Dict[str, FoodRecord] = {food.key: food for food in foods}
        self._recipes: Dict[str, RecipeRecord] = {recipe.key: recipe for recipe in recipes}
        self._journals: Dict[date, Journal] = {journal.day: journal for journal in journals}

    def get(self, key: str) -> Optional[CatalogueRecord]:
        if key in self._foods:
            return self._foods[key]
        return self._recipes.get(key)

    def load_journal(self, day: date) -> Optional[Journal]:
        return self._journals.get(day)
