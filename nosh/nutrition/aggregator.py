"""Nutrient aggregation for foods, recipes and journals.

Foods scale their declared nutrients by the resolved serving factor.
Recipes are summed from their ingredient lines, recursively, then divided
by their yield. Recursion carries the chain of recipes currently being
expanded so a recipe that refers back to itself is reported as a
CyclicRecipeError instead of recursing until the stack runs out.
"""

import logging
from datetime import date
from typing import Iterable, List, Optional, Tuple

from nosh.data_layer.catalogue import Catalogue, JournalStore
from nosh.data_layer.exceptions import CyclicRecipeError, UnknownKeyError
from nosh.data_layer.models import (
    CatalogueRecord,
    FoodRecord,
    Journal,
    NutrientVector,
    Quantity,
    RecipeRecord,
    ServingDefinition,
)
from nosh.nutrition.serving_resolver import SERVING_UNIT, resolve

logger = logging.getLogger(__name__)

# Recipes are always measured in servings of their yield.
RECIPE_SERVING = ServingDefinition(unit=SERVING_UNIT, amount=1.0, reference=True)


class NutrientAggregator:
    """Computes nutrient vectors over a catalogue snapshot.

    The aggregator never mutates records; every result is a new vector.
    """

    def __init__(self, catalogue: Catalogue):
        """Initialize aggregator with the catalogue to resolve keys against.

        Args:
            catalogue: Catalogue of foods and recipes
        """
        self.catalogue = catalogue

    def nutrients_for(self, key: str, quantity: Optional[Quantity] = None) -> NutrientVector:
        """Compute nutrients for a quantity of a food or recipe.

        Args:
            key: Food or recipe key
            quantity: How much was eaten (defaults to one serving)

        Returns:
            NutrientVector for that quantity

        Raises:
            UnknownKeyError: If the key, or any ingredient key below it, is missing
            UnknownUnitError: If a quantity's unit is not declared by its record
            NonPositiveQuantityError: If a quantity is zero or negative
            CyclicRecipeError: If a recipe refers back to itself
        """
        return self._nutrients_for(key, quantity or Quantity(), ())

    def recipe_total(self, key: str) -> NutrientVector:
        """Compute nutrients for the whole batch a recipe makes."""
        record = self._lookup(key)
        if not isinstance(record, RecipeRecord):
            raise UnknownKeyError(key, kind="recipe")
        return self._recipe_total(record, ())

    def sum_all(self, pairs: Iterable[Tuple[str, Optional[Quantity]]]) -> NutrientVector:
        """Sum nutrients over (key, quantity) pairs. An empty list sums to zero."""
        total = NutrientVector.zero()
        for key, quantity in pairs:
            total = total + self.nutrients_for(key, quantity)
        return total

    def entry_nutrients(self, journal: Journal) -> List[NutrientVector]:
        """Nutrients for each journal entry, in journal order."""
        return [self.nutrients_for(entry.key, entry.quantity) for entry in journal.entries]

    def daily_total(self, day: date, journal_store: JournalStore) -> NutrientVector:
        """Total nutrients eaten on *day*.

        A day with no journal is treated as an empty day.
        """
        journal = journal_store.load_journal(day)
        if journal is None:
            logger.debug("No journal for %s, treating as empty", day)
            return NutrientVector.zero()
        return self.sum_all((entry.key, entry.quantity) for entry in journal.entries)

    def check_acyclic(self, key: str) -> None:
        """Verify the recipe graph reachable from *key* has no cycles.

        Performs a depth-first topological walk over ingredient keys. Keys
        that are not in the catalogue are ignored here; they surface as
        UnknownKeyError at aggregation time.

        Raises:
            CyclicRecipeError: Naming the first cycle found
        """
        finished = set()

        def visit(current: str, path: Tuple[str, ...]) -> None:
            if current in path:
                raise CyclicRecipeError(list(path[path.index(current):]) + [current])
            if current in finished:
                return
            record = self.catalogue.get(current)
            if isinstance(record, RecipeRecord):
                for line in record.ingredients:
                    visit(line.key, path + (current,))
            finished.add(current)

        visit(key, ())

    def _lookup(self, key: str) -> CatalogueRecord:
        record = self.catalogue.get(key)
        if record is None:
            raise UnknownKeyError(key)
        return record

    def _nutrients_for(
        self, key: str, quantity: Quantity, in_progress: Tuple[str, ...]
    ) -> NutrientVector:
        record = self._lookup(key)

        if isinstance(record, FoodRecord):
            factor = resolve(quantity, record.servings, record.reference_serving, key=key)
            return record.nutrients * factor

        factor = resolve(quantity, (RECIPE_SERVING,), RECIPE_SERVING, key=key)
        per_serving = self._recipe_total(record, in_progress) / record.servings
        return per_serving * factor

    def _recipe_total(
        self, recipe: RecipeRecord, in_progress: Tuple[str, ...]
    ) -> NutrientVector:
        if recipe.key in in_progress:
            cycle = list(in_progress[in_progress.index(recipe.key):]) + [recipe.key]
            raise CyclicRecipeError(cycle)

        chain = in_progress + (recipe.key,)
        total = NutrientVector.zero()
        for line in recipe.ingredients:
            total = total + self._nutrients_for(line.key, line.quantity, chain)
        return total
