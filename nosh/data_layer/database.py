"""File-backed database of foods, recipes and journals.

All data is stored as text files under a root directory::

    $root/            (typically $XDG_DATA_HOME/nosh)
        food/
            banana.txt
            oats.txt
        recipe/
            smoothie.txt
        journal/
            2024/
                07/
                    01.txt
                    02.txt
"""

import logging
from datetime import date
from pathlib import Path
from typing import Iterator, Optional, Tuple

from nosh.data_layer.catalogue import Catalogue, JournalStore
from nosh.data_layer.exceptions import UnknownKeyError
from nosh.data_layer.models import CatalogueRecord, FoodRecord, Journal, RecipeRecord
from nosh.data_layer.record_format import (
    parse_food,
    parse_journal,
    parse_recipe,
    serialize_food,
    serialize_journal,
    serialize_recipe,
)

logger = logging.getLogger(__name__)

FOOD_DIR = "food"
RECIPE_DIR = "recipe"
JOURNAL_DIR = "journal"
EXTENSION = ".txt"


class Database(Catalogue, JournalStore):
    """Database for records stored as text files under a root directory."""

    def __init__(self, root: str):
        """Initialize database at the given root directory.

        The directory is created lazily on first save.

        Args:
            root: Path to the data directory
        """
        self.root = Path(root)

    # ------------------------------------------------------------------
    # Paths
    # ------------------------------------------------------------------

    def food_path(self, key: str) -> Path:
        return self.root / FOOD_DIR / f"{key}{EXTENSION}"

    def recipe_path(self, key: str) -> Path:
        return self.root / RECIPE_DIR / f"{key}{EXTENSION}"

    def journal_path(self, day: date) -> Path:
        return (
            self.root / JOURNAL_DIR
            / f"{day.year:04}" / f"{day.month:02}" / f"{day.day:02}{EXTENSION}"
        )

    # ------------------------------------------------------------------
    # Catalogue / JournalStore interface
    # ------------------------------------------------------------------

    def get(self, key: str) -> Optional[CatalogueRecord]:
        food = self.load_food(key)
        if food is not None:
            return food
        return self.load_recipe(key)

    def load_journal(self, day: date) -> Optional[Journal]:
        text = self._read(self.journal_path(day))
        if text is None:
            return None
        return parse_journal(day, text)

    # ------------------------------------------------------------------
    # Foods
    # ------------------------------------------------------------------

    def load_food(self, key: str) -> Optional[FoodRecord]:
        """Load a food by key, or return None if it does not exist.

        Raises:
            ParseError: If the file exists but is malformed
        """
        text = self._read(self.food_path(key))
        if text is None:
            return None
        return parse_food(key, text)

    def save_food(self, food: FoodRecord) -> None:
        self._write(self.food_path(food.key), serialize_food(food))

    def remove_food(self, key: str) -> None:
        self._remove(self.food_path(key), key, kind="food")

    def list_foods(self, term: Optional[str] = None) -> Iterator[Tuple[str, FoodRecord]]:
        """Yield (key, food) sorted by key, optionally only keys containing *term*."""
        for key in self._keys(FOOD_DIR, term):
            yield key, parse_food(key, self.food_path(key).read_text())

    # ------------------------------------------------------------------
    # Recipes
    # ------------------------------------------------------------------

    def load_recipe(self, key: str) -> Optional[RecipeRecord]:
        text = self._read(self.recipe_path(key))
        if text is None:
            return None
        return parse_recipe(key, text)

    def save_recipe(self, recipe: RecipeRecord) -> None:
        self._write(self.recipe_path(recipe.key), serialize_recipe(recipe))

    def remove_recipe(self, key: str) -> None:
        self._remove(self.recipe_path(key), key, kind="recipe")

    def list_recipes(self, term: Optional[str] = None) -> Iterator[Tuple[str, RecipeRecord]]:
        for key in self._keys(RECIPE_DIR, term):
            yield key, parse_recipe(key, self.recipe_path(key).read_text())

    # ------------------------------------------------------------------
    # Journals
    # ------------------------------------------------------------------

    def save_journal(self, journal: Journal) -> None:
        self._write(self.journal_path(journal.day), serialize_journal(journal))

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _read(self, path: Path) -> Optional[str]:
        logger.debug("Loading %s", path)
        try:
            return path.read_text()
        except FileNotFoundError:
            return None

    def _write(self, path: Path, text: str) -> None:
        logger.debug("Saving %s", path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text)

    def _remove(self, path: Path, key: str, kind: str) -> None:
        logger.debug("Removing %s", path)
        try:
            path.unlink()
        except FileNotFoundError:
            raise UnknownKeyError(key, kind=kind)

    def _keys(self, directory: str, term: Optional[str]) -> Iterator[str]:
        root = self.root / directory
        if not root.is_dir():
            return
        for path in sorted(root.glob(f"*{EXTENSION}")):
            key = path.stem
            if term and term not in key:
                continue
            yield key
