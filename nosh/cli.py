#!/usr/bin/env python3
"""Command-line interface for the nosh nutrition tracker."""

import argparse
import logging
import shlex
import subprocess
import sys
import tempfile
from dataclasses import replace
from datetime import date
from pathlib import Path
from typing import Callable, List, Optional, TextIO

from nosh.app_logging import configure_logging
from nosh.config import ConfigLoader, NoshConfig
from nosh.data_layer.catalogue import OverlayCatalogue
from nosh.data_layer.database import Database
from nosh.data_layer.exceptions import NoshError, UnknownKeyError
from nosh.data_layer.models import Journal, JournalEntry
from nosh.data_layer.record_format import (
    check_key,
    check_text,
    parse_food,
    parse_journal,
    parse_recipe,
    serialize_food,
    serialize_journal,
    serialize_recipe,
)
from nosh.ingestion.usda_client import USDAClient
from nosh.nutrition.aggregator import NutrientAggregator
from nosh.nutrition.serving_resolver import parse_quantity
from nosh.output.formatters import (
    format_food,
    format_journal,
    format_key_list,
    format_recipe,
    format_search_results,
)

logger = logging.getLogger(__name__)

NEW_FOOD_TEMPLATE = """\
name =
reference = g
serving.g = 100
kcal = 0
carb = 0
fat = 0
protein = 0
"""

NEW_RECIPE_TEMPLATE = """\
name =
servings = 1
"""


def parse_day(text: str) -> date:
    """argparse type for YYYY-MM-DD dates."""
    try:
        return date.fromisoformat(text)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid date '{text}', expected YYYY-MM-DD")


def run_editor(editor: str, text: str, suffix: str = ".txt") -> str:
    """Open *text* in the user's editor and return the edited contents.

    Raises:
        subprocess.CalledProcessError: If the editor exits with an error
    """
    with tempfile.TemporaryDirectory() as tmp:
        path = Path(tmp) / f"nosh{suffix}"
        path.write_text(text)
        command = shlex.split(editor) + [str(path)]
        logger.debug("Running editor: %s", command)
        subprocess.run(command, check=True)
        return path.read_text()


class NoshApp:
    """Implements each command against a database."""

    def __init__(
        self,
        config: NoshConfig,
        stdout: Optional[TextIO] = None,
        stdin: Optional[TextIO] = None,
        editor: Callable[[str, str], str] = run_editor,
    ):
        self.config = config
        self.db = Database(config.data_dir)
        self.aggregator = NutrientAggregator(self.db)
        self.stdout = stdout or sys.stdout
        self.stdin = stdin or sys.stdin
        self.editor = editor

    def _print(self, text: str) -> None:
        if text:
            print(text, file=self.stdout)

    # ------------------------------------------------------------------
    # eat
    # ------------------------------------------------------------------

    def eat(self, key: str, quantity_text: Optional[str], note: Optional[str], day: date) -> None:
        """Append a serving to a day's journal, validating it first."""
        check_key(key)
        quantity = parse_quantity(quantity_text)
        self.aggregator.nutrients_for(key, quantity)
        if note is not None:
            note = check_text(note.strip(), "note") or None

        journal = self.db.load_journal(day) or Journal(day=day)
        journal = journal.append(JournalEntry(key=key, quantity=quantity, note=note))
        self.db.save_journal(journal)
        logger.info("Added %s (%s) to %s", key, quantity, day)

    # ------------------------------------------------------------------
    # food
    # ------------------------------------------------------------------

    def food_show(self, key: str) -> None:
        food = self.db.load_food(key)
        if food is None:
            raise UnknownKeyError(key, kind="food")
        self._print(format_food(food))

    def food_ls(self, term: Optional[str]) -> None:
        self._print(format_key_list([(key, food.name) for key, food in self.db.list_foods(term)]))

    def food_rm(self, key: str) -> None:
        self.db.remove_food(key)

    def food_edit(self, key: str) -> None:
        """Edit a food in the editor; nothing is saved unless it parses."""
        existing = self.db.load_food(key)
        text = serialize_food(existing) if existing else NEW_FOOD_TEMPLATE
        food = parse_food(key, self.editor(self.config.editor, text))
        self.db.save_food(food)

    def food_search(self, term: str, key: Optional[str]) -> None:
        """Search FoodData Central and save the candidate picked on stdin."""
        client = USDAClient(api_key=self.config.api_key, search_url=self.config.search_url)
        foods = client.search(term)
        if not foods:
            self._print(f"No results for '{term}'")
            return

        self._print(format_search_results(foods))
        print("Select a food number (blank to cancel): ", end="", file=self.stdout, flush=True)
        choice = self.stdin.readline().strip()
        if not choice:
            return
        if not choice.isdigit() or not 1 <= int(choice) <= len(foods):
            raise ValueError(f"Invalid selection '{choice}', expected 1-{len(foods)}")

        chosen = foods[int(choice) - 1]
        if key:
            chosen = replace(chosen, key=key)
        self.db.save_food(chosen)
        self._print(f"Saved {chosen.name} as '{chosen.key}'")

    # ------------------------------------------------------------------
    # recipe
    # ------------------------------------------------------------------

    def recipe_show(self, key: str) -> None:
        recipe = self.db.load_recipe(key)
        if recipe is None:
            raise UnknownKeyError(key, kind="recipe")
        lines = [
            self.aggregator.nutrients_for(line.key, line.quantity)
            for line in recipe.ingredients
        ]
        self._print(format_recipe(recipe, lines, self.aggregator.recipe_total(key)))

    def recipe_ls(self, term: Optional[str]) -> None:
        self._print(format_key_list([(key, r.name) for key, r in self.db.list_recipes(term)]))

    def recipe_rm(self, key: str) -> None:
        self.db.remove_recipe(key)

    def recipe_edit(self, key: str) -> None:
        """Edit a recipe; it is saved only if it parses and its totals compute."""
        existing = self.db.load_recipe(key)
        text = serialize_recipe(existing) if existing else NEW_RECIPE_TEMPLATE
        recipe = parse_recipe(key, self.editor(self.config.editor, text))

        pending = NutrientAggregator(OverlayCatalogue(self.db, [recipe]))
        pending.check_acyclic(key)
        pending.recipe_total(key)
        self.db.save_recipe(recipe)

    # ------------------------------------------------------------------
    # journal
    # ------------------------------------------------------------------

    def journal_show(self, day: date) -> None:
        journal = self.db.load_journal(day) or Journal(day=day)
        entries = self.aggregator.entry_nutrients(journal)
        total = self.aggregator.daily_total(day, self.db)
        self._print(format_journal(journal, entries, total))

    def journal_edit(self, day: date) -> None:
        """Edit a day's journal; every entry must resolve before it is saved."""
        existing = self.db.load_journal(day)
        text = serialize_journal(existing) if existing else ""
        journal = parse_journal(day, self.editor(self.config.editor, text))
        self.aggregator.entry_nutrients(journal)
        self.db.save_journal(journal)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="nosh",
        description="Track foods, recipes and what you eat each day"
    )
    parser.add_argument(
        "--config",
        type=str,
        help="Path to YAML config file (default: $XDG_CONFIG_HOME/nosh/config.yaml)"
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging"
    )
    commands = parser.add_subparsers(dest="command", required=True)

    eat = commands.add_parser("eat", help="Add a serving of a food or recipe to a journal")
    eat.add_argument("key", help="Food or recipe key")
    eat.add_argument("quantity", nargs="?", help="Quantity such as 2, 150g or '0.5 cup' (default: 1)")
    eat.add_argument("--note", help="Note to store with the entry")
    eat.add_argument("--date", type=parse_day, default=None, help="Day to add to (default: today)")

    food = commands.add_parser("food", help="Manage foods").add_subparsers(dest="action", required=True)
    food.add_parser("show", help="Show a food").add_argument("key")
    food.add_parser("ls", help="List foods").add_argument("term", nargs="?")
    food.add_parser("rm", help="Remove a food").add_argument("key")
    food.add_parser("edit", help="Create or edit a food in $EDITOR").add_argument("key")
    search = food.add_parser("search", help="Search FoodData Central and save a result")
    search.add_argument("term")
    search.add_argument("--key", help="Key to save the chosen food under")

    recipe = commands.add_parser("recipe", help="Manage recipes").add_subparsers(dest="action", required=True)
    recipe.add_parser("show", help="Show a recipe").add_argument("key")
    recipe.add_parser("ls", help="List recipes").add_argument("term", nargs="?")
    recipe.add_parser("rm", help="Remove a recipe").add_argument("key")
    recipe.add_parser("edit", help="Create or edit a recipe in $EDITOR").add_argument("key")

    journal = commands.add_parser("journal", help="Show or edit a day's journal").add_subparsers(
        dest="action", required=True
    )
    for name, help_text in (("show", "Show a day's totals"), ("edit", "Edit a day in $EDITOR")):
        sub = journal.add_parser(name, help=help_text)
        sub.add_argument("date", nargs="?", type=parse_day, default=None, help="YYYY-MM-DD (default: today)")

    return parser


def dispatch(app: NoshApp, args: argparse.Namespace) -> None:
    if args.command == "eat":
        app.eat(args.key, args.quantity, args.note, args.date or date.today())
    elif args.command == "food":
        if args.action == "show":
            app.food_show(args.key)
        elif args.action == "ls":
            app.food_ls(args.term)
        elif args.action == "rm":
            app.food_rm(args.key)
        elif args.action == "edit":
            app.food_edit(args.key)
        elif args.action == "search":
            app.food_search(args.term, args.key)
    elif args.command == "recipe":
        if args.action == "show":
            app.recipe_show(args.key)
        elif args.action == "ls":
            app.recipe_ls(args.term)
        elif args.action == "rm":
            app.recipe_rm(args.key)
        elif args.action == "edit":
            app.recipe_edit(args.key)
    elif args.command == "journal":
        day = args.date or date.today()
        if args.action == "show":
            app.journal_show(day)
        elif args.action == "edit":
            app.journal_edit(day)


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    args = build_parser().parse_args(argv)

    try:
        config = ConfigLoader(args.config).load()
        configure_logging("DEBUG" if args.verbose else config.log_level)
    except (OSError, ValueError) as e:
        print(f"Error: failed to load config: {e}", file=sys.stderr)
        return 1

    try:
        dispatch(NoshApp(config), args)
    except NoshError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except subprocess.CalledProcessError as e:
        print(f"Error: editor exited with status {e.returncode}", file=sys.stderr)
        return 1
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
