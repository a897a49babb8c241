"""Plain-text format for food, recipe and journal records.

Records are line oriented ``key = value`` text so they are easy to edit by
hand. Blank lines and ``#`` comment lines are ignored.

Food::

    name = Banana
    reference = medium
    serving.medium = 118
    serving.g = 1
    kcal = 105
    carb = 27

Recipe::

    name = Smoothie
    servings = 2
    banana = 2 medium
    milk = 1 cup

Journal (one file per day)::

    banana = 2 medium
    oats = 0.5 cup # with honey
    coffee

Parsing validates everything a record needs before it can be used for
aggregation, so a malformed record never makes it past this module.
Serializing refuses keys, names and notes that could not be read back
(reserved or multi-word keys, multi-line or padded text), so serializing
and parsing again always yields an equal record.
"""

import logging
import math
from datetime import date
from decimal import Decimal
from typing import Dict, Iterator, List, Optional, Tuple

from nosh.data_layer.exceptions import ParseError
from nosh.data_layer.models import (
    FoodRecord,
    IngredientLine,
    Journal,
    JournalEntry,
    Nutrient,
    NutrientVector,
    Quantity,
    RecipeRecord,
    ServingDefinition,
)
from nosh.nutrition.serving_resolver import parse_quantity

logger = logging.getLogger(__name__)

SERVING_PREFIX = "serving."

# Recipe fields that would be read back as something other than an ingredient.
RESERVED_KEYS = frozenset({"name", "servings"})

_FORBIDDEN_KEY_CHARS = frozenset("#=/\\")


def check_key(key: str, field: str = "key", line: Optional[int] = None) -> str:
    """Validate a food or recipe key so it can be written and read back unchanged.

    Keys are single words without ``#``, ``=`` or path separators, and may
    not be one of the reserved recipe fields.

    Raises:
        ParseError: If the key is empty, reserved or contains forbidden characters
    """
    if not key:
        raise ParseError(field=field, reason="key cannot be empty", line=line)
    if key in RESERVED_KEYS:
        raise ParseError(field=field, reason="key is reserved", value=key, line=line)
    if any(c.isspace() or c in _FORBIDDEN_KEY_CHARS for c in key):
        raise ParseError(
            field=field,
            reason="key cannot contain whitespace, '#', '=' or path separators",
            value=key,
            line=line
        )
    return key


def check_text(value: str, field: str) -> str:
    """Validate a name or note: one line with no surrounding whitespace.

    Raises:
        ParseError: If the text would not survive serialization unchanged
    """
    if "\n" in value or "\r" in value:
        raise ParseError(field=field, reason="must be a single line", value=repr(value))
    if value != value.strip():
        raise ParseError(field=field, reason="cannot start or end with whitespace", value=repr(value))
    return value


def format_number(value: float) -> str:
    """Format a float so that ``float(format_number(x)) == x``, without a trailing ".0"."""
    value = float(value)
    if value.is_integer():
        return str(int(value))
    # repr is the shortest exact form; Decimal drops any exponent notation.
    return format(Decimal(repr(value)), "f")


def _lines(text: str) -> Iterator[Tuple[int, str]]:
    """Yield (line number, stripped line) for non-blank, non-comment lines."""
    for number, raw in enumerate(text.splitlines(), start=1):
        line = raw.strip()
        if not line or line.startswith("#"):
            continue
        yield number, line


def _split(line: str, number: int, field: str) -> Tuple[str, str]:
    if "=" not in line:
        raise ParseError(field=field, reason="expected 'key = value'", value=line, line=number)
    key, value = line.split("=", 1)
    return key.strip(), value.strip()


def _parse_float(value: str, field: str, number: int) -> float:
    try:
        number_value = float(value)
    except ValueError:
        raise ParseError(field=field, reason="expected a number", value=value, line=number)
    if not math.isfinite(number_value):
        raise ParseError(field=field, reason="expected a finite number", value=value, line=number)
    return number_value


def _parse_line_quantity(value: str, number: int) -> Quantity:
    try:
        return parse_quantity(value)
    except ParseError as e:
        raise ParseError(field=e.field, reason=e.reason, value=e.value, line=number) from e


# ============================================================================
# FOOD
# ============================================================================

def parse_food(key: str, text: str) -> FoodRecord:
    """Parse food record text.

    If ``kcal`` is omitted it is derived from the macronutrients using the
    Atwater general factors (4 kcal/g carb and protein, 9 kcal/g fat). If
    ``reference`` is omitted, a single declared serving is the reference.

    Raises:
        ParseError: On malformed lines, duplicate serving units, a missing
            or unknown reference serving, or negative nutrient amounts
    """
    check_key(key)
    name = ""
    reference: Optional[str] = None
    servings: Dict[str, float] = {}
    amounts: Dict[Nutrient, float] = {}

    for number, line in _lines(text):
        logger.debug("Parsing food line: %s", line)
        field, value = _split(line, number, field="food")

        if field == "name":
            name = value
        elif field == "reference":
            reference = value
        elif field.startswith(SERVING_PREFIX):
            unit = field[len(SERVING_PREFIX):].strip()
            if not unit:
                raise ParseError(field="serving", reason="missing unit name", value=line, line=number)
            if unit in servings:
                raise ParseError(field="serving", reason="duplicate serving unit", value=unit, line=number)
            amount = _parse_float(value, field, number)
            if amount <= 0:
                raise ParseError(field=field, reason="serving amount must be positive", value=value, line=number)
            servings[unit] = amount
        else:
            nutrient = Nutrient.from_key(field)
            if nutrient is None:
                raise ParseError(field=field, reason="unknown food key", line=number)
            amount = _parse_float(value, field, number)
            if amount < 0:
                raise ParseError(field=field, reason="nutrient amounts must be non-negative", value=value, line=number)
            amounts[nutrient] = amount

    if not servings:
        raise ParseError(field="serving", reason="at least one serving must be declared")

    if reference is None:
        if len(servings) != 1:
            raise ParseError(
                field="reference",
                reason="exactly one reference serving is required when several servings are declared"
            )
        reference = next(iter(servings))
    elif reference not in servings:
        raise ParseError(field="reference", reason="not a declared serving unit", value=reference)

    if Nutrient.KCAL not in amounts:
        amounts[Nutrient.KCAL] = (
            amounts.get(Nutrient.CARB, 0.0) * 4.0
            + amounts.get(Nutrient.PROTEIN, 0.0) * 4.0
            + amounts.get(Nutrient.FAT, 0.0) * 9.0
        )

    return FoodRecord(
        key=key,
        name=name,
        servings=tuple(
            ServingDefinition(unit=unit, amount=amount, reference=(unit == reference))
            for unit, amount in servings.items()
        ),
        nutrients=NutrientVector(amounts),
    )


def serialize_food(food: FoodRecord) -> str:
    """Serialize a food record to text. Every nutrient is written explicitly."""
    check_key(food.key)
    lines = [
        f"name = {check_text(food.name, 'name')}",
        f"reference = {food.reference_serving.unit}",
    ]
    for serving in food.servings:
        lines.append(f"{SERVING_PREFIX}{serving.unit} = {format_number(serving.amount)}")
    for nutrient, amount in food.nutrients.items():
        lines.append(f"{nutrient.value} = {format_number(amount)}")
    return "\n".join(lines) + "\n"


# ============================================================================
# RECIPE
# ============================================================================

def parse_recipe(key: str, text: str) -> RecipeRecord:
    """Parse recipe record text.

    ``name`` and ``servings`` are reserved; every other line is an
    ingredient. A bare key is one serving of that food or recipe.

    Raises:
        ParseError: On malformed quantities, a non-positive yield or an
            empty ingredient list
    """
    check_key(key)
    name = ""
    yield_servings = 1.0
    ingredients: List[IngredientLine] = []

    for number, line in _lines(text):
        logger.debug("Parsing recipe line: %s", line)
        if "=" not in line:
            ingredients.append(IngredientLine(key=check_key(line, "ingredient", number)))
            continue

        field, value = _split(line, number, field="recipe")
        if field == "name":
            name = value
        elif field == "servings":
            yield_servings = _parse_float(value, field, number)
            if yield_servings <= 0:
                raise ParseError(field="servings", reason="recipe yield must be positive", value=value, line=number)
        else:
            check_key(field, "ingredient", number)
            ingredients.append(IngredientLine(key=field, quantity=_parse_line_quantity(value, number)))

    if not ingredients:
        raise ParseError(field="ingredients", reason="a recipe needs at least one ingredient")

    return RecipeRecord(
        key=key,
        name=name,
        ingredients=tuple(ingredients),
        servings=yield_servings,
    )


def serialize_recipe(recipe: RecipeRecord) -> str:
    check_key(recipe.key)
    lines = [f"name = {check_text(recipe.name, 'name')}", f"servings = {format_number(recipe.servings)}"]
    for line in recipe.ingredients:
        check_key(line.key, "ingredient")
        lines.append(f"{line.key} = {_format_quantity(line.quantity)}")
    return "\n".join(lines) + "\n"


# ============================================================================
# JOURNAL
# ============================================================================

def parse_journal(day: date, text: str) -> Journal:
    """Parse a day's journal. Text after ``#`` on an entry line is its note."""
    entries: List[JournalEntry] = []

    for number, line in _lines(text):
        logger.debug("Parsing journal line: %s", line)
        note: Optional[str] = None
        if "#" in line:
            line, note = line.split("#", 1)
            line = line.strip()
            note = note.strip() or None

        if "=" in line:
            key, value = _split(line, number, field="journal")
            quantity = _parse_line_quantity(value, number)
        else:
            key, quantity = line, Quantity()

        check_key(key, "journal", number)
        entries.append(JournalEntry(key=key, quantity=quantity, note=note))

    return Journal(day=day, entries=tuple(entries))


def serialize_journal(journal: Journal) -> str:
    lines = []
    for entry in journal.entries:
        check_key(entry.key, "journal")
        if entry.quantity.unit is not None and "#" in entry.quantity.unit:
            raise ParseError(field="unit", reason="cannot contain '#' in a journal", value=entry.quantity.unit)
        line = f"{entry.key} = {_format_quantity(entry.quantity)}"
        if entry.note is not None:
            if not entry.note:
                raise ParseError(field="note", reason="cannot be empty")
            line += f" # {check_text(entry.note, 'note')}"
        lines.append(line)
    return "\n".join(lines) + ("\n" if lines else "")


def _format_quantity(quantity: Quantity) -> str:
    amount = format_number(quantity.amount)
    if quantity.unit is None:
        return amount
    return f"{amount} {quantity.unit}"
