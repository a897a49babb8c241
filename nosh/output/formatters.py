"""Plain-text table formatting for foods, recipes and journals."""

from typing import List, Optional, Sequence, Tuple

from nosh.data_layer.models import (
    FoodRecord,
    Journal,
    Nutrient,
    NutrientVector,
    RecipeRecord,
)

NUTRIENT_COLUMNS = [
    (Nutrient.KCAL, "kcal"),
    (Nutrient.CARB, "carb (g)"),
    (Nutrient.FAT, "fat (g)"),
    (Nutrient.PROTEIN, "protein (g)"),
    (Nutrient.FIBER, "fiber (g)"),
    (Nutrient.SODIUM, "sodium (mg)"),
]


def format_amount(amount: float) -> str:
    """Format a nutrient amount with one decimal place."""
    return f"{amount:.1f}"


def format_table(header: Sequence[str], rows: Sequence[Sequence[str]]) -> str:
    """Render rows as an aligned text table.

    The first column is left aligned (labels), the rest right aligned (numbers).
    """
    widths = [len(h) for h in header]
    for row in rows:
        for idx, cell in enumerate(row):
            widths[idx] = max(widths[idx], len(cell))

    def render(cells: Sequence[str]) -> str:
        parts = []
        for idx, cell in enumerate(cells):
            if idx == 0:
                parts.append(cell.ljust(widths[idx]))
            else:
                parts.append(cell.rjust(widths[idx]))
        return "  ".join(parts).rstrip()

    lines = [render(header), "  ".join("-" * w for w in widths)]
    lines.extend(render(row) for row in rows)
    return "\n".join(lines)


def format_nutrient_table(
    rows: Sequence[Tuple[str, NutrientVector]],
    total: Optional[NutrientVector] = None,
    label: str = "",
) -> str:
    """Format labelled nutrient vectors, with an optional total row."""
    header = [label] + [title for _, title in NUTRIENT_COLUMNS]
    body: List[List[str]] = [
        [name] + [format_amount(vector[n]) for n, _ in NUTRIENT_COLUMNS]
        for name, vector in rows
    ]
    if total is not None:
        body.append(["total"] + [format_amount(total[n]) for n, _ in NUTRIENT_COLUMNS])
    return format_table(header, body)


def format_food(food: FoodRecord) -> str:
    """Format a food's servings and per-serving nutrients.

    The reference serving is marked with ``*``.
    """
    lines = [f"{food.name} ({food.key})", "", "Servings:"]
    for serving in food.servings:
        marker = " *" if serving.reference else ""
        lines.append(f"  1 {serving.unit} = {serving.amount:g}{marker}")
    lines.append("")
    reference = food.reference_serving
    lines.append(
        format_nutrient_table([(f"per {reference.unit}", food.nutrients)], label="serving")
    )
    return "\n".join(lines)


def format_recipe(
    recipe: RecipeRecord,
    ingredient_nutrients: Sequence[NutrientVector],
    total: NutrientVector,
) -> str:
    """Format a recipe's ingredient lines, batch total and per-serving values."""
    rows = [
        (f"{line.key} ({line.quantity})", nutrients)
        for line, nutrients in zip(recipe.ingredients, ingredient_nutrients)
    ]
    lines = [
        f"{recipe.name} ({recipe.key}), makes {recipe.servings:g} servings",
        "",
        format_nutrient_table(rows, total=total, label="ingredient"),
        "",
        format_nutrient_table(
            [("per serving", total / recipe.servings)], label="serving"
        ),
    ]
    return "\n".join(lines)


def format_journal(
    journal: Journal,
    entry_nutrients: Sequence[NutrientVector],
    total: NutrientVector,
) -> str:
    """Format a day's entries with a total row."""
    rows = []
    for entry, nutrients in zip(journal.entries, entry_nutrients):
        label = f"{entry.key} ({entry.quantity})"
        if entry.note:
            label += f" # {entry.note}"
        rows.append((label, nutrients))
    return "\n".join([
        journal.day.isoformat(),
        "",
        format_nutrient_table(rows, total=total, label="food"),
    ])


def format_search_results(foods: Sequence[FoodRecord]) -> str:
    """Format numbered search candidates for selection."""
    lines = []
    for idx, food in enumerate(foods, 1):
        nutrients = food.nutrients
        lines.append(
            f"{idx}. {food.name} "
            f"[{format_amount(nutrients[Nutrient.KCAL])} kcal per "
            f"{food.reference_serving.unit}]"
        )
    return "\n".join(lines)


def format_key_list(keys: Sequence[Tuple[str, str]]) -> str:
    """Format (key, name) pairs one per line."""
    if not keys:
        return ""
    width = max(len(key) for key, _ in keys)
    return "\n".join(f"{key.ljust(width)}  {name}" for key, name in keys)
