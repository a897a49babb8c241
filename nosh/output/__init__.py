"""Output formatting for foods, recipes and journals."""

from nosh.output.formatters import (
    format_food,
    format_recipe,
    format_journal,
    format_search_results,
    format_key_list
)

__all__ = [
    "format_food",
    "format_recipe",
    "format_journal",
    "format_search_results",
    "format_key_list"
]
