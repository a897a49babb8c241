"""Ingestion of foods from the FoodData Central search API."""

from nosh.ingestion.usda_client import (
    USDAClient,
    DEFAULT_API_KEY,
    DEFAULT_SEARCH_URL,
)

from nosh.ingestion.search_mapper import (
    food_from_search_result,
    map_nutrients,
    map_servings,
    search_key,
    FDC_NUTRIENT_IDS,
    DEFAULT_SERVING_GRAMS,
)

__all__ = [
    # FoodData Central client
    "USDAClient",
    "DEFAULT_API_KEY",
    "DEFAULT_SEARCH_URL",
    # Search result mapping
    "food_from_search_result",
    "map_nutrients",
    "map_servings",
    "search_key",
    "FDC_NUTRIENT_IDS",
    "DEFAULT_SERVING_GRAMS",
]
