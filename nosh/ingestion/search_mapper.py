"""Mapping from FoodData Central search results to food records.

Search hits report nutrients as a list of ``{"nutrientId", "value"}``
objects. Several ids can carry the same quantity (energy is reported
under Atwater specific, Atwater general or plain energy depending on the
data type), so each nutrient lists its ids in order of preference and the
first one present wins. Missing nutrients default to zero.
"""

import logging
import re
from typing import Any, Dict, List, Mapping, Optional, Sequence

from nosh.data_layer.models import FoodRecord, Nutrient, NutrientVector, ServingDefinition
from nosh.nutrition.serving_resolver import SERVING_UNIT

logger = logging.getLogger(__name__)

# ============================================================================
# FDC NUTRIENT ID PREFERENCES
# ============================================================================

FDC_NUTRIENT_IDS: Dict[Nutrient, Sequence[int]] = {
    Nutrient.PROTEIN: (1003,),        # Protein
    Nutrient.FAT: (1004,),            # Total lipid (fat)
    Nutrient.CARB: (1005, 1050),      # Carbohydrate, by difference / by summation
    Nutrient.KCAL: (2048, 2047, 1008),  # Energy (Atwater specific / general) / Energy
    Nutrient.FIBER: (1079,),          # Fiber, total dietary
    Nutrient.SODIUM: (1093,),         # Sodium, Na
}

# Foundation foods carry no portion data; FDC documents their values per 100 g.
DEFAULT_SERVING_GRAMS = 100.0


def search_key(description: str) -> str:
    """Derive a record key from a search description ("Flour, potato" -> "flour_potato")."""
    key = re.sub(r"[^a-z0-9]+", "_", description.lower()).strip("_")
    return key or "food"


def _nutrient_values(food: Mapping[str, Any]) -> Dict[int, float]:
    values: Dict[int, float] = {}
    for nutrient in food.get("foodNutrients") or []:
        nutrient_id = nutrient.get("nutrientId")
        value = nutrient.get("value")
        if nutrient_id is None or value is None:
            continue
        values.setdefault(int(nutrient_id), float(value))
    return values


def map_nutrients(food: Mapping[str, Any]) -> NutrientVector:
    """Pick each nutrient's preferred FDC value from a search hit."""
    values = _nutrient_values(food)
    amounts: Dict[Nutrient, float] = {}
    for nutrient, ids in FDC_NUTRIENT_IDS.items():
        for nutrient_id in ids:
            if nutrient_id in values:
                # FDC occasionally reports tiny negative residues for computed values.
                amounts[nutrient] = max(values[nutrient_id], 0.0)
                break
    return NutrientVector(amounts)


def map_servings(food: Mapping[str, Any]) -> List[ServingDefinition]:
    """Build serving definitions from a search hit's serving fields.

    The reference serving is named ``serving``. Its amount is
    ``servingSize`` in ``servingSizeUnit``, and that unit is declared too
    so quantities like "50 g" resolve. A household serving such as
    "1 cup" becomes its own unit worth the same reference amount.
    """
    size = food.get("servingSize")
    unit = food.get("servingSizeUnit")

    if size is None or not unit or float(size) <= 0:
        return [
            ServingDefinition(unit=SERVING_UNIT, amount=DEFAULT_SERVING_GRAMS, reference=True),
            ServingDefinition(unit="g", amount=1.0),
        ]

    size = float(size)
    servings = [ServingDefinition(unit=SERVING_UNIT, amount=size, reference=True)]
    if unit != SERVING_UNIT:
        servings.append(ServingDefinition(unit=unit, amount=1.0))

    household = food.get("householdServingFullText")
    if household:
        household_serving = _parse_household(household, size)
        if household_serving is None:
            logger.warning("Failed to parse household serving: %s", household)
        elif any(s.unit == household_serving.unit for s in servings):
            logger.warning("Skipping household serving that repeats a unit: %s", household)
        else:
            servings.append(household_serving)

    return servings


def _parse_household(text: str, reference_amount: float) -> Optional[ServingDefinition]:
    parts = text.strip().split(None, 1)
    if len(parts) != 2:
        return None
    count, unit = parts
    try:
        count_value = float(count)
    except ValueError:
        return None
    if count_value <= 0:
        return None
    return ServingDefinition(unit=unit.strip(), amount=reference_amount / count_value)


def food_from_search_result(food: Mapping[str, Any], key: Optional[str] = None) -> FoodRecord:
    """Convert one FoodData Central search hit into a FoodRecord.

    Args:
        food: A single entry of the search response's ``foods`` list
        key: Key to store the record under (derived from the description if omitted)
    """
    description = " ".join((food.get("description") or "").split())
    return FoodRecord(
        key=key or search_key(description),
        name=description,
        servings=tuple(map_servings(food)),
        nutrients=map_nutrients(food),
    )
