"""Quantity parsing and resolution against a record's serving definitions.

Resolution turns a quantity such as "2 medium" or "150 g" into a scale
factor: how many reference servings the quantity is. Only the servings a
record declares are used. There is no built-in unit table, so "cup" never
silently becomes grams unless the record says how many grams a cup is.
"""

import re
from typing import Iterable, List, Optional, Sequence

from nosh.data_layer.exceptions import (
    AmbiguousUnitError,
    NonPositiveQuantityError,
    ParseError,
    UnknownUnitError,
)
from nosh.data_layer.models import Quantity, ServingDefinition

# The implicit unit every record understands as "one reference serving".
SERVING_UNIT = "serving"

_QUANTITY_PATTERN = re.compile(r"^(\d+(?:\.\d*)?|\.\d+)\s*(.*)$")


def parse_quantity(text: Optional[str]) -> Quantity:
    """Parse "1.5", "1.5c", "1.5 cups" or "25 g dry" into a Quantity.

    An empty or missing quantity means one serving.

    Raises:
        ParseError: If the text does not start with a number
    """
    if text is None or not text.strip():
        return Quantity()

    text = text.strip()
    match = _QUANTITY_PATTERN.match(text)
    if match is None:
        raise ParseError(
            field="quantity",
            reason="expected a number optionally followed by a unit",
            value=text
        )

    amount = float(match.group(1))
    unit = match.group(2).strip() or None
    return Quantity(amount=amount, unit=unit)


def match_serving(
    unit: str, servings: Sequence[ServingDefinition]
) -> Optional[ServingDefinition]:
    """Find the serving definition a unit refers to.

    Exact names win. Otherwise the unit may abbreviate exactly one declared
    name ("c" for "cups"), or be the plural of one ("slices" for "slice").

    Returns:
        The matching ServingDefinition, or None if nothing matches

    Raises:
        AmbiguousUnitError: If the unit abbreviates several declared names
    """
    for serving in servings:
        if serving.unit == unit:
            return serving

    prefixed: List[ServingDefinition] = [s for s in servings if s.unit.startswith(unit)]
    if len(prefixed) > 1:
        raise AmbiguousUnitError(unit, [s.unit for s in prefixed])
    if prefixed:
        return prefixed[0]

    if unit.endswith("s"):
        singular = unit[:-1]
        for serving in servings:
            if serving.unit == singular:
                return serving

    return None


def resolve(
    quantity: Quantity,
    servings: Iterable[ServingDefinition],
    reference_serving: ServingDefinition,
    key: Optional[str] = None,
) -> float:
    """Return how many reference servings ``quantity`` amounts to.

    Args:
        quantity: Amount and unit to resolve
        servings: Serving definitions declared by the record
        reference_serving: The serving the record's nutrients are measured per
        key: Record key, used only for error messages

    Raises:
        NonPositiveQuantityError: If the amount is zero or negative
        UnknownUnitError: If the unit matches no declared serving
        AmbiguousUnitError: If an abbreviated unit matches several servings
    """
    if quantity.amount <= 0:
        raise NonPositiveQuantityError(quantity.amount)

    if quantity.unit is None:
        return quantity.amount

    servings = list(servings)
    if quantity.unit in (SERVING_UNIT, SERVING_UNIT + "s"):
        # A declared "serving" is honoured; otherwise it is the reference
        # serving, never a prefix match such as "serving_large".
        declared = [s for s in servings if s.unit in (quantity.unit, SERVING_UNIT)]
        if not declared:
            return quantity.amount
        exact = [s for s in declared if s.unit == quantity.unit]
        serving = (exact or declared)[0]
        return quantity.amount * serving.amount / reference_serving.amount

    serving = match_serving(quantity.unit, servings)
    if serving is None:
        raise UnknownUnitError(
            quantity.unit,
            supported_units=[s.unit for s in servings],
            key=key
        )

    return quantity.amount * serving.amount / reference_serving.amount
