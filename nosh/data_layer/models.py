"""Data models for foods, recipes and journals."""
import math
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Dict, Iterator, Mapping, Optional, Tuple, Union


class Nutrient(Enum):
    """Closed set of nutrients a record can declare.

    Values double as the keys used in record text files.
    """

    KCAL = "kcal"
    CARB = "carb"
    FAT = "fat"
    PROTEIN = "protein"
    FIBER = "fiber"
    SODIUM = "sodium"

    @property
    def unit(self) -> str:
        """Unit the amount is measured in."""
        if self is Nutrient.KCAL:
            return "kcal"
        if self is Nutrient.SODIUM:
            return "mg"
        return "g"

    @classmethod
    def from_key(cls, key: str) -> Optional["Nutrient"]:
        """Return the nutrient for a text key, or None if unrecognized."""
        for nutrient in cls:
            if nutrient.value == key:
                return nutrient
        return None


class NutrientVector:
    """Immutable nutrient amounts with componentwise arithmetic.

    Nutrients that were never set read as 0.0. Amounts are never negative.
    """

    __slots__ = ("_amounts",)

    def __init__(self, amounts: Optional[Mapping[Nutrient, float]] = None):
        cleaned: Dict[Nutrient, float] = {}
        for nutrient, amount in (amounts or {}).items():
            amount = float(amount)
            if amount < 0 or math.isnan(amount):
                raise ValueError(
                    f"Nutrient amount for '{nutrient.value}' must be non-negative, got {amount}"
                )
            cleaned[nutrient] = amount
        self._amounts = cleaned

    @classmethod
    def zero(cls) -> "NutrientVector":
        return cls()

    @classmethod
    def of(cls, **amounts: float) -> "NutrientVector":
        """Build a vector from keyword text keys, e.g. ``of(kcal=105, carb=27)``."""
        return cls({Nutrient(key): value for key, value in amounts.items()})

    def __getitem__(self, nutrient: Nutrient) -> float:
        return self._amounts.get(nutrient, 0.0)

    def __iter__(self) -> Iterator[Nutrient]:
        return iter(Nutrient)

    def items(self) -> Iterator[Tuple[Nutrient, float]]:
        """Yield every nutrient in enumeration order with its amount."""
        for nutrient in Nutrient:
            yield nutrient, self[nutrient]

    def __add__(self, other: "NutrientVector") -> "NutrientVector":
        if not isinstance(other, NutrientVector):
            return NotImplemented
        return NutrientVector({n: self[n] + other[n] for n in Nutrient})

    def __radd__(self, other):
        # Lets the builtin sum() start from 0.
        if other == 0:
            return self
        return NotImplemented

    def __mul__(self, factor: float) -> "NutrientVector":
        if factor < 0:
            raise ValueError(f"Cannot scale nutrients by a negative factor: {factor}")
        return NutrientVector({n: self[n] * factor for n in Nutrient})

    __rmul__ = __mul__

    def __truediv__(self, divisor: float) -> "NutrientVector":
        if divisor <= 0:
            raise ValueError(f"Cannot divide nutrients by a non-positive value: {divisor}")
        return NutrientVector({n: self[n] / divisor for n in Nutrient})

    def __eq__(self, other) -> bool:
        if not isinstance(other, NutrientVector):
            return NotImplemented
        return all(self[n] == other[n] for n in Nutrient)

    def __hash__(self) -> int:
        return hash(tuple(self[n] for n in Nutrient))

    def is_close(self, other: "NutrientVector", tolerance: float = 1e-9) -> bool:
        """Compare two vectors allowing for floating point summation error."""
        return all(
            math.isclose(self[n], other[n], rel_tol=tolerance, abs_tol=tolerance)
            for n in Nutrient
        )

    def __repr__(self) -> str:
        inner = ", ".join(f"{n.value}={self[n]:g}" for n in Nutrient if self[n])
        return f"NutrientVector({inner})"


@dataclass(frozen=True)
class ServingDefinition:
    """A named unit and how much of the reference unit (g or ml) one of it is.

    For example ``ServingDefinition("cup", 240.0)`` says one cup is 240 g.
    """

    unit: str
    amount: float
    reference: bool = False


@dataclass(frozen=True)
class Quantity:
    """An amount of some unit. A unit of None means a count of servings."""

    amount: float = 1.0
    unit: Optional[str] = None

    def __str__(self) -> str:
        amount = f"{self.amount:g}"
        if self.unit is None:
            return amount
        return f"{amount} {self.unit}"


@dataclass(frozen=True)
class FoodRecord:
    """A leaf nutrition fact sheet.

    ``nutrients`` are measured per one reference serving.
    """

    key: str
    name: str
    servings: Tuple[ServingDefinition, ...]
    nutrients: NutrientVector = field(default_factory=NutrientVector.zero)

    @property
    def reference_serving(self) -> ServingDefinition:
        for serving in self.servings:
            if serving.reference:
                return serving
        raise ValueError(f"Food '{self.key}' declares no reference serving")


@dataclass(frozen=True)
class IngredientLine:
    """One line of a recipe: a food or recipe key and how much of it."""

    key: str
    quantity: Quantity = field(default_factory=Quantity)


@dataclass(frozen=True)
class RecipeRecord:
    """A named list of ingredient lines producing ``servings`` servings."""

    key: str
    name: str
    ingredients: Tuple[IngredientLine, ...]
    servings: float = 1.0


CatalogueRecord = Union[FoodRecord, RecipeRecord]


@dataclass(frozen=True)
class JournalEntry:
    """A serving of a food or recipe eaten on a given day."""

    key: str
    quantity: Quantity = field(default_factory=Quantity)
    note: Optional[str] = None


@dataclass(frozen=True)
class Journal:
    """Everything eaten on one calendar day, in the order it was added."""

    day: date
    entries: Tuple[JournalEntry, ...] = ()

    def append(self, entry: JournalEntry) -> "Journal":
        return Journal(day=self.day, entries=self.entries + (entry,))
