"""Structured error types for record parsing and nutrient computation.

Every failure the core can report has its own type carrying the offending
value, so the command line can print a precise message and tests can
assert on the exact failure mode:

    record text   → ParseError
    catalogue     → UnknownKeyError
    quantities    → UnknownUnitError, AmbiguousUnitError, NonPositiveQuantityError
    recipe graph  → CyclicRecipeError
    food search   → SearchError

None of these are retried: parsing and aggregation are deterministic, so
the same input always produces the same error.
"""

from enum import Enum
from typing import Any, Dict, List, Optional, Sequence


class NoshErrorCode(Enum):
    """Machine-readable error codes, one per failure mode."""

    PARSE_ERROR = "PARSE_ERROR"
    UNKNOWN_KEY = "UNKNOWN_KEY"
    UNKNOWN_UNIT = "UNKNOWN_UNIT"
    AMBIGUOUS_UNIT = "AMBIGUOUS_UNIT"
    NON_POSITIVE_QUANTITY = "NON_POSITIVE_QUANTITY"
    CYCLIC_RECIPE = "CYCLIC_RECIPE"
    SEARCH_FAILURE = "SEARCH_FAILURE"


class NoshError(Exception):
    """Base exception for all nosh errors.

    Attributes:
        code: NoshErrorCode identifying the error type
        message: Human-readable error description
        context: Dictionary of relevant error context (key, unit, etc.)
    """

    def __init__(
        self,
        code: NoshErrorCode,
        message: str,
        context: Optional[Dict[str, Any]] = None
    ):
        self.code = code
        self.message = message
        self.context = context or {}
        super().__init__(f"[{code.value}] {message}")

    def __str__(self) -> str:
        return f"[{self.code.value}] {self.message}"

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"code={self.code!r}, "
            f"message={self.message!r}, "
            f"context={self.context!r})"
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to a dictionary for structured output.

        Returns:
            Dictionary with error code, message, and context
        """
        return {
            "error_code": self.code.value,
            "message": self.message,
            "context": self.context
        }


class ParseError(NoshError):
    """Raised when record text is malformed or fails validation.

    Recoverable by re-editing the record. Context includes the field that
    failed, why it failed, the offending value and the 1-based line number
    when the failure is tied to a single line.
    """

    def __init__(
        self,
        field: str,
        reason: str,
        value: Any = None,
        line: Optional[int] = None
    ):
        context: Dict[str, Any] = {
            "field": field,
            "reason": reason,
        }
        if value is not None:
            context["value"] = str(value)
        if line is not None:
            context["line"] = line

        message = f"Invalid '{field}': {reason}"
        if value is not None:
            message += f" (value: {value})"
        if line is not None:
            message += f" on line {line}"

        super().__init__(
            code=NoshErrorCode.PARSE_ERROR,
            message=message,
            context=context
        )

        self.field = field
        self.reason = reason
        self.value = value
        self.line = line


class UnknownKeyError(NoshError):
    """Raised when a key names no food or recipe in the catalogue."""

    def __init__(self, key: str, kind: str = "food or recipe"):
        super().__init__(
            code=NoshErrorCode.UNKNOWN_KEY,
            message=f"No {kind} named '{key}'",
            context={"key": key, "kind": kind}
        )
        self.key = key
        self.kind = kind


class UnknownUnitError(NoshError):
    """Raised when a quantity's unit matches none of a record's servings.

    Context includes:
        - unit: The unit that was asked for
        - key: The record the quantity was resolved against (if known)
        - supported_units: Units the record does declare
    """

    def __init__(
        self,
        unit: str,
        supported_units: Sequence[str],
        key: Optional[str] = None
    ):
        context: Dict[str, Any] = {
            "unit": unit,
            "supported_units": list(supported_units),
        }
        if key is not None:
            context["key"] = key

        units_str = ", ".join(supported_units) if supported_units else "none"
        message = f"Unknown serving unit '{unit}'"
        if key is not None:
            message += f" for '{key}'"
        message += f", expected one of: {units_str}"

        super().__init__(
            code=NoshErrorCode.UNKNOWN_UNIT,
            message=message,
            context=context
        )

        self.unit = unit
        self.supported_units = list(supported_units)
        self.key = key


class AmbiguousUnitError(NoshError):
    """Raised when an abbreviated unit is a prefix of more than one serving."""

    def __init__(self, unit: str, matches: List[str]):
        super().__init__(
            code=NoshErrorCode.AMBIGUOUS_UNIT,
            message=(
                f"Serving unit '{unit}' is ambiguous between "
                + " and ".join(f"'{m}'" for m in matches)
            ),
            context={"unit": unit, "matches": matches}
        )
        self.unit = unit
        self.matches = matches


class NonPositiveQuantityError(NoshError):
    """Raised when a quantity amount is zero or negative."""

    def __init__(self, amount: float):
        super().__init__(
            code=NoshErrorCode.NON_POSITIVE_QUANTITY,
            message=f"Quantity must be greater than zero (value: {amount:g})",
            context={"amount": amount}
        )
        self.amount = amount


class CyclicRecipeError(NoshError):
    """Raised when a recipe refers back to itself, directly or transitively.

    ``cycle`` is the path of keys from the first repeated key back to
    itself, e.g. ``["granola", "trail_mix", "granola"]``.
    """

    def __init__(self, cycle: List[str]):
        super().__init__(
            code=NoshErrorCode.CYCLIC_RECIPE,
            message=f"Recipe cycle detected: {' -> '.join(cycle)}",
            context={"cycle": cycle}
        )
        self.cycle = cycle


class SearchError(NoshError):
    """Raised when the online food search fails.

    Context includes:
        - operation: What was being performed
        - status_code: HTTP status code (if applicable)
    """

    def __init__(
        self,
        operation: str,
        reason: str,
        status_code: Optional[int] = None
    ):
        context: Dict[str, Any] = {"operation": operation}
        if status_code is not None:
            context["status_code"] = status_code

        message = f"Food search failed during {operation}: {reason}"
        if status_code is not None:
            message += f" (HTTP {status_code})"

        super().__init__(
            code=NoshErrorCode.SEARCH_FAILURE,
            message=message,
            context=context
        )

        self.operation = operation
        self.reason = reason
        self.status_code = status_code
