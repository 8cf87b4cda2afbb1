import math
from enum import Enum, auto
from typing import Any, Callable, NamedTuple

import numpy as np
from rapidfuzz import fuzz, process

from table_interpreter.errors import FunctionNotFound, TableFunctionError


class ArgumentKind(Enum):
    SCALAR = auto()
    RANGE = auto()


class TableFunction(NamedTuple):
    name: str
    # Expected shape of each argument. SCALAR arguments are passed to
    # `evaluate` as a float, RANGE arguments as the list of the range's values.
    arguments: tuple[ArgumentKind, ...]
    evaluate: Callable[..., float]


# Lower-case name -> function
TABLE_FUNCTIONS: dict[str, TableFunction] = {}

SCALAR = ArgumentKind.SCALAR
RANGE = ArgumentKind.RANGE


def table_fn(*arguments: ArgumentKind, name: str | None = None) -> Any:
    """Decorator to register a function that can be called from formulas."""

    def decorator(fn):
        # If used on a staticmethod, unwrap for registration but return the
        # original descriptor to preserve method semantics.
        underlying = fn.__func__ if isinstance(fn, staticmethod) else fn
        reg_name = (name or underlying.__name__).lower()
        TABLE_FUNCTIONS[reg_name] = TableFunction(reg_name, arguments, underlying)
        return fn

    return decorator


def lookup_function(name: str) -> TableFunction:
    """Find a function by case-insensitive name."""
    function = TABLE_FUNCTIONS.get(name.lower())
    if function is not None:
        return function

    message = f"Unknown function '{name}'"
    suggestion = process.extractOne(
        name.lower(), TABLE_FUNCTIONS.keys(), scorer=fuzz.ratio, score_cutoff=60
    )
    if suggestion is not None:
        message += f", did you mean '{suggestion[0]}'?"
    raise FunctionNotFound(message)


class TableFunctions:
    """Collection of the built-in formula functions."""

    @table_fn(RANGE)
    @staticmethod
    def SUM(values: list[float]) -> float:
        return float(sum(values))

    @table_fn(RANGE)
    @staticmethod
    def AVG(values: list[float]) -> float:
        """Average of the range; cells without a number count as 0."""
        return sum(values) / len(values)

    @table_fn(RANGE)
    @staticmethod
    def MIN(values: list[float]) -> float:
        return min(values)

    @table_fn(RANGE)
    @staticmethod
    def MAX(values: list[float]) -> float:
        return max(values)

    @table_fn(RANGE)
    @staticmethod
    def MEDIAN(values: list[float]) -> float:
        return float(np.median(values))

    @table_fn(SCALAR)
    @staticmethod
    def SQRT(x: float) -> float:
        """Return the square root."""
        if x < 0:
            raise TableFunctionError("SQRT requires non-negative input")
        return math.sqrt(x)

    @table_fn(SCALAR)
    @staticmethod
    def LOG10(x: float) -> float:
        if x <= 0:
            raise TableFunctionError("LOG10 requires positive input")
        return math.log10(x)

    @table_fn(SCALAR)
    @staticmethod
    def ABS(x: float) -> float:
        """Return the absolute value."""
        return abs(x)
