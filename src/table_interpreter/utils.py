import math

from openpyxl.utils import column_index_from_string, get_column_letter

from table_interpreter import config
from table_interpreter.position import CellPosition, Direction
from table_interpreter.tokenizer import CELL_REF_REGEX


def column_as_int(col: str) -> int:
    """Zero-based column index of a column label (`A` -> 0)."""
    return column_index_from_string(col) - 1


def column_as_str(col: int) -> str:
    return get_column_letter(col + 1)


def extract_cell_reference(ref: str) -> CellPosition | None:
    """Parse an `A1` style reference, returning None if invalid."""
    if not CELL_REF_REGEX.fullmatch(ref):
        return None
    letters = ref.rstrip("0123456789")
    row = int(ref[len(letters) :])
    if row == 0:
        return None
    try:
        return CellPosition(row - 1, column_as_int(letters))
    except ValueError:
        # openpyxl rejects columns past XFD
        return None


def resolve_relative_reference(ref: str, origin: CellPosition) -> CellPosition:
    """Resolve `^`, `>2`, `v`, `<3`... against the position of the formula."""
    direction = Direction.from_char(ref[0])
    if direction is None:
        raise ValueError(f"Invalid direction in relative reference: {ref}")
    count = int(ref[1:]) if len(ref) > 1 else 1
    return origin.offset(direction, count)


def format_number(value: float) -> str:
    value = float(value)
    if config.number_precision is not None:
        return f"{value:.{config.number_precision}g}"
    if math.isfinite(value) and value.is_integer() and abs(value) < 1e16:
        return str(int(value))
    return repr(value)
