import re
from dataclasses import dataclass, replace
from enum import Enum, auto

from table_interpreter.ast import ExpressionArena, NodeId
from table_interpreter.errors import ParseError, TableError
from table_interpreter.parser import parse_formula
from table_interpreter.position import ORIGIN, CellPosition, Direction
from table_interpreter.utils import format_number

NUMBER_REGEX = re.compile(r"[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?")
SEPARATOR_REGEX = re.compile(r"_{2,}")


class CellKind(Enum):
    TEXT = auto()
    NUMBER = auto()
    EXPRESSION = auto()
    CLONE = auto()
    SEPARATOR = auto()
    ERROR = auto()
    EMPTY = auto()


class EvaluationState(Enum):
    PENDING = auto()
    IN_PROGRESS = auto()
    DONE = auto()


@dataclass
class Cell:
    """One slot of the table.

    Only the fields relevant to `kind` are meaningful:
    - TEXT: `text`
    - NUMBER: `number`
    - EXPRESSION: `node`, `shift` (translation applied to every relative
      reference of the node) and `number` once `state` is DONE
    - CLONE: `direction` and `offset` of the cell to copy
    - ERROR: `error`
    """

    kind: CellKind
    state: EvaluationState = EvaluationState.PENDING
    text: str = ""
    number: float = 0.0
    node: NodeId | None = None
    shift: CellPosition = ORIGIN
    direction: Direction = Direction.NONE
    offset: int = 0
    error: TableError | None = None

    @classmethod
    def empty(cls) -> "Cell":
        return cls(CellKind.EMPTY)

    @classmethod
    def from_text(cls, text: str) -> "Cell":
        return cls(CellKind.TEXT, text=text)

    @classmethod
    def from_number(cls, number: float) -> "Cell":
        return cls(CellKind.NUMBER, number=number)

    @classmethod
    def from_expression(cls, node: NodeId, shift: CellPosition = ORIGIN) -> "Cell":
        return cls(CellKind.EXPRESSION, node=node, shift=shift)

    @classmethod
    def clone(cls, direction: Direction, offset: int = 1) -> "Cell":
        return cls(CellKind.CLONE, direction=direction, offset=offset)

    @classmethod
    def separator(cls) -> "Cell":
        return cls(CellKind.SEPARATOR)

    @classmethod
    def from_error(cls, error: TableError) -> "Cell":
        # Errors are terminal, there is nothing left to evaluate
        return cls(CellKind.ERROR, state=EvaluationState.DONE, error=error)

    @property
    def value(self) -> float | str | None:
        """Python value of the cell, as exported to DataFrames and workbooks."""
        if self.kind == CellKind.NUMBER:
            return self.number
        if self.kind == CellKind.EXPRESSION:
            return self.number if self.state == EvaluationState.DONE else str(self)
        if self.kind == CellKind.TEXT:
            return self.text
        if self.kind == CellKind.ERROR:
            return str(self)
        return None

    def __str__(self) -> str:
        match self.kind:
            case CellKind.TEXT:
                return self.text
            case CellKind.NUMBER:
                return format_number(self.number)
            case CellKind.EXPRESSION:
                if self.state == EvaluationState.DONE:
                    return format_number(self.number)
                return "#ERROR#"
            case CellKind.ERROR:
                return f"#{self.error}#"
            case CellKind.CLONE:
                return "#ERROR#"
            case _:
                return ""


def parse_direction(text: str) -> tuple[Direction, int]:
    """Parse the `^3` part of a clone cell into its direction and offset."""
    if len(text) == 0:
        raise ParseError("No clone direction")

    direction = Direction.from_char(text[0])
    if direction is None:
        raise ParseError(f"Invalid clone direction '{text}'")

    count = text[1:].strip()
    if not count:
        return direction, 1
    if not count.isdigit():
        raise ParseError(f"Invalid clone offset '{count}'")
    offset = int(count)
    if offset == 0:
        raise ParseError("A cell cannot clone itself")
    return direction, offset


def parse_cell(text: str, position: CellPosition, arena: ExpressionArena) -> Cell:
    """Classify the trimmed text of the cell at `position`.

    Malformed formulas and clone directives become ERROR cells instead of
    raising, so a single bad cell never prevents the table from loading.
    """
    if len(text) == 0:
        return Cell.empty()

    try:
        if text[0] == "=":
            return Cell.from_expression(parse_formula(text[1:], position, arena))

        if text[0] == ":":
            return Cell.clone(*parse_direction(text[1:]))
    except TableError as e:
        return Cell.from_error(e)

    if SEPARATOR_REGEX.fullmatch(text):
        return Cell.separator()

    if NUMBER_REGEX.fullmatch(text):
        return Cell.from_number(float(text))

    return Cell.from_text(text)


def clone_cell(cell: Cell, direction: Direction, offset: int = 1) -> Cell:
    """Copy of `cell` as seen from `offset` steps in `direction` away from it.

    An expression keeps sharing its parsed node but its relative references
    are moved along with the copy, and it has to be evaluated again.
    """
    if cell.kind == CellKind.EXPRESSION:
        return replace(
            cell,
            shift=cell.shift.offset(direction.reverse(), offset),
            state=EvaluationState.PENDING,
            number=0.0,
        )
    return replace(cell)
