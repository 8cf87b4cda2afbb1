from enum import Enum
from typing import Iterator, NamedTuple

from openpyxl.utils import get_column_letter


# Each direction's value is its (row, column) step, which makes reverse() a
# simple negation.
class Direction(Enum):
    UP = (-1, 0)
    RIGHT = (0, 1)
    DOWN = (1, 0)
    LEFT = (0, -1)
    NONE = (0, 0)

    @classmethod
    def from_char(cls, char: str) -> "Direction | None":
        """Map one of the direction characters `^ > v <` to a Direction."""
        return DIRECTION_CHARS.get(char)

    def reverse(self) -> "Direction":
        row_step, column_step = self.value
        return Direction((-row_step, -column_step))

    def offset(self, row: int, column: int, count: int = 1) -> tuple[int, int]:
        row_step, column_step = self.value
        return row + row_step * count, column + column_step * count


DIRECTION_CHARS = {
    "^": Direction.UP,
    ">": Direction.RIGHT,
    "v": Direction.DOWN,
    "<": Direction.LEFT,
}


class CellPosition(NamedTuple):
    row: int
    column: int

    def offset(self, direction: Direction, count: int = 1) -> "CellPosition":
        # No bounds checking here, the table takes care of that
        return CellPosition(*direction.offset(self.row, self.column, count))

    def shift(self, offset: "CellPosition") -> "CellPosition":
        return CellPosition(self.row + offset.row, self.column + offset.column)

    def __str__(self) -> str:
        if self.row < 0 or self.column < 0:
            return f"R{self.row + 1}C{self.column + 1}"
        return f"{get_column_letter(self.column + 1)}{self.row + 1}"


ORIGIN = CellPosition(0, 0)


class Range(NamedTuple):
    start: CellPosition
    end: CellPosition

    def shift(self, offset: CellPosition) -> "Range":
        return Range(self.start.shift(offset), self.end.shift(offset))

    def positions(self) -> Iterator[CellPosition]:
        """Yield every position of the rectangle, corners included, row by row."""
        first_row, last_row = sorted((self.start.row, self.end.row))
        first_column, last_column = sorted((self.start.column, self.end.column))
        for row in range(first_row, last_row + 1):
            for column in range(first_column, last_column + 1):
                yield CellPosition(row, column)

    def __str__(self) -> str:
        return f"{self.start}:{self.end}"
