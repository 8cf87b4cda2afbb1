from typing import Iterator

from table_interpreter.ast import ExpressionArena
from table_interpreter.cell import Cell, CellKind
from table_interpreter.errors import EvaluationError
from table_interpreter.position import CellPosition


class Table:
    """Grid of cells stored row-major, plus the arena owning their formulas."""

    def __init__(
        self,
        rows: int,
        columns: int,
        content: list[Cell] | None = None,
        arena: ExpressionArena | None = None,
    ):
        if content is None:
            content = [Cell.empty() for _ in range(rows * columns)]
        if len(content) != rows * columns:
            raise ValueError(
                f"Expected {rows * columns} cells for a {rows}x{columns} table, got {len(content)}"
            )
        self.rows = rows
        self.columns = columns
        self.content = content
        self.arena = arena if arena is not None else ExpressionArena()

    def contains(self, position: CellPosition) -> bool:
        return 0 <= position.row < self.rows and 0 <= position.column < self.columns

    def _index(self, position: CellPosition) -> int:
        return position.row * self.columns + position.column

    def cell_at(self, position: CellPosition) -> Cell:
        """Cell at `position`, or a new ERROR cell if it is outside the table."""
        if not self.contains(position):
            return Cell.from_error(EvaluationError("Cell outside table"))
        return self.content[self._index(position)]

    def set_cell(self, position: CellPosition, cell: Cell) -> None:
        if not self.contains(position):
            raise IndexError(f"{position} is outside a {self.rows}x{self.columns} table")
        self.content[self._index(position)] = cell

    def is_empty(self, position: CellPosition) -> bool:
        # Positions outside the table are not "empty", they don't exist
        if not self.contains(position):
            return False
        return self.content[self._index(position)].kind == CellKind.EMPTY

    def positions(self) -> Iterator[CellPosition]:
        """Every position of the table in row-major order."""
        for row in range(self.rows):
            for column in range(self.columns):
                yield CellPosition(row, column)

    def evaluate(self) -> "Table":
        """Evaluate every cell in place and return the table."""
        # Avoid circular imports
        from table_interpreter.interpreter import TableInterpreter

        TableInterpreter(self).evaluate()
        return self

    def __repr__(self) -> str:
        return f"Table(rows={self.rows}, columns={self.columns})"
