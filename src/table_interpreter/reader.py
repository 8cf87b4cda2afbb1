import logging
from pathlib import Path

from table_interpreter.ast import ExpressionArena
from table_interpreter.cell import Cell, clone_cell, parse_cell
from table_interpreter.errors import EvaluationError, ReadError
from table_interpreter.position import CellPosition, Direction
from table_interpreter.table import Table

REPEAT_DIRECTIVE = "..."
CELL_SEPARATOR = "|"


def _repeat_count(line: str, line_number: int) -> int:
    count = line[len(REPEAT_DIRECTIVE) :].strip()
    if not count.isdigit():
        raise ReadError(f"Invalid repeat count '{count}' on line {line_number}")
    return int(count)


def count_table_size(text: str) -> tuple[int, int]:
    """Number of rows and columns of the table described by `text`."""
    rows = 0
    columns = 0
    for line_number, line in enumerate(text.splitlines(), start=1):
        line = line.strip()
        if line.startswith(REPEAT_DIRECTIVE):
            rows += _repeat_count(line, line_number)
            continue

        rows += 1
        columns = max(columns, line.count(CELL_SEPARATOR) + 1)

    return rows, columns


class TableReader:
    """Builds a Table from the plain text grid format.

    Each line is a row and cells are separated by `|`. A line `...N` repeats
    the row above it N times, each copy behaving like a row of `:^` clones.
    """

    def __init__(self, text: str):
        self.text = text
        self.rows, self.columns = count_table_size(text)
        self.arena = ExpressionArena()
        self.content = [Cell.empty() for _ in range(self.rows * self.columns)]

    def read(self) -> Table:
        row = 0
        for line_number, line in enumerate(self.text.splitlines(), start=1):
            line = line.strip()
            if line.startswith(REPEAT_DIRECTIVE):
                row = self._repeat_row(row, _repeat_count(line, line_number))
                continue

            for column, text in enumerate(line.split(CELL_SEPARATOR)):
                position = CellPosition(row, column)
                self.content[self._index(position)] = parse_cell(
                    text.strip(), position, self.arena
                )
            row += 1

        return Table(self.rows, self.columns, self.content, self.arena)

    def _index(self, position: CellPosition) -> int:
        return position.row * self.columns + position.column

    def _repeat_row(self, row: int, count: int) -> int:
        if row == 0:
            logging.warning("Row repeat directive used before the first row")
            for _ in range(count):
                for column in range(self.columns):
                    error = EvaluationError("Cannot duplicate above the table")
                    self.content[self._index(CellPosition(row, column))] = Cell.from_error(error)
                row += 1
            return row

        for _ in range(count):
            for column in range(self.columns):
                above = self.content[self._index(CellPosition(row - 1, column))]
                self.content[self._index(CellPosition(row, column))] = clone_cell(
                    above, Direction.UP, 1
                )
            row += 1
        return row


def read_table(text: str) -> Table:
    return TableReader(text).read()


def read_table_file(path: str | Path) -> Table:
    with open(path, encoding="utf-8") as file:
        return read_table(file.read())
