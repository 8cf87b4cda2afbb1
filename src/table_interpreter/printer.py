from table_interpreter.cell import CellKind
from table_interpreter.position import CellPosition
from table_interpreter.table import Table

SEPARATOR_CHAR = "_"
COLUMN_DELIMITER = " | "


def cell_texts(table: Table) -> list[list[str]]:
    """Rendered text of every cell, row by row."""
    return [
        [str(table.cell_at(CellPosition(row, column))) for column in range(table.columns)]
        for row in range(table.rows)
    ]


def column_widths(table: Table, texts: list[list[str]] | None = None) -> list[int]:
    if texts is None:
        texts = cell_texts(table)
    widths = [0] * table.columns
    for row in texts:
        for column, text in enumerate(row):
            widths[column] = max(widths[column], len(text))
    return widths


def last_printed_column(table: Table, row: int) -> int:
    """Index of the last column of `row` before its trailing empty cells."""
    last = table.columns - 1
    while last > 0 and table.is_empty(CellPosition(row, last)):
        last -= 1
    return last


def render_table(table: Table) -> str:
    """Render the table as right-aligned, `|`-delimited columns.

    Separator cells are drawn as a rule as wide as their column.
    """
    texts = cell_texts(table)
    widths = column_widths(table, texts)

    lines = []
    for row in range(table.rows):
        parts = []
        for column in range(last_printed_column(table, row) + 1):
            text = texts[row][column]
            if table.cell_at(CellPosition(row, column)).kind == CellKind.SEPARATOR:
                text = SEPARATOR_CHAR * widths[column]
            parts.append(text.rjust(widths[column]))
        lines.append(COLUMN_DELIMITER.join(parts))

    return "".join(line + "\n" for line in lines)
