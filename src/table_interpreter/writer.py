from pathlib import Path

import pandas as pd
from openpyxl import Workbook
from openpyxl.styles import Border, Font, Side
from openpyxl.worksheet.worksheet import Worksheet

from table_interpreter.cell import CellKind
from table_interpreter.position import CellPosition
from table_interpreter.table import Table
from table_interpreter.utils import column_as_str

ERROR_FONT = Font(color="FFC00000")
SEPARATOR_BORDER = Border(bottom=Side(style="thin"))


def table_to_dataframe(table: Table) -> pd.DataFrame:
    """Values of an evaluated table, with `A, B...` columns and 1-based rows."""
    data = [
        [table.cell_at(CellPosition(row, column)).value for column in range(table.columns)]
        for row in range(table.rows)
    ]
    return pd.DataFrame(
        data,
        columns=[column_as_str(column) for column in range(table.columns)],
        index=range(1, table.rows + 1),
    )


class TableWriter:
    """Writes the values of an evaluated table into a worksheet."""

    def __init__(self, ws: Worksheet, row: int = 1, col: int = 1) -> None:
        self.ws = ws
        self.row = row
        self.col = col

    def write(self, table: Table) -> None:
        for position in table.positions():
            cell = table.cell_at(position)
            ws_cell = self.ws.cell(self.row + position.row, self.col + position.column)
            if cell.kind == CellKind.SEPARATOR:
                ws_cell.border = SEPARATOR_BORDER
                continue
            ws_cell.value = cell.value
            if cell.kind == CellKind.ERROR:
                ws_cell.font = ERROR_FONT
        auto_resize_columns(self.ws)


def auto_resize_columns(
    ws: Worksheet, min_width: float = 0, max_width: float = 50
) -> None:
    """Size each column of the worksheet to its longest value."""
    for col in ws.columns:
        max_length = max(
            (len(str(cell.value)) for cell in col if cell.value is not None),
            default=0,
        )
        adjusted_width = max(min_width, min(max_length + 2, max_width))
        ws.column_dimensions[col[0].column_letter].width = adjusted_width


def save_table_workbook(table: Table, path: str | Path, title: str = "Table") -> None:
    wb = Workbook()
    ws = wb.active
    assert ws is not None
    ws.title = title
    TableWriter(ws).write(table)
    wb.save(path)
