import pandas as pd
import pytest
from openpyxl import Workbook, load_workbook

from table_interpreter.reader import read_table
from table_interpreter.writer import (
    ERROR_FONT,
    TableWriter,
    save_table_workbook,
    table_to_dataframe,
)


@pytest.fixture
def table():
    return read_table("name | 2 | =B1 * 3\n__ | =1 / 0 | ").evaluate()


def test_table_to_dataframe(table):
    df = table_to_dataframe(table)
    assert list(df.columns) == ["A", "B", "C"]
    assert list(df.index) == [1, 2]
    assert df.loc[1, "A"] == "name"
    assert df.loc[1, "C"] == 6
    assert df.loc[2, "B"] == "#Division by zero#"
    assert pd.isna(df.loc[2, "A"])


class TestTableWriter:
    def test_write_values(self, table):
        wb = Workbook()
        ws = wb.active
        TableWriter(ws).write(table)

        assert ws["A1"].value == "name"
        assert ws["B1"].value == 2
        assert ws["C1"].value == 6
        assert ws["B2"].value == "#Division by zero#"
        assert ws["B2"].font.color.rgb == ERROR_FONT.color.rgb
        assert ws["A2"].value is None
        assert ws["A2"].border.bottom.style == "thin"

    def test_write_with_offset(self, table):
        wb = Workbook()
        ws = wb.active
        TableWriter(ws, row=3, col=2).write(table)
        assert ws["B3"].value == "name"
        assert ws["D3"].value == 6

    def test_columns_are_resized(self, table):
        wb = Workbook()
        ws = wb.active
        TableWriter(ws).write(table)
        assert ws.column_dimensions["B"].width == len("#Division by zero#") + 2


def test_save_table_workbook(table, tmp_path):
    path = tmp_path / "table.xlsx"
    save_table_workbook(table, path, title="Results")

    wb = load_workbook(path)
    ws = wb["Results"]
    assert ws["C1"].value == 6
    assert ws["B2"].value == "#Division by zero#"
    assert ws["B2"].font.color.rgb == "FFC00000"
