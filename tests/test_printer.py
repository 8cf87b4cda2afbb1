import pytest

from table_interpreter import config
from table_interpreter.printer import column_widths, last_printed_column, render_table
from table_interpreter.reader import read_table


def render(text: str) -> list[str]:
    output = render_table(read_table(text).evaluate())
    assert output.endswith("\n")
    return output.splitlines()


class TestRenderTable:
    def test_columns_are_right_aligned(self):
        assert render("1 | 22 | 333\n4444 | 5") == [
            "   1 | 22 | 333",
            "4444 |  5",
        ]

    def test_separator_fills_column(self):
        assert render("1 | 22 | 333\n4444 | 5\n__ | __ | __") == [
            "   1 | 22 | 333",
            "4444 |  5",
            "____ | __ | ___",
        ]

    def test_trailing_empty_cells_are_trimmed(self):
        assert render("a | | \nb | c | d") == [
            "a",
            "b | c | d",
        ]

    def test_first_column_is_always_printed(self):
        assert render(" | x") == [" | x"]
        assert render("x\n | ") == ["x", " "]

    def test_evaluated_values(self):
        assert render("1 | 2 | =A1 + B1 | =A1 / 4") == ["1 | 2 | 3 | 0.25"]

    def test_errors(self):
        assert render("=B1 | =A1") == ["#Loop!# | #Loop!#"]

    def test_unevaluated_table(self):
        output = render_table(read_table("1 | =A1 + 1 | :<"))
        assert output == "1 | #ERROR# | #ERROR#\n"

    def test_empty_table(self):
        assert render_table(read_table("")) == ""


class TestNumberFormat:
    @pytest.mark.parametrize(
        "text, expected",
        [
            ("=10 / 4", "2.5"),
            ("=1 / 3", "0.3333333333333333"),
            ("=3 * 2", "6"),
            ("1.50", "1.5"),
            ("1e3", "1000"),
            ("=-7", "-7"),
        ],
    )
    def test_shortest_form(self, text, expected):
        assert render(text) == [expected]

    def test_precision(self):
        config.set_number_precision(3)
        assert render("=1 / 3 | =200 / 3 | 12345") == ["0.333 | 66.7 | 1.23e+04"]

    def test_invalid_precision(self):
        with pytest.raises(ValueError):
            config.set_number_precision(0)


def test_column_widths():
    table = read_table("1 | hello\n=10 * 10").evaluate()
    assert column_widths(table) == [3, 5]


def test_last_printed_column():
    table = read_table("1 | 2 | \n | | ")
    assert last_printed_column(table, 0) == 1
    assert last_printed_column(table, 1) == 0
