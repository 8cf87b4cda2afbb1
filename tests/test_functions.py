import math

import pytest

from table_interpreter.errors import FunctionNotFound, TableFunctionError
from table_interpreter.functions import (
    RANGE,
    SCALAR,
    TABLE_FUNCTIONS,
    TableFunctions,
    lookup_function,
    table_fn,
)
from table_interpreter.reader import read_table


class TestTableFunctions:
    def test_sum(self):
        assert TableFunctions.SUM([1.0, 2.0, 3.5]) == 6.5
        assert TableFunctions.SUM([]) == 0

    def test_avg(self):
        assert TableFunctions.AVG([1.0, 2.0, 0.0, 5.0]) == 2

    def test_min_max(self):
        assert TableFunctions.MIN([3.0, -1.0, 2.0]) == -1
        assert TableFunctions.MAX([3.0, -1.0, 2.0]) == 3

    def test_median(self):
        assert TableFunctions.MEDIAN([5.0, 1.0, 3.0]) == 3
        assert TableFunctions.MEDIAN([1.0, 2.0, 3.0, 4.0]) == 2.5

    def test_sqrt(self):
        assert TableFunctions.SQRT(16.0) == 4
        assert math.isclose(TableFunctions.SQRT(2.0), 1.4142135623730951)
        with pytest.raises(TableFunctionError):
            TableFunctions.SQRT(-1.0)

    def test_abs(self):
        assert TableFunctions.ABS(-3.5) == 3.5

    def test_log10(self):
        assert TableFunctions.LOG10(1000.0) == 3
        with pytest.raises(TableFunctionError, match="LOG10 requires positive input"):
            TableFunctions.LOG10(0.0)

    def test_log10_from_formulas(self):
        table = read_table("100 | =LOG10(A1) + log10(10) | =LOG10(-1)").evaluate()
        assert str(table.content[1]) == "3"
        assert str(table.content[2]) == "#LOG10 requires positive input#"


class TestLookup:
    @pytest.mark.parametrize("name", ["sum", "SUM", "Sum"])
    def test_case_insensitive(self, name):
        assert lookup_function(name) is TABLE_FUNCTIONS["sum"]

    def test_argument_shapes(self):
        assert lookup_function("sum").arguments == (RANGE,)
        assert lookup_function("sqrt").arguments == (SCALAR,)

    def test_suggestion(self):
        with pytest.raises(FunctionNotFound, match="did you mean 'sqrt'"):
            lookup_function("sqrtt")

    def test_no_suggestion(self):
        with pytest.raises(FunctionNotFound) as exc_info:
            lookup_function("qwertyuiop")
        assert str(exc_info.value) == "Unknown function 'qwertyuiop'"


@pytest.fixture
def hypot():
    @table_fn(SCALAR, SCALAR, name="hypot")
    def _hypot(x: float, y: float) -> float:
        return math.hypot(x, y)

    yield TABLE_FUNCTIONS["hypot"]
    del TABLE_FUNCTIONS["hypot"]


class TestRegistration:
    def test_registered_name(self, hypot):
        assert hypot.name == "hypot"
        assert hypot.arguments == (SCALAR, SCALAR)
        assert hypot.evaluate(3.0, 4.0) == 5

    def test_usable_from_formulas(self, hypot):
        table = read_table("3 | 4 | =HYPOT(A1, B1)").evaluate()
        assert str(table.content[2]) == "5"

    def test_arity_is_checked(self, hypot):
        table = read_table("=hypot(3)").evaluate()
        assert str(table.content[0]) == "#HYPOT expects 2 argument(s), got 1#"
