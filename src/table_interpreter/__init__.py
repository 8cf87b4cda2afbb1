from table_interpreter.errors import (
    CoercionError,
    CycleError,
    EvaluationError,
    FunctionNotFound,
    ParseError,
    ReadError,
    TableError,
    TableFunctionError,
    TokenizerError,
)
from table_interpreter.interpreter import TableInterpreter
from table_interpreter.printer import render_table
from table_interpreter.reader import read_table, read_table_file
from table_interpreter.table import Table

__all__ = [
    "CoercionError",
    "CycleError",
    "EvaluationError",
    "FunctionNotFound",
    "ParseError",
    "ReadError",
    "Table",
    "TableError",
    "TableFunctionError",
    "TableInterpreter",
    "TokenizerError",
    "read_table",
    "read_table_file",
    "render_table",
]
