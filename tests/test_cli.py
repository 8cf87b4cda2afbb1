import pytest
from openpyxl import load_workbook

from table_interpreter import config
from table_interpreter.cli import build_parser, main


@pytest.fixture
def table_file(tmp_path):
    path = tmp_path / "input.txt"
    path.write_text("1 | 2 | =A1 + B1\n=1 / 4 | :^ | :^\n", encoding="utf-8")
    return path


def test_prints_to_stdout(table_file, capsys):
    assert main([str(table_file)]) == 0
    out = capsys.readouterr().out
    assert out.splitlines() == [
        "   1 | 2 |    3",
        "0.25 | 2 | 2.25",
    ]


def test_precision_option(tmp_path, capsys):
    path = tmp_path / "third.txt"
    path.write_text("=1 / 3 | =200 / 3", encoding="utf-8")
    assert main([str(path), "--precision", "2"]) == 0
    assert capsys.readouterr().out == "0.33 | 67\n"
    assert config.number_precision == 2


def test_max_depth_option(tmp_path, capsys):
    path = tmp_path / "chain.txt"
    path.write_text("=A2\n=A3\n=A4\n1", encoding="utf-8")
    assert main([str(path), "--max-depth", "2"]) == 0
    assert capsys.readouterr().out.splitlines() == ["1", "1", "1", "1"]
    assert config.max_evaluation_depth == 2


def test_long_formula_does_not_crash(tmp_path, capsys):
    path = tmp_path / "big.txt"
    long_sum = "=" + "+".join(["1"] * 600)
    nested = "=" + "(" * 200 + "1" + ")" * 200
    path.write_text(f"{long_sum}\n{nested}", encoding="utf-8")
    assert main([str(path)]) == 0
    lines = capsys.readouterr().out.splitlines()
    assert lines[0].strip() == "600"
    assert lines[1].startswith("#Formula is nested too deeply")


def test_missing_file(tmp_path, capsys):
    path = tmp_path / "missing.txt"
    assert main([str(path)]) == 1
    assert capsys.readouterr().err == f"Error: File '{path}' not found\n"


def test_read_error(tmp_path, capsys):
    path = tmp_path / "bad.txt"
    path.write_text("1\n...many", encoding="utf-8")
    assert main([str(path)]) == 1
    assert "Invalid repeat count 'many' on line 2" in capsys.readouterr().err


def test_invalid_option(table_file, capsys):
    assert main([str(table_file), "--max-depth", "0"]) == 1
    assert "Evaluation depth must be positive" in capsys.readouterr().err


def test_text_output(table_file, tmp_path, capsys):
    output = tmp_path / "out.txt"
    assert main([str(table_file), str(output)]) == 0
    assert capsys.readouterr().out == ""
    assert output.read_text(encoding="utf-8").startswith("   1 | 2 |    3\n")


def test_workbook_output(table_file, tmp_path):
    output = tmp_path / "out.xlsx"
    assert main([str(table_file), str(output)]) == 0
    ws = load_workbook(output).active
    assert ws["C1"].value == 3
    assert ws["C2"].value == 2.25


def test_parser_defaults():
    args = build_parser().parse_args(["table.txt"])
    assert args.output is None
    assert args.precision is None
    assert args.max_depth == 100
    assert not args.verbose
