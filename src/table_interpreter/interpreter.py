import logging

from table_interpreter import config
from table_interpreter.ast import (
    BinaryOperation,
    CellRef,
    ConstantRef,
    Function,
    NodeId,
    Number,
    RangeRef,
    UnaryOperation,
)
from table_interpreter.cell import Cell, CellKind, EvaluationState, clone_cell
from table_interpreter.errors import (
    CoercionError,
    CycleError,
    EvaluationDepthExceeded,
    EvaluationError,
    TableError,
    TableFunctionError,
)
from table_interpreter.functions import RANGE, SCALAR, lookup_function
from table_interpreter.position import CellPosition, Range
from table_interpreter.table import Table


def apply_operator(operator: str, left: float, right: float) -> float:
    match operator:
        case "+":
            return left + right
        case "-":
            return left - right
        case "*":
            return left * right
        case "/":
            if right == 0:
                raise EvaluationError("Division by zero")
            return left / right
        case _:
            raise ValueError(f"Unknown operator: {operator}")


class TableInterpreter:
    """Lazily evaluates the cells of a table, in place.

    A cell is evaluated the first time something asks for it and its result
    is memoized on the cell itself. Asking for a cell that is still being
    evaluated means its formula depends on itself: that cell is replaced by a
    "Loop!" error, which then propagates to every cell of the cycle.
    """

    def __init__(self, table: Table):
        self.table = table
        self.arena = table.arena
        # Nested evaluations (cells and sub-expressions) on the Python stack
        self.depth = 0

    def evaluate(self) -> None:
        """Evaluate every cell of the table, row by row."""
        for position in self.table.positions():
            self.ensure_evaluated(position)

    def ensure_evaluated(self, position: CellPosition) -> None:
        """Evaluate the cell at `position` and everything it depends on.

        References are followed recursively up to `config.max_evaluation_depth`
        nested evaluations. A longer chain is unwound and evaluated again from
        the cell that was out of reach, so its length is only bounded by the
        size of the table.
        """
        pending = [position]
        while pending:
            try:
                self._ensure_evaluated(pending[-1])
            except EvaluationDepthExceeded as e:
                if e.position in pending:
                    # Each pending cell waits on the next one: this is a cycle
                    logging.debug(f"Cycle detected at {e.position}")
                    self.table.set_cell(e.position, Cell.from_error(CycleError("Loop!")))
                else:
                    logging.debug(f"Resuming evaluation from {e.position}")
                    pending.append(e.position)
            else:
                pending.pop()

    def _ensure_evaluated(self, position: CellPosition) -> None:
        if not self.table.contains(position):
            return

        cell = self.table.cell_at(position)
        if cell.state == EvaluationState.DONE:
            return

        if cell.state == EvaluationState.IN_PROGRESS:
            logging.debug(f"Cycle detected at {position}")
            self.table.set_cell(position, Cell.from_error(CycleError("Loop!")))
            return

        if cell.kind not in (CellKind.EXPRESSION, CellKind.CLONE):
            cell.state = EvaluationState.DONE
            return

        if self.depth >= config.max_evaluation_depth:
            raise EvaluationDepthExceeded(position)

        self._evaluate_cell(position, cell)

    def _evaluate_cell(self, position: CellPosition, cell: Cell) -> None:
        cell.state = EvaluationState.IN_PROGRESS
        self.depth += 1
        try:
            if cell.kind == CellKind.EXPRESSION:
                self._evaluate_expression_cell(position, cell)
            else:
                self._resolve_clone(position, cell)
        except EvaluationDepthExceeded:
            # Evaluated again once the cell out of reach is done
            if self.table.cell_at(position) is cell:
                cell.state = EvaluationState.PENDING
            raise
        finally:
            self.depth -= 1

    def _evaluate_expression_cell(self, position: CellPosition, cell: Cell) -> None:
        assert cell.node is not None
        try:
            value = self.evaluate_node(cell.node, cell.shift)
        except TableError as e:
            self._fail(position, cell, e)
            return

        # The cell may have been turned into a cycle error while we were busy
        if self.table.cell_at(position) is cell:
            cell.number = value
            cell.state = EvaluationState.DONE

    def _resolve_clone(self, position: CellPosition, cell: Cell) -> None:
        source = position.offset(cell.direction, cell.offset)
        self._ensure_evaluated(source)
        if self.table.cell_at(position) is not cell:
            # Broken while resolving the source, i.e. the clone is on a cycle
            return

        copy = clone_cell(self.table.cell_at(source), cell.direction, cell.offset)
        logging.debug(f"{position} cloned {source} as {copy.kind.name}")
        self.table.set_cell(position, copy)
        if copy.kind == CellKind.EXPRESSION:
            self._evaluate_cell(position, copy)
        else:
            copy.state = EvaluationState.DONE

    def _fail(self, position: CellPosition, cell: Cell, error: TableError) -> None:
        # A cell already replaced by a cycle error keeps that error
        if self.table.cell_at(position) is cell:
            self.table.set_cell(position, Cell.from_error(error))

    def evaluate_node(self, node_id: NodeId, shift: CellPosition) -> float:
        """Evaluate a node, moving every relative reference by `shift`."""
        self.depth += 1
        try:
            return self._evaluate_node(node_id, shift)
        finally:
            self.depth -= 1

    def _evaluate_node(self, node_id: NodeId, shift: CellPosition) -> float:
        node = self.arena[node_id]

        if isinstance(node, Number):
            return node.value

        elif isinstance(node, CellRef):
            return self._reference_value(node.position.shift(shift))

        elif isinstance(node, ConstantRef):
            return self._reference_value(node.position)

        elif isinstance(node, RangeRef):
            raise EvaluationError("Ranges can only be used in functions")

        elif isinstance(node, BinaryOperation):
            return self._evaluate_binary_op(node, shift)

        elif isinstance(node, UnaryOperation):
            value = self.evaluate_node(node.operand, shift)
            return -value if node.operator == "-" else value

        elif isinstance(node, Function):
            return self._evaluate_function(node, shift)

        raise ValueError(f"Unknown node type: {type(node)}")

    def _evaluate_binary_op(self, node: BinaryOperation, shift: CellPosition) -> float:
        # `1 + 2 + 3 ...` nests to the left: walk down the left operands and
        # fold them back up, left to right, instead of recursing on each one.
        # An error on the left skips everything to its right.
        chain = [node]
        left = self.arena[node.left]
        while isinstance(left, BinaryOperation):
            chain.append(left)
            left = self.arena[left.left]

        value = self.evaluate_node(chain[-1].left, shift)
        for operation in reversed(chain):
            right = self.evaluate_node(operation.right, shift)
            value = apply_operator(operation.operator, value, right)
        return value

    def _reference_value(self, position: CellPosition) -> float:
        self._ensure_evaluated(position)
        cell = self.table.cell_at(position)

        match cell.kind:
            case CellKind.NUMBER:
                return cell.number
            case CellKind.EXPRESSION:
                if cell.state != EvaluationState.DONE:
                    raise EvaluationError(f"{position} could not be evaluated")
                return cell.number
            case CellKind.EMPTY:
                return 0.0
            case CellKind.TEXT:
                raise CoercionError("Cannot operate on text")
            case CellKind.SEPARATOR:
                raise CoercionError("Cannot operate on a separator")
            case CellKind.ERROR:
                assert cell.error is not None
                raise cell.error.with_traceback(None)
            case _:
                raise EvaluationError(f"{position} could not be evaluated")

    def _evaluate_function(self, node: Function, shift: CellPosition) -> float:
        function = lookup_function(node.name)

        # Check every argument before evaluating any of them
        if len(node.arguments) != len(function.arguments):
            raise TableFunctionError(
                f"{function.name.upper()} expects {len(function.arguments)} "
                f"argument(s), got {len(node.arguments)}"
            )
        for i, (arg, kind) in enumerate(zip(node.arguments, function.arguments)):
            is_range = isinstance(self.arena[arg], RangeRef)
            if kind == RANGE and not is_range:
                raise TableFunctionError(
                    f"Argument {i + 1} of {function.name.upper()} must be a range"
                )
            if kind == SCALAR and is_range:
                raise TableFunctionError(
                    f"Argument {i + 1} of {function.name.upper()} cannot be a range"
                )

        values = []
        for arg, kind in zip(node.arguments, function.arguments):
            arg_node = self.arena[arg]
            if kind == RANGE:
                assert isinstance(arg_node, RangeRef)
                values.append(self.range_values(arg_node.range.shift(shift)))
            else:
                values.append(self.evaluate_node(arg, shift))
        return function.evaluate(*values)

    def range_values(self, cell_range: Range) -> list[float]:
        """Evaluate every cell of a range and return their numbers.

        Cells without a number (text, empty, errors...) count as 0.
        """
        if not (
            self.table.contains(cell_range.start) and self.table.contains(cell_range.end)
        ):
            raise EvaluationError(f"Range {cell_range} is outside the table")

        values: list[float] = []
        for position in cell_range.positions():
            self._ensure_evaluated(position)
            cell = self.table.cell_at(position)
            if cell.kind == CellKind.NUMBER or (
                cell.kind == CellKind.EXPRESSION and cell.state == EvaluationState.DONE
            ):
                values.append(cell.number)
            else:
                if cell.kind != CellKind.EMPTY:
                    logging.debug(f"{position} ({cell.kind.name}) counts as 0 in {cell_range}")
                values.append(0.0)
        return values
