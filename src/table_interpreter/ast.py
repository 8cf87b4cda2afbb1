from typing import NamedTuple

from table_interpreter.position import CellPosition, Range

# Index of a node inside the table's ExpressionArena
NodeId = int


class Number(NamedTuple):
    value: float


class CellRef(NamedTuple):
    """Relative reference, moved by the shift offset of the cell evaluating it."""

    position: CellPosition


class ConstantRef(NamedTuple):
    """Absolute (`$`) reference, never shifted."""

    position: CellPosition


class RangeRef(NamedTuple):
    range: Range


class BinaryOperation(NamedTuple):
    left: NodeId
    operator: str
    right: NodeId


class UnaryOperation(NamedTuple):
    operator: str
    operand: NodeId


class Function(NamedTuple):
    name: str
    arguments: tuple[NodeId, ...]


# Type alias for all possible AST nodes
ASTNode = (
    Number | CellRef | ConstantRef | RangeRef | BinaryOperation | UnaryOperation | Function
)


class ExpressionArena:
    """Append-only store for every node parsed for one table.

    Nodes are immutable and never removed, so a NodeId stays valid for the
    lifetime of the arena and can be shared by any number of cells.
    """

    def __init__(self):
        self.nodes: list[ASTNode] = []

    def add(self, node: ASTNode) -> NodeId:
        self.nodes.append(node)
        return len(self.nodes) - 1

    def __getitem__(self, node_id: NodeId) -> ASTNode:
        return self.nodes[node_id]

    def __len__(self) -> int:
        return len(self.nodes)


def format_node(arena: ExpressionArena, node_id: NodeId) -> str:
    """Render a node back to formula text (without the leading `=`)."""
    node = arena[node_id]
    if isinstance(node, Number):
        value = node.value
        return str(int(value)) if value.is_integer() else repr(value)
    if isinstance(node, CellRef):
        return str(node.position)
    if isinstance(node, ConstantRef):
        return f"${node.position}"
    if isinstance(node, RangeRef):
        return str(node.range)
    if isinstance(node, BinaryOperation):
        # Left operands of a long `a + b + c ...` are formatted in a loop
        chain = [node]
        while isinstance(arena[chain[-1].left], BinaryOperation):
            chain.append(arena[chain[-1].left])

        text = format_node(arena, chain[-1].left)
        for operation in reversed(chain):
            left = text
            right = format_node(arena, operation.right)
            if operation.operator in "*/":
                # Operands of lower precedence need their parentheses back
                if _is_additive(arena, operation.left):
                    left = f"({left})"
                if _is_additive(arena, operation.right):
                    right = f"({right})"
            elif operation.operator == "-" and _is_additive(arena, operation.right):
                right = f"({right})"
            text = f"{left} {operation.operator} {right}"
        return text
    if isinstance(node, UnaryOperation):
        operand = format_node(arena, node.operand)
        if isinstance(arena[node.operand], BinaryOperation):
            operand = f"({operand})"
        return f"{node.operator}{operand}"
    if isinstance(node, Function):
        args = ", ".join(format_node(arena, arg) for arg in node.arguments)
        return f"{node.name}({args})"
    raise ValueError(f"Unknown node type: {type(node)}")


def _is_additive(arena: ExpressionArena, node_id: NodeId) -> bool:
    node = arena[node_id]
    return isinstance(node, BinaryOperation) and node.operator in "+-"
