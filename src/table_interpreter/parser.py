from contextlib import contextmanager
from typing import Callable, Iterator, List, Optional

from table_interpreter.ast import (
    BinaryOperation,
    CellRef,
    ConstantRef,
    ExpressionArena,
    Function,
    NodeId,
    Number,
    RangeRef,
    UnaryOperation,
)
from table_interpreter.errors import ParseError
from table_interpreter.position import CellPosition, Range
from table_interpreter.tokenizer import TableTokenizer, Token, TokenType
from table_interpreter.utils import extract_cell_reference, resolve_relative_reference

# Deepest nesting of parentheses, function calls and signs in one formula
MAX_NESTING_DEPTH = 64


def parse_formula(
    formula: str, origin: CellPosition, arena: ExpressionArena
) -> NodeId:
    """Parse a formula (without its leading `=`) written in the cell at `origin`."""
    tokens = TableTokenizer(formula).tokenize()
    return TableParser(tokens, origin, arena).parse()


class TableParser:
    """Recursive-descent parser that allocates every node it builds in `arena`.

    Relative references (`^`, `>2`...) are resolved against `origin`, the
    position of the cell the formula was written in.
    """

    def __init__(self, tokens: List[Token], origin: CellPosition, arena: ExpressionArena):
        self.tokens = tokens
        self.origin = origin
        self.arena = arena
        self.current = 0
        self.nesting = 0

    def parse(self) -> NodeId:
        """Parse tokens into an AST and return the id of its root."""
        self.current = 0
        if not self.tokens:
            raise ParseError("Expected value, got nothing instead")

        root = self.parse_expression()
        if (token := self.peek()) is not None:
            raise ParseError(
                f"Unexpected '{token.value}' at position {token.position}, expected operator"
            )
        self._reject_range(root)
        return root

    def peek(self) -> Optional[Token]:
        """Look at the current token without consuming it."""
        if self.current >= len(self.tokens):
            return None
        return self.tokens[self.current]

    def read(self) -> Token:
        """Consume and return the current token."""
        if self.current >= len(self.tokens):
            raise ParseError("Unexpected end of formula")
        tok = self.tokens[self.current]
        self.current += 1
        return tok

    def read_if_match(self, *types: TokenType) -> Optional[Token]:
        """Consume and return current token if it matches any of the given types."""
        token = self.peek()
        if token is not None and token.type in types:
            self.current += 1
            return token
        return None

    @contextmanager
    def _nested(self, token: Token) -> Iterator[None]:
        self.nesting += 1
        if self.nesting > MAX_NESTING_DEPTH:
            raise ParseError(f"Formula is nested too deeply at position {token.position}")
        try:
            yield
        finally:
            self.nesting -= 1

    def _reject_range(self, node_id: NodeId) -> None:
        if isinstance(self.arena[node_id], RangeRef):
            raise ParseError("Ranges can only be used in functions")

    def _parse_binary_operation(
        self, parse_operand: Callable[[], NodeId], valid_operators: set[str]
    ) -> NodeId:
        """Parse a binary operation with the given operand parser and operators."""
        left = parse_operand()

        while True:
            next_tok = self.peek()
            if (
                not next_tok
                or next_tok.type != TokenType.OPERATOR
                or next_tok.value not in valid_operators
            ):
                break

            self.read()  # consume operator
            right = parse_operand()
            self._reject_range(left)
            self._reject_range(right)
            left = self.arena.add(
                BinaryOperation(left=left, operator=next_tok.value, right=right)
            )

        return left

    def parse_expression(self) -> NodeId:
        """Parse an expression (lowest precedence: addition/subtraction)."""
        return self._parse_binary_operation(self.parse_term, {"+", "-"})

    def parse_term(self) -> NodeId:
        """Parse multiplication/division (*, /)."""
        return self._parse_binary_operation(self.parse_unary, {"*", "/"})

    def parse_unary(self) -> NodeId:
        token = self.peek()
        if token is not None and token.type == TokenType.OPERATOR and token.value in "+-":
            self.read()
            with self._nested(token):
                operand = self.parse_unary()
            self._reject_range(operand)
            return self.arena.add(UnaryOperation(operator=token.value, operand=operand))
        return self.parse_factor()

    def parse_factor(self) -> NodeId:
        """Parse a factor (highest precedence: literals, references, functions)."""
        token = self.peek()
        if token is None:
            raise ParseError("Expected value, got nothing instead")

        if token.type == TokenType.NUMBER:
            self.read()
            return self.arena.add(Number(float(token.value)))

        elif token.type in (TokenType.CELL, TokenType.RELATIVE):
            return self.parse_reference()

        elif token.type == TokenType.DOLLAR:
            self.read()
            ref_token = self.read_if_match(TokenType.CELL, TokenType.RELATIVE)
            if ref_token is None:
                raise ParseError(f"Expected cell reference after '$' at position {token.position}")
            if (next_token := self.peek()) and next_token.type == TokenType.COLON:
                raise ParseError("Absolute references cannot be used in ranges")
            return self.arena.add(ConstantRef(self._resolve_reference(ref_token)))

        elif token.type == TokenType.NAME:
            self.read()
            if not self.read_if_match(TokenType.LPAREN):
                raise ParseError(f"Expected '(' after function name '{token.value}'")
            with self._nested(token):
                return self.parse_function_call(token.value)

        elif token.type == TokenType.LPAREN:
            self.read()  # consume '('
            with self._nested(token):
                expr = self.parse_expression()
            self._reject_range(expr)
            if not self.read_if_match(TokenType.RPAREN):
                raise ParseError("Expected closing parenthesis ')'")
            return expr

        elif token.type == TokenType.OPERATOR:
            raise ParseError(f"Unexpected '{token.value}', expected value")

        raise ParseError(
            f"Unexpected token: {token.type.name} at position {token.position}"
        )

    def parse_reference(self) -> NodeId:
        """Parse a cell reference, or a range if it is followed by ':'."""
        start = self._resolve_reference(self.read())

        if not self.read_if_match(TokenType.COLON):
            return self.arena.add(CellRef(start))

        end_token = self.read_if_match(TokenType.CELL, TokenType.RELATIVE)
        if end_token is None:
            curr = self.peek()
            raise ParseError(
                f"Expected cell reference after ':', got "
                f"{curr.type.name if curr else 'end of formula'}"
            )
        end = self._resolve_reference(end_token)
        return self.arena.add(RangeRef(Range(start, end)))

    def parse_function_call(self, name: str) -> NodeId:
        """Parse the arguments of a function call; at least one is required."""
        args = []

        while True:
            args.append(self.parse_expression())

            next_tok = self.peek()
            if not next_tok:
                raise ParseError("Unexpected end of formula in function call")

            if next_tok.type == TokenType.RPAREN:
                self.read()  # consume ')'
                break

            if next_tok.type == TokenType.COMMA:
                self.read()  # consume ','
                continue

            raise ParseError(
                f"Expected ',' or ')' in function call, got {next_tok.type.name}"
            )

        return self.arena.add(Function(name=name, arguments=tuple(args)))

    def _resolve_reference(self, token: Token) -> CellPosition:
        if token.type == TokenType.RELATIVE:
            return resolve_relative_reference(token.value, self.origin)

        position = extract_cell_reference(token.value)
        if position is None:
            raise ParseError(f"Invalid cell reference: {token.value}")
        return position
