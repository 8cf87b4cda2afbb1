import re
from enum import Enum, auto
from typing import List, NamedTuple

from table_interpreter.errors import TokenizerError

CELL_REF_REGEX = re.compile(r"[A-Z]+\d+")
RELATIVE_CHARS = "^><"


class TokenType(Enum):
    NUMBER = auto()
    CELL = auto()
    RELATIVE = auto()  # ^ > v < with an optional count
    NAME = auto()
    OPERATOR = auto()
    DOLLAR = auto()
    LPAREN = auto()
    RPAREN = auto()
    COMMA = auto()
    COLON = auto()


class Token(NamedTuple):
    type: TokenType
    value: str
    position: int


class TableTokenizer:
    SINGLE_CHAR_TOKENS = {
        "$": TokenType.DOLLAR,
        "(": TokenType.LPAREN,
        ")": TokenType.RPAREN,
        ",": TokenType.COMMA,
        ":": TokenType.COLON,
    }

    def __init__(self, formula: str):
        self.formula = formula.strip()
        self.pos = 0
        self.length = len(self.formula)

    def tokenize(self) -> List[Token]:
        """Tokenize the formula and return list of tokens."""
        tokens = []
        while self.pos < self.length:
            char = self.formula[self.pos]

            if char.isspace():
                self.pos += 1
                continue
            elif char.isdigit() or char == ".":
                tokens.append(self._tokenize_number())
            elif char in RELATIVE_CHARS:
                tokens.append(self._tokenize_relative())
            elif char.isalpha() or char == "_":
                tokens.append(self._tokenize_identifier())
            elif char in "+-*/":
                tokens.append(Token(TokenType.OPERATOR, char, self.pos))
                self.pos += 1
            elif char in self.SINGLE_CHAR_TOKENS:
                tokens.append(Token(self.SINGLE_CHAR_TOKENS[char], char, self.pos))
                self.pos += 1
            else:
                raise TokenizerError(
                    f"Unexpected character: {char} at position {self.pos}"
                )

        return tokens

    def _read_digits(self) -> str:
        start = self.pos
        while self.pos < self.length and self.formula[self.pos].isdigit():
            self.pos += 1
        return self.formula[start : self.pos]

    def _tokenize_relative(self) -> Token:
        """Tokenize a relative reference such as `^`, `>2` or `<10`."""
        start = self.pos
        self.pos += 1  # direction character
        self._read_digits()
        return Token(TokenType.RELATIVE, self.formula[start : self.pos], start)

    def _tokenize_identifier(self) -> Token:
        """Tokenize an identifier (function name, cell reference or `v`)."""
        start = self.pos
        while self.pos < self.length and (
            self.formula[self.pos].isalnum() or self.formula[self.pos] == "_"
        ):
            self.pos += 1

        value = self.formula[start : self.pos]
        # Lower-case `v` is the "down" direction, optionally followed by a count
        if value == "v" or (value[0] == "v" and value[1:].isdigit()):
            return Token(TokenType.RELATIVE, value, start)
        # `LOG10(` is a function call, not the cell LOG10
        if self._followed_by("("):
            return Token(TokenType.NAME, value, start)
        if CELL_REF_REGEX.fullmatch(value):
            return Token(TokenType.CELL, value, start)
        if value[0].isupper() and any(c.isdigit() for c in value):
            raise TokenizerError(f"Invalid cell reference: {value} at position {start}")
        return Token(TokenType.NAME, value, start)

    def _followed_by(self, char: str) -> bool:
        """Whether the next non-blank character is `char`."""
        rest = self.formula[self.pos :].lstrip()
        return rest.startswith(char)

    def _tokenize_number(self) -> Token:
        """Tokenize a number (integer or decimal)."""
        start = self.pos
        seen_decimal = False
        has_digits = False
        seen_exponent = False

        while self.pos < self.length:
            char = self.formula[self.pos]

            if char.isdigit():
                has_digits = True
                self.pos += 1
            elif char == "." and not seen_decimal and not seen_exponent:
                seen_decimal = True
                self.pos += 1
            elif char == "." and seen_decimal:
                raise TokenizerError(
                    f"Invalid number format at position {start}: multiple decimal points"
                )
            elif (char == "e" or char == "E") and not seen_exponent and has_digits:
                seen_exponent = True
                self.pos += 1
                # Optional sign after e/E
                if self.pos < self.length and (self.formula[self.pos] in "+-"):
                    self.pos += 1
                # Must have at least one digit after e/E
                if self.pos >= self.length or not self.formula[self.pos].isdigit():
                    raise TokenizerError(
                        f"Invalid scientific notation at position {start}: missing exponent"
                    )
            else:
                break

        value = self.formula[start : self.pos]

        if value == ".":
            raise TokenizerError(
                f"Invalid number format at position {start}: lone decimal point"
            )
        elif not has_digits:
            raise TokenizerError(
                f"Invalid number format at position {start}: no digits"
            )
        elif value.endswith("."):
            raise TokenizerError(
                f"Invalid number format at position {start}: trailing decimal point"
            )

        return Token(TokenType.NUMBER, value, start)
