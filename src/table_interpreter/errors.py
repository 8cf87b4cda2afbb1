class TableError(Exception):
    """Base class for every error that can end up in a table cell."""


class TokenizerError(TableError):
    pass


class ParseError(TableError):
    pass


class ReadError(TableError):
    """The grid text itself is malformed and cannot be loaded."""


class EvaluationError(TableError):
    pass


class CycleError(EvaluationError):
    pass


class CoercionError(EvaluationError):
    pass


class FunctionNotFound(EvaluationError):
    pass


class TableFunctionError(EvaluationError):
    pass


class EvaluationDepthExceeded(Exception):
    """Raised when a chain of references is too deep to follow recursively.

    Not a TableError: it never ends up in a cell. The interpreter unwinds the
    chain and resumes evaluation from `position`.
    """

    def __init__(self, position):
        super().__init__(f"Evaluation depth exceeded at {position}")
        self.position = position
