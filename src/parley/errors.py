"""Exceptions raised while parsing and running dialogue scripts."""


class ParleyError(Exception):
    """Base exception for the package."""


class ScriptSyntaxError(ParleyError, ValueError):
    """Raised when script text is malformed."""

    def __init__(self, message: str, line: int | None = None, text: str | None = None):
        self.line = line
        self.text = text
        if line is not None:
            message = f"line {line}: {message}"
        super().__init__(message)


class ExpressionError(ParleyError, ValueError):
    """Raised when a condition cannot be tokenized, parsed or evaluated."""

    def __init__(self, message: str, position: int | None = None):
        self.position = position
        super().__init__(message)


class ExpressionTypeError(ExpressionError, TypeError):
    """Raised when an ordering comparison gets non-numeric operands."""


class DialogueError(ParleyError, RuntimeError):
    """Raised when the runtime cannot make progress."""


class UnknownNodeError(DialogueError, KeyError):
    """Raised on a jump to a node that was never defined."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Unknown node: {name}")

    # KeyError quotes its argument, keep the plain message
    def __str__(self):
        return self.args[0]


class NoAvailableChoicesError(DialogueError):
    """Raised when every entry of a choice step is filtered out."""


class ChoiceIndexError(DialogueError, IndexError):
    """Raised when a choice index does not address a displayed option."""
