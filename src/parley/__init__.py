"""Branching dialogue scripts: parser, condition language and runtime."""

from .errors import (
    ChoiceIndexError,
    DialogueError,
    ExpressionError,
    ExpressionTypeError,
    NoAvailableChoicesError,
    ParleyError,
    ScriptSyntaxError,
    UnknownNodeError,
)
from .events import DialogueEvent
from .expressions import eval_bool
from .parser import parse_file, parse_script
from .runtime import DialogueRunner

__all__ = [
    "ChoiceIndexError",
    "DialogueError",
    "DialogueEvent",
    "DialogueRunner",
    "ExpressionError",
    "ExpressionTypeError",
    "NoAvailableChoicesError",
    "ParleyError",
    "ScriptSyntaxError",
    "UnknownNodeError",
    "eval_bool",
    "parse_file",
    "parse_script",
]
