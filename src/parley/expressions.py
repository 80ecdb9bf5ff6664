"""
Condition language: AST, precedence climbing parser and evaluator.

Grammar, lowest to highest precedence:
    ||  <  &&  <  == !=  <  < <= > >=  <  unary !  <  ( ... )

Evaluation never raises on unknown variables, they evaluate to None (absent).
Ordering comparisons are the only operations with a type requirement.
"""

import operator
from collections.abc import Mapping
from functools import cache

from pydantic import BaseModel

from parley.errors import ExpressionError, ExpressionTypeError
from parley.models import Value
from parley.text import parse_number
from parley.tokens import Tokenizer

PRECEDENCE = {
    "||": 1,
    "&&": 2,
    "==": 3,
    "!=": 3,
    "<": 4,
    "<=": 4,
    ">": 4,
    ">=": 4,
}
ORDERING = {
    "<": operator.lt,
    "<=": operator.le,
    ">": operator.gt,
    ">=": operator.ge,
}


# AST models
class Expr(BaseModel):
    pass


class Constant(Expr):
    value: Value


class Variable(Expr):
    name: str


class Not(Expr):
    operand: Expr


class Binary(Expr):
    op: str
    left: Expr
    right: Expr


class ExpressionParser:
    def __init__(self, text: str):
        self.tokens = Tokenizer(text)

    def parse(self) -> Expr:
        expr = self.parse_expression()
        token = self.tokens.peek()
        if token.type != "END":
            raise ExpressionError(
                f"Unexpected token {token.value!r} at position {token.start_pos}", token.start_pos
            )
        return expr

    def parse_expression(self, min_precedence: int = 0) -> Expr:
        left = self.parse_unary()
        while True:
            token = self.tokens.peek()
            if token.type != "OP" or token.value not in PRECEDENCE:
                break
            precedence = PRECEDENCE[token.value]
            if precedence < min_precedence:
                break
            self.tokens.pop()
            # left associative
            right = self.parse_expression(precedence + 1)
            left = Binary(op=token.value, left=left, right=right)
        return left

    def parse_unary(self) -> Expr:
        token = self.tokens.peek()
        if token.type == "OP" and token.value == "!":
            self.tokens.pop()
            return Not(operand=self.parse_unary())
        return self.parse_primary()

    def parse_primary(self) -> Expr:
        token = self.tokens.pop()
        match token.type:
            case "NUMBER":
                return Constant(value=float(token.value))
            case "STRING":
                return Constant(value=token.value)
            case "TRUE":
                return Constant(value=True)
            case "FALSE":
                return Constant(value=False)
            case "NULL":
                return Constant(value=None)
            case "NAME":
                return Variable(name=token.value)
            case "LPAR":
                expr = self.parse_expression()
                close = self.tokens.pop()
                if close.type != "RPAR":
                    raise ExpressionError(
                        f"Expected ')' but found {close.value!r} at position {close.start_pos}",
                        close.start_pos,
                    )
                return expr
            case "END":
                raise ExpressionError(
                    f"Unexpected end of expression at position {token.start_pos}", token.start_pos
                )
            case _:
                raise ExpressionError(
                    f"Unexpected token {token.value!r} at position {token.start_pos}",
                    token.start_pos,
                )


@cache
def parse_expression(text: str) -> Expr:
    return ExpressionParser(text).parse()


def kind_name(value: Value) -> str:
    match value:
        case None:
            return "null"
        case bool():
            return "bool"
        case float() | int():
            return "number"
        case str():
            return "string"
        case _:
            return type(value).__name__


def truthy(value: Value) -> bool:
    match value:
        case None:
            return False
        case bool():
            return value
        case float() | int():
            return abs(value) > 0
        case str():
            return value != ""
        case _:
            return True


def to_number(value: Value) -> float | None:
    """Numeric view of a value, strings count when they look like a number, bools never do."""
    match value:
        case bool() | None:
            return None
        case float() | int():
            return float(value)
        case str():
            return parse_number(value)
        case _:
            return None


def values_equal(left: Value, right: Value) -> bool:
    if left is None or right is None:
        return left is None and right is None
    if isinstance(left, str) and isinstance(right, str):
        return left == right

    left_number, right_number = to_number(left), to_number(right)
    if left_number is not None and right_number is not None:
        return left_number == right_number

    # plain == would make True equal to 1.0
    return type(left) is type(right) and left == right


def compare(op: str, left: Value, right: Value) -> bool:
    left_number, right_number = to_number(left), to_number(right)
    if left_number is None or right_number is None:
        raise ExpressionTypeError(
            f"Numeric comparison requires numbers, got '{kind_name(left)}' and '{kind_name(right)}'"
        )
    return ORDERING[op](left_number, right_number)


def evaluate(expr: Expr, variables: Mapping[str, Value]) -> Value:
    match expr:
        case Constant(value=value):
            return value
        case Variable(name=name):
            return variables.get(name)
        case Not(operand=operand):
            return not truthy(evaluate(operand, variables))
        case Binary(op="&&", left=left, right=right):
            return truthy(evaluate(left, variables)) and truthy(evaluate(right, variables))
        case Binary(op="||", left=left, right=right):
            return truthy(evaluate(left, variables)) or truthy(evaluate(right, variables))
        case Binary(op="==", left=left, right=right):
            return values_equal(evaluate(left, variables), evaluate(right, variables))
        case Binary(op="!=", left=left, right=right):
            return not values_equal(evaluate(left, variables), evaluate(right, variables))
        case Binary(op=op, left=left, right=right) if op in ORDERING:
            return compare(op, evaluate(left, variables), evaluate(right, variables))
        case Binary(op=op):
            raise ExpressionError(f"Unknown operator {op!r}")
        case _:
            raise ExpressionError(f"Unknown expression node {type(expr).__name__}")


def eval_bool(text: str | None, variables: Mapping[str, Value]) -> bool:
    """Evaluate condition text to a bool, an empty condition is always true."""
    if not text or not text.strip():
        return True
    return truthy(evaluate(parse_expression(text), variables))
