import pytest

from parley.errors import ExpressionError, ExpressionTypeError
from parley.expressions import (
    Binary,
    Constant,
    Not,
    Variable,
    eval_bool,
    evaluate,
    parse_expression,
    truthy,
    values_equal,
)
from parley.tokens import tokenize
from parley.variables import Variables


def test_tokenize():
    tokens = tokenize('hasKey && gold >= 10.5 || name == "a\\"b" != !null')
    assert [(t.type, t.value) for t in tokens] == [
        ("NAME", "hasKey"),
        ("OP", "&&"),
        ("NAME", "gold"),
        ("OP", ">="),
        ("NUMBER", "10.5"),
        ("OP", "||"),
        ("NAME", "name"),
        ("OP", "=="),
        ("STRING", 'a"b'),
        ("OP", "!="),
        ("OP", "!"),
        ("NULL", "null"),
    ]


def test_tokenize_positions_and_keywords():
    tokens = tokenize("  (TRUE)<=.5e1")
    assert [t.type for t in tokens] == ["LPAR", "TRUE", "RPAR", "OP", "NUMBER"]
    assert [t.start_pos for t in tokens] == [2, 3, 7, 8, 10]
    assert tokens[-1].value == ".5e1"


def test_tokenize_string_escapes():
    (token,) = tokenize(r'"tab\there\nslash\\ \q"')
    assert token.value == "tab\there\nslash\\ q"


@pytest.mark.parametrize(
    "text, message",
    [
        ("a @ b", "Unexpected character '@' at position 2"),
        ("a = b", "Unexpected character '='"),
        ("a & b", "Unexpected character '&'"),
        ('"open', "Unterminated string"),
        ("1.2.3", "Invalid number '1.2.3'"),
        ("1e", "Invalid number"),
    ],
)
def test_tokenize_errors(text, message):
    with pytest.raises(ExpressionError, match=message):
        tokenize(text)


def test_precedence():
    a, b, c = Variable(name="a"), Variable(name="b"), Variable(name="c")
    assert parse_expression("a || b && c") == Binary(
        op="||", left=a, right=Binary(op="&&", left=b, right=c)
    )
    assert parse_expression("a == b < c") == Binary(
        op="==", left=a, right=Binary(op="<", left=b, right=c)
    )
    assert parse_expression("!a == b") == Binary(op="==", left=Not(operand=a), right=b)
    assert parse_expression("!(a || b)") == Not(operand=Binary(op="||", left=a, right=b))


def test_left_associativity():
    a, b, c = Variable(name="a"), Variable(name="b"), Variable(name="c")
    assert parse_expression("a == b == c") == Binary(
        op="==", left=Binary(op="==", left=a, right=b), right=c
    )
    assert parse_expression("a || b || c") == Binary(
        op="||", left=Binary(op="||", left=a, right=b), right=c
    )


def test_constants():
    assert parse_expression("3") == Constant(value=3.0)
    assert parse_expression('"x"') == Constant(value="x")
    assert parse_expression("false") == Constant(value=False)
    assert parse_expression("null") == Constant(value=None)
    assert parse_expression("!!true") == Not(operand=Not(operand=Constant(value=True)))


@pytest.mark.parametrize(
    "text, message",
    [
        ("a &&", "Unexpected end of expression"),
        ("", "Unexpected end of expression"),
        ("(a || b", "Expected '\\)'"),
        ("a b", "Unexpected token 'b' at position 2"),
        ("a )", "Unexpected token"),
        ("&& a", "Unexpected token '&&'"),
    ],
)
def test_parse_errors(text, message):
    with pytest.raises(ExpressionError, match=message):
        parse_expression(text)


def test_equality_and_inequality():
    text = 'a == 1 && b != "x"'
    assert eval_bool(text, {"a": 1.0, "b": "y"})
    assert not eval_bool(text, {"a": 1.0, "b": "x"})


def test_negation_of_absent_variable():
    assert eval_bool("!hasKey", {})
    assert not eval_bool("!hasKey", {"hasKey": True})
    assert eval_bool("  !hasKey  ", {"hasKey": False})


@pytest.mark.parametrize(
    "text, variables, expected",
    [
        ("", {}, True),
        ("   ", {}, True),
        ("missing", {}, False),
        ("missing == null", {}, True),
        ("missing != 0", {}, True),
        ("x", {"x": 0.0}, False),
        ("x", {"x": -2.0}, True),
        ("x", {"x": ""}, False),
        ("x", {"x": "0"}, True),
        ('"10" == 10', {}, True),
        ('"10" > 9', {}, True),
        ('" 2.5 " <= 2.5', {}, True),
        ('"abc" == "ABC"', {}, False),
        ('"1.0" == "1"', {}, False),
        ("true == 1", {}, False),
        ("true == true", {}, True),
        ("gold >= 10 && !greedy", {"gold": 10.0}, True),
        ("a < b || c", {"a": 2.0, "b": 1.0, "c": "yes"}, True),
    ],
)
def test_eval_bool(text, variables, expected):
    assert eval_bool(text, variables) is expected


def test_none_condition_is_true():
    assert eval_bool(None, {}) is True


def test_short_circuit():
    # the right operand would raise if it were evaluated
    assert eval_bool("false && 1 < true", {}) is False
    assert eval_bool("true || 1 < true", {}) is True
    with pytest.raises(ExpressionTypeError):
        eval_bool("true && 1 < true", {})


def test_logical_operators_return_bools():
    assert evaluate(parse_expression('"x" || 0'), {}) is True
    assert evaluate(parse_expression("1 && 2"), {}) is True
    assert evaluate(parse_expression("x"), {"x": "value"}) == "value"


def test_ordering_on_bool_raises():
    with pytest.raises(ExpressionTypeError, match="bool") as excinfo:
        eval_bool("true < 2", {})
    assert isinstance(excinfo.value, TypeError)
    assert "'bool' and 'number'" in str(excinfo.value)


@pytest.mark.parametrize("text", ['"abc" < 1', "missing > 0", "null <= null"])
def test_ordering_requires_numbers(text):
    with pytest.raises(ExpressionTypeError, match="Numeric comparison requires numbers"):
        eval_bool(text, {})


def test_case_insensitive_variables():
    variables = Variables({"hasKey": True})
    assert eval_bool("HASKEY && haskey", variables)


def test_truthy():
    assert truthy(None) is False
    assert truthy(0.0) is False
    assert truthy(0.001) is True
    assert truthy("false") is True


def test_values_equal():
    assert values_equal(None, None)
    assert not values_equal(None, False)
    assert not values_equal("", None)
    assert values_equal(2, 2.0)
    assert not values_equal(False, 0.0)
