import pytest

from parley.text import format_value, interpolate, parse_number
from parley.variables import Variables


@pytest.mark.parametrize(
    "text, expected",
    [
        ("10", 10.0),
        (" -2.5 ", -2.5),
        ("+.5", 0.5),
        ("3.", 3.0),
        ("1E-2", 0.01),
        ("abc", None),
        ("", None),
        ("1,5", None),
        ("1_000", None),
        ("nan", None),
        ("inf", None),
        ("1.2.3", None),
    ],
)
def test_parse_number(text, expected):
    assert parse_number(text) == expected


@pytest.mark.parametrize(
    "value, expected",
    [
        (True, "true"),
        (False, "false"),
        (10.0, "10"),
        (-3.0, "-3"),
        (2.5, "2.5"),
        (0.1, "0.1"),
        (1e20, "1E+20"),
        (-2.5e-7, "-2.5E-07"),
        (7, "7"),
        ("calm", "calm"),
    ],
)
def test_format_value(value, expected):
    assert format_value(value) == expected


def test_interpolate():
    variables = Variables({"gold": 10, "name": "Ada", "brave": True, "gone": None})
    assert interpolate("{name} has {gold} coins", variables) == "Ada has 10 coins"
    assert interpolate("brave={BRAVE}", variables) == "brave=true"
    assert interpolate("{gone} {missing} {1bad} {}", variables) == "{gone} {missing} {1bad} {}"
    assert interpolate("", variables) == ""


def test_variables_keep_latest_spelling():
    variables = Variables({"hasKey": True})
    variables["HASKEY"] = False
    assert list(variables) == ["HASKEY"]
    assert variables["haskey"] is False
    assert "HasKey" in variables
    assert 1 not in variables

    del variables["hasKEY"]
    assert len(variables) == 0


def test_variables_store_ints_as_numbers():
    variables = Variables()
    variables["n"] = 3
    variables["flag"] = True
    assert type(variables["n"]) is float
    assert variables["flag"] is True
