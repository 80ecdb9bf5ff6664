import re
from collections.abc import Mapping

from parley.models import Value

number_re = re.compile(r"^\s*[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?\s*$")
variable_re = re.compile(r"\{(?P<name>[A-Za-z][A-Za-z0-9_]*)\}")


def parse_number(text: str) -> float | None:
    """
    Parse a decimal number the same way regardless of locale.

    Accepts an optional sign, digits with an optional fraction and an optional exponent.
    Anything else (including `nan`, `inf` and `1_000`) gives None.
    """
    if not number_re.search(text):
        return None
    return float(text)


def format_value(value: Value) -> str:
    match value:
        case bool():
            return "true" if value else "false"
        case float() | int():
            value = float(value)
            if value.is_integer() and abs(value) < 1e16:
                return str(int(value))
            return repr(value).replace("e", "E")
        case _:
            return str(value)


def interpolate(text: str, variables: Mapping[str, Value]) -> str:
    """Replace `{name}` tokens with variable values, unknown names are left as written."""
    if not text:
        return text

    def replace(match: re.Match) -> str:
        value = variables.get(match.group("name"))
        if value is None:
            return match.group(0)
        return format_value(value)

    return variable_re.sub(replace, text)
