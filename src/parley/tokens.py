"""
Condition tokenizer.
Splits a condition such as `hasKey && gold >= 10` into lark tokens, one token of lookahead.
"""

from lark import Token

from parley.errors import ExpressionError

# longest first so `<=` wins over `<`
OPERATORS = ("&&", "||", "==", "!=", "<=", ">=", "<", ">", "!")
KEYWORDS = {"true": "TRUE", "false": "FALSE", "null": "NULL"}
ESCAPES = {"n": "\n", "t": "\t", '"': '"', "\\": "\\"}


class Tokenizer:
    def __init__(self, text: str | None):
        self.text = text or ""
        self.pos = 0
        self._peeked: Token | None = None

    def peek(self) -> Token:
        if self._peeked is None:
            self._peeked = self._scan()
        return self._peeked

    def pop(self) -> Token:
        token = self.peek()
        self._peeked = None
        return token

    def __iter__(self):
        while (token := self.pop()).type != "END":
            yield token

    def _scan(self) -> Token:
        text = self.text
        while self.pos < len(text) and text[self.pos].isspace():
            self.pos += 1

        start = self.pos
        if start >= len(text):
            return Token("END", "", start_pos=start)

        char = text[start]
        if char == "(":
            self.pos += 1
            return Token("LPAR", char, start_pos=start)
        if char == ")":
            self.pos += 1
            return Token("RPAR", char, start_pos=start)

        for op in OPERATORS:
            if text.startswith(op, start):
                self.pos += len(op)
                return Token("OP", op, start_pos=start)

        if char == '"':
            return self._scan_string(start)

        if char.isdigit() or (char == "." and text[start + 1 : start + 2].isdigit()):
            return self._scan_number(start)

        if char.isalpha() or char == "_":
            self.pos += 1
            while self.pos < len(text) and (text[self.pos].isalnum() or text[self.pos] == "_"):
                self.pos += 1
            name = text[start : self.pos]
            return Token(KEYWORDS.get(name.lower(), "NAME"), name, start_pos=start)

        raise ExpressionError(f"Unexpected character {char!r} at position {start}", start)

    def _scan_string(self, start: int) -> Token:
        text = self.text
        self.pos = start + 1
        chars = []
        while self.pos < len(text):
            char = text[self.pos]
            self.pos += 1
            if char == '"':
                return Token("STRING", "".join(chars), start_pos=start)
            if char == "\\" and self.pos < len(text):
                escaped = text[self.pos]
                self.pos += 1
                chars.append(ESCAPES.get(escaped, escaped))
                continue
            chars.append(char)

        raise ExpressionError(f"Unterminated string starting at position {start}", start)

    def _scan_number(self, start: int) -> Token:
        text = self.text
        self.pos = start + 1
        while self.pos < len(text) and (text[self.pos].isdigit() or text[self.pos] == "."):
            self.pos += 1

        # optional exponent
        if self.pos < len(text) and text[self.pos] in "eE":
            self.pos += 1
            if self.pos < len(text) and text[self.pos] in "+-":
                self.pos += 1
            while self.pos < len(text) and text[self.pos].isdigit():
                self.pos += 1

        raw = text[start : self.pos]
        try:
            float(raw)
        except ValueError:
            raise ExpressionError(f"Invalid number {raw!r} at position {start}", start) from None
        return Token("NUMBER", raw, start_pos=start)


def tokenize(text: str) -> list[Token]:
    return list(Tokenizer(text))
