"""
Dialogue script parsing pipeline. There is no grammar, we work line by line like this.
1. Tree builder: Walk the lines, group them into nodes, choice blocks and if blocks, assign known tokens.
2. Transformer: Turn tokens into steps and commands, parse choice tags and `set` values.
"""

import re
from pathlib import Path

import rich
import typer
from lark import Token, Transformer, Tree
from lark.exceptions import VisitError
from rich.progress import track

from parley.config import walk_script_files
from parley.errors import ParleyError, ScriptSyntaxError
from parley.models import (
    Choice,
    Command,
    CommandStep,
    Condition,
    Dialogue,
    Jump,
    Menu,
    Node,
    Script,
    Set,
    Value,
)
from parley.text import parse_number

app = typer.Typer(pretty_exceptions_show_locals=False)

"""
Stage 1: Tree builder
Construct a raw tree of nodes and blocks, every script line becomes a token carrying its line number.
"""

title_re = re.compile(r"^title:(?P<name>.*)$", re.IGNORECASE)
if_re = re.compile(r"^if\b", re.IGNORECASE)


def is_command(strip: str) -> bool:
    return strip.startswith("<<") and strip.endswith(">>") and len(strip) >= 4


def unwrap_command(strip: str) -> str:
    return strip[2:-2].strip()


def is_indented(line: str) -> bool:
    return line.startswith("    ") or line.startswith("\t")


def is_block_keyword(inner: str) -> bool:
    return inner.lower() in ("else", "endif")


class ScriptTreeBuilder:
    def __init__(self, script: str):
        self.lines = script.replace("\r\n", "\n").replace("\r", "\n").split("\n")
        self.i = 0

    @property
    def lineno(self) -> int:
        return self.i + 1

    def build(self) -> Tree:
        root = Tree("start", [])
        node = None
        in_body = False

        while self.i < len(self.lines):
            raw = self.lines[self.i]
            strip = raw.strip()

            if not strip:
                self.i += 1
                continue

            if match := title_re.search(strip):
                title = Token("TITLE", match.group("name").strip(), line=self.lineno)
                node = Tree("node", [title, Tree("body", [])])
                root.children.append(node)
                in_body = False
                self.i += 1
                continue

            if strip == "---":
                if node is None:
                    raise ScriptSyntaxError("Found '---' before any 'title:'", self.lineno, raw)
                in_body = True
                self.i += 1
                continue

            if strip == "===":
                node = None
                in_body = False
                self.i += 1
                continue

            # anything outside a node body is ignored
            if not in_body or node is None:
                self.i += 1
                continue

            body = node.children[1]
            body.children.append(self.step())

        return root

    def step(self) -> Tree | Token:
        raw = self.lines[self.i]
        strip = raw.strip()

        if strip.startswith("->"):
            return self.menu()

        if is_command(strip):
            inner = unwrap_command(strip)
            if if_re.search(inner):
                return self.condition()
            token = Token("COMMAND", inner, line=self.lineno)
            self.i += 1
            return token

        token = Token("LINE", raw.rstrip(), line=self.lineno)
        self.i += 1
        return token

    def menu(self) -> Tree:
        """Consume contiguous `->` entries together with the indented commands under each."""
        choices = []
        while self.i < len(self.lines):
            strip = self.lines[self.i].strip()
            if not strip.startswith("->"):
                break

            header = Token("CHOICE", strip[2:].strip(), line=self.lineno)
            commands = []
            self.i += 1

            while self.i < len(self.lines):
                raw = self.lines[self.i]
                strip = raw.strip()
                if not strip:
                    self.i += 1
                    continue
                if strip.startswith("->") or not is_indented(raw):
                    break
                if not is_command(strip):
                    raise ScriptSyntaxError(
                        f"Expected command like <<jump Node>> under choice, got: {strip}",
                        self.lineno,
                        raw,
                    )
                # an indented <<else>> or <<endif>> closes the enclosing if block
                if is_block_keyword(unwrap_command(strip)):
                    break
                commands.append(Token("COMMAND", unwrap_command(strip), line=self.lineno))
                self.i += 1

            choices.append(Tree("choice", [header, *commands]))

        return Tree("menu", choices)

    def condition(self) -> Tree:
        """Consume an `<<if>>` block up to its matching `<<endif>>`."""
        start_raw = self.lines[self.i]
        start_line = self.lineno
        header = Token("IF", unwrap_command(start_raw.strip())[2:].strip(), line=start_line)
        then_body = Tree("body", [])
        else_body = Tree("body", [])
        active = then_body
        self.i += 1

        while self.i < len(self.lines):
            raw = self.lines[self.i]
            strip = raw.strip()

            if not strip:
                self.i += 1
                continue

            if is_command(strip):
                inner = unwrap_command(strip)
                if inner.lower() == "else":
                    active = else_body
                    self.i += 1
                    continue
                if inner.lower() == "endif":
                    self.i += 1
                    return Tree("condition", [header, then_body, else_body])

            active.children.append(self.step())

        raise ScriptSyntaxError(
            "Reached end of file while parsing if block (missing <<endif>>)", start_line, start_raw
        )


def build_script_tree(script: str) -> Tree:
    """
    Group script lines into a tree of nodes and blocks.
    """
    assert isinstance(script, str)
    return ScriptTreeBuilder(script).build()


"""
Stage 2: Transform
Parse commands, choice tags and values. Wrap bare commands into steps.
"""


def take_tag(text: str, tag: str, line: int) -> tuple[str, str | None, str]:
    """Split `before [tag inside] after`, inside is None when the tag is absent."""
    match = re.search(re.escape(tag), text, re.IGNORECASE)
    if match is None:
        return text, None, ""
    start = match.start()
    end = text.find("]", start)
    if end < 0:
        raise ScriptSyntaxError(f"Choice tag {tag.strip()}...] missing closing ']': {text}", line)
    return text[:start], text[start + len(tag) : end].strip(), text[end + 1 :]


def parse_choice_tags(raw: str, line: int) -> tuple[str, str | None, float | None]:
    """
    Split a choice header into display text, condition and time limit.

    "Open door [if hasKey]"          -> ("Open door", "hasKey", None)
    "Run [time 3] [if !brave]"       -> ("Run", "!brave", 3.0)
    """
    text, condition, after = take_tag(raw, "[if ", line)
    if condition is not None and not condition:
        raise ScriptSyntaxError(f"Empty [if ...] condition in: {raw}", line)

    # the time tag may sit on either side of the condition tag
    before, seconds, _ = take_tag(text, "[time ", line)
    if seconds is not None:
        text = before
    else:
        _, seconds, _ = take_tag(after, "[time ", line)

    time_limit = None
    if seconds is not None:
        time_limit = parse_number(seconds)
        if time_limit is None:
            raise ScriptSyntaxError(f"Invalid time value: {seconds}", line)

    return text.strip(), condition, time_limit


def parse_value(raw: str) -> Value:
    if raw.lower() == "true":
        return True
    if raw.lower() == "false":
        return False
    if len(raw) >= 2 and raw.startswith('"') and raw.endswith('"'):
        return raw[1:-1]
    if (number := parse_number(raw)) is not None:
        return number
    # bare words are kept as strings
    return raw


def parse_command(text: str, line: int = 0) -> Command:
    parts = text.split(None, 1)
    if not parts:
        raise ScriptSyntaxError("Empty command", line)

    head = parts[0].lower()
    tail = parts[1].strip() if len(parts) > 1 else ""

    match head:
        case "jump":
            return Jump(target=tail, line=line)
        case "set":
            name, eq, value = tail.partition("=")
            if not eq:
                raise ScriptSyntaxError(f"Bad set syntax (expected name = value): {tail}", line)
            return Set(name=name.strip(), value=parse_value(value.strip()), line=line)
        case _:
            raise ScriptSyntaxError(f"Unknown command: {head}", line)


class ScriptTransformer(Transformer):
    def LINE(self, token):
        return Dialogue(text=token.value, line=token.line)

    def COMMAND(self, token):
        return parse_command(token.value, token.line)

    def choice(self, children):
        header, *commands = children
        text, condition, time_limit = parse_choice_tags(header.value, header.line)
        return Choice(text=text, condition=condition, commands=commands, line=header.line), time_limit

    def menu(self, children):
        choices = [choice for choice, _ in children]
        limits = [limit for _, limit in children if limit is not None]
        # the shortest limit in the block wins
        return Menu(
            choices=choices,
            time_limit=min(limits) if limits else None,
            line=choices[0].line,
        )

    def body(self, children):
        steps = []
        for child in children:
            match child:
                case Jump() | Set():
                    steps.append(CommandStep(command=child, line=child.line))
                case _:
                    steps.append(child)
        return steps

    def condition(self, children):
        header, then_steps, else_steps = children
        return Condition(
            condition=header.value,
            then_steps=then_steps,
            else_steps=else_steps,
            line=header.line,
        )

    def node(self, children):
        title, steps = children
        return Node(name=title.value, steps=steps, line=title.line)

    def start(self, nodes):
        script = Script()
        for node in nodes:
            script.add(node)
        return script


def parse_script(script: str) -> Script:
    tree = build_script_tree(script)
    try:
        return ScriptTransformer().transform(tree)
    except VisitError as e:
        raise e.orig_exc from None


def parse_file(path: Path) -> Script:
    return parse_script(Path(path).read_text(encoding="utf-8"))


@app.command("parse")
def parse_and_print(path: Path, output: Path | None = None):
    """Parse a script and print its nodes."""
    script = parse_file(path)
    rich.print(script)
    rich.print(f"Parsed {len(script)} nodes")
    if output is not None:
        output.write_text(script.model_dump_json(indent=2))


@app.command("check")
def check_all_scripts(path: Path | None = None):
    """Parse every script file and report the ones that fail."""
    scripts = list(walk_script_files(path))
    failures = 0
    for script_path in track(scripts):
        try:
            script = parse_file(script_path)
        except ParleyError as e:
            failures += 1
            rich.print(f"[red]{script_path}[/]: {e}")
            continue
        rich.print(f"{script_path}: parsed {len(script)} nodes")

    rich.print(f"Checked {len(scripts)} scripts, {failures} failed")
    if failures:
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
