from typing import Annotated, Literal

from pydantic import BaseModel, Field

# a variable value, None stands for an absent variable
Value = bool | float | str | None


# Base models
class Source(BaseModel):
    line: int = 0


# Commands
class Jump(Source):
    kind: Literal["jump"] = "jump"
    target: str


class Set(Source):
    kind: Literal["set"] = "set"
    name: str
    value: Value


Command = Annotated[Jump | Set, Field(discriminator="kind")]


# Steps
class Dialogue(Source):
    kind: Literal["line"] = "line"
    text: str


class Choice(Source):
    text: str
    condition: str | None = None
    commands: list[Command] = []


class Menu(Source):
    kind: Literal["menu"] = "menu"
    choices: list[Choice] = []
    time_limit: float | None = None
    # index into the displayed choices, not into `choices`
    default_option: int = 0


class CommandStep(Source):
    kind: Literal["command"] = "command"
    command: Command


class Condition(Source):
    kind: Literal["if"] = "if"
    condition: str
    then_steps: list["Step"] = []
    else_steps: list["Step"] = []


Step = Annotated[Dialogue | Menu | CommandStep | Condition, Field(discriminator="kind")]

Condition.model_rebuild()


class Node(Source):
    name: str
    steps: list[Step] = []


class Script(BaseModel):
    """Node graph keyed by case-folded node name."""

    nodes: dict[str, Node] = {}

    def add(self, node: Node) -> None:
        # redefinition replaces the earlier node
        self.nodes[node.name.casefold()] = node

    def get(self, name: str) -> Node | None:
        return self.nodes.get(name.casefold())

    def __contains__(self, name: str) -> bool:
        return name.casefold() in self.nodes

    def __len__(self) -> int:
        return len(self.nodes)

    def names(self) -> list[str]:
        return [node.name for node in self.nodes.values()]
