"""
Dialogue runtime.
Walks a parsed Script step by step and stops at every line, every set of options and at the end.

Typical host loop:

    runner = DialogueRunner(parse_script(text))
    runner.on(DialogueEvent.LINE, show_line)
    runner.on(DialogueEvent.OPTIONS, show_options)
    runner.start_node("Intro")
    ...
    runner.continue_()    # player advanced
    runner.choose(1)      # player picked the second displayed option
    runner.tick(delta)    # every frame, drives timed choices
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass

from parley.errors import (
    ChoiceIndexError,
    DialogueError,
    ExpressionError,
    NoAvailableChoicesError,
    UnknownNodeError,
)
from parley.events import DialogueEvent, EventEmitter
from parley.expressions import eval_bool
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
    Step,
    Value,
)
from parley.text import interpolate
from parley.variables import Variables

logger = logging.getLogger(__name__)


@dataclass
class Frame:
    """A cursor over a list of steps: a node body or an inlined if branch."""

    steps: list[Step]
    index: int = 0

    def peek(self) -> Step | None:
        return self.steps[self.index] if self.index < len(self.steps) else None


class DialogueRunner(EventEmitter):
    def __init__(self, script: Script, variables: Mapping[str, Value] | None = None):
        super().__init__()
        self.script = script
        self._vars = Variables(variables)
        self._node: Node | None = None
        # the bottom frame is the node body, frames above it are inlined if branches
        self._frames: list[Frame] = []
        self._step: Step | None = None
        self._menu: Menu | None = None
        self._displayed: list[Choice] = []
        self._timer_running = False
        self._time_remaining = 0.0
        self._just_jumped = False

    # --- State ---

    @property
    def current_node(self) -> str | None:
        return self._node.name if self._node else None

    @property
    def position(self) -> str | None:
        """`Node:line` of the step that ran last, for error reports."""
        if self._node is None:
            return None
        line = self._step.line if self._step is not None else self._node.line
        return f"{self._node.name}:{line}"

    @property
    def just_jumped(self) -> bool:
        return self._just_jumped

    @property
    def is_waiting_for_choice(self) -> bool:
        return self._menu is not None

    @property
    def options(self) -> list[str]:
        return [choice.text for choice in self._displayed]

    @property
    def time_remaining(self) -> float | None:
        return self._time_remaining if self._timer_running else None

    @property
    def is_next_step_choice(self) -> bool:
        return isinstance(self._peek_step(), Menu)

    @property
    def variables(self) -> dict[str, Value]:
        return dict(self._vars.items())

    # --- Control ---

    def start_node(self, name: str) -> None:
        self._jump(name)
        self.continue_()

    def continue_(self) -> None:
        if self._menu is not None:
            return

        while True:
            step = self._next_step()
            match step:
                case None:
                    self.emit(DialogueEvent.END)
                    return
                case Dialogue(text=text):
                    self._just_jumped = False
                    self.emit(DialogueEvent.LINE, text)
                    return
                case CommandStep(command=command):
                    self.execute(command)
                case Menu():
                    self._present(step)
                    return
                case Condition():
                    self._expand(step)
                case _:
                    raise DialogueError(f"Unknown step: {type(step).__name__}")

    def choose(self, index: int) -> None:
        self._timer_running = False

        if self._menu is None:
            return

        if not 0 <= index < len(self._displayed):
            raise ChoiceIndexError(
                f"Choice index {index} out of range, {len(self._displayed)} options displayed"
            )

        choice = self._displayed[index]
        self._menu = None
        self._displayed = []
        logger.debug("choose %r at node %r", choice.text, self.current_node)

        for command in choice.commands:
            self.execute(command)

        self.continue_()

    def tick(self, delta: float) -> None:
        if not self._timer_running:
            return
        if self._menu is None:
            self._timer_running = False
            return

        # negative deltas never add time
        self._time_remaining = max(self._time_remaining - max(delta, 0.0), 0.0)
        self.emit(DialogueEvent.TIMER_UPDATED, self._time_remaining)

        if self._time_remaining <= 0:
            self._timer_running = False
            self.emit(DialogueEvent.TIMER_EXPIRED)
            # the default is an index into the displayed options
            self.choose(self._menu.default_option)

    def execute(self, command: Command) -> None:
        match command:
            case Jump(target=target):
                self._jump(target)
            case Set(name=name, value=value):
                self._vars[name] = value
                value = self._vars[name]
                logger.debug("set %s = %r", name, value)
                self.emit(DialogueEvent.VARIABLE_SET, name, value)
            case _:
                raise DialogueError(f"Unknown command: {type(command).__name__}")

    # --- Variables ---

    def interpolate(self, text: str) -> str:
        return interpolate(text, self._vars)

    def get(self, name: str, default: Value = None, kind: type | None = None) -> Value:
        """Variable value, or `default` when it is missing, absent, or not of type `kind`."""
        value = self._vars.get(name)
        if value is None or (kind is not None and not isinstance(value, kind)):
            return default
        return value

    def set(self, name: str, value: Value) -> None:
        self._vars[name] = value

    def has(self, name: str) -> bool:
        return name in self._vars

    # --- Internals ---

    def _jump(self, name: str) -> None:
        node = self.script.get(name)
        if node is None:
            raise UnknownNodeError(name)
        logger.debug("jump to %r", node.name)
        self._node = node
        self._frames = [Frame(node.steps)]
        self._step = None
        self._just_jumped = True

    def _peek_step(self) -> Step | None:
        for frame in reversed(self._frames):
            if (step := frame.peek()) is not None:
                return step
        return None

    def _next_step(self) -> Step | None:
        while self._frames:
            frame = self._frames[-1]
            if (step := frame.peek()) is not None:
                frame.index += 1
                self._step = step
                return step
            # keep the node frame, an exhausted node stays exhausted
            if len(self._frames) == 1:
                return None
            self._frames.pop()
        return None

    def _expand(self, step: Condition) -> None:
        branch = step.then_steps if self._eval(step.condition) else step.else_steps
        # the branch runs next, as if it were written in place of the if block
        if branch:
            self._frames.append(Frame(branch))

    def _present(self, menu: Menu) -> None:
        displayed = [choice for choice in menu.choices if self._is_available(choice)]
        logger.debug(
            "options node=%r shown=%d time_limit=%s",
            self.current_node,
            len(displayed),
            menu.time_limit if menu.time_limit is not None else "none",
        )
        if not displayed:
            raise NoAvailableChoicesError(
                f"No available choices at node '{self.current_node}' (line {menu.line})"
            )

        self._menu = menu
        self._displayed = displayed
        self.emit(DialogueEvent.OPTIONS, [choice.text for choice in displayed])

        if menu.time_limit is not None:
            self._time_remaining = menu.time_limit
            self._timer_running = True
            self.emit(DialogueEvent.TIMER_STARTED, self._time_remaining)
        else:
            self._timer_running = False

    def _is_available(self, choice: Choice) -> bool:
        if not choice.condition or not choice.condition.strip():
            return True
        return self._eval(choice.condition)

    def _eval(self, condition: str | None) -> bool:
        try:
            result = eval_bool(condition, self._vars)
        except ExpressionError as e:
            e.add_note(f"in condition {condition!r} at {self.position}")
            raise
        logger.debug("eval node=%r expr=%r => %s", self.current_node, condition, result)
        return result
