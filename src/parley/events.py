"""
Runtime output events.

Usage:
    runner.on(DialogueEvent.LINE, lambda text: print(text))
    runner.on(DialogueEvent.OPTIONS, show_buttons)

Handlers are called synchronously in subscription order, with the arguments listed below.
"""

from collections import defaultdict
from enum import Enum, auto
from typing import Any, Callable


class DialogueEvent(Enum):
    LINE = auto()  # (text)
    OPTIONS = auto()  # (labels)
    END = auto()  # ()
    VARIABLE_SET = auto()  # (name, value)
    TIMER_STARTED = auto()  # (seconds)
    TIMER_UPDATED = auto()  # (seconds_remaining)
    TIMER_EXPIRED = auto()  # ()


Handler = Callable[..., Any]


class EventEmitter:
    def __init__(self):
        self._handlers: dict[DialogueEvent, list[Handler]] = defaultdict(list)

    def on(self, event: DialogueEvent, handler: Handler) -> Handler:
        self._handlers[event].append(handler)
        return handler

    def off(self, event: DialogueEvent, handler: Handler) -> None:
        if handler in self._handlers[event]:
            self._handlers[event].remove(handler)

    def emit(self, event: DialogueEvent, *args) -> None:
        # copy so a handler may unsubscribe itself
        for handler in list(self._handlers[event]):
            handler(*args)
