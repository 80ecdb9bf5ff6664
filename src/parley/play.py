"""
Console player.
Runs a script in the terminal and drives the runtime the way a game host would.
"""

import time
from pathlib import Path

import typer
from rich.console import Console
from rich.prompt import IntPrompt

from parley.events import DialogueEvent
from parley.parser import parse_file, parse_value
from parley.runtime import DialogueRunner

app = typer.Typer(pretty_exceptions_show_locals=False)
console = Console()


class ConsolePlayer:
    def __init__(self, runner: DialogueRunner):
        self.runner = runner
        self.finished = False
        runner.on(DialogueEvent.LINE, self.show_line)
        runner.on(DialogueEvent.OPTIONS, self.show_options)
        runner.on(DialogueEvent.END, self.show_end)
        runner.on(DialogueEvent.VARIABLE_SET, self.show_variable)
        runner.on(DialogueEvent.TIMER_STARTED, self.show_timer)
        runner.on(DialogueEvent.TIMER_EXPIRED, self.show_expired)

    def show_line(self, text: str):
        console.print(f"[yellow]{self.runner.current_node}[/]: {self.runner.interpolate(text)}")

    def show_options(self, labels: list[str]):
        for i, label in enumerate(labels, 1):
            console.print(f"  [cyan]{i}[/]) {self.runner.interpolate(label)}")

    def show_end(self):
        console.print("[dim](end)[/]")
        self.finished = True

    def show_variable(self, name, value):
        console.print(f"[dim]{name} = {value!r}[/]")

    def show_timer(self, seconds: float):
        console.print(f"[magenta]{seconds:g} seconds to choose[/]")

    def show_expired(self):
        console.print("[red]Time is up![/]")

    def ask_choice(self):
        count = len(self.runner.options)
        started = time.monotonic()
        answer = IntPrompt.ask("Choose", choices=[str(i) for i in range(1, count + 1)])
        # a late answer loses to the timer, which picks the default option
        self.runner.tick(time.monotonic() - started)
        if self.runner.is_waiting_for_choice:
            self.runner.choose(answer - 1)

    def run(self, start: str):
        self.runner.start_node(start)
        while not self.finished:
            if self.runner.is_waiting_for_choice:
                self.ask_choice()
            elif self.runner.is_next_step_choice and not self.runner.just_jumped:
                self.runner.continue_()
            else:
                console.input("[dim]press enter[/]")
                self.runner.continue_()


def parse_assignments(assignments: list[str]) -> dict:
    variables = {}
    for assignment in assignments:
        name, eq, value = assignment.partition("=")
        if not eq:
            raise typer.BadParameter(f"expected name=value, got {assignment!r}")
        variables[name.strip()] = parse_value(value.strip())
    return variables


@app.command("play")
def play_script(
    path: Path,
    start: str | None = None,
    var: list[str] = typer.Option([], "--set", help="Initial variable as name=value"),
):
    """Play a script in the terminal."""
    script = parse_file(path)
    if start is None:
        if not len(script):
            console.print("[red]No nodes in script[/]")
            raise typer.Exit(1)
        start = script.names()[0]

    runner = DialogueRunner(script, parse_assignments(var))
    ConsolePlayer(runner).run(start)


if __name__ == "__main__":
    app()
