"""Jump graph utilities: where does each node lead, which targets are missing, what is unreachable."""

from collections.abc import Iterator
from pathlib import Path

import networkx as nx
import rich
import typer

from parley.models import Choice, CommandStep, Condition, Jump, Menu, Script, Step
from parley.parser import parse_file

app = typer.Typer()


def walk_jumps(steps: list[Step]) -> Iterator[Jump]:
    for step in steps:
        match step:
            case CommandStep(command=Jump() as jump):
                yield jump
            case Menu(choices=choices):
                for choice in choices:
                    yield from choice_jumps(choice)
            case Condition(then_steps=then_steps, else_steps=else_steps):
                yield from walk_jumps(then_steps)
                yield from walk_jumps(else_steps)


def choice_jumps(choice: Choice) -> Iterator[Jump]:
    for command in choice.commands:
        if isinstance(command, Jump):
            yield command


def find_jumps(script: Script) -> Iterator[dict]:
    """
    Find all jumps in a script.

    Yields:
        Dictionary with the source node, the target as written, the source line and
        whether the target node exists
    """
    for node in script.nodes.values():
        for jump in walk_jumps(node.steps):
            target = script.get(jump.target)
            yield {
                "src_node": node.name,
                "dst_node": target.name if target else jump.target,
                "line": jump.line,
                "known": target is not None,
            }


def jumps_to_graph(script: Script) -> nx.DiGraph:
    """
    Convert the jumps of a script to a directed graph.

    Every node is present even without edges, unknown targets are flagged with `missing=True`.
    """
    g = nx.DiGraph()
    for node in script.nodes.values():
        g.add_node(node.name, line=node.line)

    for row in find_jumps(script):
        if not row["known"]:
            g.add_node(row["dst_node"], missing=True)
        g.add_edge(row["src_node"], row["dst_node"], line=row["line"])

    return g


def unknown_targets(script: Script) -> list[dict]:
    return [row for row in find_jumps(script) if not row["known"]]


def unreachable_nodes(script: Script, start: str) -> list[str]:
    start_node = script.get(start)
    if start_node is None:
        return script.names()
    g = jumps_to_graph(script)
    reachable = nx.descendants(g, start_node.name) | {start_node.name}
    return [name for name in script.names() if name not in reachable]


@app.command("graph")
def print_graph(path: Path, start: str | None = None):
    """Print the jump graph of a script and check jump targets."""
    script = parse_file(path)
    g = jumps_to_graph(script)

    for src, dst, data in g.edges(data=True):
        rich.print(f"[yellow]{src}[/] -> [cyan]{dst}[/] [dim]line {data['line']}")

    missing = unknown_targets(script)
    for row in missing:
        rich.print(f"[red]unknown node[/] {row['dst_node']!r} in {row['src_node']} line {row['line']}")

    if start is None and len(script):
        start = script.names()[0]
    if start is not None:
        for name in unreachable_nodes(script, start):
            rich.print(f"[dim]unreachable from {start}:[/] {name}")

    rich.print(f"{g.number_of_nodes()} nodes, {g.number_of_edges()} jumps")
    if missing:
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
