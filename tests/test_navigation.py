from pathlib import Path

from parley.navigation import (
    find_jumps,
    jumps_to_graph,
    unknown_targets,
    unreachable_nodes,
    walk_jumps,
)
from parley.parser import parse_file, parse_script

DATA = Path(__file__).parent / "data"

GHOST_SCRIPT = """\
title: A
---
<<if x>>
    <<jump Ghost>>
<<else>>
    -> go
        <<jump b>>
<<endif>>
===
title: B
---
Hi
===
title: C
---
Nobody comes here.
===
"""


def test_find_jumps():
    script = parse_file(DATA / "micro_script.dlg")
    assert list(find_jumps(script)) == [
        {"src_node": "Intro", "dst_node": "HasKeyNode", "line": 6, "known": True},
        {"src_node": "HasKeyNode", "dst_node": "Vault", "line": 14, "known": True},
    ]


def test_walk_jumps_enters_branches_and_choices():
    script = parse_script(GHOST_SCRIPT)
    jumps = list(walk_jumps(script.get("A").steps))
    assert [(jump.target, jump.line) for jump in jumps] == [("Ghost", 4), ("b", 7)]


def test_jumps_to_graph():
    g = jumps_to_graph(parse_script(GHOST_SCRIPT))
    assert set(g.nodes) == {"A", "B", "C", "Ghost"}
    assert set(g.edges) == {("A", "Ghost"), ("A", "B")}
    assert g.nodes["Ghost"]["missing"] is True
    assert g.nodes["A"]["line"] == 1
    assert g.edges["A", "B"]["line"] == 7


def test_unknown_targets():
    script = parse_script(GHOST_SCRIPT)
    assert unknown_targets(script) == [
        {"src_node": "A", "dst_node": "Ghost", "line": 4, "known": False},
    ]
    assert unknown_targets(parse_file(DATA / "micro_script.dlg")) == []


def test_unreachable_nodes():
    script = parse_script(GHOST_SCRIPT)
    assert unreachable_nodes(script, "a") == ["C"]
    assert unreachable_nodes(script, "C") == ["A", "B"]
    assert unreachable_nodes(script, "Nowhere") == ["A", "B", "C"]

    micro = parse_file(DATA / "micro_script.dlg")
    assert unreachable_nodes(micro, "Intro") == []
    assert unreachable_nodes(micro, "Vault") == ["Intro", "HasKeyNode"]
