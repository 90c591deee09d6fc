"""
unitchain.core.graph
====================

Composes pairwise equivalences into one conversion expression.

A fresh, undirected graph is built for the requested group (one node per
unit, one edge per equivalence) and searched breadth-first *from the
output unit toward the input unit*. Each node carries the expression that
turns a value in its own unit (the free variable ``x``) into a value in
the output unit; stepping across an edge substitutes the reoriented edge
equation for ``x``. The first time the input unit is dequeued its
expression is the answer, so the result follows a path with the fewest
edges.
"""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass, field
from typing import Dict, Optional, Sequence, Tuple

from unitchain.core.solver import EquationSolver, normalize_negation, solve_for
from unitchain.core.tokens import CLOSE, FREE_VARIABLE, OPEN, Token, render, symbol, tokenize
from unitchain.errors import ConversionPathError, SolverError
from unitchain.factors.equivalence import Equivalence, FactorGroup

logger = logging.getLogger(__name__)

Tokens = Tuple[Token, ...]


@dataclass(slots=True)
class GraphNode:
    name: str
    visited: bool = False
    path: Tokens = (symbol(FREE_VARIABLE),)
    # neighbor unit name -> first equivalence linking the two
    neighbors: Dict[str, Equivalence] = field(default_factory=dict)

    @property
    def expression(self) -> str:
        return render(self.path)


class ConversionGraph:
    """Nodes indexed by unit name; edges stored as names, not references."""

    def __init__(self, group: FactorGroup) -> None:
        self.group = group
        self.nodes: Dict[str, GraphNode] = {}
        for eq in group.equivalences:
            a = self._get_or_create(eq.unit_a)
            b = self._get_or_create(eq.unit_b)
            a.neighbors.setdefault(b.name, eq)
            b.neighbors.setdefault(a.name, eq)

    def _get_or_create(self, name: str) -> GraphNode:
        node = self.nodes.get(name)
        if node is None:
            node = self.nodes[name] = GraphNode(name)
        return node

    def get(self, name: str) -> Optional[GraphNode]:
        return self.nodes.get(name)


def substitute(path: Sequence[Token], replacement: Sequence[Token], exposed: str) -> Tokens:
    """
    Replace every free variable in ``path`` by ``(replacement)``, then
    rename ``exposed`` (the symbol ``replacement`` is written in) to the
    free variable, and spell out any '-' left directly in front of it.
    """
    out: list[Token] = []
    for tok in path:
        if tok.is_symbol and tok.text == FREE_VARIABLE:
            out.extend((OPEN, *replacement, CLOSE))
        else:
            out.append(tok)

    free = symbol(FREE_VARIABLE)
    renamed = [free if (t.is_symbol and t.text == exposed) else t for t in out]
    cleaned, _ = normalize_negation(renamed, FREE_VARIABLE)
    return cleaned


def _step(path: Tokens, edge: Equivalence, neighbor: str, solver: EquationSolver) -> Tokens:
    # neighbor is the unit we are moving to; express the current unit's
    # symbol in terms of the neighbor's symbol
    if edge.is_a_side(neighbor):
        solved, exposed = solver(edge.equation, "b"), "a"
    else:
        solved, exposed = solver(edge.equation, "a"), "b"
    return substitute(path, tokenize(solved), exposed)


def find_path(
    group: FactorGroup,
    in_unit: str,
    out_unit: str,
    solver: EquationSolver = solve_for,
    source: Optional[str] = None,
) -> str:
    """
    Build the expression that converts a value in ``in_unit`` (bound to
    ``x``) into ``out_unit``.

    ``solver`` reorients each traversed equation; ``source`` only shows up
    in the error message.

    An edge whose equation cannot be rearranged is skipped (and logged);
    its far node stays reachable through other edges.

    Raises:
      ConversionPathError if either unit is not part of the group or the
      two units are not connected by solvable edges.
    """
    graph = ConversionGraph(group)
    for unit in (out_unit, in_unit):
        if graph.get(unit) is None:
            raise ConversionPathError(f"Unit '{unit}' is not defined in group '{group.name}'.")

    start = graph.nodes[out_unit]
    start.visited = True
    queue = deque([start])
    skipped: list[str] = []

    while queue:
        node = queue.popleft()
        if node.name == in_unit:
            logger.debug("conversion %s -> %s in %s: %s", in_unit, out_unit, group.name, node.expression)
            return node.expression

        for name, edge in node.neighbors.items():
            neighbor = graph.nodes[name]
            if neighbor.visited:
                continue
            try:
                neighbor.path = _step(node.path, edge, name, solver)
            except SolverError as e:
                logger.warning(
                    "skipping %s <-> %s (%s) in %s: %s",
                    edge.unit_a, edge.unit_b, edge.equation, group.name, e,
                )
                skipped.append(f"'{edge.unit_a}'/'{edge.unit_b}' ({edge.equation}): {e}")
                continue
            neighbor.visited = True
            queue.append(neighbor)

    message = (
        f"Could not find a conversion path from '{in_unit}' to '{out_unit}' "
        f"in group '{group.name}'."
    )
    if skipped:
        message += " Unsolvable equivalences: " + "; ".join(skipped) + "."
    if source:
        message += f" Check the definitions in {source}."
    raise ConversionPathError(message)


__all__ = ["GraphNode", "ConversionGraph", "substitute", "find_path"]
