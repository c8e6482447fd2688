"""Dependency graph leveling for the network diagram."""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .config import NetworkConfig
from .logger import get_logger
from .models import Task


class VisitState(Enum):
    """Resolution state of a node during leveling."""

    UNVISITED = "unvisited"
    IN_PROGRESS = "in-progress"
    DONE = "done"


@dataclass(frozen=True)
class Edge:
    """A dependency edge, drawn from the dependency to its dependent."""

    from_id: str
    to_id: str


def _default_levels() -> dict[str, int]:
    return {}


def _default_edges() -> list[Edge]:
    return []


@dataclass(frozen=True)
class DependencyGraph:
    """Level per task plus the edges between tasks.

    broken_edges lists the edges along which a dependency cycle was cut;
    a dependent need not sit above its dependency along them.
    """

    levels: dict[str, int] = field(default_factory=_default_levels)
    edges: list[Edge] = field(default_factory=_default_edges)
    broken_edges: list[Edge] = field(default_factory=_default_edges)

    @property
    def has_cycles(self) -> bool:
        return bool(self.broken_edges)

    def to_dict(self) -> dict[str, Any]:
        return {
            "levels": dict(self.levels),
            "edges": [{"from": e.from_id, "to": e.to_id} for e in self.edges],
            "broken_edges": [{"from": e.from_id, "to": e.to_id} for e in self.broken_edges],
        }


def build_adjacency(tasks: Sequence[Task]) -> dict[str, list[str]]:
    """Map each task id to its dependencies that resolve to a known task.

    Dangling ids are dropped; order and duplicates are kept. When two tasks
    share an id the first one wins.
    """
    adjacency: dict[str, list[str]] = {}
    for task in tasks:
        adjacency.setdefault(task.id, list(task.dependencies))
    return {
        task_id: [dep for dep in deps if dep in adjacency] for task_id, deps in adjacency.items()
    }


def assign_levels(tasks: Sequence[Task]) -> DependencyGraph:
    """Assign every task the length of its longest dependency chain.

    A task with no resolvable dependencies is level 0; otherwise its level is
    one more than the highest level among its dependencies. Resolution is a
    depth-first walk with an explicit stack. When the walk reaches a
    dependency that is still being resolved (a cycle), that dependency counts
    as level 0 for this occurrence and the edge is reported as broken.

    Args:
        tasks: Tasks with their dependency id lists

    Returns:
        DependencyGraph with levels, edges (dependency -> dependent, input
        order) and the edges cut to break cycles
    """
    logger = get_logger()
    adjacency = build_adjacency(tasks)

    state: dict[str, VisitState] = dict.fromkeys(adjacency, VisitState.UNVISITED)
    levels: dict[str, int] = {}
    pending: dict[str, int] = {}
    broken: list[Edge] = []

    for root in adjacency:
        if state[root] is not VisitState.UNVISITED:
            continue

        state[root] = VisitState.IN_PROGRESS
        pending[root] = 0
        stack: list[tuple[str, Iterator[str]]] = [(root, iter(adjacency[root]))]

        while stack:
            node, deps = stack[-1]
            descended = False
            for dep in deps:
                dep_state = state[dep]
                if dep_state is VisitState.DONE:
                    pending[node] = max(pending[node], levels[dep] + 1)
                elif dep_state is VisitState.IN_PROGRESS:
                    pending[node] = max(pending[node], 1)
                    broken.append(Edge(from_id=dep, to_id=node))
                    logger.debug("Cycle: %s re-entered from %s, counted as level 0", dep, node)
                else:
                    state[dep] = VisitState.IN_PROGRESS
                    pending[dep] = 0
                    stack.append((dep, iter(adjacency[dep])))
                    descended = True
                    break
            if descended:
                continue

            stack.pop()
            levels[node] = pending.pop(node)
            state[node] = VisitState.DONE
            if stack:
                parent = stack[-1][0]
                pending[parent] = max(pending[parent], levels[node] + 1)

    # Completion order differs from input order
    levels = {task_id: levels[task_id] for task_id in adjacency}
    edges = [Edge(from_id=dep, to_id=task_id) for task_id, deps in adjacency.items() for dep in deps]

    if broken:
        logger.changes("Dependency cycles broken at %d edge(s)", len(broken))
    logger.checks("Leveled %d task(s), %d edge(s)", len(levels), len(edges))
    return DependencyGraph(levels=levels, edges=edges, broken_edges=broken)


def group_by_level(graph: DependencyGraph) -> dict[int, list[str]]:
    """Bucket task ids by level, levels ascending, input order within a level."""
    buckets: dict[int, list[str]] = {}
    for task_id, level in graph.levels.items():
        buckets.setdefault(level, []).append(task_id)
    return dict(sorted(buckets.items()))


def layout_positions(
    graph: DependencyGraph, config: NetworkConfig | None = None
) -> dict[str, tuple[float, float]]:
    """Place nodes in horizontal bands, one band per level, centred on x=0."""
    config = config or NetworkConfig()
    positions: dict[str, tuple[float, float]] = {}
    for level, task_ids in group_by_level(graph).items():
        count = len(task_ids)
        for index, task_id in enumerate(task_ids):
            x = (index - (count - 1) / 2) * config.node_spacing
            y = level * config.level_height
            positions[task_id] = (x, y)
    return positions
