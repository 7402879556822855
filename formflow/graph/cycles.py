from __future__ import annotations

import logging
from collections import deque
from collections.abc import Iterable, Mapping, Sequence

from formflow.graph.models import QuestionNode


LOGGER = logging.getLogger(__name__)


def would_create_cycle(
    nodes: Sequence[QuestionNode],
    edges: Iterable[object],
    candidate: object,
) -> bool:
    """Return True when adding ``candidate`` would close a loop in the form flow.

    ``edges`` and ``candidate`` may be ``TransitionEdge`` objects or mappings
    with ``source`` / ``target`` keys.
    """
    source, target = _endpoints(candidate)
    if source == target:
        LOGGER.debug("Self-loop rejected on node '%s'.", source)
        return True

    pairs = [_endpoints(edge) for edge in edges]
    pairs.append((source, target))
    return _eliminated_count(nodes, pairs) != len(nodes)


def has_cycle(nodes: Sequence[QuestionNode], edges: Iterable[object]) -> bool:
    pairs = [_endpoints(edge) for edge in edges]
    if any(source == target for source, target in pairs):
        return True
    return _eliminated_count(nodes, pairs) != len(nodes)


def _eliminated_count(nodes: Sequence[QuestionNode], pairs: list[tuple[str, str]]) -> int:
    # Parallel edges each add to the in-degree and each decrement it, so a
    # duplicate source/target pair is not a loop. The editor refuses duplicates.
    in_degree: dict[str, int] = {}
    adjacency: dict[str, list[str]] = {}
    for node in nodes:
        in_degree[node.id] = 0
        adjacency[node.id] = []

    for source, target in pairs:
        in_degree[target] = in_degree.get(target, 0) + 1
        # Edges leaving unknown nodes only count toward their target's in-degree.
        if source in adjacency:
            adjacency[source].append(target)

    queue = deque(node.id for node in nodes if in_degree[node.id] == 0)
    visited = 0
    while queue:
        current = queue.popleft()
        visited += 1
        for neighbor in adjacency.get(current, []):
            in_degree[neighbor] -= 1
            if in_degree[neighbor] == 0:
                queue.append(neighbor)

    return visited


def _endpoints(edge: object) -> tuple[str, str]:
    if isinstance(edge, Mapping):
        return str(edge.get("source")), str(edge.get("target"))
    return str(getattr(edge, "source")), str(getattr(edge, "target"))
