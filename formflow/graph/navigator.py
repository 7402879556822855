from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from functools import cmp_to_key

from formflow.graph.conditions import is_edge_active
from formflow.graph.models import QuestionNode, TransitionEdge


LOGGER = logging.getLogger(__name__)


def find_next_node(
    current_node: QuestionNode,
    nodes: Sequence[QuestionNode],
    edges: Sequence[TransitionEdge],
    answers: Mapping[str, object],
) -> QuestionNode | None:
    """Return the next question after ``current_node``, or None when the flow ends.

    Outgoing edges are tried in list order and the first active one wins.
    """
    outgoing = [edge for edge in edges if edge.source == current_node.id]
    if not outgoing:
        return None

    chosen = next((edge for edge in outgoing if is_edge_active(edge, answers, nodes)), None)
    if chosen is None:
        LOGGER.debug("No active transition out of '%s'; flow complete.", current_node.id)
        return None

    return next((node for node in nodes if node.id == chosen.target), None)


def find_start_node(
    nodes: Sequence[QuestionNode],
    edges: Sequence[TransitionEdge],
    start_node_id: str | None = None,
) -> QuestionNode | None:
    targets = {edge.target for edge in edges}
    candidates = [node for node in nodes if node.id not in targets]

    if candidates:
        if start_node_id:
            preferred = next((node for node in candidates if node.id == start_node_id), None)
            if preferred is not None:
                return preferred
        return sorted(candidates, key=cmp_to_key(_entry_order))[0]

    if nodes:
        return nodes[0]
    return None


def _entry_order(left: QuestionNode, right: QuestionNode) -> float:
    left_id = _leading_int(left.id)
    right_id = _leading_int(right.id)
    if left_id is not None and right_id is not None:
        return left_id - right_id
    return left.position.y - right.position.y


def _leading_int(value: str) -> int | None:
    text = value.strip()
    digits = ""
    for index, char in enumerate(text):
        if char.isdigit() or (index == 0 and char in "+-"):
            digits += char
            continue
        break
    if digits in {"", "+", "-"}:
        return None
    return int(digits)
