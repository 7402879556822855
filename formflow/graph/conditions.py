from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence

from formflow.graph.comparator import compare
from formflow.graph.expressions import evaluate_expression
from formflow.graph.models import EMPTINESS_OPERATORS, Condition, QuestionNode, TransitionEdge


LOGGER = logging.getLogger(__name__)


def evaluate_condition(
    condition: Condition,
    answers: Mapping[str, object],
    nodes: Sequence[QuestionNode],
) -> bool:
    source_node = _find_by_variable(nodes, condition.source_variable)
    if source_node is None:
        LOGGER.debug("Condition source variable '%s' matches no question.", condition.source_variable)
        return False

    source_value = answers.get(condition.source_variable)
    source_type = source_node.type

    if condition.operator in EMPTINESS_OPERATORS:
        return compare(condition.operator, source_value, None, source_type)

    if condition.target == "variable" and isinstance(condition.value, str):
        compare_node = _find_by_variable(nodes, condition.value)
        if compare_node is None:
            LOGGER.debug("Condition comparison variable '%s' matches no question.", condition.value)
            return False
        return compare(
            condition.operator,
            source_value,
            answers.get(condition.value),
            source_type,
        )

    return compare(condition.operator, source_value, condition.value, source_type)


def is_edge_active(
    edge: TransitionEdge,
    answers: Mapping[str, object],
    nodes: Sequence[QuestionNode],
) -> bool:
    expression = (edge.custom_expression or "").strip()
    if not edge.conditions and not expression:
        return True

    if expression:
        try:
            return evaluate_expression(expression, answers)
        except Exception as exc:  # noqa: BLE001
            LOGGER.warning("Custom expression on edge '%s' failed: %s", edge.id, exc)
            return False

    results = [evaluate_condition(condition, answers, nodes) for condition in edge.conditions]
    if edge.logical_operator == "and":
        return all(results)
    return any(results)


def _find_by_variable(nodes: Sequence[QuestionNode], variable_name: str) -> QuestionNode | None:
    return next((node for node in nodes if node.variable_name == variable_name), None)
