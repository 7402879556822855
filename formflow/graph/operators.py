from __future__ import annotations

from formflow.graph.models import EMPTINESS_OPERATORS, Condition, TransitionEdge


TEXT_OPERATORS = [
    ("equals", "is exactly"),
    ("notEquals", "is not"),
    ("contains", "contains"),
    ("notContains", "does not contain"),
    ("isEmpty", "is empty"),
    ("isNotEmpty", "is not empty"),
]
BOOLEAN_OPERATORS = [
    ("equals", "is"),
    ("notEquals", "is not"),
]
RATING_OPERATORS = [
    ("equals", "is exactly"),
    ("notEquals", "is not"),
    ("greaterThan", "is greater than"),
    ("lessThan", "is less than"),
    ("greaterThanOrEqual", "is at least"),
    ("lessThanOrEqual", "is at most"),
]
DEFAULT_OPERATORS = [
    ("equals", "is exactly"),
    ("notEquals", "is not"),
]
VALUE_ONLY_TYPES = {"rating", "boolean", "multipleChoice", "dropdown"}


def operator_choices(question_type: str) -> list[tuple[str, str]]:
    """Operators the condition builder offers for a question type, with labels."""
    if question_type == "text":
        return list(TEXT_OPERATORS)
    if question_type == "boolean":
        return list(BOOLEAN_OPERATORS)
    if question_type == "rating":
        return list(RATING_OPERATORS)
    return list(DEFAULT_OPERATORS)


def allowed_operators(question_type: str) -> list[str]:
    return [value for value, _ in operator_choices(question_type)]


def operator_label(operator: str, question_type: str) -> str:
    for value, label in operator_choices(question_type):
        if value == operator:
            return label
    return operator


def allowed_comparison_targets(question_type: str) -> list[str]:
    if question_type in VALUE_ONLY_TYPES:
        return ["value"]
    return ["value", "variable"]


def condition_problem(condition: Condition) -> str | None:
    if not condition.source_variable:
        return "Please select a question to check"
    if not condition.operator:
        return "Please select how to compare the answer"
    if (
        condition.operator not in EMPTINESS_OPERATORS
        and not condition.value
        and condition.value is not False
    ):
        return "Please specify a value to compare against"
    return None


def describe_edge(edge: TransitionEdge) -> str:
    if not edge.conditions:
        return "Always"
    if len(edge.conditions) == 1:
        condition = edge.conditions[0]
        return f"{condition.source_variable} {condition.operator}"
    return f"{len(edge.conditions)} conditions ({edge.logical_operator.upper()})"
