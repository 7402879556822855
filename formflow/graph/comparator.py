from __future__ import annotations

import math

from formflow.graph.values import (
    NUMERIC_TYPES,
    date_timestamp,
    js_string,
    normalize_value,
    strict_equals,
    to_number,
)


ORDERING_OPERATORS = {
    "equals",
    "notEquals",
    "greaterThan",
    "lessThan",
    "greaterThanOrEqual",
    "lessThanOrEqual",
}


def is_empty(value: object) -> bool:
    return value is None or (isinstance(value, str) and value == "")


def compare(operator: str, left: object, right: object, question_type: str) -> bool:
    if operator == "isEmpty":
        return is_empty(left)
    if operator == "isNotEmpty":
        return not is_empty(left)

    # Unknown operands never satisfy a comparison, negated operators included.
    if left is None or right is None:
        return False

    normalized_left = normalize_value(left, question_type)
    normalized_right = normalize_value(right, question_type)

    if question_type == "date":
        return _compare_ordered(
            operator,
            date_timestamp(normalized_left),
            date_timestamp(normalized_right),
        )

    if question_type == "boolean":
        if operator == "equals":
            return normalized_left == normalized_right
        if operator == "notEquals":
            return normalized_left != normalized_right
        return False

    if question_type in NUMERIC_TYPES:
        return _compare_ordered(
            operator,
            to_number(normalized_left),
            to_number(normalized_right),
        )

    if operator == "equals":
        return strict_equals(normalized_left, normalized_right)
    if operator == "notEquals":
        return not strict_equals(normalized_left, normalized_right)
    if operator == "contains":
        return js_string(normalized_right) in js_string(normalized_left)
    if operator == "notContains":
        return js_string(normalized_right) not in js_string(normalized_left)
    return False


def _compare_ordered(operator: str, left: float, right: float) -> bool:
    if operator not in ORDERING_OPERATORS:
        return False
    if math.isnan(left) or math.isnan(right):
        return False

    if operator == "equals":
        return left == right
    if operator == "notEquals":
        return left != right
    if operator == "greaterThan":
        return left > right
    if operator == "lessThan":
        return left < right
    if operator == "greaterThanOrEqual":
        return left >= right
    return left <= right
