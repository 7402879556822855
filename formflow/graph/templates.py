from __future__ import annotations

import re
from collections.abc import Mapping
from datetime import date, datetime

from formflow.graph.values import is_number, js_string


PLACEHOLDER_RE = re.compile(r"\[(\w+)\]")


def placeholder_names(text: str) -> list[str]:
    seen: set[str] = set()
    names: list[str] = []
    for match in PLACEHOLDER_RE.finditer(text or ""):
        name = match.group(1)
        if name not in seen:
            seen.add(name)
            names.append(name)
    return names


def render_question(text: str, answers: Mapping[str, object]) -> str:
    """Fill ``[variableName]`` placeholders with the answers collected so far."""
    if not text:
        return text

    def _replace(match: re.Match[str]) -> str:
        key = match.group(1)
        if key not in answers:
            return ""
        value = answers[key]
        if isinstance(value, (datetime, date)):
            return long_date(value)
        if isinstance(value, bool):
            return "Yes" if value else "No"
        return js_string(value)

    return PLACEHOLDER_RE.sub(_replace, text)


def format_answer(value: object, question_type: str) -> str:
    if question_type == "boolean":
        return "Yes" if value is True else "No"
    if question_type == "date":
        return long_date(value) if isinstance(value, (datetime, date)) else js_string(value)
    if question_type == "rating":
        return f"{js_string(value)}/5"
    if question_type == "slider":
        number = value if is_number(value) else 0
        return f"{js_string(number)}%"
    return js_string(value)


def long_date(value: date) -> str:
    return f"{value:%B} {_ordinal(value.day)}, {value.year}"


def _ordinal(day: int) -> str:
    if 10 <= day % 100 <= 20:
        suffix = "th"
    else:
        suffix = {1: "st", 2: "nd", 3: "rd"}.get(day % 10, "th")
    return f"{day}{suffix}"
