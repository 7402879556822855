from __future__ import annotations

import re
from typing import Any
from urllib.parse import urlparse

from formflow.graph.models import (
    COMPARISON_OPERATORS,
    COMPARISON_TARGETS,
    LOGICAL_OPERATORS,
    MEDIA_TYPES,
    QUESTION_TYPES,
    FormGraph,
)


VARIABLE_NAME_RE = re.compile(r"^[a-zA-Z_][a-zA-Z0-9_]*$")
MAX_QUESTION_LENGTH = 1000
MAX_VARIABLE_NAME_LENGTH = 50
MAX_HELP_TEXT_LENGTH = 500
MAX_OPTIONS = 50
MAX_OPTION_LENGTH = 200
MAX_URL_LENGTH = 1000
MAX_EXPRESSION_LENGTH = 500
MAX_FORM_NAME_LENGTH = 200
POSITION_LIMIT = 10000


class FormValidationError(ValueError):
    """Raised when a form definition fails validation."""


def validate_form_definition(form: dict[str, Any]) -> list[str]:
    errors: list[str] = []

    nodes = form.get("nodes")
    if not isinstance(nodes, list) or not nodes:
        errors.append("Top-level field 'nodes' must be a non-empty list.")
        return errors

    node_ids: set[str] = set()
    variable_owner: dict[str, str] = {}

    for index, node in enumerate(nodes):
        if not isinstance(node, dict):
            errors.append(f"nodes[{index}] must be an object.")
            continue

        node_id = node.get("id")
        if not isinstance(node_id, str) or not node_id.strip():
            errors.append(f"nodes[{index}].id must be a non-empty string.")
            continue

        if node_id in node_ids:
            errors.append(f"Duplicate node id '{node_id}'.")
            continue
        node_ids.add(node_id)

        _validate_position(node=node, node_id=node_id, errors=errors)

        data = node.get("data")
        if not isinstance(data, dict):
            errors.append(f"Node '{node_id}' is missing object field 'data'.")
            continue

        _validate_node_data(data=data, node_id=node_id, errors=errors)

        variable_name = data.get("variableName")
        if isinstance(variable_name, str) and variable_name:
            owner = variable_owner.get(variable_name)
            if owner is not None:
                errors.append(
                    f"Node '{node_id}' reuses variable name '{variable_name}' already used by node '{owner}'."
                )
            else:
                variable_owner[variable_name] = node_id

    edges = form.get("edges", [])
    if not isinstance(edges, list):
        errors.append("Top-level field 'edges' must be a list.")
        edges = []

    edge_ids: set[str] = set()
    for index, edge in enumerate(edges):
        if not isinstance(edge, dict):
            errors.append(f"edges[{index}] must be an object.")
            continue

        edge_id = edge.get("id")
        if not isinstance(edge_id, str) or not edge_id.strip():
            errors.append(f"edges[{index}].id must be a non-empty string.")
            continue
        if edge_id in edge_ids:
            errors.append(f"Duplicate edge id '{edge_id}'.")
            continue
        edge_ids.add(edge_id)

        for key in ("source", "target"):
            endpoint = edge.get(key)
            if not isinstance(endpoint, str) or not endpoint:
                errors.append(f"Edge '{edge_id}' requires non-empty string '{key}'.")
            elif endpoint not in node_ids:
                errors.append(f"Edge '{edge_id}' references missing {key} node '{endpoint}'.")

        data = edge.get("data", {})
        if not isinstance(data, dict):
            errors.append(f"Edge '{edge_id}' field 'data' must be an object.")
            continue
        _validate_edge_data(data=data, edge_id=edge_id, errors=errors)

    settings = form.get("settings")
    if settings is not None:
        if not isinstance(settings, dict):
            errors.append("Top-level field 'settings' must be an object.")
        else:
            _validate_settings(settings=settings, node_ids=node_ids, errors=errors)

    return errors


def validate_form_or_raise(form: dict[str, Any]) -> None:
    errors = validate_form_definition(form)
    if errors:
        rendered = "\n".join(f"- {error}" for error in errors)
        raise FormValidationError(f"Form validation failed:\n{rendered}")


def load_form(form: dict[str, Any]) -> FormGraph:
    validate_form_or_raise(form)
    return FormGraph.from_dict(form)


def _validate_position(*, node: dict[str, Any], node_id: str, errors: list[str]) -> None:
    position = node.get("position")
    if position is None:
        return
    if not isinstance(position, dict):
        errors.append(f"Node '{node_id}' field 'position' must be an object.")
        return
    for axis in ("x", "y"):
        value = position.get(axis)
        if not _is_number(value):
            errors.append(f"Node '{node_id}' position.{axis} must be a number.")
        elif abs(value) > POSITION_LIMIT:
            errors.append(f"Node '{node_id}' position.{axis} must be within ±{POSITION_LIMIT}.")


def _validate_node_data(*, data: dict[str, Any], node_id: str, errors: list[str]) -> None:
    question = data.get("question")
    if not isinstance(question, str) or not question:
        errors.append(f"Node '{node_id}' question is required.")
    elif len(question) > MAX_QUESTION_LENGTH:
        errors.append(f"Node '{node_id}' question must be less than {MAX_QUESTION_LENGTH} characters.")

    question_type = data.get("type")
    if question_type not in QUESTION_TYPES:
        errors.append(f"Node '{node_id}' has invalid question type '{question_type}'.")

    if not isinstance(data.get("required"), bool):
        errors.append(f"Node '{node_id}' field 'required' must be a boolean.")

    variable_name = data.get("variableName")
    if not isinstance(variable_name, str) or not variable_name:
        errors.append(f"Node '{node_id}' variable name is required.")
    elif len(variable_name) > MAX_VARIABLE_NAME_LENGTH:
        errors.append(
            f"Node '{node_id}' variable name must be less than {MAX_VARIABLE_NAME_LENGTH} characters."
        )
    elif not VARIABLE_NAME_RE.match(variable_name):
        errors.append(
            f"Node '{node_id}' variable name must start with a letter or underscore and contain only "
            "letters, numbers, and underscores."
        )

    help_text = data.get("helpText")
    if help_text is not None:
        if not isinstance(help_text, str):
            errors.append(f"Node '{node_id}' helpText must be a string.")
        elif len(help_text) > MAX_HELP_TEXT_LENGTH:
            errors.append(f"Node '{node_id}' help text must be less than {MAX_HELP_TEXT_LENGTH} characters.")

    options = data.get("options")
    if options is not None:
        if not isinstance(options, list) or not all(isinstance(item, str) for item in options):
            errors.append(f"Node '{node_id}' options must be a list of strings.")
        elif not options:
            errors.append(f"Node '{node_id}' options cannot be empty when provided.")
        elif len(options) > MAX_OPTIONS:
            errors.append(f"Node '{node_id}' allows a maximum of {MAX_OPTIONS} options.")
        elif any(len(item) > MAX_OPTION_LENGTH for item in options):
            errors.append(f"Node '{node_id}' options must each be less than {MAX_OPTION_LENGTH} characters.")

    for key in ("imageUrl", "videoUrl", "pdfUrl"):
        url = data.get(key)
        if url is None:
            continue
        if not isinstance(url, str) or not _is_url(url):
            errors.append(f"Node '{node_id}' {key} must be a valid URL.")
        elif len(url) > MAX_URL_LENGTH:
            errors.append(f"Node '{node_id}' {key} must be less than {MAX_URL_LENGTH} characters.")

    media_types = data.get("mediaTypes")
    if media_types is not None:
        if not isinstance(media_types, list) or not media_types:
            errors.append(f"Node '{node_id}' must select at least one media type.")
        elif any(item not in MEDIA_TYPES for item in media_types):
            errors.append(f"Node '{node_id}' mediaTypes must only contain: image, video, pdf.")


def _validate_edge_data(*, data: dict[str, Any], edge_id: str, errors: list[str]) -> None:
    conditions = data.get("conditions", [])
    if not isinstance(conditions, list):
        errors.append(f"Edge '{edge_id}' conditions must be a list.")
        conditions = []

    for index, condition in enumerate(conditions):
        path = f"Edge '{edge_id}' conditions[{index}]"
        if not isinstance(condition, dict):
            errors.append(f"{path} must be an object.")
            continue
        if not isinstance(condition.get("sourceVariable"), str):
            errors.append(f"{path}.sourceVariable must be a string.")
        if condition.get("operator") not in COMPARISON_OPERATORS:
            errors.append(f"{path} has invalid operator '{condition.get('operator')}'.")
        target = condition.get("type")
        if target is not None and target not in COMPARISON_TARGETS:
            errors.append(f"{path}.type must be one of: value, variable.")

    logical_operator = data.get("logicalOperator")
    if logical_operator is not None and logical_operator not in LOGICAL_OPERATORS:
        errors.append(f"Edge '{edge_id}' logicalOperator must be one of: and, or.")

    expression = data.get("customExpression")
    if expression is not None:
        if not isinstance(expression, str):
            errors.append(f"Edge '{edge_id}' customExpression must be a string.")
        elif len(expression) > MAX_EXPRESSION_LENGTH:
            errors.append(
                f"Edge '{edge_id}' customExpression must be less than {MAX_EXPRESSION_LENGTH} characters."
            )


def _validate_settings(*, settings: dict[str, Any], node_ids: set[str], errors: list[str]) -> None:
    form_name = settings.get("formName")
    if form_name is not None and (not isinstance(form_name, str) or len(form_name) > MAX_FORM_NAME_LENGTH):
        errors.append(f"settings.formName must be a string of at most {MAX_FORM_NAME_LENGTH} characters.")

    start_node_id = settings.get("startNodeId")
    if start_node_id and start_node_id not in node_ids:
        errors.append(f"Start node '{start_node_id}' does not exist in nodes list.")


def _is_number(value: object) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _is_url(value: str) -> bool:
    parsed = urlparse(value)
    return parsed.scheme in {"http", "https"} and bool(parsed.netloc)
