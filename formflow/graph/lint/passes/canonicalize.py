from __future__ import annotations

import copy
from typing import Any

from formflow.graph.lint.models import LintDiagnostic


NODE_DATA_KEYS = (
    "question",
    "type",
    "required",
    "variableName",
    "helpText",
    "options",
    "imageUrl",
    "videoUrl",
    "pdfUrl",
    "mediaTypes",
)
NODE_ALIASES = {
    "variable_name": "variableName",
    "help_text": "helpText",
    "image_url": "imageUrl",
    "video_url": "videoUrl",
    "pdf_url": "pdfUrl",
    "media_types": "mediaTypes",
}
EDGE_ALIASES = {
    "logical_operator": "logicalOperator",
    "custom_expression": "customExpression",
}
CONDITION_ALIASES = {
    "source_variable": "sourceVariable",
    "target": "type",
}
SETTINGS_ALIASES = {
    "form_id": "formId",
    "form_name": "formName",
    "start_node_id": "startNodeId",
    "is_published": "isPublished",
    "primary_color": "primaryColor",
    "show_branding": "showBranding",
    "use_ai": "useAI",
}


def run_canonicalize_pass(form: dict[str, Any]) -> tuple[dict[str, Any], list[LintDiagnostic]]:
    cloned = copy.deepcopy(form)
    diagnostics: list[LintDiagnostic] = []

    nodes = cloned.get("nodes")
    if isinstance(nodes, list):
        cloned["nodes"] = [_canonical_node(node, diagnostics) for node in nodes]

    edges = cloned.get("edges")
    if edges is None:
        cloned["edges"] = []
    elif isinstance(edges, list):
        cloned["edges"] = [_canonical_edge(edge, diagnostics) for edge in edges]

    settings = cloned.get("settings")
    if isinstance(settings, dict):
        _rename_aliases(settings, SETTINGS_ALIASES, diagnostics, path="settings")

    return cloned, diagnostics


def _canonical_node(node: Any, diagnostics: list[LintDiagnostic]) -> Any:
    if not isinstance(node, dict):
        return node

    normalized = dict(node)
    node_id = str(normalized.get("id") or "") or None

    if not isinstance(normalized.get("data"), dict):
        movable = [
            key
            for key in normalized
            if (key in NODE_DATA_KEYS or key in NODE_ALIASES)
            and not (key == "type" and normalized[key] == "questionNode")
        ]
        flat = {key: normalized.pop(key) for key in movable}
        if flat:
            normalized["data"] = flat
            diagnostics.append(
                LintDiagnostic(
                    code="CANONICAL_FLAT_NODE",
                    severity="info",
                    message="Moved flat question fields under 'data'.",
                    node_id=node_id,
                    path="data",
                )
            )

    data = normalized.get("data")
    if isinstance(data, dict):
        data = dict(data)
        _rename_aliases(data, NODE_ALIASES, diagnostics, node_id=node_id, path="data")
        if "required" not in data:
            data["required"] = False
            diagnostics.append(
                LintDiagnostic(
                    code="CANONICAL_REQUIRED_DEFAULT",
                    severity="info",
                    message="Defaulted 'required' to false.",
                    node_id=node_id,
                    path="data.required",
                )
            )
        normalized["data"] = data

    return normalized


def _canonical_edge(edge: Any, diagnostics: list[LintDiagnostic]) -> Any:
    if not isinstance(edge, dict):
        return edge

    normalized = dict(edge)
    edge_id = str(normalized.get("id") or "") or None

    data = normalized.get("data")
    if data is None:
        data = {}
    if not isinstance(data, dict):
        return normalized
    data = dict(data)

    _rename_aliases(data, EDGE_ALIASES, diagnostics, edge_id=edge_id, path="data")

    if "conditions" not in data:
        data["conditions"] = []
        diagnostics.append(
            LintDiagnostic(
                code="CANONICAL_CONDITIONS_DEFAULT",
                severity="info",
                message="Added empty conditions list.",
                edge_id=edge_id,
                path="data.conditions",
            )
        )
    if "logicalOperator" not in data:
        data["logicalOperator"] = "and"
        diagnostics.append(
            LintDiagnostic(
                code="CANONICAL_LOGICAL_OPERATOR_DEFAULT",
                severity="info",
                message="Defaulted logicalOperator to 'and'.",
                edge_id=edge_id,
                path="data.logicalOperator",
            )
        )

    conditions = data.get("conditions")
    if isinstance(conditions, list):
        canonical_conditions: list[Any] = []
        for index, condition in enumerate(conditions):
            if isinstance(condition, dict):
                condition = dict(condition)
                _rename_aliases(
                    condition,
                    CONDITION_ALIASES,
                    diagnostics,
                    edge_id=edge_id,
                    path=f"data.conditions[{index}]",
                )
            canonical_conditions.append(condition)
        data["conditions"] = canonical_conditions

    normalized["data"] = data
    return normalized


def _rename_aliases(
    payload: dict[str, Any],
    aliases: dict[str, str],
    diagnostics: list[LintDiagnostic],
    *,
    node_id: str | None = None,
    edge_id: str | None = None,
    path: str,
) -> None:
    for alias, canonical in aliases.items():
        if alias not in payload or canonical in payload:
            continue
        payload[canonical] = payload.pop(alias)
        diagnostics.append(
            LintDiagnostic(
                code="CANONICAL_FIELD_ALIAS",
                severity="info",
                message=f"Canonicalized '{alias}' to '{canonical}'.",
                node_id=node_id,
                edge_id=edge_id,
                path=f"{path}.{alias}",
            )
        )
