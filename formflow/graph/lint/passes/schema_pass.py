from __future__ import annotations

import re
from typing import Any

from formflow.graph.lint.models import LintDiagnostic
from formflow.graph.schema import validate_form_definition


NODE_ID_RE = re.compile(r"^(?:Node|Start node) '([^']+)'")
EDGE_ID_RE = re.compile(r"^Edge '([^']+)'")


def run_schema_pass(form: dict[str, Any]) -> list[LintDiagnostic]:
    diagnostics: list[LintDiagnostic] = []
    for error in validate_form_definition(form):
        node_match = NODE_ID_RE.search(error)
        edge_match = EDGE_ID_RE.search(error)
        diagnostics.append(
            LintDiagnostic(
                code="SCHEMA_VALIDATION_FAILED",
                severity="error",
                message=error,
                node_id=node_match.group(1) if node_match else None,
                edge_id=edge_match.group(1) if edge_match else None,
                hint="Fix schema issues before publishing the form.",
            )
        )
    return diagnostics
