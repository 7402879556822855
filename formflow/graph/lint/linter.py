from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any

from formflow.graph.lint.models import LintDiagnostic, LintOptions, LintResult
from formflow.graph.lint.passes import (
    run_canonicalize_pass,
    run_cfg_pass,
    run_condition_pass,
    run_schema_pass,
    run_template_pass,
)
from formflow.graph.models import FormGraph


LOGGER = logging.getLogger(__name__)


class FlowLinter:
    """Checks a serialized form and reports diagnostics without changing the caller's payload."""

    def lint(self, form: dict[str, Any], options: LintOptions | None = None) -> LintResult:
        opts = options or LintOptions()
        diagnostics: list[LintDiagnostic] = []

        if not isinstance(form, dict):
            diagnostics.append(
                LintDiagnostic(
                    code="SCHEMA_VALIDATION_FAILED",
                    severity="error",
                    message="Form definition must be a JSON object.",
                )
            )
            return LintResult(ok=False, diagnostics=diagnostics)

        rewritten, canonical_diags = run_canonicalize_pass(form)
        diagnostics.extend(canonical_diags)

        schema_diags = run_schema_pass(rewritten)
        diagnostics.extend(schema_diags)
        if schema_diags:
            # Flow analysis needs a structurally valid form.
            return LintResult(ok=False, diagnostics=diagnostics, rewritten_form=rewritten)

        graph = FormGraph.from_dict(rewritten)

        _, cfg_diags = run_cfg_pass(graph)
        diagnostics.extend(cfg_diags)
        diagnostics.extend(run_condition_pass(graph))
        _, template_diags = run_template_pass(graph)
        diagnostics.extend(template_diags)

        if opts.strict:
            diagnostics = [
                replace(item, severity="error") if item.severity == "warning" else item
                for item in diagnostics
            ]

        ok = not any(item.severity == "error" for item in diagnostics)
        LOGGER.debug("Linted form with %d nodes: %d diagnostics, ok=%s", len(graph.nodes), len(diagnostics), ok)
        return LintResult(
            ok=ok,
            diagnostics=diagnostics,
            rewritten_form=rewritten,
            form=graph if ok else None,
        )
