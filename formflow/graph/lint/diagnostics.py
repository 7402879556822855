from __future__ import annotations

from formflow.graph.lint.models import LintDiagnostic


SEVERITY_ORDER = {"error": 0, "warning": 1, "info": 2}


def render_diagnostic(diagnostic: LintDiagnostic) -> str:
    location_bits: list[str] = []
    if diagnostic.node_id:
        location_bits.append(f"node={diagnostic.node_id}")
    if diagnostic.edge_id:
        location_bits.append(f"edge={diagnostic.edge_id}")
    if diagnostic.path:
        location_bits.append(f"path={diagnostic.path}")

    location = f" [{', '.join(location_bits)}]" if location_bits else ""
    message = diagnostic.message.rstrip(".")
    hint = f" Hint: {diagnostic.hint}" if diagnostic.hint else ""
    return f"{diagnostic.severity.upper()} {diagnostic.code}: {message}{location}.{hint}"


def sort_diagnostics(diagnostics: list[LintDiagnostic]) -> list[LintDiagnostic]:
    return sorted(
        diagnostics,
        key=lambda item: (
            SEVERITY_ORDER.get(item.severity, 9),
            item.code,
            item.node_id or "",
            item.edge_id or "",
        ),
    )


def render_diagnostics(diagnostics: list[LintDiagnostic]) -> str:
    return "\n".join(f"- {render_diagnostic(item)}" for item in sort_diagnostics(diagnostics))
