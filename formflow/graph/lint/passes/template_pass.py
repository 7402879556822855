from __future__ import annotations

from dataclasses import dataclass

from formflow.graph.lint.models import LintDiagnostic
from formflow.graph.models import FormGraph
from formflow.graph.templates import placeholder_names


@dataclass(slots=True)
class TemplateAnalysis:
    node_refs: dict[str, list[str]]


def run_template_pass(form: FormGraph) -> tuple[TemplateAnalysis, list[LintDiagnostic]]:
    diagnostics: list[LintDiagnostic] = []
    refs_map: dict[str, list[str]] = {}

    predecessors: dict[str, set[str]] = {node.id: set() for node in form.nodes}
    for edge in form.edges:
        if edge.target in predecessors:
            predecessors[edge.target].add(edge.source)

    for node in form.nodes:
        refs = placeholder_names(node.question)
        refs_map[node.id] = refs
        if not refs:
            continue

        ancestors = _ancestors(node.id, predecessors)
        for ref in refs:
            referenced = form.node_by_variable(ref)
            if referenced is None:
                diagnostics.append(
                    LintDiagnostic(
                        code="TEMPLATE_UNKNOWN_VARIABLE",
                        severity="warning",
                        message=f"Placeholder '[{ref}]' does not match any question variable.",
                        node_id=node.id,
                        path="data.question",
                        hint="Unknown placeholders render as empty text.",
                    )
                )
            elif referenced.id not in ancestors:
                diagnostics.append(
                    LintDiagnostic(
                        code="TEMPLATE_FORWARD_REFERENCE",
                        severity="warning",
                        message=f"Placeholder '[{ref}]' refers to a question that is never answered before this one.",
                        node_id=node.id,
                        path="data.question",
                    )
                )

    return TemplateAnalysis(node_refs=refs_map), diagnostics


def _ancestors(node_id: str, predecessors: dict[str, set[str]]) -> set[str]:
    seen: set[str] = set()
    stack = list(predecessors.get(node_id, ()))
    while stack:
        current = stack.pop()
        if current in seen:
            continue
        seen.add(current)
        stack.extend(predecessors.get(current, ()))
    # A question inside a loop is its own ancestor, but it is still unanswered when first asked.
    seen.discard(node_id)
    return seen
