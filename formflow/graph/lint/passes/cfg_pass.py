from __future__ import annotations

from dataclasses import dataclass

from formflow.graph.cycles import has_cycle
from formflow.graph.lint.models import LintDiagnostic
from formflow.graph.models import FormGraph
from formflow.graph.navigator import find_start_node


@dataclass(slots=True)
class CFGAnalysis:
    adjacency: dict[str, list[str]]
    reachable: set[str]
    start: str | None
    has_cycle: bool


def run_cfg_pass(form: FormGraph) -> tuple[CFGAnalysis, list[LintDiagnostic]]:
    diagnostics: list[LintDiagnostic] = []

    adjacency: dict[str, list[str]] = {node.id: [] for node in form.nodes}
    for edge in form.edges:
        if edge.source in adjacency and edge.target not in adjacency[edge.source]:
            adjacency[edge.source].append(edge.target)

    targets = {edge.target for edge in form.edges}
    entry_points = [node.id for node in form.nodes if node.id not in targets]
    if form.nodes and not entry_points:
        diagnostics.append(
            LintDiagnostic(
                code="FLOW_NO_START",
                severity="info",
                message="Every question has an incoming connection; the first question is used as the start.",
                node_id=form.nodes[0].id,
                hint="Remove the connection into the question that should open the form.",
            )
        )
    elif len(entry_points) > 1:
        diagnostics.append(
            LintDiagnostic(
                code="FLOW_MULTIPLE_ENTRY_POINTS",
                severity="info",
                message=f"{len(entry_points)} questions have no incoming connection: {', '.join(entry_points)}.",
                hint="Only one of them opens the form; connect the others or set a start question.",
            )
        )

    start_node = find_start_node(form.nodes, form.edges, form.settings.start_node_id)
    start = start_node.id if start_node is not None else None
    if start is not None and form.settings.start_node_id and form.settings.start_node_id != start:
        diagnostics.append(
            LintDiagnostic(
                code="FLOW_START_OVERRIDDEN",
                severity="info",
                message=f"Configured start question '{form.settings.start_node_id}' has incoming connections; '{start}' is used instead.",
                node_id=form.settings.start_node_id,
                path="settings.startNodeId",
            )
        )

    reachable: set[str] = set()
    if start is not None:
        _dfs_reachable(start, adjacency, reachable)

    for node in form.nodes:
        if node.id not in reachable:
            diagnostics.append(
                LintDiagnostic(
                    code="FLOW_UNREACHABLE_NODE",
                    severity="warning",
                    message=f"Question '{node.variable_name or node.id}' can never be asked.",
                    node_id=node.id,
                    hint="Connect it from an earlier question or remove it.",
                )
            )

    cyclic = has_cycle(form.nodes, form.edges)
    if cyclic:
        diagnostics.append(
            LintDiagnostic(
                code="FLOW_CYCLE_DETECTED",
                severity="warning",
                message="Form flow contains a loop.",
                hint="The editor refuses new loops; remove one connection of the existing loop.",
            )
        )

    return CFGAnalysis(adjacency=adjacency, reachable=reachable, start=start, has_cycle=cyclic), diagnostics


def _dfs_reachable(start: str, adjacency: dict[str, list[str]], reachable: set[str]) -> None:
    stack = [start]
    while stack:
        current = stack.pop()
        if current in reachable:
            continue
        reachable.add(current)
        for target in adjacency.get(current, []):
            if target not in reachable:
                stack.append(target)
