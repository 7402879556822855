from __future__ import annotations

from formflow.graph.expressions import ExpressionError, referenced_names
from formflow.graph.lint.models import LintDiagnostic
from formflow.graph.models import EMPTINESS_OPERATORS, FormGraph
from formflow.graph.operators import (
    allowed_comparison_targets,
    allowed_operators,
    condition_problem,
)


def run_condition_pass(form: FormGraph) -> list[LintDiagnostic]:
    diagnostics: list[LintDiagnostic] = []
    known_variables = {node.variable_name for node in form.nodes if node.variable_name}

    for edge in form.edges:
        expression = (edge.custom_expression or "").strip()

        if expression and edge.conditions:
            diagnostics.append(
                LintDiagnostic(
                    code="EDGE_MIXED_MECHANISMS",
                    severity="warning",
                    message="Connection has both a custom expression and a condition list; only the expression is evaluated.",
                    edge_id=edge.id,
                    hint="Keep one of the two.",
                )
            )

        if expression:
            try:
                names = referenced_names(expression)
            except ExpressionError as exc:
                diagnostics.append(
                    LintDiagnostic(
                        code="EXPRESSION_INVALID",
                        severity="warning",
                        message=f"Custom expression cannot be evaluated: {exc}",
                        edge_id=edge.id,
                        path="data.customExpression",
                        hint="An invalid expression never activates its connection.",
                    )
                )
            else:
                for name in sorted(names - known_variables):
                    diagnostics.append(
                        LintDiagnostic(
                            code="CONDITION_UNKNOWN_VARIABLE",
                            severity="warning",
                            message=f"Custom expression references unknown variable '{name}'.",
                            edge_id=edge.id,
                            path="data.customExpression",
                        )
                    )

        for index, condition in enumerate(edge.conditions):
            path = f"data.conditions[{index}]"
            source = form.node_by_variable(condition.source_variable)
            if source is None:
                diagnostics.append(
                    LintDiagnostic(
                        code="CONDITION_UNKNOWN_VARIABLE",
                        severity="warning",
                        message=f"Condition checks unknown variable '{condition.source_variable}'.",
                        edge_id=edge.id,
                        path=f"{path}.sourceVariable",
                        hint="A condition on a missing question is always false.",
                    )
                )
                continue

            if condition.operator not in allowed_operators(source.type):
                diagnostics.append(
                    LintDiagnostic(
                        code="CONDITION_OPERATOR_MISMATCH",
                        severity="warning",
                        message=f"Operator '{condition.operator}' is not offered for {source.type} questions.",
                        edge_id=edge.id,
                        path=f"{path}.operator",
                    )
                )

            if condition.target not in allowed_comparison_targets(source.type):
                diagnostics.append(
                    LintDiagnostic(
                        code="CONDITION_TARGET_MISMATCH",
                        severity="warning",
                        message=f"{source.type} questions can only be compared against a fixed value.",
                        edge_id=edge.id,
                        path=f"{path}.type",
                    )
                )

            if condition.operator in EMPTINESS_OPERATORS:
                continue

            problem = condition_problem(condition)
            if problem is not None:
                diagnostics.append(
                    LintDiagnostic(
                        code="CONDITION_VALUE_MISSING",
                        severity="warning",
                        message=problem,
                        edge_id=edge.id,
                        path=f"{path}.value",
                    )
                )
            elif condition.target == "variable" and condition.value not in known_variables:
                diagnostics.append(
                    LintDiagnostic(
                        code="CONDITION_UNKNOWN_VARIABLE",
                        severity="warning",
                        message=f"Condition compares against unknown variable '{condition.value}'.",
                        edge_id=edge.id,
                        path=f"{path}.value",
                    )
                )

    return diagnostics
