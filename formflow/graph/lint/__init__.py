from formflow.graph.lint.diagnostics import render_diagnostic, render_diagnostics
from formflow.graph.lint.linter import FlowLinter
from formflow.graph.lint.models import LintDiagnostic, LintOptions, LintResult

__all__ = [
    "FlowLinter",
    "LintDiagnostic",
    "LintOptions",
    "LintResult",
    "render_diagnostic",
    "render_diagnostics",
]
