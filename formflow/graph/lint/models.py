from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from formflow.graph.models import FormGraph


DiagnosticSeverity = Literal["error", "warning", "info"]


@dataclass(slots=True)
class LintDiagnostic:
    code: str
    severity: DiagnosticSeverity
    message: str
    node_id: str | None = None
    edge_id: str | None = None
    path: str | None = None
    hint: str | None = None


@dataclass(slots=True)
class LintOptions:
    strict: bool = False


@dataclass(slots=True)
class LintResult:
    ok: bool
    diagnostics: list[LintDiagnostic]
    rewritten_form: dict | None = None
    form: FormGraph | None = None

    @property
    def errors(self) -> list[LintDiagnostic]:
        return [item for item in self.diagnostics if item.severity == "error"]

    @property
    def warnings(self) -> list[LintDiagnostic]:
        return [item for item in self.diagnostics if item.severity in {"warning", "info"}]
