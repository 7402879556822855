from formflow.graph.lint.passes.canonicalize import run_canonicalize_pass
from formflow.graph.lint.passes.cfg_pass import CFGAnalysis, run_cfg_pass
from formflow.graph.lint.passes.condition_pass import run_condition_pass
from formflow.graph.lint.passes.schema_pass import run_schema_pass
from formflow.graph.lint.passes.template_pass import TemplateAnalysis, run_template_pass

__all__ = [
    "CFGAnalysis",
    "TemplateAnalysis",
    "run_canonicalize_pass",
    "run_cfg_pass",
    "run_condition_pass",
    "run_schema_pass",
    "run_template_pass",
]
