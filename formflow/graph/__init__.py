from formflow.graph.comparator import compare, is_empty
from formflow.graph.conditions import evaluate_condition, is_edge_active
from formflow.graph.cycles import has_cycle, would_create_cycle
from formflow.graph.editor import ConnectResult, EditorError, FormEditor
from formflow.graph.expressions import ExpressionError, evaluate_expression, validate_expression
from formflow.graph.hooks import DEFAULT_HOOK_EVENTS, FlowHookRegistry, HookInvocation
from formflow.graph.models import (
    Condition,
    FormGraph,
    FormSettings,
    NodePosition,
    QuestionNode,
    TransitionEdge,
)
from formflow.graph.navigator import find_next_node, find_start_node
from formflow.graph.schema import (
    FormValidationError,
    load_form,
    validate_form_definition,
    validate_form_or_raise,
)
from formflow.graph.session import ResponseSession, SessionError, SessionMessage, SubmitResult
from formflow.graph.values import normalize_value

__all__ = [
    "Condition",
    "ConnectResult",
    "DEFAULT_HOOK_EVENTS",
    "EditorError",
    "ExpressionError",
    "FlowHookRegistry",
    "FormEditor",
    "FormGraph",
    "FormSettings",
    "FormValidationError",
    "HookInvocation",
    "NodePosition",
    "QuestionNode",
    "ResponseSession",
    "SessionError",
    "SessionMessage",
    "SubmitResult",
    "TransitionEdge",
    "compare",
    "evaluate_condition",
    "evaluate_expression",
    "find_next_node",
    "find_start_node",
    "has_cycle",
    "is_edge_active",
    "is_empty",
    "load_form",
    "normalize_value",
    "validate_expression",
    "validate_form_definition",
    "validate_form_or_raise",
    "would_create_cycle",
]
