from formflow.graph import (
    FormGraph,
    QuestionNode,
    TransitionEdge,
    find_next_node,
    find_start_node,
    would_create_cycle,
)

__version__ = "0.1.0"

__all__ = [
    "FormGraph",
    "QuestionNode",
    "TransitionEdge",
    "__version__",
    "find_next_node",
    "find_start_node",
    "would_create_cycle",
]
