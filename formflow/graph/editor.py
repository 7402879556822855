from __future__ import annotations

import copy
import logging
import random
import string
import time
import uuid
from dataclasses import dataclass
from typing import Any

from formflow.graph.cycles import would_create_cycle
from formflow.graph.hooks import FlowHookRegistry
from formflow.graph.models import (
    CHOICE_TYPES,
    LOGICAL_OPERATORS,
    QUESTION_TYPES,
    Condition,
    FormGraph,
    NodePosition,
    QuestionNode,
    TransitionEdge,
)
from formflow.graph.schema import VARIABLE_NAME_RE


LOGGER = logging.getLogger(__name__)

CYCLE_REJECTION = "Cannot create a loop in the form flow"
DEFAULT_OPTIONS = ["Option 1", "Option 2"]
NODE_SPACING = 150
EDITABLE_NODE_FIELDS = {
    "question",
    "type",
    "variable_name",
    "required",
    "help_text",
    "options",
    "image_url",
    "video_url",
    "pdf_url",
    "media_types",
    "position",
}
_BASE36 = string.digits + string.ascii_lowercase


class EditorError(ValueError):
    """Raised when an editor operation targets unknown ids or invalid values."""


@dataclass(slots=True)
class ConnectResult:
    accepted: bool
    edge: TransitionEdge | None = None
    reason: str | None = None


def generate_variable_name() -> str:
    suffix = "".join(random.choices(_BASE36, k=9))
    return f"question_{int(time.time() * 1000)}_{suffix}"


class FormEditor:
    """Edits one form on behalf of a single editor session."""

    def __init__(self, graph: FormGraph | None = None, hooks: FlowHookRegistry | None = None) -> None:
        self.graph = graph or FormGraph()
        self.hooks = hooks or FlowHookRegistry()
        self.dirty = False

    def add_node(self, question_type: str = "text") -> QuestionNode:
        if question_type not in QUESTION_TYPES:
            raise EditorError(f"Unknown question type '{question_type}'.")

        nodes = self.graph.nodes
        y = max(node.position.y for node in nodes) + NODE_SPACING if nodes else 100
        node = QuestionNode(
            id=str(uuid.uuid4()),
            question="New Question",
            type=question_type,
            variable_name=self._unique_variable_name(),
            required=False,
            help_text="",
            options=list(DEFAULT_OPTIONS) if question_type in CHOICE_TYPES else None,
            position=NodePosition(x=250, y=y),
        )
        nodes.append(node)
        self._changed("node_added", node_id=node.id)
        return node

    def update_node(self, node_id: str, **changes: Any) -> QuestionNode:
        node = self._require_node(node_id)

        unknown = set(changes) - EDITABLE_NODE_FIELDS
        if unknown:
            raise EditorError(f"Cannot update unknown question fields: {', '.join(sorted(unknown))}.")
        if "type" in changes and changes["type"] not in QUESTION_TYPES:
            raise EditorError(f"Unknown question type '{changes['type']}'.")
        if "variable_name" in changes:
            self._check_variable_name(changes["variable_name"], node_id=node_id)

        for name, value in changes.items():
            if name == "position" and isinstance(value, dict):
                value = NodePosition(x=float(value.get("x", 0)), y=float(value.get("y", 0)))
            setattr(node, name, value)

        self._changed("node_updated", node_id=node_id, fields=sorted(changes))
        return node

    def duplicate_node(self, node_id: str) -> QuestionNode:
        original = self._require_node(node_id)
        clone = copy.deepcopy(original)
        clone.id = str(uuid.uuid4())
        clone.variable_name = self._unique_variable_name()
        clone.position = NodePosition(x=original.position.x + 50, y=original.position.y + 50)
        self.graph.nodes.append(clone)
        self._changed("node_added", node_id=clone.id, duplicated_from=node_id)
        return clone

    def delete_node(self, node_id: str) -> list[TransitionEdge]:
        """Remove a question together with every connection touching it."""
        node = self._require_node(node_id)
        removed = [edge for edge in self.graph.edges if node_id in (edge.source, edge.target)]
        self.graph.nodes.remove(node)
        self.graph.edges = [edge for edge in self.graph.edges if edge not in removed]
        for edge in removed:
            self.hooks.emit("edge_removed", {"edge_id": edge.id, "cascade_from": node_id})
        self._changed("node_removed", node_id=node_id, removed_edges=[edge.id for edge in removed])
        return removed

    def connect(self, source: str | None, target: str | None) -> ConnectResult:
        if not source or not target:
            return self._reject(source, target, "Connection requires both a source and a target")
        if self.graph.node_by_id(source) is None or self.graph.node_by_id(target) is None:
            return self._reject(source, target, "Connection references an unknown question")
        if any(edge.source == source and edge.target == target for edge in self.graph.edges):
            return self._reject(source, target, "These questions are already connected")
        if would_create_cycle(self.graph.nodes, self.graph.edges, {"source": source, "target": target}):
            LOGGER.info("Rejected connection %s -> %s: would create a loop.", source, target)
            return self._reject(source, target, CYCLE_REJECTION)

        edge = TransitionEdge(
            id=f"edge-{source}-{target}",
            source=source,
            target=target,
            conditions=[],
            logical_operator="and",
        )
        self.graph.edges.append(edge)
        self._changed("edge_added", edge_id=edge.id, source=source, target=target)
        return ConnectResult(accepted=True, edge=edge)

    def update_edge(
        self,
        edge_id: str,
        *,
        conditions: list[Condition] | None = None,
        logical_operator: str | None = None,
        custom_expression: str | None = None,
    ) -> TransitionEdge:
        edge = self.graph.edge_by_id(edge_id)
        if edge is None:
            raise EditorError(f"Unknown connection '{edge_id}'.")
        if logical_operator is not None and logical_operator not in LOGICAL_OPERATORS:
            raise EditorError(f"Logical operator must be one of: {', '.join(LOGICAL_OPERATORS)}.")

        if conditions is not None:
            edge.conditions = list(conditions)
        if logical_operator is not None:
            edge.logical_operator = logical_operator
        if custom_expression is not None:
            edge.custom_expression = custom_expression.strip() or None

        self._changed("edge_updated", edge_id=edge_id)
        return edge

    def delete_edge(self, edge_id: str) -> TransitionEdge:
        edge = self.graph.edge_by_id(edge_id)
        if edge is None:
            raise EditorError(f"Unknown connection '{edge_id}'.")
        self.graph.edges.remove(edge)
        self._changed("edge_removed", edge_id=edge_id)
        return edge

    def update_settings(self, **changes: Any) -> None:
        settings = self.graph.settings
        for name, value in changes.items():
            if not hasattr(settings, name):
                raise EditorError(f"Unknown form setting '{name}'.")
            setattr(settings, name, value)
        self.dirty = True
        self.hooks.emit("settings_updated", {"fields": sorted(changes)})

    def sync_start_node(self) -> str | None:
        """Point ``start_node_id`` at the first question without incoming connections."""
        nodes = self.graph.nodes
        if not nodes:
            return self.graph.settings.start_node_id

        targets = {edge.target for edge in self.graph.edges}
        start = next((node for node in nodes if node.id not in targets), nodes[0])
        if start.id != self.graph.settings.start_node_id:
            self.update_settings(start_node_id=start.id)
        return start.id

    def mark_saved(self) -> None:
        self.dirty = False

    def _require_node(self, node_id: str) -> QuestionNode:
        node = self.graph.node_by_id(node_id)
        if node is None:
            raise EditorError(f"Unknown question '{node_id}'.")
        return node

    def _check_variable_name(self, name: object, *, node_id: str) -> None:
        if not isinstance(name, str) or not VARIABLE_NAME_RE.match(name) or len(name) > 50:
            raise EditorError(
                "Variable name must start with a letter or underscore and contain only letters, "
                "numbers, and underscores."
            )
        owner = self.graph.node_by_variable(name)
        if owner is not None and owner.id != node_id:
            raise EditorError(f"Variable name '{name}' is already used by another question.")

    def _unique_variable_name(self) -> str:
        while True:
            name = generate_variable_name()
            if self.graph.node_by_variable(name) is None:
                return name

    def _reject(self, source: str | None, target: str | None, reason: str) -> ConnectResult:
        self.hooks.emit("edge_rejected", {"source": source, "target": target, "reason": reason})
        return ConnectResult(accepted=False, reason=reason)

    def _changed(self, event: str, **context: Any) -> None:
        self.dirty = True
        self.hooks.emit(event, context)
        if event not in {"edge_updated", "node_updated"}:
            self.sync_start_node()
