from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Literal


QuestionType = Literal[
    "text",
    "longText",
    "multipleChoice",
    "dropdown",
    "boolean",
    "date",
    "rating",
    "slider",
    "media",
]
ComparisonOperator = Literal[
    "equals",
    "notEquals",
    "contains",
    "notContains",
    "greaterThan",
    "lessThan",
    "greaterThanOrEqual",
    "lessThanOrEqual",
    "isEmpty",
    "isNotEmpty",
]
LogicalOperator = Literal["and", "or"]
ComparisonTarget = Literal["value", "variable"]
MediaType = Literal["image", "video", "pdf"]

QUESTION_TYPES = (
    "text",
    "longText",
    "multipleChoice",
    "dropdown",
    "boolean",
    "date",
    "rating",
    "slider",
    "media",
)
COMPARISON_OPERATORS = (
    "equals",
    "notEquals",
    "contains",
    "notContains",
    "greaterThan",
    "lessThan",
    "greaterThanOrEqual",
    "lessThanOrEqual",
    "isEmpty",
    "isNotEmpty",
)
EMPTINESS_OPERATORS = {"isEmpty", "isNotEmpty"}
LOGICAL_OPERATORS = ("and", "or")
COMPARISON_TARGETS = ("value", "variable")
MEDIA_TYPES = ("image", "video", "pdf")
CHOICE_TYPES = {"multipleChoice", "dropdown"}


@dataclass(slots=True)
class NodePosition:
    x: float = 0.0
    y: float = 0.0


@dataclass(slots=True)
class QuestionNode:
    id: str
    question: str
    type: QuestionType
    variable_name: str
    required: bool = False
    help_text: str | None = None
    options: list[str] | None = None
    image_url: str | None = None
    video_url: str | None = None
    pdf_url: str | None = None
    media_types: list[MediaType] | None = None
    position: NodePosition = field(default_factory=NodePosition)

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> QuestionNode:
        data = payload.get("data") if isinstance(payload.get("data"), dict) else payload
        position = payload.get("position") if isinstance(payload.get("position"), dict) else {}
        options = data.get("options")
        media_types = data.get("mediaTypes")
        return cls(
            id=str(payload.get("id") or ""),
            question=str(data.get("question") or ""),
            type=data.get("type") or "text",
            variable_name=str(data.get("variableName") or ""),
            required=bool(data.get("required", False)),
            help_text=data.get("helpText"),
            options=list(options) if isinstance(options, list) else None,
            image_url=data.get("imageUrl"),
            video_url=data.get("videoUrl"),
            pdf_url=data.get("pdfUrl"),
            media_types=list(media_types) if isinstance(media_types, list) else None,
            position=NodePosition(
                x=float(position.get("x", 0) or 0),
                y=float(position.get("y", 0) or 0),
            ),
        )

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "question": self.question,
            "type": self.type,
            "required": self.required,
            "variableName": self.variable_name,
        }
        optional = {
            "helpText": self.help_text,
            "options": self.options,
            "imageUrl": self.image_url,
            "videoUrl": self.video_url,
            "pdfUrl": self.pdf_url,
            "mediaTypes": self.media_types,
        }
        data.update({key: value for key, value in optional.items() if value is not None})
        return {
            "id": self.id,
            "type": "questionNode",
            "position": {"x": self.position.x, "y": self.position.y},
            "data": data,
        }


@dataclass(slots=True)
class Condition:
    source_variable: str
    operator: ComparisonOperator
    value: object = None
    target: ComparisonTarget = "value"

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> Condition:
        target = payload.get("type")
        return cls(
            source_variable=str(payload.get("sourceVariable") or ""),
            operator=payload.get("operator") or "equals",
            value=payload.get("value"),
            target="variable" if target == "variable" else "value",
        )

    def to_dict(self) -> dict[str, Any]:
        value = self.value
        if isinstance(value, (datetime, date)):
            value = value.isoformat()
        return {
            "sourceVariable": self.source_variable,
            "operator": self.operator,
            "value": value,
            "type": self.target,
        }


@dataclass(slots=True)
class TransitionEdge:
    id: str
    source: str
    target: str
    conditions: list[Condition] = field(default_factory=list)
    logical_operator: LogicalOperator = "and"
    custom_expression: str | None = None

    @property
    def is_unconditional(self) -> bool:
        return not self.conditions and not (self.custom_expression or "").strip()

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> TransitionEdge:
        data = payload.get("data") if isinstance(payload.get("data"), dict) else {}
        conditions = data.get("conditions")
        return cls(
            id=str(payload.get("id") or ""),
            source=str(payload.get("source") or ""),
            target=str(payload.get("target") or ""),
            conditions=[
                Condition.from_dict(item) for item in conditions if isinstance(item, dict)
            ]
            if isinstance(conditions, list)
            else [],
            logical_operator=data.get("logicalOperator") or "and",
            custom_expression=data.get("customExpression") or None,
        )

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "conditions": [condition.to_dict() for condition in self.conditions],
            "logicalOperator": self.logical_operator,
        }
        if self.custom_expression:
            data["customExpression"] = self.custom_expression
        return {
            "id": self.id,
            "source": self.source,
            "target": self.target,
            "type": "conditionalEdge",
            "data": data,
        }


@dataclass(slots=True)
class FormSettings:
    form_id: str = ""
    form_name: str = ""
    start_node_id: str | None = None
    is_published: bool = False
    primary_color: str = "#000000"
    show_branding: bool = True
    use_ai: bool = False

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> FormSettings:
        return cls(
            form_id=str(payload.get("formId") or ""),
            form_name=str(payload.get("formName") or ""),
            start_node_id=payload.get("startNodeId") or None,
            is_published=bool(payload.get("isPublished", False)),
            primary_color=str(payload.get("primaryColor") or "#000000"),
            show_branding=bool(payload.get("showBranding", True)),
            use_ai=bool(payload.get("useAI", False)),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "formId": self.form_id,
            "formName": self.form_name,
            "startNodeId": self.start_node_id or "",
            "isPublished": self.is_published,
            "primaryColor": self.primary_color,
            "showBranding": self.show_branding,
            "useAI": self.use_ai,
        }


@dataclass(slots=True)
class FormGraph:
    """Nodes, edges and settings of one form."""

    nodes: list[QuestionNode] = field(default_factory=list)
    edges: list[TransitionEdge] = field(default_factory=list)
    settings: FormSettings = field(default_factory=FormSettings)

    def node_by_id(self, node_id: str) -> QuestionNode | None:
        return next((node for node in self.nodes if node.id == node_id), None)

    def node_by_variable(self, variable_name: str) -> QuestionNode | None:
        return next((node for node in self.nodes if node.variable_name == variable_name), None)

    def edge_by_id(self, edge_id: str) -> TransitionEdge | None:
        return next((edge for edge in self.edges if edge.id == edge_id), None)

    def outgoing_edges(self, node_id: str) -> list[TransitionEdge]:
        return [edge for edge in self.edges if edge.source == node_id]

    def incoming_edges(self, node_id: str) -> list[TransitionEdge]:
        return [edge for edge in self.edges if edge.target == node_id]

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> FormGraph:
        nodes = payload.get("nodes") if isinstance(payload.get("nodes"), list) else []
        edges = payload.get("edges") if isinstance(payload.get("edges"), list) else []
        settings = payload.get("settings") if isinstance(payload.get("settings"), dict) else {}
        return cls(
            nodes=[QuestionNode.from_dict(item) for item in nodes if isinstance(item, dict)],
            edges=[TransitionEdge.from_dict(item) for item in edges if isinstance(item, dict)],
            settings=FormSettings.from_dict(settings),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "nodes": [node.to_dict() for node in self.nodes],
            "edges": [edge.to_dict() for edge in self.edges],
            "settings": self.settings.to_dict(),
        }
