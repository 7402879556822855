from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import date, datetime
from types import MappingProxyType
from typing import Any, Literal, Mapping

from formflow.graph.hooks import FlowHookRegistry
from formflow.graph.models import FormGraph, QuestionNode
from formflow.graph.navigator import find_next_node, find_start_node
from formflow.graph.templates import format_answer, render_question
from formflow.graph.values import js_string
from formflow.phrasing import SessionMode, TransitionPhraser
from formflow.settings import DEFAULT_MAX_TEXT_LENGTH


LOGGER = logging.getLogger(__name__)

SessionStatus = Literal["in_progress", "review", "complete", "submitted"]
MessageRole = Literal["system", "user"]

REQUIRED_MESSAGE = "This field is required"
TOO_LONG_MESSAGE = "Text is too long (maximum 10,000 characters)"
UPDATED_MESSAGE = "✅ Response updated successfully! You can continue or start over to see the complete flow."
TEXT_TYPES = {"text", "longText"}


class SessionError(RuntimeError):
    """Raised when a response session is driven out of order."""


@dataclass(slots=True)
class SessionMessage:
    role: MessageRole
    text: str
    node_id: str | None = None
    variable_name: str | None = None
    value: object = None


@dataclass(slots=True)
class SubmitResult:
    accepted: bool
    status: SessionStatus
    error: str | None = None
    message: SessionMessage | None = None


class ResponseSession:
    """Walks one respondent through a form, one question at a time.

    The session owns the answer set: answers are recorded here and handed to
    the navigator read-only.
    """

    def __init__(
        self,
        graph: FormGraph,
        *,
        mode: SessionMode = "live",
        phraser: TransitionPhraser | None = None,
        hooks: FlowHookRegistry | None = None,
        max_text_length: int = DEFAULT_MAX_TEXT_LENGTH,
    ) -> None:
        self.graph = graph
        self.mode = mode
        self.phraser = phraser or TransitionPhraser()
        self.hooks = hooks or FlowHookRegistry()
        self.max_text_length = max_text_length
        self._answers: dict[str, object] = {}
        self.transcript: list[SessionMessage] = []
        self.current_node: QuestionNode | None = None
        self.status: SessionStatus = "in_progress"
        self._editing = False
        self._resume: tuple[SessionStatus, QuestionNode | None] | None = None

    @property
    def answers(self) -> Mapping[str, object]:
        return MappingProxyType(self._answers)

    @property
    def editing(self) -> bool:
        return self._editing

    async def start(self) -> SessionMessage | None:
        self._answers = {}
        self.transcript = []
        self.current_node = None
        self.status = "in_progress"
        self._editing = False
        self._resume = None

        start = find_start_node(self.graph.nodes, self.graph.edges, self.graph.settings.start_node_id)
        if start is None:
            LOGGER.info("Form has no questions; session completes immediately.")
            self.status = "complete"
            await self.hooks.aemit("flow_completed", {"answers": {}, "mode": self.mode})
            return None

        question_text = render_question(start.question, self._answers)
        text = await self.phraser.greeting(question_text, self.graph.settings.form_name, self.mode)
        return await self._ask(start, text)

    async def submit(self, value: object) -> SubmitResult:
        node = self.current_node
        if node is None:
            raise SessionError("There is no question waiting for an answer.")

        error = self.validate(value, node)
        if error is not None:
            return SubmitResult(accepted=False, status=self.status, error=error)

        self._answers[node.variable_name] = value
        answer_message = SessionMessage(
            role="user",
            text=format_answer(value, node.type),
            node_id=node.id,
            variable_name=node.variable_name,
            value=value,
        )
        self.transcript.append(answer_message)
        await self.hooks.aemit(
            "answer_recorded",
            {"node_id": node.id, "variable_name": node.variable_name, "value": value},
        )

        if self._editing:
            return self._finish_edit()

        next_node = find_next_node(node, self.graph.nodes, self.graph.edges, self.answers)
        if next_node is not None:
            question_text = render_question(next_node.question, self._answers)
            text = await self.phraser.transition(
                question_text,
                previous_question=node.question,
                previous_answer=answer_message.text,
            )
            message = await self._ask(next_node, text)
            return SubmitResult(accepted=True, status=self.status, message=message)

        self.current_node = None
        if self.mode == "live":
            self.status = "review"
            message = None
        else:
            self.status = "complete"
            message = self._system_message(self._completion_text("preview"))
        await self.hooks.aemit("flow_completed", {"answers": dict(self._answers), "mode": self.mode})
        return SubmitResult(accepted=True, status=self.status, message=message)

    def edit_answer(self, variable_name: str) -> QuestionNode:
        if self.status == "submitted":
            raise SessionError("Form has already been submitted and cannot be edited.")
        node = self.graph.node_by_variable(variable_name)
        if node is None:
            raise SessionError(f"No question stores its answer in '{variable_name}'.")

        if not self._editing:
            self._resume = (self.status, self.current_node)
        self._editing = True
        self.current_node = node
        self.status = "in_progress"
        return node

    def finalize(self) -> dict[str, Any]:
        if self.mode != "live":
            raise SessionError("Only live sessions can be submitted.")
        if self.status == "submitted":
            raise SessionError("Form has already been submitted.")
        if not self._answers:
            raise SessionError("No form values to submit")

        serialized = {
            key: value.isoformat() if isinstance(value, (datetime, date)) else value
            for key, value in self._answers.items()
        }
        self.status = "submitted"
        self.current_node = None
        self._system_message(self._completion_text("live"))
        LOGGER.info("Response finalized with %d answers.", len(serialized))
        return serialized

    def validate(self, value: object, node: QuestionNode) -> str | None:
        if node.required and _is_blank(value):
            return REQUIRED_MESSAGE
        if node.type in TEXT_TYPES and self.mode == "live" and len(js_string(value)) > self.max_text_length:
            return TOO_LONG_MESSAGE
        return None

    async def _ask(self, node: QuestionNode, text: str) -> SessionMessage:
        self.current_node = node
        message = SessionMessage(role="system", text=text, node_id=node.id, variable_name=node.variable_name)
        self.transcript.append(message)
        await self.hooks.aemit(
            "question_asked",
            {"node_id": node.id, "variable_name": node.variable_name, "text": text},
        )
        return message

    def _finish_edit(self) -> SubmitResult:
        self._editing = False
        resume = self._resume
        self._resume = None

        if self.mode == "live":
            self.current_node = None
            self.status = "review"
            return SubmitResult(accepted=True, status=self.status)

        status, node = resume if resume is not None else ("in_progress", None)
        self.status = status
        self.current_node = node
        message = self._system_message(UPDATED_MESSAGE)
        return SubmitResult(accepted=True, status=self.status, message=message)

    def _completion_text(self, mode: SessionMode) -> str:
        name_value = self._answers.get("user_name") or self._answers.get("name")
        name = js_string(name_value) if name_value else ""
        if mode == "live":
            tail = "Your responses have been recorded successfully. 🎉"
        else:
            tail = "This is a preview of how your form responses would be collected. 🎉"
        if name:
            return f"Thank you so much, {name}! {tail}"
        return f"Thank you so much! {tail}"

    def _system_message(self, text: str) -> SessionMessage:
        message = SessionMessage(role="system", text=text)
        self.transcript.append(message)
        return message


def _is_blank(value: object) -> bool:
    if isinstance(value, str):
        return value.strip() == ""
    if value is None or value is False:
        return True
    if isinstance(value, (int, float)):
        return value == 0 or math.isnan(value)
    return False
