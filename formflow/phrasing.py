from __future__ import annotations

import asyncio
import logging
import random
from typing import Literal

from langchain_core.messages import HumanMessage, SystemMessage

from formflow.llm_client import LLMClient, extract_text


LOGGER = logging.getLogger(__name__)

SessionMode = Literal["live", "preview"]

DEFAULT_TRANSITIONS = ("Great!", "Thanks!", "Got it.", "Perfect.", "Awesome!")

SYSTEM_PROMPT = """You are a concise, context-aware form assistant.

STRICT GUIDELINES (follow every time):
1. Stay within the exact context provided by the user input and the optional "Context" string.
2. NEVER introduce new topics, questions, or information that are not present in the original text or the instructions.
3. If asked to include the original question verbatim, include it EXACTLY as written (no paraphrasing).
4. Keep the tone friendly and conversational, within 1-2 short sentences maximum.
5. Do NOT add explanations, extra commentary, or unrelated chatter. Respond only with the rewritten text.

If no transformation is explicitly requested, return the original text unchanged."""

GREETING_CONTEXT = """Original Question: "{question}"
Form Name: "{form_name}"
Mode: "{mode}"

Instructions:
1. Create a warm, brief greeting (1-2 sentences max)
2. MUST include the EXACT original question at the end
3. DO NOT rephrase or modify the original question
4. DO NOT explain how to answer or mention the options"""

TRANSITION_CONTEXT = """Previous question: "{previous_question}"
Previous answer: "{previous_answer}"
Current question: "{question}"

Instructions:
1. Create a VERY brief transition (1-2 words or a short phrase)
2. The transition should acknowledge their previous answer naturally
3. MUST be followed by the EXACT original question
4. DO NOT rephrase or modify the original question
5. DO NOT add explanations or options"""


def default_greeting(question_text: str, form_name: str, mode: SessionMode) -> str:
    if mode == "live":
        return f"Hi there! 👋 Welcome to {form_name or 'this form'}. Let's start with: {question_text}"
    return f"Hi there! 👋 I'd love to learn more about you. Let's start with: {question_text}"


class TransitionPhraser:
    """Best-effort conversational wording around question texts.

    Every LLM call is bounded by ``timeout_seconds``; on any failure the plain
    question (or the default greeting) is returned so navigation never waits
    on the model.
    """

    def __init__(
        self,
        llm_client: LLMClient | None = None,
        *,
        timeout_seconds: float = 5.0,
        rng: random.Random | None = None,
    ) -> None:
        self._llm = llm_client
        self._timeout = timeout_seconds
        self._rng = rng or random.Random()

    @property
    def uses_ai(self) -> bool:
        return self._llm is not None

    async def greeting(self, question_text: str, form_name: str = "", mode: SessionMode = "live") -> str:
        fallback = default_greeting(question_text, form_name, mode)
        if self._llm is None:
            return fallback

        context = GREETING_CONTEXT.format(
            question=question_text,
            form_name=form_name or "this form",
            mode=mode,
        )
        reply = await self._rephrase(fallback, context)
        return reply or fallback

    async def transition(
        self,
        question_text: str,
        previous_question: str | None = None,
        previous_answer: object = None,
    ) -> str:
        if self._llm is None or previous_question is None:
            return f"{self._rng.choice(DEFAULT_TRANSITIONS)} {question_text}"

        context = TRANSITION_CONTEXT.format(
            previous_question=previous_question,
            previous_answer=previous_answer,
            question=question_text,
        )
        reply = await self._rephrase(f"Create a brief transition to: {question_text}", context)
        if not reply:
            return question_text

        if question_text in reply:
            prefix = reply.replace(question_text, "", 1).strip()
        else:
            prefix = reply.strip()
        return f"{prefix} {question_text}" if prefix else question_text

    async def _rephrase(self, text: str, context: str) -> str | None:
        assert self._llm is not None
        messages = [
            SystemMessage(content=SYSTEM_PROMPT),
            HumanMessage(
                content=(
                    "Please rephrase this in a natural, conversational way while maintaining "
                    f'its core meaning: "{text}"\nContext: {context}'
                )
            ),
        ]
        try:
            response = await asyncio.wait_for(self._llm.invoke(messages), timeout=self._timeout)
        except asyncio.TimeoutError:
            LOGGER.warning("Phrasing call timed out after %.1fs; using plain text.", self._timeout)
            return None
        except Exception as exc:  # noqa: BLE001
            LOGGER.warning("Phrasing call failed: %s", exc)
            return None

        reply = extract_text(response).strip()
        return reply or None
