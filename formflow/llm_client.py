from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Protocol, Sequence

from langchain_core.messages import AIMessage, BaseMessage
from langchain_openai import ChatOpenAI

from formflow.settings import DEFAULT_OPENAI_BASE_URL, AppSettings


LOGGER = logging.getLogger(__name__)


class LLMCallError(RuntimeError):
    """The chat model gave no usable reply within the configured attempts."""


class LLMClient(Protocol):
    """What the phraser needs from a chat model."""

    @property
    def model_name(self) -> str: ...

    async def invoke(self, messages: Sequence[BaseMessage]) -> AIMessage: ...


@dataclass(slots=True)
class OpenAILLMConfig:
    api_key: str
    model: str
    base_url: str = DEFAULT_OPENAI_BASE_URL
    temperature: float = 0.2
    # Greetings and transitions are one or two sentences.
    max_tokens: int = 60
    timeout_seconds: int = 30
    retry_attempts: int = 2
    retry_backoff_seconds: float = 1.0

    @classmethod
    def from_settings(cls, settings: AppSettings) -> OpenAILLMConfig:
        if not settings.openai_api_key:
            raise ValueError("OPENAI_API_KEY is required for the OpenAI client.")
        return cls(
            api_key=settings.openai_api_key,
            model=settings.openai_model,
            base_url=settings.openai_base_url,
            temperature=settings.openai_temperature,
            max_tokens=settings.openai_max_tokens,
            timeout_seconds=settings.llm_request_timeout_seconds,
            retry_attempts=settings.llm_retry_attempts,
            retry_backoff_seconds=settings.llm_retry_backoff_seconds,
        )


class OpenAILLMClient:
    """Short-reply chat client used for conversational phrasing.

    Retries are handled here with a linear backoff, so the underlying
    ``ChatOpenAI`` model is built with its own retries disabled.
    """

    def __init__(self, config: OpenAILLMConfig) -> None:
        self._config = config
        self._model = ChatOpenAI(
            model=config.model,
            api_key=config.api_key,
            base_url=config.base_url,
            temperature=config.temperature,
            max_tokens=config.max_tokens,
            timeout=config.timeout_seconds,
            max_retries=0,
        )

    @property
    def model_name(self) -> str:
        return self._config.model

    async def invoke(self, messages: Sequence[BaseMessage]) -> AIMessage:
        attempts = max(1, self._config.retry_attempts)
        failure: Exception | None = None

        for attempt in range(1, attempts + 1):
            if attempt > 1:
                wait = self._config.retry_backoff_seconds * (attempt - 1)
                LOGGER.debug("Retrying %s in %.1fs (attempt %d of %d).", self.model_name, wait, attempt, attempts)
                await asyncio.sleep(wait)
            try:
                reply = await self._model.ainvoke(list(messages))
            except Exception as exc:  # noqa: BLE001
                failure = exc
                continue
            if isinstance(reply, AIMessage):
                return reply
            failure = LLMCallError(f"{self.model_name} answered with {type(reply).__name__}, not an AI message")

        raise LLMCallError(f"{self.model_name} failed after {attempts} attempt(s): {failure}")


def extract_text(message: AIMessage) -> str:
    """Plain text of a reply, joining text blocks when the content is a list."""
    content = message.content
    if isinstance(content, str):
        return content
    if not isinstance(content, list):
        return ""
    chunks = (block if isinstance(block, str) else block.get("text") for block in content if isinstance(block, (str, dict)))
    return "".join(chunk for chunk in chunks if isinstance(chunk, str))


def build_llm_client(settings: AppSettings) -> OpenAILLMClient | None:
    if not settings.openai_api_key:
        LOGGER.info("OPENAI_API_KEY is not set; conversational phrasing uses built-in texts.")
        return None
    return OpenAILLMClient(OpenAILLMConfig.from_settings(settings))
