from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv


DEFAULT_OPENAI_BASE_URL = "https://api.openai.com/v1"
DEFAULT_OPENAI_MODEL = "gpt-4o-mini"
DEFAULT_MAX_TEXT_LENGTH = 10000


@dataclass(slots=True)
class AppSettings:
    openai_api_key: str | None = None
    openai_base_url: str = DEFAULT_OPENAI_BASE_URL
    openai_model: str = DEFAULT_OPENAI_MODEL
    openai_temperature: float = 0.2
    openai_max_tokens: int = 60
    llm_request_timeout_seconds: int = 30
    llm_retry_attempts: int = 2
    llm_retry_backoff_seconds: float = 1.0
    phrasing_timeout_seconds: float = 5.0
    use_ai: bool = False
    max_text_length: int = DEFAULT_MAX_TEXT_LENGTH



def _get_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if not value:
        return default
    try:
        return int(value)
    except ValueError:
        return default



def _get_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if not value:
        return default
    try:
        return float(value)
    except ValueError:
        return default


def _get_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if not value:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}



def load_settings() -> AppSettings:
    load_dotenv()

    return AppSettings(
        openai_api_key=os.getenv("OPENAI_API_KEY") or None,
        openai_base_url=os.getenv("OPENAI_BASE_URL", DEFAULT_OPENAI_BASE_URL),
        openai_model=os.getenv("OPENAI_MODEL", DEFAULT_OPENAI_MODEL),
        openai_temperature=_get_float("OPENAI_TEMPERATURE", 0.2),
        openai_max_tokens=_get_int("OPENAI_MAX_TOKENS", 60),
        llm_request_timeout_seconds=_get_int("LLM_REQUEST_TIMEOUT_SECONDS", 30),
        llm_retry_attempts=_get_int("LLM_RETRY_ATTEMPTS", 2),
        llm_retry_backoff_seconds=_get_float("LLM_RETRY_BACKOFF_SECONDS", 1.0),
        phrasing_timeout_seconds=_get_float("FORMFLOW_PHRASING_TIMEOUT_SECONDS", 5.0),
        use_ai=_get_bool("FORMFLOW_USE_AI", False),
        max_text_length=_get_int("FORMFLOW_MAX_TEXT_LENGTH", DEFAULT_MAX_TEXT_LENGTH),
    )
