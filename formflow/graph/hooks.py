from __future__ import annotations

import inspect
import logging
from collections import defaultdict
from dataclasses import dataclass
from typing import Any, Awaitable, Callable


LOGGER = logging.getLogger(__name__)

HookCallback = Callable[[dict[str, Any]], object | Awaitable[object]]


@dataclass(slots=True)
class HookInvocation:
    event: str
    callback_name: str
    result: object | None
    error: str | None = None


class FlowHookRegistry:
    """Lifecycle hooks for form editing and response sessions.

    A failing callback is logged and recorded on its invocation; it never
    interrupts the editor or session that emitted the event.
    """

    def __init__(self) -> None:
        self._callbacks: dict[str, list[HookCallback]] = defaultdict(list)

    def register(self, event: str, callback: HookCallback) -> None:
        if event not in DEFAULT_HOOK_EVENTS:
            LOGGER.debug("Registering callback for non-standard hook event '%s'.", event)
        self._callbacks[event].append(callback)

    def clear(self, event: str | None = None) -> None:
        if event is None:
            self._callbacks.clear()
            return
        self._callbacks.pop(event, None)

    def callbacks_for(self, event: str) -> list[HookCallback]:
        return list(self._callbacks.get(event, []))

    def emit(self, event: str, context: dict[str, Any]) -> list[HookInvocation]:
        invocations: list[HookInvocation] = []
        for callback in self.callbacks_for(event):
            callback_name = str(getattr(callback, "__name__", callback.__class__.__name__))
            try:
                result = callback(context)
            except Exception as exc:  # noqa: BLE001
                invocations.append(self._failed(event, callback_name, exc))
                continue
            if inspect.isawaitable(result):
                # Sync emit cannot await; close coroutines so they are not left pending.
                close = getattr(result, "close", None)
                if callable(close):
                    close()
                LOGGER.debug("Hook '%s' for '%s' returned an awaitable; use aemit.", callback_name, event)
                result = None
            invocations.append(HookInvocation(event=event, callback_name=callback_name, result=result))
        return invocations

    async def aemit(self, event: str, context: dict[str, Any]) -> list[HookInvocation]:
        invocations: list[HookInvocation] = []
        for callback in self.callbacks_for(event):
            callback_name = str(getattr(callback, "__name__", callback.__class__.__name__))
            try:
                result = callback(context)
                if inspect.isawaitable(result):
                    result = await result
            except Exception as exc:  # noqa: BLE001
                invocations.append(self._failed(event, callback_name, exc))
                continue
            invocations.append(HookInvocation(event=event, callback_name=callback_name, result=result))
        return invocations

    @staticmethod
    def _failed(event: str, callback_name: str, exc: Exception) -> HookInvocation:
        LOGGER.warning("Hook '%s' failed for event '%s': %s", callback_name, event, exc)
        return HookInvocation(event=event, callback_name=callback_name, result=None, error=str(exc))


DEFAULT_HOOK_EVENTS = {
    "node_added",
    "node_updated",
    "node_removed",
    "edge_added",
    "edge_updated",
    "edge_removed",
    "edge_rejected",
    "settings_updated",
    "question_asked",
    "answer_recorded",
    "flow_completed",
}
