from __future__ import annotations

import asyncio
import inspect
import logging
from enum import Enum
from typing import Any, Callable

logger = logging.getLogger(__name__)

Listener = Callable[..., Any]


def _key(event: str | Enum) -> str:
    return event.value if isinstance(event, Enum) else str(event)


class EventEmitter:
    """Per-instance publish/subscribe registry.

    Listeners run synchronously in registration order. A listener returning an
    awaitable has it scheduled on the running loop. Exceptions raised by a listener
    are logged and never propagate into the emitter's caller.
    """

    def __init__(self) -> None:
        self._listeners: dict[str, list[Listener]] = {}
        self._tasks: set[asyncio.Future[Any]] = set()

    def on(self, event: str | Enum, listener: Listener) -> Listener:
        self._listeners.setdefault(_key(event), []).append(listener)
        return listener

    def once(self, event: str | Enum, listener: Listener) -> Listener:
        def _wrapper(*args: Any) -> Any:
            self.off(event, _wrapper)
            return listener(*args)

        _wrapper.__wrapped__ = listener  # type: ignore[attr-defined]
        return self.on(event, _wrapper)

    def off(self, event: str | Enum, listener: Listener | None = None) -> None:
        key = _key(event)
        if listener is None:
            self._listeners.pop(key, None)
            return
        listeners = self._listeners.get(key, [])
        for registered in list(listeners):
            if registered is listener or getattr(registered, "__wrapped__", None) is listener:
                listeners.remove(registered)
                break
        if not listeners:
            self._listeners.pop(key, None)

    def listener_count(self, event: str | Enum) -> int:
        return len(self._listeners.get(_key(event), []))

    def emit(self, event: str | Enum, *args: Any) -> bool:
        """Call every listener for event. Returns True if there was at least one."""
        listeners = list(self._listeners.get(_key(event), []))
        for listener in listeners:
            try:
                result = listener(*args)
            except Exception:
                logger.exception(f"Listener for '{_key(event)}' raised")
                continue
            if inspect.isawaitable(result):
                task = asyncio.ensure_future(result)
                self._tasks.add(task)
                task.add_done_callback(self._on_listener_done)
        return bool(listeners)

    def _on_listener_done(self, task: asyncio.Future[Any]) -> None:
        self._tasks.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.error(f"Async listener failed: {task.exception()!r}")
