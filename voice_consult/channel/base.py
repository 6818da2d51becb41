"""
Event-emitting base class for realtime voice channels.

Listeners are matched by identity: ``off`` removes the exact callable that was
passed to ``on``. Listeners may be plain functions or coroutine functions.
"""

import inspect
import logging
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List, Optional, Union

from voice_consult.config.constants import LOGGER_NAME
from voice_consult.models.assistant import AssistantConfig

logger = logging.getLogger(LOGGER_NAME)

Listener = Callable[..., Any]
StartTarget = Union[str, AssistantConfig]


class VoiceChannel(ABC):
    """Realtime link to the voice provider."""

    def __init__(self):
        self._listeners: Dict[str, List[Listener]] = {}

    def on(self, event: str, listener: Listener) -> None:
        self._listeners.setdefault(event, []).append(listener)

    def off(self, event: str, listener: Listener) -> None:
        """Remove a listener. Unknown listeners are ignored."""
        listeners = self._listeners.get(event)
        if not listeners:
            return
        try:
            listeners.remove(listener)
        except ValueError:
            return
        if not listeners:
            del self._listeners[event]

    def listener_count(self, event: Optional[str] = None) -> int:
        if event is not None:
            return len(self._listeners.get(event, ()))
        return sum(len(listeners) for listeners in self._listeners.values())

    async def emit(self, event: str, *args: Any) -> None:
        """
        Deliver an event to every listener registered for it.

        A failing listener is logged and does not prevent delivery to the
        remaining listeners.
        """
        for listener in list(self._listeners.get(event, ())):
            try:
                result = listener(*args)
                if inspect.isawaitable(result):
                    await result
            except Exception as e:
                logger.error(f"Error in '{event}' listener: {e}", exc_info=True)

    @abstractmethod
    async def start(self, target: StartTarget) -> None:
        """
        Start a call.

        Args:
            target: Pre-provisioned assistant id, or an inline assistant config
        """

    @abstractmethod
    async def stop(self) -> None:
        """Hang up and release the underlying connection."""
