"""
Transcript assembly from streaming speech-recognition events.

The realtime channel is a schema-loose boundary, so malformed events are
dropped instead of raising.
"""

import logging
from typing import Any, List, Optional, Tuple

from pydantic import ValidationError

from voice_consult.config.constants import (
    LOGGER_NAME,
    MESSAGE_TYPE_TRANSCRIPT,
    RECENT_MESSAGES_LIMIT,
    TRANSCRIPT_FINAL,
    TRANSCRIPT_PARTIAL,
)
from voice_consult.models.transcript import LiveUtterance, TranscriptEvent, Utterance

logger = logging.getLogger(LOGGER_NAME)


def transcript_event_from_message(message: Any) -> Optional[dict]:
    """
    Translate a provider transcript message into an assembler event.

    Provider messages look like
    ``{"type": "transcript", "role": ..., "transcriptType": ..., "transcript": ...}``.

    Returns:
        ``{"kind", "role", "text"}`` or None if the message is not a transcript
    """
    if not isinstance(message, dict) or message.get("type") != MESSAGE_TYPE_TRANSCRIPT:
        return None
    return {
        "kind": message.get("transcriptType"),
        "role": message.get("role"),
        "text": message.get("transcript"),
    }


class TranscriptAssembler:
    """
    Keeps the in-progress utterance and the log of finalized utterances.

    The log is append-only; readers get tuples.
    """

    def __init__(self):
        self._current: Optional[LiveUtterance] = None
        self._log: List[Utterance] = []

    @property
    def current(self) -> Optional[LiveUtterance]:
        return self._current

    @property
    def messages(self) -> Tuple[Utterance, ...]:
        return tuple(self._log)

    def last(self, n: int = RECENT_MESSAGES_LIMIT) -> Tuple[Utterance, ...]:
        if n <= 0:
            return ()
        return tuple(self._log[-n:])

    def __len__(self) -> int:
        return len(self._log)

    def clear_current(self) -> None:
        self._current = None

    def on_event(self, event: Any) -> bool:
        """
        Apply one partial or final event.

        Returns:
            True if the event was applied, False if it was ignored
        """
        if isinstance(event, TranscriptEvent):
            parsed = event
        else:
            try:
                parsed = TranscriptEvent.model_validate(event)
            except ValidationError:
                logger.debug(f"Ignoring malformed transcript event: {event!r}")
                return False

        if parsed.kind == TRANSCRIPT_PARTIAL:
            self._current = LiveUtterance(role=parsed.role, text=parsed.text)
        elif parsed.kind == TRANSCRIPT_FINAL:
            self._log.append(Utterance(role=parsed.role, text=parsed.text))
            self._current = None
        return True

    def on_message(self, message: Any) -> bool:
        """Apply a raw provider message; non-transcript messages are ignored."""
        event = transcript_event_from_message(message)
        if event is None:
            return False
        return self.on_event(event)
