"""
Normalization of realtime channel errors into a display message.

Providers wrap errors inconsistently (``{"errorMsg": ...}``,
``{"error": {"message": ...}}``, ``{"error": {"error": {"message": ...}}}``,
plain strings, exceptions). Extraction rules are tried in order and the first
non-empty string wins. Add new provider shapes to ``EXTRACTION_RULES``.
"""

from collections.abc import Mapping
from typing import Any, NamedTuple, Optional, Tuple

from voice_consult.config.constants import FALLBACK_ERROR_MESSAGE

# (tag, path) pairs, evaluated first-match-wins
EXTRACTION_RULES: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ("errorMsg", ("errorMsg",)),
    ("error.errorMsg", ("error", "errorMsg")),
    ("error.message", ("error", "message")),
    ("error.error.message", ("error", "error", "message")),
    ("message", ("message",)),
)


class NormalizedError(NamedTuple):
    message: str
    ends_call: bool = True
    source: str = "fallback"


def _extract(value: Any, path: Tuple[str, ...]) -> Optional[str]:
    for key in path:
        if not isinstance(value, Mapping):
            return None
        value = value.get(key)
    if isinstance(value, str) and value.strip():
        return value
    return None


def normalize_error(error: Any) -> NormalizedError:
    """
    Reduce an arbitrary error value to one display message.

    Never raises. Every error surfaced by the channel ends the call, so
    ``ends_call`` is always True.
    """
    for tag, path in EXTRACTION_RULES:
        message = _extract(error, path)
        if message is not None:
            return NormalizedError(message, True, tag)

    if isinstance(error, str) and error.strip():
        return NormalizedError(error, True, "string")

    if isinstance(error, BaseException):
        text = str(error)
        if text.strip():
            return NormalizedError(text, True, "exception")

    return NormalizedError(FALLBACK_ERROR_MESSAGE, True, "fallback")
