"""Call state, notifications and the call snapshot read model."""

import time
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field

from voice_consult.models.transcript import LiveUtterance, Utterance


class CallState(str, Enum):
    """Lifecycle state of a single voice call."""
    IDLE = "idle"
    CONNECTING = "connecting"
    ACTIVE = "active"
    ENDING = "ending"


class NotificationLevel(str, Enum):
    ERROR = "error"
    SUCCESS = "success"
    INFO = "info"


class Notification(BaseModel):
    """Single-line, user-visible notice."""
    level: NotificationLevel
    message: str
    createdAt: float = Field(default_factory=time.time)


class CallSnapshot(BaseModel):
    """Everything the UI needs to render a call."""
    sessionId: str
    state: CallState
    connected: bool
    busy: bool
    currentSpeaker: Optional[str] = None
    liveTranscript: Optional[LiveUtterance] = None
    messages: List[Utterance] = Field(default_factory=list)
    elapsedSeconds: float = 0.0
    notifications: List[Notification] = Field(default_factory=list)
