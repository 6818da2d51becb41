"""Utterance and transcript event models."""

import uuid
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, StrictStr

Role = Literal["user", "assistant"]


class Utterance(BaseModel):
    """A finalized speaker turn. Immutable once appended to the log."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    role: Role
    text: str


class LiveUtterance(BaseModel):
    """The in-progress utterance, replaced on every partial update."""

    model_config = ConfigDict(frozen=True)

    role: Role
    text: str


class TranscriptEvent(BaseModel):
    """A partial or final speech-recognition event."""

    model_config = ConfigDict(strict=True)

    kind: Literal["partial", "final"]
    role: Role
    text: StrictStr
