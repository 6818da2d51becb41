"""
Pydantic models for outbound provider and backend payloads.

This module provides the inline assistant configuration accepted by the voice
provider when no pre-provisioned assistant is configured, and the request body
sent to the report-generation collaborator.
"""

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field

from voice_consult.models.session import SessionDetail
from voice_consult.models.transcript import Utterance


class TranscriberConfig(BaseModel):
    provider: str
    language: str


class VoiceConfig(BaseModel):
    provider: str
    voiceId: str


class SystemMessage(BaseModel):
    role: Literal["system"] = "system"
    content: Optional[str] = None


class ModelConfig(BaseModel):
    provider: str
    model: str
    messages: List[SystemMessage] = Field(default_factory=list)


class AssistantConfig(BaseModel):
    """Inline assistant definition passed to the provider's start call."""
    name: str
    firstMessage: str
    transcriber: TranscriberConfig
    voice: VoiceConfig
    model: ModelConfig


class ReportRequest(BaseModel):
    """Body of the report-generation request."""
    messages: List[Utterance]
    sessionDetail: SessionDetail
    sessionId: str

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(mode="json")
