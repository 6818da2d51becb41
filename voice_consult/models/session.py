"""
Pydantic models for the session lookup collaborator.

The backend returns a session detail with the persona ("doctor agent") the
user picked. Field names follow the backend's JSON (camelCase).
"""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class DoctorAgent(BaseModel):
    """AI persona a user talks to during a consultation."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: Optional[int] = None
    specialist: str = Field(..., description="Display name of the specialist")
    description: Optional[str] = None
    image: Optional[str] = None
    agentPrompt: Optional[str] = Field(None, description="System prompt for the persona")
    voiceId: Optional[str] = Field(None, description="Provider voice identifier")
    subscriptionRequired: bool = False


class SessionDetail(BaseModel):
    """Session descriptor: immutable for the duration of a call."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: Optional[int] = None
    sessionId: str = Field(..., description="Unique session identifier")
    notes: Optional[str] = None
    report: Optional[Any] = None
    selectedDoctor: Optional[DoctorAgent] = None
    createdOn: Optional[str] = None
