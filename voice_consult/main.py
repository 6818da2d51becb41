"""
FastAPI server for real-time voice consultations.

This module initializes the FastAPI application that the consultation page talks
to. It exposes endpoints to start and stop a voice call for a session and to
poll the call's state, live transcript and pending notifications while the
call is running.
"""

from pathlib import Path

import dotenv
from fastapi import FastAPI, HTTPException

from voice_consult.channel.vapi import VapiWebSocketChannel
from voice_consult.config.logging_config import configure_logging
from voice_consult.config.settings import load_settings
from voice_consult.exceptions import SessionLookupError
from voice_consult.models.call import CallSnapshot, CallState
from voice_consult.services.session_api import SessionApiClient
from voice_consult.session.call_session import CallSession
from voice_consult.session.registry import CallSessionRegistry
from voice_consult.session.report import ReportTrigger

# Load environment variables from .env file if it exists
env_path = Path(".") / ".env"
if env_path.exists():
    dotenv.load_dotenv(env_path)

logger = configure_logging()
settings = load_settings()

app = FastAPI(
    title="Voice Consult",
    description="Real-time voice consultations with an AI doctor persona",
    version="1.0.0",
)

api_client = SessionApiClient(settings.api_base_url)
report_trigger = ReportTrigger(api_client)
registry = CallSessionRegistry()


def create_channel(api_key: str) -> VapiWebSocketChannel:
    return VapiWebSocketChannel(api_key, settings.vapi_base_url)


def create_call_session(session_id: str) -> CallSession:
    return CallSession(session_id, settings, create_channel, report_trigger)


def snapshot_and_release(session: CallSession) -> CallSnapshot:
    """Snapshot the session, then drop it from the registry if it has settled."""
    snapshot = session.snapshot()
    registry.release(session.session_id)
    return snapshot


@app.get("/sessions/{session_id}/call", response_model=CallSnapshot)
async def get_call(session_id: str):
    """Current call state, live transcript, recent messages and notifications.

    Unknown sessions report an idle call without being registered.
    """
    session = registry.get_session(session_id)
    if session is None:
        return create_call_session(session_id).snapshot()
    return snapshot_and_release(session)


@app.post("/sessions/{session_id}/call", response_model=CallSnapshot)
async def start_call(session_id: str):
    """Start a voice call for the session.

    The session detail is fetched first; if it cannot be loaded no call is
    started. Starting while a call is already running returns the current
    snapshot unchanged.
    """
    existing = registry.get_session(session_id)
    if existing is not None and existing.state is not CallState.IDLE:
        return existing.snapshot()

    try:
        detail = await api_client.get_session_detail(session_id)
    except SessionLookupError as e:
        raise HTTPException(status_code=404 if e.not_found else 502, detail=str(e))

    session = registry.get_or_create(session_id, create_call_session)
    await session.start(detail)
    return snapshot_and_release(session)


@app.delete("/sessions/{session_id}/call", response_model=CallSnapshot)
async def stop_call(session_id: str):
    """End the call, generate the consultation report and return to idle."""
    session = registry.get_session(session_id)
    if session is None:
        raise HTTPException(status_code=404, detail=f"No call for session {session_id}")
    await session.stop()
    return snapshot_and_release(session)


@app.get("/health")
async def health_check():
    """Health check endpoint for monitoring system status.

    Returns:
        dict: Status information including whether the voice provider is configured.
    """
    return {
        "status": "healthy",
        "vapi_api_key_configured": bool(settings.vapi_api_key),
        "assistant_id_configured": bool(settings.vapi_assistant_id),
        "active_calls": registry.active_count(),
    }


@app.get("/")
async def root():
    """Root endpoint to display basic information about the API."""
    return {
        "name": "Voice Consult",
        "description": "Real-time voice consultations with an AI doctor persona",
        "version": "1.0.0",
        "endpoints": {
            "/sessions/{session_id}/call": "GET status, POST start, DELETE stop",
            "/health": "Health check endpoint",
        },
    }


if __name__ == "__main__":
    import uvicorn

    logger.info(f"Starting server on http://{settings.host}:{settings.port}")
    uvicorn.run(app, host=settings.host, port=settings.port, http="h11")
