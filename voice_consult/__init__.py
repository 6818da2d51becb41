"""
Voice Consult - real-time voice consultations with an AI doctor persona

This application lets a user start a live voice call with an AI persona, follow
the transcript while the conversation happens, and receive a consultation report
once the call is over.

Architecture Overview:
- FastAPI server exposing HTTP endpoints to start, stop and inspect a call
- A realtime voice channel (provider websocket) delivering call, speech,
  transcript and error events
- A per-session call state machine that assembles the transcript and submits
  it for report generation exactly once per call

Key Components:
- channel: Event-emitting realtime channel and the owned listener handle
- config: Settings, constants, and logging setup
- models: Pydantic models for sessions, utterances and provider payloads
- services: HTTP clients for the session lookup and report collaborators
- session: Call lifecycle state machine, transcript assembler, error
  normalizer, report trigger and notifications

Getting Started:
1. Set up environment variables:
   - VAPI_API_KEY: Voice provider API key (required to start a call)
   - VAPI_ASSISTANT_ID: Optional pre-provisioned assistant
   - API_BASE_URL: Base URL of the session/report backend
   - LOG_LEVEL: Logging level (default INFO)

2. Start the server:
   ```bash
   python -m voice_consult.main
   ```
"""
