"""
Constants and configuration values used throughout the application.

This module defines constants that are used across different parts of the application,
providing a centralized location for configuration values and making it easier to
maintain consistent naming throughout the codebase.
"""

# Logger name used throughout the application
LOGGER_NAME = "voice_consult"

# Realtime channel event kinds
EVENT_CALL_START = "call-start"
EVENT_CALL_END = "call-end"
EVENT_MESSAGE = "message"
EVENT_SPEECH_START = "speech-start"
EVENT_SPEECH_END = "speech-end"
EVENT_ERROR = "error"

CHANNEL_EVENTS = (
    EVENT_CALL_START,
    EVENT_CALL_END,
    EVENT_MESSAGE,
    EVENT_SPEECH_START,
    EVENT_SPEECH_END,
    EVENT_ERROR,
)

# Speaker roles
ROLE_USER = "user"
ROLE_ASSISTANT = "assistant"

# Transcript message fields as sent by the provider
MESSAGE_TYPE_TRANSCRIPT = "transcript"
TRANSCRIPT_PARTIAL = "partial"
TRANSCRIPT_FINAL = "final"

# Voice provider defaults
DEFAULT_VAPI_BASE_URL = "https://api.vapi.ai"
DEFAULT_API_BASE_URL = "http://localhost:3000"
DEFAULT_CONNECT_TIMEOUT = 30  # seconds
HTTP_TIMEOUT = 30  # seconds

# Inline assistant configuration
ASSISTANT_NAME = "AI Medical Doctor Voice Agent"
ASSISTANT_FIRST_MESSAGE = (
    "Hi there! I’m your AI Medical Assistant. I’m here to help you with any "
    "health questions or concerns you might have today. How are you feeling?"
)
TRANSCRIBER_PROVIDER = "assembly-ai"
TRANSCRIBER_LANGUAGE = "en"
VOICE_PROVIDER = "playht"
DEFAULT_VOICE_ID = "will"
MODEL_PROVIDER = "openai"
MODEL_NAME = "gpt-4"

# Collaborator endpoints (relative to API_BASE_URL)
SESSION_DETAIL_PATH = "/api/session-chat"
MEDICAL_REPORT_PATH = "/api/medical-report"

# User-facing messages
FALLBACK_ERROR_MESSAGE = "Call ended unexpectedly."
MISSING_API_KEY_MESSAGE = "Missing VAPI_API_KEY"
CONNECT_TIMEOUT_MESSAGE = "Could not connect the call. Please try again."
CALL_CANCELLED_MESSAGE = "Call ended before it connected."
REPORT_SUCCESS_MESSAGE = "Your report is generated!"
REPORT_FAILURE_MESSAGE = "Call ended, but the report could not be generated."

# Number of finalized messages shown next to the live transcript
RECENT_MESSAGES_LIMIT = 4
