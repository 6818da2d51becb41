"""Exception hierarchy for the voice consultation service."""


class VoiceConsultError(Exception):
    """Base class for all application errors."""


class ConfigurationError(VoiceConsultError):
    """A required setting (e.g. the channel API key) is missing."""


class SessionLookupError(VoiceConsultError):
    """The session detail could not be fetched or parsed."""

    def __init__(self, message: str, not_found: bool = False):
        super().__init__(message)
        self.not_found = not_found


class ChannelError(VoiceConsultError):
    """The realtime channel could not be started or failed mid-call."""


class ReportSubmissionError(VoiceConsultError):
    """The report-generation collaborator rejected or failed the request."""
