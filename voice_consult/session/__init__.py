"""
Call session lifecycle for voice consultations.

Key components:
- call_session: CallSession, the per-session state machine
  (idle -> connecting -> active -> ending -> idle).
- transcript: TranscriptAssembler, turning partial/final recognition events
  into a live utterance and an append-only log.
- errors: normalize_error, mapping nested provider error payloads to a
  single display message.
- report: ReportTrigger, submitting the finished transcript for a report.
- notifications: Notifier, the queue of user-visible notices.
- registry: CallSessionRegistry, one CallSession per UI session.
"""

from voice_consult.session.call_session import CallSession
from voice_consult.session.errors import NormalizedError, normalize_error
from voice_consult.session.notifications import Notifier
from voice_consult.session.registry import CallSessionRegistry
from voice_consult.session.report import ReportTrigger
from voice_consult.session.transcript import TranscriptAssembler
