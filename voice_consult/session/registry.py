"""
Registry of call sessions, one per UI session id.

This module provides the CallSessionRegistry class which keeps a CallSession
for every session with a call in progress, so that start, stop and status
requests for the same session id always reach the same state machine.
"""

from typing import Callable, Dict, Optional

from voice_consult.models.call import CallState
from voice_consult.session.call_session import CallSession


class CallSessionRegistry:
    """
    Maps session ids to their CallSession.

    Sessions are created by ``get_or_create`` when a call is started and are
    released once they are idle and their notifications have been read.
    """

    def __init__(self):
        """Initialize an empty dictionary of call sessions."""
        self.sessions: Dict[str, CallSession] = {}

    def get_session(self, session_id: str) -> Optional[CallSession]:
        """
        Get a call session by its id.

        Returns:
            The CallSession, or None if the session is unknown
        """
        return self.sessions.get(session_id)

    def get_or_create(
        self, session_id: str, factory: Callable[[str], CallSession]
    ) -> CallSession:
        """
        Get the call session for an id, creating it with ``factory`` if needed.

        Args:
            session_id: Unique identifier of the UI session
            factory: Called with the session id to build a new CallSession
        """
        session = self.sessions.get(session_id)
        if session is None:
            session = factory(session_id)
            self.sessions[session_id] = session
        return session

    def release(self, session_id: str) -> bool:
        """
        Drop a session that is idle and has no unread notifications.

        Returns:
            True if the session was removed, False if it is unknown, in a call,
            or still holding notifications for the user
        """
        session = self.sessions.get(session_id)
        if session is None or session.state is not CallState.IDLE:
            return False
        if session.notifier.pending():
            return False
        del self.sessions[session_id]
        return True

    def active_count(self) -> int:
        """Number of sessions that are not idle."""
        return sum(1 for s in self.sessions.values() if s.state is not CallState.IDLE)
