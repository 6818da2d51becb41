import unittest
from unittest.mock import MagicMock

from voice_consult.models.call import CallState
from voice_consult.session.registry import CallSessionRegistry


def make_session(session_id, state=CallState.IDLE, pending=()):
    session = MagicMock()
    session.session_id = session_id
    session.state = state
    session.notifier.pending.return_value = list(pending)
    return session


class TestCallSessionRegistry(unittest.TestCase):

    def setUp(self):
        self.registry = CallSessionRegistry()
        self.session_id = "session-123"

    def add(self, session):
        return self.registry.get_or_create(session.session_id, lambda _id: session)

    def test_get_session(self):
        session = self.add(make_session(self.session_id))

        self.assertIs(self.registry.get_session(self.session_id), session)

    def test_get_nonexistent_session(self):
        self.assertIsNone(self.registry.get_session("nonexistent-id"))
        self.assertEqual(self.registry.sessions, {})

    def test_get_or_create_builds_once(self):
        factory = MagicMock(side_effect=make_session)

        first = self.registry.get_or_create(self.session_id, factory)
        second = self.registry.get_or_create(self.session_id, factory)

        self.assertIs(first, second)
        factory.assert_called_once_with(self.session_id)

    def test_release_idle_session(self):
        self.add(make_session(self.session_id))

        self.assertTrue(self.registry.release(self.session_id))
        self.assertNotIn(self.session_id, self.registry.sessions)

    def test_release_session_in_call_is_refused(self):
        self.add(make_session(self.session_id, CallState.ACTIVE))

        self.assertFalse(self.registry.release(self.session_id))
        self.assertIn(self.session_id, self.registry.sessions)

    def test_release_keeps_unread_notifications(self):
        self.add(make_session(self.session_id, pending=["Your report is generated!"]))

        self.assertFalse(self.registry.release(self.session_id))
        self.assertIn(self.session_id, self.registry.sessions)

    def test_release_nonexistent_session(self):
        self.assertFalse(self.registry.release("nonexistent-id"))

    def test_active_count(self):
        self.add(make_session("a"))
        self.add(make_session("b", CallState.CONNECTING))
        self.add(make_session("c", CallState.ENDING))

        self.assertEqual(self.registry.active_count(), 2)

    def test_repeated_start_and_release_stays_bounded(self):
        for i in range(100):
            self.add(make_session(f"session-{i}"))
            self.registry.release(f"session-{i}")

        self.assertEqual(len(self.registry.sessions), 0)


if __name__ == "__main__":
    unittest.main()
