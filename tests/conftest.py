import logging

import pytest

from voice_consult.channel.base import VoiceChannel
from voice_consult.config.settings import Settings
from voice_consult.models.session import DoctorAgent, SessionDetail
from voice_consult.session.call_session import CallSession
from voice_consult.session.notifications import Notifier
from voice_consult.session.report import ReportTrigger


@pytest.fixture(autouse=True)
def reset_logging():
    """Reset logging configuration before each test"""
    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
    logging.basicConfig(level=logging.NOTSET)
    yield


class FakeChannel(VoiceChannel):
    """In-memory channel that records start/stop calls."""

    def __init__(self, connect_on_start=True, start_error=None, stop_error=None):
        super().__init__()
        self.connect_on_start = connect_on_start
        self.start_error = start_error
        self.stop_error = stop_error
        self.started_with = None
        self.stop_calls = 0

    async def start(self, target):
        self.started_with = target
        if self.start_error is not None:
            raise self.start_error
        if self.connect_on_start:
            await self.emit("call-start")

    async def stop(self):
        self.stop_calls += 1
        if self.stop_error is not None:
            raise self.stop_error


class FakeChannelFactory:
    def __init__(self, **channel_kwargs):
        self.channel_kwargs = channel_kwargs
        self.channels = []
        self.api_keys = []

    def __call__(self, api_key):
        self.api_keys.append(api_key)
        channel = FakeChannel(**self.channel_kwargs)
        self.channels.append(channel)
        return channel

    @property
    def last(self):
        return self.channels[-1]


class FakeReportClient:
    """Report collaborator that records requests; can block or fail."""

    def __init__(self, result=None, error=None):
        self.result = result if result is not None else {"summary": "ok"}
        self.error = error
        self.requests = []
        self.gate = None

    async def generate_report(self, request):
        self.requests.append(request)
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        return self.result


def _transcript(role, text, kind="final"):
    return {"type": "transcript", "role": role, "transcriptType": kind, "transcript": text}


@pytest.fixture
def transcript_message():
    """Build a provider transcript message."""
    return _transcript


@pytest.fixture
def fake_channel_cls():
    return FakeChannel


@pytest.fixture
def fake_factory_cls():
    return FakeChannelFactory


@pytest.fixture
def settings():
    return Settings(vapi_api_key="test-api-key", connect_timeout=30)


@pytest.fixture
def descriptor():
    return SessionDetail(
        id=1,
        sessionId="session-123",
        notes="Headache for two days",
        selectedDoctor=DoctorAgent(
            id=2,
            specialist="Neurologist",
            description="Brain and nerves",
            image="/doctor2.png",
            agentPrompt="You are a friendly neurologist.",
            voiceId="chris",
        ),
        createdOn="2026-10-01",
    )


@pytest.fixture
def channel_factory():
    return FakeChannelFactory()


@pytest.fixture
def report_client():
    return FakeReportClient()


@pytest.fixture
def call_session(settings, channel_factory, report_client):
    return CallSession(
        "session-123",
        settings,
        channel_factory,
        ReportTrigger(report_client),
        notifier=Notifier(),
    )
