"""
Lifecycle state machine for a single voice consultation call.

A CallSession moves through ``idle -> connecting -> active -> ending -> idle``.
``connecting -> idle`` and ``active -> idle`` are taken on failures. Channel
events are delivered on the event loop in any order; every handler first checks
that it belongs to the live channel handle, so events from a torn-down call
are ignored.

Exactly one report is submitted per call that reached ``active`` and ended
through ``stop()`` or a provider hangup. Calls ending on an error skip the
report unless ``Settings.report_on_error`` is set.
"""

import asyncio
import logging
import time
from typing import Any, Callable, Dict, Optional, Tuple

from voice_consult.channel.base import Listener, VoiceChannel
from voice_consult.channel.handle import ChannelHandle
from voice_consult.config.constants import (
    CALL_CANCELLED_MESSAGE,
    CONNECT_TIMEOUT_MESSAGE,
    EVENT_CALL_END,
    EVENT_CALL_START,
    EVENT_ERROR,
    EVENT_MESSAGE,
    EVENT_SPEECH_END,
    EVENT_SPEECH_START,
    LOGGER_NAME,
    RECENT_MESSAGES_LIMIT,
    REPORT_FAILURE_MESSAGE,
    REPORT_SUCCESS_MESSAGE,
    ROLE_ASSISTANT,
    ROLE_USER,
)
from voice_consult.config.settings import Settings
from voice_consult.exceptions import ConfigurationError, ReportSubmissionError
from voice_consult.models.call import CallSnapshot, CallState
from voice_consult.models.session import SessionDetail
from voice_consult.models.transcript import Utterance
from voice_consult.session.assistant_config import resolve_start_target
from voice_consult.session.errors import normalize_error
from voice_consult.session.notifications import Notifier
from voice_consult.session.report import ReportTrigger
from voice_consult.session.transcript import TranscriptAssembler

logger = logging.getLogger(LOGGER_NAME)

ChannelFactory = Callable[[str], VoiceChannel]

ALLOWED_TRANSITIONS = {
    CallState.IDLE: {CallState.CONNECTING},
    CallState.CONNECTING: {CallState.ACTIVE, CallState.ENDING, CallState.IDLE},
    CallState.ACTIVE: {CallState.ENDING, CallState.IDLE},
    CallState.ENDING: {CallState.IDLE},
}


class CallSession:
    """
    Owns the call state, the channel handle and the transcript of one UI session.

    ``start()`` and ``stop()`` never raise for call failures; failures end up
    as notifications on ``notifier``.
    """

    def __init__(
        self,
        session_id: str,
        settings: Settings,
        channel_factory: ChannelFactory,
        report_trigger: ReportTrigger,
        notifier: Optional[Notifier] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.session_id = session_id
        self.settings = settings
        self._channel_factory = channel_factory
        self._report_trigger = report_trigger
        self.notifier = notifier or Notifier()
        self._clock = clock

        self.state = CallState.IDLE
        self.descriptor: Optional[SessionDetail] = None
        self.assembler = TranscriptAssembler()
        self.current_speaker: Optional[str] = None
        self.report: Optional[Any] = None

        self._handle: Optional[ChannelHandle] = None
        self._timeout_task: Optional[asyncio.Task] = None
        self._active_since: Optional[float] = None
        self._report_submitted = False

    # -- read side -------------------------------------------------------

    @property
    def busy(self) -> bool:
        """True while a channel open or a teardown/report is in flight."""
        return self.state in (CallState.CONNECTING, CallState.ENDING)

    @property
    def connected(self) -> bool:
        return self.state is CallState.ACTIVE

    @property
    def handle(self) -> Optional[ChannelHandle]:
        return self._handle

    @property
    def elapsed(self) -> float:
        """Seconds since the call became active, 0 when not in a call."""
        if self._active_since is None or self.state not in (CallState.ACTIVE, CallState.ENDING):
            return 0.0
        return max(0.0, self._clock() - self._active_since)

    def snapshot(self, drain: bool = True, limit: int = RECENT_MESSAGES_LIMIT) -> CallSnapshot:
        notifications = self.notifier.drain() if drain else self.notifier.pending()
        return CallSnapshot(
            sessionId=self.session_id,
            state=self.state,
            connected=self.connected,
            busy=self.busy,
            currentSpeaker=self.current_speaker,
            liveTranscript=self.assembler.current,
            messages=list(self.assembler.last(limit)),
            elapsedSeconds=round(self.elapsed, 1),
            notifications=notifications,
        )

    # -- commands --------------------------------------------------------

    async def start(self, descriptor: Optional[SessionDetail]) -> CallState:
        """
        Start a call for the given session.

        No-op unless the session is idle. A missing channel API key is reported
        as a notification and leaves the session idle without opening a channel.

        Returns:
            The state after the start attempt
        """
        if self.state is not CallState.IDLE:
            logger.info(f"Ignoring start for session {self.session_id}: call is {self.state.value}")
            return self.state
        if descriptor is None:
            logger.warning(f"Cannot start call for session {self.session_id}: no session detail")
            return self.state
        try:
            api_key = self.settings.require_api_key()
        except ConfigurationError as e:
            logger.error(f"Cannot start call for session {self.session_id}: {e}")
            self.notifier.error(str(e))
            return self.state

        self.descriptor = descriptor
        self.assembler = TranscriptAssembler()
        self.current_speaker = None
        self.report = None
        self._active_since = None
        self._report_submitted = False
        self._transition(CallState.CONNECTING)

        handle = None
        try:
            handle = ChannelHandle(self._channel_factory(api_key))
            self._handle = handle
            handle.register(self._build_listeners(handle))
            target = resolve_start_target(self.settings, descriptor)
        except Exception as e:
            logger.error(f"Could not set up call channel: {e}", exc_info=True)
            await self._abort(handle, normalize_error(e).message)
            return self.state

        self._timeout_task = asyncio.create_task(self._connect_timeout(handle))
        logger.info(
            f"Starting call for session {self.session_id} "
            f"({'assistant ' + target if isinstance(target, str) else 'inline assistant'})"
        )

        try:
            await handle.channel.start(target)
        except Exception as e:
            if self._is_current(handle):
                normalized = normalize_error(e)
                logger.error(f"Failed to start call for session {self.session_id}: {normalized.message}")
                await self._abort(handle, normalized.message)
            else:
                logger.info(f"Channel start failed after call was torn down: {e}")

        return self.state

    async def stop(self) -> CallState:
        """
        End the call.

        From ``active`` the transcript is submitted for a report before the
        channel is torn down. From ``connecting`` the partially-opened channel
        is torn down without a report. No-op in any other state.
        """
        if self.state not in (CallState.CONNECTING, CallState.ACTIVE):
            logger.info(f"Ignoring stop for session {self.session_id}: call is {self.state.value}")
            return self.state
        logger.info(f"Stopping call for session {self.session_id}")
        await self._finish(self._handle, submit_report=True)
        return self.state

    # -- channel listeners ----------------------------------------------

    def _build_listeners(self, handle: ChannelHandle) -> Dict[str, Listener]:
        # Fresh callables per call; the handle removes these exact objects
        async def on_call_start(*_args):
            await self._on_call_start(handle)

        async def on_call_end(*_args):
            await self._on_call_end(handle)

        async def on_message(message=None, *_args):
            self._on_message(handle, message)

        async def on_speech_start(*_args):
            self._on_speech(handle, ROLE_ASSISTANT)

        async def on_speech_end(*_args):
            self._on_speech(handle, ROLE_USER)

        async def on_error(error=None, *_args):
            await self._on_error(handle, error)

        return {
            EVENT_CALL_START: on_call_start,
            EVENT_CALL_END: on_call_end,
            EVENT_MESSAGE: on_message,
            EVENT_SPEECH_START: on_speech_start,
            EVENT_SPEECH_END: on_speech_end,
            EVENT_ERROR: on_error,
        }

    def _is_current(self, handle: Optional[ChannelHandle]) -> bool:
        return handle is not None and handle is self._handle and not handle.closed

    async def _on_call_start(self, handle: ChannelHandle) -> None:
        if not self._is_current(handle) or self.state is not CallState.CONNECTING:
            return
        self._cancel_timeout()
        self._active_since = self._clock()
        self._transition(CallState.ACTIVE)
        logger.info(f"Call started for session {self.session_id}")

    async def _on_call_end(self, handle: ChannelHandle) -> None:
        if not self._is_current(handle):
            return
        if self.state is CallState.ACTIVE:
            logger.info(f"Call ended by provider for session {self.session_id}")
            await self._finish(handle, submit_report=True)
        elif self.state is CallState.CONNECTING:
            logger.info(f"Call ended before connecting for session {self.session_id}")
            await self._finish(handle, submit_report=False)
        # ending: the in-flight stop owns teardown

    def _on_message(self, handle: ChannelHandle, message: Any) -> None:
        if not self._is_current(handle) or self.state is CallState.IDLE:
            return
        self.assembler.on_message(message)

    def _on_speech(self, handle: ChannelHandle, role: str) -> None:
        if not self._is_current(handle):
            return
        self.current_speaker = role

    async def _on_error(self, handle: ChannelHandle, error: Any) -> None:
        if not self._is_current(handle):
            return
        normalized = normalize_error(error)
        logger.error(f"Channel error for session {self.session_id}: {normalized.message}")
        logger.debug(f"Raw channel error: {error!r}")

        if self.state is CallState.ENDING:
            return
        if self.state is CallState.ACTIVE and self.settings.report_on_error:
            await self._finish(handle, submit_report=True, error_message=normalized.message)
            return
        await self._abort(handle, normalized.message)

    # -- teardown --------------------------------------------------------

    async def _connect_timeout(self, handle: ChannelHandle) -> None:
        try:
            await asyncio.sleep(self.settings.connect_timeout)
        except asyncio.CancelledError:
            return
        if self._is_current(handle) and self.state is CallState.CONNECTING:
            logger.error(
                f"Call for session {self.session_id} did not start within "
                f"{self.settings.connect_timeout}s"
            )
            await self._abort(handle, CONNECT_TIMEOUT_MESSAGE)

    def _cancel_timeout(self) -> None:
        task = self._timeout_task
        self._timeout_task = None
        if task and task is not asyncio.current_task() and not task.done():
            task.cancel()

    async def _teardown(self, handle: Optional[ChannelHandle]) -> None:
        self._cancel_timeout()
        if handle is not None:
            await handle.close()
        if self._handle is handle:
            self._handle = None
        self.current_speaker = None
        self.assembler.clear_current()
        self._transition(CallState.IDLE)

    async def _abort(self, handle: Optional[ChannelHandle], message: str) -> None:
        """Fatal failure: tear down straight to idle, no report."""
        await self._teardown(handle)
        self.notifier.error(message)

    async def _finish(
        self,
        handle: Optional[ChannelHandle],
        submit_report: bool,
        error_message: Optional[str] = None,
    ) -> None:
        was_active = self.state is CallState.ACTIVE
        transcript = self.assembler.messages
        self._transition(CallState.ENDING)

        outcome: Optional[bool] = None
        if submit_report and was_active and not self._report_submitted:
            self._report_submitted = True
            outcome = await self._submit_report(transcript)

        await self._teardown(handle)
        logger.info(f"Call for session {self.session_id} is idle")

        if not was_active:
            self.notifier.info(CALL_CANCELLED_MESSAGE)
        if error_message:
            self.notifier.error(error_message)
        if outcome is True:
            self.notifier.success(REPORT_SUCCESS_MESSAGE)
        elif outcome is False:
            self.notifier.error(REPORT_FAILURE_MESSAGE)

    async def _submit_report(self, transcript: Tuple[Utterance, ...]) -> bool:
        try:
            self.report = await self._report_trigger.submit(
                self.session_id, self.descriptor, transcript
            )
        except ReportSubmissionError as e:
            logger.error(f"Report submission failed for session {self.session_id}: {e}")
            return False
        return True

    def _transition(self, new_state: CallState) -> None:
        if new_state not in ALLOWED_TRANSITIONS[self.state]:
            raise RuntimeError(f"Illegal call transition {self.state.value} -> {new_state.value}")
        logger.debug(f"Session {self.session_id}: {self.state.value} -> {new_state.value}")
        self.state = new_state
