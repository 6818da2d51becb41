"""
Vapi realtime channel over the provider's websocket transport.

A call is created with ``POST {base_url}/call`` and a websocket transport. The
response carries a websocket URL that streams the call: binary frames are
audio, text frames are JSON control messages. Control messages are translated
into the channel event kinds:

- socket connected                       -> call-start
- ``speech-update`` (assistant started)  -> speech-start
- ``speech-update`` (assistant stopped)  -> speech-end
- ``status-update`` ended / ``hang``     -> call-end
- socket closed normally                 -> call-end
- ``error`` message / abnormal close     -> error
- every JSON message                     -> message
"""

import asyncio
import json
import logging
import time
import traceback
from typing import Any, Dict, Optional

import requests
import websockets
from websockets.exceptions import ConnectionClosed, ConnectionClosedError, ConnectionClosedOK

from voice_consult.channel.base import StartTarget, VoiceChannel
from voice_consult.config.constants import (
    DEFAULT_VAPI_BASE_URL,
    EVENT_CALL_END,
    EVENT_CALL_START,
    EVENT_ERROR,
    EVENT_MESSAGE,
    EVENT_SPEECH_END,
    EVENT_SPEECH_START,
    HTTP_TIMEOUT,
    LOGGER_NAME,
    ROLE_ASSISTANT,
)
from voice_consult.exceptions import ChannelError

logger = logging.getLogger(LOGGER_NAME)

CONNECTION_TIMEOUT = 30  # seconds

# WebSocket configuration
WS_MAX_SIZE = 16 * 1024 * 1024  # 16MB - large enough for audio frames
WS_PING_INTERVAL = 5  # seconds

TRANSPORT = {
    "provider": "vapi.websocket",
    "audioFormat": {"format": "pcm_s16le", "container": "raw", "sampleRate": 16000},
}


class VapiWebSocketChannel(VoiceChannel):
    """
    Realtime channel to Vapi using the websocket call transport.
    """

    def __init__(self, api_key: str, base_url: str = DEFAULT_VAPI_BASE_URL):
        super().__init__()
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.call_id: Optional[str] = None
        self.ws = None
        self._recv_task: Optional[asyncio.Task] = None
        self._is_closing = False
        self._ended = False

    def _build_call_request(self, target: StartTarget) -> Dict[str, Any]:
        body: Dict[str, Any] = {"transport": TRANSPORT}
        if isinstance(target, str):
            body["assistantId"] = target
        else:
            body["assistant"] = target.model_dump()
        return body

    async def _create_call(self, target: StartTarget) -> str:
        """Create the call and return its websocket URL."""
        try:
            response = await asyncio.to_thread(
                requests.post,
                f"{self.base_url}/call",
                headers={
                    "Authorization": f"Bearer {self.api_key}",
                    "Content-Type": "application/json",
                },
                json=self._build_call_request(target),
                timeout=HTTP_TIMEOUT,
            )
        except requests.RequestException as e:
            raise ChannelError(f"Could not reach voice provider: {e}") from e

        if response.status_code not in (200, 201):
            try:
                detail = response.json()
            except ValueError:
                detail = response.text
            logger.error(f"Call creation failed ({response.status_code}): {detail}")
            raise ChannelError(f"Voice provider rejected the call ({response.status_code})")

        try:
            data = response.json()
        except ValueError as e:
            raise ChannelError("Voice provider returned an invalid response") from e

        self.call_id = data.get("id")
        url = (data.get("transport") or {}).get("websocketCallUrl")
        if not url:
            raise ChannelError("Voice provider did not return a websocket URL")
        return url

    async def start(self, target: StartTarget) -> None:
        """
        Create a call and connect to its websocket.

        Raises:
            ChannelError: If the call cannot be created or connected
        """
        if self.ws is not None:
            raise ChannelError("Channel already started")
        self._is_closing = False
        self._ended = False

        url = await self._create_call(target)
        logger.info(f"Created provider call: {self.call_id}")

        try:
            connection_start = time.time()
            ws = await asyncio.wait_for(
                websockets.connect(
                    url,
                    max_size=WS_MAX_SIZE,
                    ping_interval=WS_PING_INTERVAL,
                    ping_timeout=10,
                    compression=None,
                ),
                timeout=CONNECTION_TIMEOUT,
            )
        except asyncio.TimeoutError as e:
            raise ChannelError(
                f"Timeout while connecting to call websocket (after {CONNECTION_TIMEOUT}s)"
            ) from e
        except Exception as e:
            logger.debug(f"Connection error details: {traceback.format_exc()}")
            raise ChannelError(f"Failed to connect to call websocket: {e}") from e
        logger.debug(f"Call websocket connected in {time.time() - connection_start:.2f} seconds")

        # stop() may have been requested while connecting
        if self._is_closing:
            await self._hang_up(ws)
            return

        self.ws = ws
        self._recv_task = asyncio.create_task(self._recv_loop())
        await self.emit(EVENT_CALL_START)

    async def _dispatch(self, data: Dict[str, Any]) -> None:
        message_type = data.get("type")

        if message_type == "speech-update" and data.get("role") == ROLE_ASSISTANT:
            status = data.get("status")
            if status == "started":
                await self.emit(EVENT_SPEECH_START)
            elif status == "stopped":
                await self.emit(EVENT_SPEECH_END)
        elif message_type == "error":
            await self.emit(EVENT_ERROR, data)

        await self.emit(EVENT_MESSAGE, data)

        if message_type == "hang" or (
            message_type == "status-update" and data.get("status") == "ended"
        ):
            await self._emit_call_end()

    async def _emit_call_end(self) -> None:
        if self._ended:
            return
        self._ended = True
        await self.emit(EVENT_CALL_END)

    async def _recv_loop(self) -> None:
        """Read control messages until the socket closes or the call ends."""
        try:
            async for message in self.ws:
                if isinstance(message, bytes):
                    # Audio frames are played by the client, not by the session
                    continue
                try:
                    data = json.loads(message)
                except json.JSONDecodeError:
                    logger.warning(f"Received invalid JSON: {message[:100]}...")
                    continue
                if not isinstance(data, dict):
                    logger.debug(f"Ignoring non-object message: {message[:100]}")
                    continue

                await self._dispatch(data)
                if self._ended or self._is_closing:
                    break
        except ConnectionClosedOK:
            logger.info("Call websocket closed normally")
        except ConnectionClosedError as e:
            logger.warning(f"Call websocket closed unexpectedly: {e}")
            if not self._is_closing:
                await self.emit(EVENT_ERROR, {"error": {"message": f"Connection lost: {e}"}})
        except asyncio.CancelledError:
            logger.debug("Receive loop cancelled")
            raise
        except Exception as e:
            logger.error(f"Error in receive loop: {e}")
            logger.debug(f"Receive loop error details: {traceback.format_exc()}")
            if not self._is_closing:
                await self.emit(EVENT_ERROR, {"error": {"message": str(e)}})

        if not self._is_closing:
            await self._emit_call_end()

    async def stop(self) -> None:
        """
        Hang up the call and close the websocket.

        Raises whatever the websocket raises while closing; callers that tear
        down a call are expected to tolerate that.
        """
        self._is_closing = True

        task = self._recv_task
        self._recv_task = None
        if task and task is not asyncio.current_task() and not task.done():
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass

        ws = self.ws
        self.ws = None
        if ws is None:
            return
        await self._hang_up(ws)

    async def _hang_up(self, ws) -> None:
        try:
            await ws.send(json.dumps({"type": "end-call"}))
        except ConnectionClosed:
            logger.debug("Call websocket already closed before end-call")
        await ws.close()
        logger.info(f"Stopped provider call: {self.call_id}")
