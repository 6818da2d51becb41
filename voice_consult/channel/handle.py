"""
Owned handle over a channel and the listeners a call registered on it.

A call session creates one ChannelHandle per call. The handle registers exactly
one listener per event kind and removes the same callables on ``close``, so
repeated start/stop cycles never leak or duplicate subscriptions.
"""

import logging
from typing import Dict, Mapping

from voice_consult.channel.base import Listener, VoiceChannel
from voice_consult.config.constants import CHANNEL_EVENTS, LOGGER_NAME

logger = logging.getLogger(LOGGER_NAME)


class ChannelHandle:
    """A channel plus one listener slot per event kind."""

    def __init__(self, channel: VoiceChannel):
        self.channel = channel
        self._slots: Dict[str, Listener] = {}
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def registered_events(self):
        return tuple(self._slots)

    def register(self, listeners: Mapping[str, Listener]) -> None:
        """
        Register one listener for every channel event kind.

        Raises:
            ValueError: If a slot is missing or unknown, or listeners were
                already registered on this handle
            RuntimeError: If the handle has been closed
        """
        if self._closed:
            raise RuntimeError("Cannot register listeners on a closed channel handle")
        if self._slots:
            raise ValueError("Listeners are already registered on this handle")
        if set(listeners) != set(CHANNEL_EVENTS):
            raise ValueError(
                f"Expected listeners for {sorted(CHANNEL_EVENTS)}, got {sorted(listeners)}"
            )

        for event in CHANNEL_EVENTS:
            listener = listeners[event]
            self.channel.on(event, listener)
            self._slots[event] = listener
        logger.debug(f"Registered {len(self._slots)} channel listeners")

    def release(self) -> None:
        """Unregister every listener. Safe to call more than once."""
        for event, listener in list(self._slots.items()):
            try:
                self.channel.off(event, listener)
            except Exception as e:
                logger.warning(f"Failed to remove '{event}' listener: {e}")
            del self._slots[event]

    async def close(self) -> None:
        """
        Stop the channel and unregister all listeners.

        Only the first call has an effect. A channel that fails to stop (for
        example because the provider already closed it) is logged and the
        listeners are still released.
        """
        if self._closed:
            return
        self._closed = True

        try:
            await self.channel.stop()
        except Exception as e:
            logger.warning(f"Channel stop() failed: {e}")

        self.release()
        logger.debug("Channel handle closed")
