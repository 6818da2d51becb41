"""
Realtime voice channel abstractions.

Key components:
- base: VoiceChannel, an event emitter with ``on``/``off``/``emit`` plus the
  ``start``/``stop`` lifecycle every channel implementation provides.
- handle: ChannelHandle, the object a call session owns while a call runs. It
  holds exactly one listener per event kind and unregisters all of them in a
  single idempotent teardown.
- vapi: VapiWebSocketChannel, the provider implementation that creates a call
  over HTTPS and streams its control messages over a websocket.
"""

from voice_consult.channel.base import VoiceChannel
from voice_consult.channel.handle import ChannelHandle
