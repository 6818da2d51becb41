"""Building the provider start argument from a session's persona."""

from voice_consult.channel.base import StartTarget
from voice_consult.config.constants import (
    ASSISTANT_FIRST_MESSAGE,
    ASSISTANT_NAME,
    DEFAULT_VOICE_ID,
    MODEL_NAME,
    MODEL_PROVIDER,
    TRANSCRIBER_LANGUAGE,
    TRANSCRIBER_PROVIDER,
    VOICE_PROVIDER,
)
from voice_consult.config.settings import Settings
from voice_consult.models.assistant import (
    AssistantConfig,
    ModelConfig,
    SystemMessage,
    TranscriberConfig,
    VoiceConfig,
)
from voice_consult.models.session import SessionDetail


def build_assistant_config(descriptor: SessionDetail) -> AssistantConfig:
    """Inline assistant for the session's persona."""
    doctor = descriptor.selectedDoctor
    voice_id = (doctor.voiceId if doctor else None) or DEFAULT_VOICE_ID
    prompt = doctor.agentPrompt if doctor else None

    return AssistantConfig(
        name=ASSISTANT_NAME,
        firstMessage=ASSISTANT_FIRST_MESSAGE,
        transcriber=TranscriberConfig(
            provider=TRANSCRIBER_PROVIDER, language=TRANSCRIBER_LANGUAGE
        ),
        voice=VoiceConfig(provider=VOICE_PROVIDER, voiceId=voice_id),
        model=ModelConfig(
            provider=MODEL_PROVIDER,
            model=MODEL_NAME,
            messages=[SystemMessage(content=prompt)],
        ),
    )


def resolve_start_target(settings: Settings, descriptor: SessionDetail) -> StartTarget:
    """Use the pre-provisioned assistant when configured, else the inline config."""
    if settings.vapi_assistant_id:
        return settings.vapi_assistant_id
    return build_assistant_config(descriptor)
