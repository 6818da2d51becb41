"""
Runtime settings read from the environment.

Values are read once by ``load_settings()``; a ``.env`` file is loaded by the
server entry point before this happens.
"""

import os
from typing import Optional

from pydantic import BaseModel, Field

from voice_consult.config.constants import (
    DEFAULT_API_BASE_URL,
    DEFAULT_CONNECT_TIMEOUT,
    DEFAULT_VAPI_BASE_URL,
    MISSING_API_KEY_MESSAGE,
)
from voice_consult.exceptions import ConfigurationError

_TRUE_VALUES = {"1", "true", "yes", "on"}


class Settings(BaseModel):
    """Credentials, collaborator URLs and call policy."""

    vapi_api_key: Optional[str] = Field(None, description="Realtime channel API key")
    vapi_assistant_id: Optional[str] = Field(
        None, description="Pre-provisioned assistant; inline config is used when absent"
    )
    vapi_base_url: str = DEFAULT_VAPI_BASE_URL
    api_base_url: str = DEFAULT_API_BASE_URL
    connect_timeout: float = Field(DEFAULT_CONNECT_TIMEOUT, gt=0)
    report_on_error: bool = False
    host: str = "0.0.0.0"
    port: int = 8000

    def require_api_key(self) -> str:
        """
        Return the channel API key.

        Raises:
            ConfigurationError: If VAPI_API_KEY is not set
        """
        if not self.vapi_api_key:
            raise ConfigurationError(MISSING_API_KEY_MESSAGE)
        return self.vapi_api_key


def _env(name: str) -> Optional[str]:
    # Blank values count as unset
    value = os.getenv(name)
    if value is None or not value.strip():
        return None
    return value.strip()


def load_settings() -> Settings:
    """Build a Settings object from environment variables."""
    return Settings(
        vapi_api_key=_env("VAPI_API_KEY"),
        vapi_assistant_id=_env("VAPI_ASSISTANT_ID"),
        vapi_base_url=_env("VAPI_BASE_URL") or DEFAULT_VAPI_BASE_URL,
        api_base_url=_env("API_BASE_URL") or DEFAULT_API_BASE_URL,
        connect_timeout=float(_env("CALL_CONNECT_TIMEOUT") or DEFAULT_CONNECT_TIMEOUT),
        report_on_error=(_env("REPORT_ON_ERROR") or "").lower() in _TRUE_VALUES,
        host=_env("HOST") or "0.0.0.0",
        port=int(_env("PORT") or "8000"),
    )
