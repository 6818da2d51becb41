from unittest.mock import patch

import pytest
from pydantic import ValidationError

from voice_consult.config.constants import (
    DEFAULT_API_BASE_URL,
    DEFAULT_VAPI_BASE_URL,
    MISSING_API_KEY_MESSAGE,
)
from voice_consult.config.settings import Settings, load_settings
from voice_consult.exceptions import ConfigurationError


def test_defaults_from_empty_environment():
    with patch.dict("os.environ", {}, clear=True):
        settings = load_settings()

    assert settings.vapi_api_key is None
    assert settings.vapi_assistant_id is None
    assert settings.vapi_base_url == DEFAULT_VAPI_BASE_URL
    assert settings.api_base_url == DEFAULT_API_BASE_URL
    assert settings.connect_timeout == 30
    assert settings.report_on_error is False
    assert settings.port == 8000


def test_reads_environment():
    env = {
        "VAPI_API_KEY": "pk_live",
        "VAPI_ASSISTANT_ID": "asst_1",
        "API_BASE_URL": "https://consult.example.com",
        "CALL_CONNECT_TIMEOUT": "12.5",
        "REPORT_ON_ERROR": "true",
        "PORT": "9000",
    }
    with patch.dict("os.environ", env, clear=True):
        settings = load_settings()

    assert settings.vapi_api_key == "pk_live"
    assert settings.vapi_assistant_id == "asst_1"
    assert settings.api_base_url == "https://consult.example.com"
    assert settings.connect_timeout == 12.5
    assert settings.report_on_error is True
    assert settings.port == 9000


def test_blank_values_count_as_unset():
    with patch.dict("os.environ", {"VAPI_API_KEY": "  ", "VAPI_ASSISTANT_ID": ""}, clear=True):
        settings = load_settings()

    assert settings.vapi_api_key is None
    assert settings.vapi_assistant_id is None


def test_timeout_must_be_positive():
    with pytest.raises(ValidationError):
        Settings(connect_timeout=0)


def test_require_api_key_returns_key():
    assert Settings(vapi_api_key="pk_live").require_api_key() == "pk_live"


def test_require_api_key_raises_when_missing():
    with pytest.raises(ConfigurationError, match=MISSING_API_KEY_MESSAGE):
        Settings(vapi_api_key=None).require_api_key()
