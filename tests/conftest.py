"""
Shared pytest fixtures for nutrilens tests.
"""
import os
from unittest.mock import MagicMock, patch

import pytest

from tests.fakes import FakeClock, FakeDevice


@pytest.fixture
def mock_env():
    """Fixture to set common test environment variables."""
    env_vars = {
        "MONGO_URI": "mongodb://localhost:27017",
        "MONGO_DB_NAME": "test_nutrilens_db",
        "GROQ_API_KEY": "test_groq_key_placeholder",
        "UPLOADTHING_TOKEN": "sk_test_placeholder",
        "ENABLE_WORKERS": "false",
    }
    with patch.dict(os.environ, env_vars, clear=False):
        yield env_vars


@pytest.fixture
def mock_settings():
    """Fixture to mock get_settings for tests. Patches all modules that use it."""
    mock = MagicMock()
    mock.mongo_uri = "mongodb://localhost:27017"
    mock.mongo_database_name = "test_db"
    mock.groq_api_key = "test_groq_key"
    mock.vlm_model = "test-vlm"
    mock.groq_tts_api_key = "test_tts_key"
    mock.groq_tts_model = "test-tts"
    mock.groq_tts_voice = "troy"
    mock.uploadthing_token = "sk_test_token"
    mock.discord_webhook_url = "https://discord.test/webhook"

    # Patch at source and at use sites (modules import get_settings at load time)
    with patch("nutrilens.core.config.get_settings", return_value=mock), patch(
        "nutrilens.infrastructure.external.groq_vlm_service.get_settings", return_value=mock
    ), patch(
        "nutrilens.infrastructure.external.uploadthing_client.get_settings", return_value=mock
    ), patch(
        "nutrilens.infrastructure.audio.tts_service.get_settings", return_value=mock
    ), patch(
        "nutrilens.infrastructure.notifications.discord_notifier.get_settings", return_value=mock
    ):
        yield mock


@pytest.fixture
def session_settings():
    """Timing settings for the session state machine, shrunk for tests."""
    settings = MagicMock()
    settings.default_username = "Nathan"
    settings.camera_cooldown_seconds = 0.0
    settings.camera_acquire_timeout_seconds = 0.2
    settings.camera_retry_step_seconds = 0.01
    settings.capture_timeout_seconds = 1.0
    settings.poll_interval_seconds = 0.01
    settings.stream_capture_interval_seconds = 5.0
    settings.stream_fallback_interval_seconds = 30.0
    return settings


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def fake_device():
    return FakeDevice()
