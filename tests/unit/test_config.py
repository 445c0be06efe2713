"""
Tests for environment-driven settings.
"""

import pytest

from ai_image_canvas.core.config import CanvasSettings

KEY_VARS = (
    "CANVAS_API_KEY",
    "API_KEY",
    "CANVAS_GATEWAY_API_KEY",
    "AI_GATEWAY_API_KEY",
    "OPENAI_API_KEY",
    "CANVAS_DEBUG",
    "CANVAS_LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in KEY_VARS:
        monkeypatch.delenv(name, raising=False)


def test_defaults():
    settings = CanvasSettings(_env_file=None)
    assert settings.api_key == ""
    assert settings.chat_model == "openai/gpt-4o"
    assert settings.debug is False
    assert settings.video_poll_interval == 10.0
    assert settings.debug_delay == 3.0
    assert settings.spawn_offset == 400.0


def test_unprefixed_api_key(monkeypatch):
    monkeypatch.setenv("API_KEY", "plain")
    assert CanvasSettings(_env_file=None).api_key == "plain"


def test_prefixed_api_key_wins(monkeypatch):
    monkeypatch.setenv("API_KEY", "plain")
    monkeypatch.setenv("CANVAS_API_KEY", "prefixed")
    assert CanvasSettings(_env_file=None).api_key == "prefixed"


def test_gateway_key_aliases(monkeypatch):
    monkeypatch.setenv("AI_GATEWAY_API_KEY", "gw")
    assert CanvasSettings(_env_file=None).gateway_api_key == "gw"


def test_debug_and_log_level(monkeypatch):
    monkeypatch.setenv("CANVAS_DEBUG", "true")
    monkeypatch.setenv("CANVAS_LOG_LEVEL", "debug")
    settings = CanvasSettings(_env_file=None)
    assert settings.debug is True
    assert settings.log_level == "DEBUG"


def test_dotenv_file(tmp_path):
    env_file = tmp_path / ".env"
    env_file.write_text("CANVAS_API_KEY=from-file\nCANVAS_PORT=9001\n")
    settings = CanvasSettings(_env_file=env_file)
    assert settings.api_key == "from-file"
    assert settings.port == 9001
