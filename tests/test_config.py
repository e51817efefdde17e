"""Tests for environment-driven settings."""

import logging

import pytest

from tictactoe.config import LOG_FORMAT, Settings, configure_logging


def test_defaults_when_environment_is_empty():
    settings = Settings.from_env({})
    assert settings == Settings(host="0.0.0.0", port=8000, log_level="INFO", strict=False)


def test_reads_overrides():
    settings = Settings.from_env(
        {
            "TICTACTOE_HOST": "127.0.0.1",
            "TICTACTOE_PORT": "9001",
            "TICTACTOE_LOG_LEVEL": "debug",
            "TICTACTOE_STRICT": "yes",
        }
    )
    assert settings.host == "127.0.0.1"
    assert settings.port == 9001
    assert settings.log_level == "DEBUG"
    assert settings.strict is True


def test_blank_values_fall_back_to_defaults():
    assert Settings.from_env({"TICTACTOE_PORT": "  "}).port == 8000


@pytest.mark.parametrize("port", ["http", "0", "70000"])
def test_invalid_port(port):
    with pytest.raises(ValueError):
        Settings.from_env({"TICTACTOE_PORT": port})


def test_configure_logging_installs_single_handler():
    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    try:
        configure_logging("WARNING")
        configure_logging("DEBUG")
        assert root.level == logging.DEBUG
        assert len(root.handlers) == 1
        assert root.handlers[0].formatter._fmt == LOG_FORMAT
    finally:
        root.handlers[:] = saved_handlers
        root.setLevel(saved_level)
