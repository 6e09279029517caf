"""
Tests for main.py - Main Entry Point

Tests for the main entry point including:
- Logging configuration
- Token validation
- Container and bot creation
- Exit codes
"""

import json
import logging
from pathlib import Path
from unittest.mock import MagicMock, mock_open, patch

from pydantic import SecretStr

from moosek.main import main, setup_logging

SHIPPED_CONFIG = Path(__file__).resolve().parents[1] / "logging_config.json"


def _settings(token: str = "test_token_123") -> MagicMock:
    settings = MagicMock()
    settings.discord.token = SecretStr(token)
    settings.log_level = "INFO"
    settings.environment = "test"
    return settings


class TestLoggingSetup:
    """Tests for logging configuration."""

    def test_dictconfig_called_when_json_exists(self):
        config = {"version": 1, "disable_existing_loggers": False, "root": {"level": "INFO", "handlers": []}}
        with (
            patch("builtins.open", mock_open(read_data=json.dumps(config))),
            patch("logging.config.dictConfig") as mock_dc,
        ):
            setup_logging()

        mock_dc.assert_called_once_with(config)

    def test_fallback_to_basicconfig_when_json_missing(self):
        with (
            patch("builtins.open", side_effect=FileNotFoundError),
            patch("logging.basicConfig") as mock_bc,
        ):
            setup_logging("debug")

        mock_bc.assert_called_once()
        assert mock_bc.call_args.kwargs["level"] == logging.DEBUG

    def test_fallback_to_basicconfig_when_json_malformed(self):
        with (
            patch("builtins.open", mock_open(read_data="{not json")),
            patch("logging.basicConfig") as mock_bc,
        ):
            setup_logging()

        mock_bc.assert_called_once()

    def test_root_logger_level_overridden(self):
        root = logging.getLogger()
        previous = root.level
        try:
            with patch("logging.config.dictConfig"), patch("builtins.open", mock_open(read_data="{}")):
                setup_logging("WARNING")
            assert root.level == logging.WARNING
        finally:
            root.setLevel(previous)

    def test_shipped_config_quiets_noisy_libraries(self):
        loaded = json.loads(SHIPPED_CONFIG.read_text())
        for name in ("discord", "aiosqlite"):
            assert loaded["loggers"][name]["level"] == "WARNING"
        assert loaded["formatters"]["colored"]["()"] == "moosek.utils.logging.ColoredFormatter"


class TestMainFunction:
    """Tests for the main entry point function."""

    def test_main_returns_error_without_token(self):
        with (
            patch("moosek.config.settings.get_settings", return_value=_settings("")),
            patch("moosek.main.setup_logging"),
            patch("moosek.config.container.create_container") as mock_create,
        ):
            assert main() == 1

        mock_create.assert_not_called()

    def test_main_successful_run(self):
        settings = _settings()
        mock_bot = MagicMock()
        container = MagicMock()

        with (
            patch("moosek.config.settings.get_settings", return_value=settings),
            patch("moosek.main.setup_logging") as mock_logging,
            patch("moosek.config.container.create_container", return_value=container) as mock_container,
            patch("moosek.infrastructure.discord.bot.create_bot", return_value=mock_bot) as mock_create_bot,
        ):
            exit_code = main()

        assert exit_code == 0
        mock_logging.assert_called_once_with("INFO")
        mock_container.assert_called_once_with(settings)
        mock_create_bot.assert_called_once_with(container, settings)
        mock_bot.run_with_graceful_shutdown.assert_called_once_with("test_token_123")

    def test_main_handles_keyboard_interrupt(self):
        mock_bot = MagicMock()
        mock_bot.run_with_graceful_shutdown.side_effect = KeyboardInterrupt()

        with (
            patch("moosek.config.settings.get_settings", return_value=_settings()),
            patch("moosek.main.setup_logging"),
            patch("moosek.config.container.create_container"),
            patch("moosek.infrastructure.discord.bot.create_bot", return_value=mock_bot),
        ):
            assert main() == 0

    def test_main_handles_exception(self):
        mock_bot = MagicMock()
        mock_bot.run_with_graceful_shutdown.side_effect = RuntimeError("Bot crashed!")

        with (
            patch("moosek.config.settings.get_settings", return_value=_settings()),
            patch("moosek.main.setup_logging"),
            patch("moosek.config.container.create_container"),
            patch("moosek.infrastructure.discord.bot.create_bot", return_value=mock_bot),
        ):
            assert main() == 1
