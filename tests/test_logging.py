import logging
from unittest.mock import MagicMock, patch

import pytest
from petition_admin.core.logging import (
    DEFAULT_LOG_LEVEL,
    NOISY_LIBRARIES,
    _get_loki_handler,
    mask_token,
    setup_logging,
)


@pytest.fixture(autouse=True)
def reset_logging():
    root = logging.getLogger()
    original_handlers = root.handlers[:]
    root.handlers.clear()

    yield

    root.handlers.clear()
    root.handlers.extend(original_handlers)


@patch("petition_admin.core.logging.Settings")
def test_setup_logging_default_level(MockSettings, monkeypatch):
    """Test setup_logging configures logging with default level."""
    monkeypatch.delenv("LOKI_URL", raising=False)
    MockSettings.return_value.get_log_level.return_value = DEFAULT_LOG_LEVEL

    setup_logging()

    root_logger = logging.getLogger()
    assert root_logger.level == logging.INFO
    assert len(root_logger.handlers) == 1
    assert isinstance(root_logger.handlers[0], logging.StreamHandler)

    for lib_name in NOISY_LIBRARIES:
        assert logging.getLogger(lib_name).level == logging.WARNING


@patch("petition_admin.core.logging.Settings")
def test_setup_logging_specific_level(MockSettings, monkeypatch):
    monkeypatch.delenv("LOKI_URL", raising=False)
    MockSettings.return_value.get_log_level.return_value = "DEBUG"

    setup_logging()

    assert logging.getLogger().level == logging.DEBUG


@patch("petition_admin.core.logging.Settings")
def test_setup_logging_invalid_level(MockSettings, monkeypatch, capsys):
    """Test setup_logging defaults to INFO and warns on invalid level."""
    monkeypatch.delenv("LOKI_URL", raising=False)
    MockSettings.return_value.get_log_level.return_value = "INVALID_LEVEL"

    setup_logging()

    captured = capsys.readouterr()
    assert "WARNING: Invalid LOG_LEVEL 'INVALID_LEVEL'" in captured.err
    assert logging.getLogger().level == logging.INFO


@patch("petition_admin.core.logging.Settings")
def test_setup_logging_with_loki(MockSettings, monkeypatch):
    """Test setup_logging adds the Loki handler when LOKI_URL is set."""
    monkeypatch.setenv("LOKI_URL", "http://localhost:3100")
    MockSettings.return_value.get_log_level.return_value = DEFAULT_LOG_LEVEL
    mock_loki_handler = MagicMock()
    mock_loki_handler.level = logging.INFO

    with patch("petition_admin.core.logging._get_loki_handler", return_value=mock_loki_handler) as mock_get:
        setup_logging()

    mock_get.assert_called_once_with("http://localhost:3100")
    assert mock_loki_handler in logging.getLogger().handlers


def test_get_loki_handler_success():
    mock_handler = MagicMock()
    with patch("logging_loki.LokiHandler", return_value=mock_handler) as MockLokiHandler:
        handler = _get_loki_handler("http://localhost:3100", "test_app")

    assert handler is mock_handler
    MockLokiHandler.assert_called_once_with(
        url="http://localhost:3100/loki/api/v1/push",
        tags={"application": "test_app", "environment": "development"},
        version="1",
    )
    mock_handler.setFormatter.assert_called_once()


@pytest.mark.parametrize("loki_url", ["localhost:3100", ""])
def test_get_loki_handler_invalid_url(loki_url):
    with patch("logging_loki.LokiHandler"):
        assert _get_loki_handler(loki_url) is None


def test_get_loki_handler_exception():
    with patch("logging_loki.LokiHandler", side_effect=Exception("Test error")):
        assert _get_loki_handler("http://localhost:3100") is None


@pytest.mark.parametrize(
    "token, expected",
    [
        ("0123456789abcdef", "01234567..."),
        ("abc", "abc..."),
        ("", "<none>"),
        (None, "<none>"),
    ],
)
def test_mask_token(token, expected):
    assert mask_token(token) == expected
