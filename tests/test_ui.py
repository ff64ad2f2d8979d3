"""Tests for the console Ui."""

import pytest
import structlog
from structlog.testing import capture_logs

from docker_push.ui import ConsoleUi


@pytest.fixture(autouse=True)
def reset_structlog():
    structlog.reset_defaults()
    yield
    structlog.reset_defaults()


def test_messages_go_to_stderr_only_without_logging(capsys):
    ui = ConsoleUi()

    ui.say("Starting")
    ui.message("Pushing: app")
    ui.error("Error logging out: boom")

    captured = capsys.readouterr()
    assert captured.out == ""
    assert "==> docker-push: Starting" in captured.err
    assert "    docker-push: Pushing: app" in captured.err
    assert "==> docker-push: Error logging out: boom" in captured.err


def test_messages_mirrored_once_logging_configured():
    structlog.configure(processors=[])

    with capture_logs() as logs:
        ConsoleUi().message("Pushing: app")

    assert logs == [{"event": "ui", "text": "Pushing: app", "log_level": "debug"}]
