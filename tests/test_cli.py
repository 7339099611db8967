"""Tests for the CLI commands (typer CliRunner)."""

import sys
from pathlib import Path
from unittest import mock

from typer.testing import CliRunner

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from spaceauth_renewer import config
from spaceauth_renewer.cli import app, fetch_code, renew
from spaceauth_renewer.models import QueueMessage, RenewalResult
from spaceauth_renewer.sms_queue.memory import sns_wrapped_sms

runner = CliRunner()


def test_validate_config_reports_missing(monkeypatch):
    for name in config.REQUIRED_SETTINGS:
        monkeypatch.delenv(name, raising=False)
    result = runner.invoke(app, ["validate-config"])
    assert result.exit_code == 1
    assert "SQS_QUEUE_URL" in result.output


def test_validate_config_ok_hides_password(monkeypatch):
    for name in config.REQUIRED_SETTINGS:
        monkeypatch.setenv(name, "set")
    monkeypatch.setattr(config, "FASTLANE_PASSWORD", "hunter2")
    result = runner.invoke(app, ["validate-config"])
    assert result.exit_code == 0
    assert "hunter2" not in result.output
    assert "Config valid" in result.output


def test_fetch_code_prints_and_deletes(monkeypatch):
    monkeypatch.setattr(config, "SQS_QUEUE_URL", "https://sqs.example/queue")
    queue = mock.Mock()
    queue.receive.return_value = [
        QueueMessage(message_id="m-1", receipt_handle="rh-1", body=sns_wrapped_sms("Your Apple ID Code is: 123456."))
    ]
    with mock.patch.object(fetch_code, "SqsMessageQueue", return_value=queue):
        result = runner.invoke(app, ["fetch-code", "--wait", "1"])
    assert result.exit_code == 0
    assert "Code: 123456" in result.output
    queue.delete.assert_called_once_with("rh-1")


def test_fetch_code_keep_leaves_message(monkeypatch):
    monkeypatch.setattr(config, "SQS_QUEUE_URL", "https://sqs.example/queue")
    queue = mock.Mock()
    queue.receive.return_value = [
        QueueMessage(message_id="m-1", receipt_handle="rh-1", body=sns_wrapped_sms("Your Apple ID Code is: 123456."))
    ]
    with mock.patch.object(fetch_code, "SqsMessageQueue", return_value=queue):
        result = runner.invoke(app, ["fetch-code", "--keep"])
    assert result.exit_code == 0
    queue.delete.assert_not_called()


def test_fetch_code_empty_queue(monkeypatch):
    monkeypatch.setattr(config, "SQS_QUEUE_URL", "https://sqs.example/queue")
    queue = mock.Mock()
    queue.receive.return_value = []
    with mock.patch.object(fetch_code, "SqsMessageQueue", return_value=queue):
        result = runner.invoke(app, ["fetch-code"])
    assert result.exit_code == 1
    assert "No message" in result.output


def test_renew_reports_still_valid():
    collaborators = (mock.Mock(), mock.Mock(), mock.Mock())
    with mock.patch.object(renew, "build_collaborators", return_value=collaborators), mock.patch.object(
        renew, "renew_session", return_value=RenewalResult(session="s", updated=False)
    ):
        result = runner.invoke(app, ["renew"])
    assert result.exit_code == 0
    assert "still valid" in result.output


def test_invalid_settings_lists_unparseable_numbers(monkeypatch):
    monkeypatch.setenv("CODE_WAIT_SECONDS", "abc")
    monkeypatch.setenv("QUEUE_WAIT_TIME_SECONDS", "15")
    monkeypatch.setenv("QUEUE_VISIBILITY_TIMEOUT", "1.5")
    assert config.invalid_settings() == ["CODE_WAIT_SECONDS", "QUEUE_VISIBILITY_TIMEOUT"]


def test_validate_config_reports_invalid_number(monkeypatch):
    for name in config.REQUIRED_SETTINGS:
        monkeypatch.setenv(name, "set")
    monkeypatch.setenv("SPACEAUTH_TIMEOUT_SECONDS", "five minutes")
    result = runner.invoke(app, ["validate-config"])
    assert result.exit_code == 1
    assert "SPACEAUTH_TIMEOUT_SECONDS" in result.output
