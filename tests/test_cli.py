"""Tests for the tripwire CLI (render / notify)."""

import json
from unittest.mock import patch

import httpx
from click.testing import CliRunner

from tripwire import __version__
from tripwire.cli import _parse_headers, main

EVENT = {
    "repository": "acme/tripwire",
    "branch": "main",
    "commit_sha": "abc1234def5678",
    "rule": "aws-access-key-id",
    "file_path": "config/settings.py",
    "author": "dev@example.com",
    "detected_at": "2026-02-26T12:00:00Z",
}


def _write_event(tmp_path, **overrides):
    data = {**EVENT, **overrides}
    path = tmp_path / "event.json"
    path.write_text(json.dumps(data))
    return str(path)


def _mock_client_factory(requests, status_code=200):
    def handler(request):
        requests.append(request)
        return httpx.Response(status_code)

    def factory(timeout=10.0, headers=None):
        return httpx.AsyncClient(transport=httpx.MockTransport(handler), headers=headers or {})

    return factory


# ─── render ──────────────────────────────────────────────────────────────────


def test_version():
    result = CliRunner().invoke(main, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_render_chat(tmp_path):
    result = CliRunner().invoke(main, ["render", _write_event(tmp_path)])
    assert result.exit_code == 0, result.output
    payload = json.loads(result.output)
    assert len(payload["blocks"]) == 2
    assert "abc1234" in payload["text"]


def test_render_webhook(tmp_path):
    result = CliRunner().invoke(main, ["render", _write_event(tmp_path), "--format", "webhook"])
    assert result.exit_code == 0, result.output
    payload = json.loads(result.output)
    assert payload["event"] == "secret.detected"
    assert payload["detected_at"] == "2026-02-26T12:00:00Z"


def test_render_invalid_event(tmp_path):
    result = CliRunner().invoke(main, ["render", _write_event(tmp_path, author="")])
    assert result.exit_code == 1
    assert "author is required" in result.output


# ─── notify ──────────────────────────────────────────────────────────────────


def test_notify_requires_target(tmp_path):
    result = CliRunner().invoke(main, ["notify", _write_event(tmp_path)], env={
        "TRIPWIRE_SLACK_WEBHOOK_URL": None,
        "TRIPWIRE_WEBHOOK_URL": None,
    })
    assert result.exit_code == 2
    assert "--slack-url" in result.output


def test_notify_both_targets(tmp_path):
    requests = []
    with patch("tripwire.cli.create_client", side_effect=_mock_client_factory(requests)):
        result = CliRunner().invoke(main, [
            "notify", _write_event(tmp_path),
            "--slack-url", "https://hooks.slack.com/services/T/B/X",
            "--webhook-url", "https://alerts.example.com/hook",
            "-H", "Authorization: Bearer abc",
        ])
    assert result.exit_code == 0, result.output
    assert len(requests) == 2
    assert "blocks" in json.loads(requests[0].content)
    assert json.loads(requests[1].content)["event"] == "secret.detected"
    assert all(r.headers["Authorization"] == "Bearer abc" for r in requests)
    assert "slack alert sent" in result.output
    assert "webhook alert sent" in result.output


def test_notify_url_from_env(tmp_path):
    requests = []
    with patch("tripwire.cli.create_client", side_effect=_mock_client_factory(requests)):
        result = CliRunner().invoke(
            main, ["notify", _write_event(tmp_path)],
            env={"TRIPWIRE_WEBHOOK_URL": "https://alerts.example.com/hook", "TRIPWIRE_SLACK_WEBHOOK_URL": None},
        )
    assert result.exit_code == 0, result.output
    assert str(requests[0].url) == "https://alerts.example.com/hook"


def test_notify_reports_status_failure(tmp_path):
    requests = []
    with patch("tripwire.cli.create_client", side_effect=_mock_client_factory(requests, status_code=400)):
        result = CliRunner().invoke(main, [
            "notify", _write_event(tmp_path),
            "--webhook-url", "https://alerts.example.com/hook",
        ])
    assert result.exit_code == 1
    assert "400" in result.output
    assert len(requests) == 1


def test_notify_bad_url_reported(tmp_path):
    requests = []
    with patch("tripwire.cli.create_client", side_effect=_mock_client_factory(requests)):
        result = CliRunner().invoke(main, [
            "notify", _write_event(tmp_path),
            "--slack-url", "not-a-url",
            "--webhook-url", "https://alerts.example.com/hook",
        ])
    assert result.exit_code == 1
    assert "configuration" in result.output
    # The valid target is still attempted
    assert len(requests) == 1


def test_notify_invalid_event_sends_nothing(tmp_path):
    requests = []
    with patch("tripwire.cli.create_client", side_effect=_mock_client_factory(requests)):
        result = CliRunner().invoke(main, [
            "notify", _write_event(tmp_path, commit_sha=" "),
            "--webhook-url", "https://alerts.example.com/hook",
        ])
    assert result.exit_code == 1
    assert "commit_sha is required" in result.output
    assert requests == []


# ─── _parse_headers ──────────────────────────────────────────────────────────


def test_parse_headers():
    assert _parse_headers(("X-Token: abc", "Authorization:Bearer x")) == {
        "X-Token": "abc",
        "Authorization": "Bearer x",
    }


def test_parse_headers_rejects_malformed(tmp_path):
    result = CliRunner().invoke(main, [
        "notify", _write_event(tmp_path),
        "--webhook-url", "https://alerts.example.com/hook",
        "-H", "no-colon",
    ])
    assert result.exit_code == 2
    assert "Name: value" in result.output
