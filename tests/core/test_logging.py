"""Tests for JSON logging, masking and request correlation."""

from __future__ import annotations

import json
import logging
import sys

import pytest

from tastyreply.core.logging import JsonFormatter, mask, set_request_id, setup_logging


class _JsonCapture(logging.Handler):
    """Format records as they are emitted, inside the caller's context."""

    def __init__(self):
        super().__init__()
        self.setFormatter(JsonFormatter())
        self.lines: list[dict] = []

    def emit(self, record: logging.LogRecord) -> None:
        self.lines.append(json.loads(self.format(record)))


@pytest.fixture
def capture():
    handler = _JsonCapture()
    logger = logging.getLogger("tastyreply")
    logger.addHandler(handler)
    yield handler
    logger.removeHandler(handler)


def _format(msg: str = "event", **extra) -> dict:
    record = logging.makeLogRecord({"name": "tastyreply.test", "msg": msg, "levelname": "INFO"})
    record.__dict__.update(extra)
    return json.loads(JsonFormatter().format(record))


def test_oauth_secrets_masked_in_extra():
    line = _format(
        "oauth_exchange",
        payload={
            "client_id": "1234.apps.googleusercontent.com",
            "client_secret": "GOCSPX-abc",
            "code": "4/0AY0e-g7",
            "id_token": "opaque",
            "accessToken": "opaque",
            "refresh-token": "opaque",
        },
    )

    payload = line["fields"]["payload"]
    assert payload["client_id"] == "1234.apps.googleusercontent.com"
    for key in ("client_secret", "code", "id_token", "accessToken", "refresh-token"):
        assert payload[key] == "***"


def test_nested_sequences_are_masked():
    masked = mask({"headers": [{"Authorization": "Bearer abc"}], "attempts": (1, 2)})

    assert masked == {"headers": [{"Authorization": "***"}], "attempts": [1, 2]}


@pytest.mark.parametrize(
    "raw, secret, replacement",
    [
        ("key sk-proj-abcdef123456", "abcdef123456", "sk-***"),
        ("google ya29.a0AfH6SMBxYz1234567890", "a0AfH6SMBxYz1234567890", "ya29.***"),
        ("refresh 1//0gLx9abcdefghijk", "0gLx9abcdefghijk", "1//***"),
        ("Authorization: Bearer abcdefghijklmnop", "abcdefghijklmnop", "Bearer ***"),
        (
            "token eyJhbGciOiJIUzI1NiIsInR5cCI6IkpXVCJ9.eyJ1c2VySWQiOiJ1MSJ9.c2ln",
            "eyJ1c2VySWQiOiJ1MSJ9",
            "eyJ***",
        ),
    ],
)
def test_token_shapes_masked_in_event_text(raw, secret, replacement):
    event = _format(raw)["event"]

    assert secret not in event
    assert replacement in event


def test_plain_values_untouched():
    line = _format("synced 12 reviews", user_id="u1", synced=12, rating=4.5, replied=False)

    assert line["event"] == "synced 12 reviews"
    assert line["fields"] == {"user_id": "u1", "synced": 12, "rating": 4.5, "replied": False}


def test_record_shape():
    set_request_id("req-1")
    line = _format()

    assert line["level"] == "INFO"
    assert line["logger"] == "tastyreply.test"
    assert line["request_id"] == "req-1"
    assert line["ts"].endswith("+00:00")
    assert "fields" not in line


def test_exception_text_included():
    try:
        raise ValueError("store unreachable")
    except ValueError:
        record = logging.getLogger("tastyreply.test").makeRecord(
            "tastyreply.test", logging.ERROR, __file__, 1, "failed", (), sys.exc_info()
        )

    line = json.loads(JsonFormatter().format(record))
    assert "ValueError: store unreachable" in line["exc_info"]


def test_set_request_id_generates_uuid():
    rid = set_request_id()

    assert len(rid) == 36
    assert set_request_id(None) != rid


def test_setup_logging_replaces_handlers(tmp_path):
    root = logging.getLogger()
    saved = (root.level, list(root.handlers))
    try:
        log_file = tmp_path / "logs" / "app.json"
        setup_logging("DEBUG", file_path=str(log_file))
        setup_logging("DEBUG", file_path=str(log_file))

        assert len(root.handlers) == 2
        assert all(isinstance(h.formatter, JsonFormatter) for h in root.handlers)
        assert log_file.parent.is_dir()
        assert logging.getLogger("openai").level == logging.WARNING
    finally:
        for h in list(root.handlers):
            root.removeHandler(h)
            h.close()
        root.setLevel(saved[0])
        for h in saved[1]:
            root.addHandler(h)


def test_request_id_reaches_fallback_warning(client, auth_headers, completion, capture):
    completion.complete.side_effect = RuntimeError("completion down")

    response = client.post(
        "/api/ai/generate-reply",
        json={"reviewText": "Cold soup", "rating": 2, "tone": "apologetic"},
        headers={**auth_headers, "X-Request-ID": "req-fallback"},
    )

    assert response.status_code == 200
    assert response.json()["data"]["source"] == "fallback"
    warning = next(line for line in capture.lines if line["event"] == "reply_generation_fallback")
    assert warning["level"] == "WARNING"
    assert warning["request_id"] == "req-fallback"
    assert warning["fields"] == {"tone": "apologetic", "rating": 2, "error": "completion down"}
