from structlog.testing import capture_logs

from saju_client.infrastructure.observability.logging import (
    REDACTED,
    log_api_call,
    redact_secrets,
)


def test_redact_secrets_masks_credentials_only():
    event = {"event": "Logged in", "token": "abc", "password": "pw", "email": "m@x.com"}

    redacted = redact_secrets(None, "info", event)

    assert redacted["token"] == REDACTED
    assert redacted["password"] == REDACTED
    assert redacted["email"] == "m@x.com"


def test_redact_secrets_leaves_empty_values():
    assert redact_secrets(None, "info", {"token": None})["token"] is None


def test_log_api_call_level_follows_status():
    with capture_logs() as logs:
        log_api_call("GET", "/records", 200, 12.34)
        log_api_call("POST", "/auth/register", 400, 5.0)

    assert [(e["log_level"], e["status_code"]) for e in logs] == [("info", 200), ("warning", 400)]
    assert logs[0]["event_type"] == "api_call"
    assert logs[0]["duration_ms"] == 12.3
