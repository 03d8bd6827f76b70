from __future__ import annotations

from fleetfines._redact import redact_for_log


def test_redact_for_log_redacts_sensitive_keys() -> None:
    payload = {
        "username": "ana",
        "password": "pw",
        "fileData": "JVBERi0xLjQK",
        "nested": [{"password": "x"}],
        "fileMimeType": "application/pdf",
    }

    redacted = redact_for_log(payload)
    assert redacted["username"] == "ana"
    assert redacted["password"] == "<redacted>"
    assert redacted["fileData"] == "<redacted>"
    assert redacted["nested"][0]["password"] == "<redacted>"
    assert redacted["fileMimeType"] == "application/pdf"


def test_redact_for_log_summarizes_bytes_and_truncates() -> None:
    redacted = redact_for_log({"blob": b"\x00" * 10, "value": "x" * 600}, max_string=10)
    assert redacted["blob"] == "<bytes:10b>"
    assert redacted["value"].startswith("x" * 10)
    assert "<truncated>" in redacted["value"]
