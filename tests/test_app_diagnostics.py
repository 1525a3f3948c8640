from __future__ import annotations

from transdesk.app.diagnostics import describe_failure, hint_for_exception, summarize_exception


def test_summarize_exception_picks_last_meaningful_line() -> None:
    detail = """Traceback (most recent call last):
  File "x.py", line 1, in <module>
    boom()
RuntimeError: microphone busy
"""
    assert summarize_exception(detail) == "RuntimeError: microphone busy"
    assert summarize_exception("") == "Unknown error."


def test_summarize_exception_truncates() -> None:
    out = summarize_exception("ValueError: " + "x" * 400, max_len=50)
    assert len(out) == 50
    assert out.endswith("...")


def test_hints_cover_domain_failures() -> None:
    assert "virtualenv" in hint_for_exception("ModuleNotFoundError: No module named 'gtts'")
    assert "--list-devices" in hint_for_exception("PortAudioError: Error opening InputStream")
    assert "Speech model" in hint_for_exception("RuntimeError: faster_whisper could not load model")
    assert hint_for_exception("KeyError: 'x'") == "Check logs for full traceback."


def test_describe_failure_is_one_line() -> None:
    line = describe_failure("Traceback...\nKeyError: 'token'")
    assert line == "KeyError: 'token' (Check logs for full traceback.)"


def test_hints_cover_network_failures() -> None:
    assert "--api-url" in hint_for_exception("ConnectionError: Max retries exceeded with url: /api/users/me")
    assert "HTTPS" in hint_for_exception("SSLError: certificate verify failed")
