from __future__ import annotations

from transdesk.app.state import SessionState, SessionStateTracker


def test_state_tracker_happy_path() -> None:
    tracker = SessionStateTracker()
    assert tracker.state == SessionState.IDLE
    assert tracker.last_error is None

    tracker.set_recording()
    assert tracker.state == SessionState.RECORDING

    tracker.set_translating()
    assert tracker.state == SessionState.TRANSLATING

    tracker.set_idle()
    assert tracker.set_speaking() is True
    assert tracker.state == SessionState.SPEAKING

    tracker.finish_speaking()
    assert tracker.state == SessionState.IDLE


def test_speaking_only_starts_from_idle() -> None:
    tracker = SessionStateTracker()
    tracker.set_translating()
    assert tracker.set_speaking() is False
    assert tracker.state == SessionState.TRANSLATING

    tracker.finish_speaking()
    assert tracker.state == SessionState.TRANSLATING


def test_error_lands_in_idle_and_clears_on_next_action() -> None:
    tracker = SessionStateTracker()
    tracker.set_recording()
    tracker.set_error("boom")
    assert tracker.state == SessionState.IDLE
    assert tracker.last_error == "boom"

    tracker.set_recording()
    assert tracker.state == SessionState.RECORDING
    assert tracker.last_error is None


def test_note_error_keeps_state() -> None:
    tracker = SessionStateTracker()
    tracker.set_recording()
    tracker.note_error("rejected")
    assert tracker.state == SessionState.RECORDING
    assert tracker.last_error == "rejected"
    tracker.clear_error()
    assert tracker.last_error is None
