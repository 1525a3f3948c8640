from __future__ import annotations

from transdesk.errors import AppError
from transdesk.ui.bridge import TaskRunner, UiBus


def test_ui_bus_drains_in_order_and_respects_max_items() -> None:
    bus = UiBus()
    seen: list[int] = []
    for i in range(3):
        bus.push(lambda i=i: seen.append(i))

    assert bus.drain(max_items=2) == 2
    assert seen == [0, 1]
    assert bus.drain() == 1
    assert seen == [0, 1, 2]
    assert bus.pop() is None


def _run(runner: TaskRunner, bus: UiBus, fn) -> tuple[list, list]:
    done: list = []
    errors: list = []
    thread = runner.submit("job", fn, on_done=done.append, on_error=errors.append)
    thread.join(timeout=5.0)
    bus.drain()
    return done, errors


def test_task_runner_delivers_result_on_drain() -> None:
    bus = UiBus()
    done, errors = _run(TaskRunner(bus), bus, lambda: 42)
    assert done == [42]
    assert errors == []


def test_task_runner_passes_app_error_message() -> None:
    bus = UiBus()

    def _fail():
        raise AppError.server("Translation service unavailable")

    done, errors = _run(TaskRunner(bus), bus, _fail)
    assert done == []
    assert errors == ["Translation service unavailable"]


def test_task_runner_summarizes_unexpected_errors() -> None:
    bus = UiBus()

    def _crash():
        raise RuntimeError("portaudio exploded")

    done, errors = _run(TaskRunner(bus), bus, _crash)
    assert done == []
    assert len(errors) == 1
    assert errors[0].startswith("RuntimeError: portaudio exploded")
    assert "--list-devices" in errors[0]


def test_nothing_reaches_ui_before_drain() -> None:
    bus = UiBus()
    done: list = []
    thread = TaskRunner(bus).submit("job", lambda: "x", on_done=done.append)
    thread.join(timeout=5.0)
    assert done == []
    bus.drain()
    assert done == ["x"]
