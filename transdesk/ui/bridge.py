from __future__ import annotations

import logging
import queue
import threading
import traceback
from typing import Any, Callable, Optional

from transdesk.app.diagnostics import describe_failure
from transdesk.app.logging_setup import log_event
from transdesk.errors import AppError

UiCallback = Callable[[], None]


class UiBus:
    """
    Thread-safe handoff from worker threads -> UI thread.
    Workers push callables. The UI drains them on its timer (non-blocking).
    """

    def __init__(self) -> None:
        self.q: "queue.Queue[UiCallback]" = queue.Queue()

    def push(self, callback: UiCallback) -> None:
        self.q.put_nowait(callback)

    def pop(self) -> Optional[UiCallback]:
        try:
            return self.q.get_nowait()
        except queue.Empty:
            return None

    def drain(self, max_items: int = 50) -> int:
        drained = 0
        while drained < max_items:
            callback = self.pop()
            if callback is None:
                break
            callback()
            drained += 1
        return drained


class TaskRunner:
    """
    Run blocking calls on daemon threads and deliver the outcome through the bus.

    `on_done(result)` or `on_error(message)` run on the UI thread. AppError
    keeps its own message; anything else is logged with its traceback and
    summarized.
    """

    def __init__(self, bus: UiBus, *, logger: logging.Logger | None = None) -> None:
        self.bus = bus
        self.logger = logger

    def submit(
        self,
        name: str,
        fn: Callable[[], Any],
        on_done: Optional[Callable[[Any], None]] = None,
        on_error: Optional[Callable[[str], None]] = None,
    ) -> threading.Thread:
        def _work() -> None:
            try:
                result = fn()
            except AppError as e:
                message = e.message
                log_event(self.logger, logging.INFO, "task_failed", task=name, kind=e.kind.value)
                if on_error is not None:
                    self.bus.push(lambda: on_error(message))
                return
            except Exception:
                detail = traceback.format_exc()
                if self.logger is not None:
                    self.logger.exception("task_crash", extra={"task": name})
                if on_error is not None:
                    self.bus.push(lambda: on_error(describe_failure(detail)))
                return
            if on_done is not None:
                self.bus.push(lambda: on_done(result))

        thread = threading.Thread(target=_work, name=f"transdesk-{name}", daemon=True)
        thread.start()
        return thread
