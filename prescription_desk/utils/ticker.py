"""
Periodic callback with an explicit start/stop lifecycle.

Drives auto-refresh of the record list. The timer is a scoped resource: it is
started when a screen (CLI command) is entered and stopped, with its thread joined,
when that screen exits. There are no module-level timers.

Usage:
    with Ticker(30.0, session.refresh, name="auto-refresh"):
        wait_for_ctrl_c()
"""

from __future__ import annotations

import threading
from typing import Callable, Optional

from prescription_desk.utils.logging import get_logger

log = get_logger(__name__)


class Ticker:
    """
    Invoke `callback` every `interval_seconds` on a background daemon thread.

    A failing tick is logged and the ticker keeps running; a refresh that fails
    once must not stop later refreshes.
    """

    def __init__(
        self,
        interval_seconds: float,
        callback: Callable[[], object],
        name: str = "ticker",
        immediate: bool = False,
    ) -> None:
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")
        self.interval_seconds = interval_seconds
        self.name = name
        self.immediate = immediate
        self.ticks = 0
        self._callback = callback
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def _tick(self) -> None:
        self.ticks += 1
        try:
            self._callback()
        except Exception:  # noqa: BLE001 - a tick failure is reported, never fatal
            log.exception(f"[TICK FAILED] {self.name}", extra={"ticker": self.name, "tick": self.ticks})

    def _run(self) -> None:
        if self.immediate:
            self._tick()
        while not self._stop.wait(timeout=self.interval_seconds):
            self._tick()

    def start(self) -> "Ticker":
        if self.running:
            return self
        self._stop.clear()
        self._thread = threading.Thread(target=self._run, name=self.name, daemon=True)
        self._thread.start()
        log.debug("Ticker started", extra={"ticker": self.name, "interval": self.interval_seconds})
        return self

    def stop(self, timeout: Optional[float] = None) -> None:
        """Signal the thread and wait for it; safe to call more than once."""
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout=timeout if timeout is not None else self.interval_seconds + 1.0)
            self._thread = None
            log.debug("Ticker stopped", extra={"ticker": self.name, "ticks": self.ticks})

    def __enter__(self) -> "Ticker":
        return self.start()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.stop()


__all__ = ["Ticker"]
