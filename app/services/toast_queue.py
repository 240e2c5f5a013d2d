# app/services/toast_queue.py
import asyncio
import logging
import time
from typing import Callable

from app.schemas.toast import Severity, Toast

logger = logging.getLogger(__name__)


class ToastQueue:
    """
    In-memory list of transient notifications.

    Each toast expires `ttl` seconds after creation. When an event loop is
    running, removal is also scheduled with call_later; reads additionally
    drop anything past its deadline so the queue is correct without a loop.
    """

    def __init__(self, ttl: float = 5.0, clock: Callable[[], float] = time.time):
        self.ttl = ttl
        self._clock = clock
        self._toasts: list[Toast] = []
        self._deadlines: dict[int, float] = {}
        self._timers: dict[int, asyncio.TimerHandle] = {}
        self._last_id = 0

    def _next_id(self) -> int:
        # Millisecond timestamp, bumped when two toasts share a tick
        toast_id = max(int(self._clock() * 1000), self._last_id + 1)
        self._last_id = toast_id
        return toast_id

    def add_toast(self, message: str, severity: Severity = "info") -> Toast:
        toast = Toast(id=self._next_id(), message=message, type=severity)
        self._toasts.append(toast)
        self._deadlines[toast.id] = self._clock() + self.ttl

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            loop = None
        if loop is not None:
            self._timers[toast.id] = loop.call_later(self.ttl, self.dismiss, toast.id)

        logger.debug("Toast %s (%s): %s", toast.id, severity, message)
        return toast

    def success(self, message: str) -> Toast:
        return self.add_toast(message, "success")

    def error(self, message: str) -> Toast:
        return self.add_toast(message, "error")

    def info(self, message: str) -> Toast:
        return self.add_toast(message, "info")

    def dismiss(self, toast_id: int) -> None:
        """Remove a toast by id. Removing an unknown id is a no-op."""
        self._toasts = [t for t in self._toasts if t.id != toast_id]
        self._deadlines.pop(toast_id, None)
        timer = self._timers.pop(toast_id, None)
        if timer is not None:
            timer.cancel()

    @property
    def toasts(self) -> list[Toast]:
        """Live toasts in insertion order (oldest first)."""
        now = self._clock()
        for toast_id, deadline in list(self._deadlines.items()):
            if deadline < now:
                self.dismiss(toast_id)
        return list(self._toasts)
