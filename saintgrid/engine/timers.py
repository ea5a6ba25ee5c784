"""
Timer Backends — deferred callbacks for the rhythm engines

A backend owns every deferred callback for one thread:
- call_later(delay_ms, callback) -> TimerHandle (cancellable, one-shot)
- post(callback): run soon on the owner thread (safe from any thread)
- monotonic_ms(): clock used for tick statistics

QtTimerBackend drives the running app. Tests swap in a manual clock.
"""

from __future__ import annotations

import time
from typing import Callable, Optional, Protocol

from PyQt5.QtCore import QObject, Qt, QTimer, pyqtSignal


class TimerHandle(Protocol):
    @property
    def active(self) -> bool: ...

    def cancel(self) -> None: ...


class TimerBackend(Protocol):
    def call_later(self, delay_ms: int, callback: Callable[[], None]) -> TimerHandle: ...

    def post(self, callback: Callable[[], None]) -> None: ...

    def monotonic_ms(self) -> float: ...


class QtTimerHandle:
    """One single-shot QTimer. Cancel is idempotent."""

    def __init__(self, delay_ms: int, callback: Callable[[], None], parent: QObject):
        self._callback = callback
        self._timer: Optional[QTimer] = QTimer(parent)
        self._timer.setSingleShot(True)
        self._timer.setTimerType(Qt.PreciseTimer)
        self._timer.timeout.connect(self._fire)
        self._timer.start(max(0, int(delay_ms)))

    @property
    def active(self) -> bool:
        return self._timer is not None and self._timer.isActive()

    def _fire(self):
        self._release()
        self._callback()

    def cancel(self):
        if self._timer is not None:
            self._timer.stop()
            self._release()

    def _release(self):
        timer, self._timer = self._timer, None
        if timer is not None:
            timer.timeout.disconnect(self._fire)
            timer.deleteLater()


class QtTimerBackend(QObject):
    """
    QTimer-based backend.

    Create it on the GUI thread; timers fire from that thread's event loop.
    post() goes through a queued signal, so a worker thread (e.g. a plugin
    pool finishing a Future) hands the continuation back to the GUI thread.
    """

    _posted = pyqtSignal(object)

    def __init__(self, parent: Optional[QObject] = None):
        super().__init__(parent)
        self._posted.connect(self._run_posted)

    def call_later(self, delay_ms: int, callback: Callable[[], None]) -> QtTimerHandle:
        return QtTimerHandle(delay_ms, callback, self)

    def post(self, callback: Callable[[], None]):
        self._posted.emit(callback)

    def _run_posted(self, callback):
        callback()

    def monotonic_ms(self) -> float:
        return time.monotonic() * 1000.0
