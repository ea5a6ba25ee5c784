"""
Manual timer backend for engine tests.

ManualTimers implements the TimerBackend interface with a virtual clock:
- advance(ms) fires due timers in (due time, creation order) order
- flush() runs callbacks handed over via post()
Nothing runs until the test asks for it.
"""
from collections import deque


class ManualTimerHandle:
    def __init__(self, due: float, seq: int, callback):
        self.due = due
        self.seq = seq
        self.callback = callback
        self.cancelled = False
        self.fired = False

    @property
    def active(self) -> bool:
        return not (self.cancelled or self.fired)

    def cancel(self):
        self.cancelled = True


class ManualTimers:
    def __init__(self):
        self.now = 0.0
        self._seq = 0
        self._handles = []
        self._posted = deque()

    # TimerBackend -----------------------------------------------------------

    def call_later(self, delay_ms, callback):
        self._seq += 1
        handle = ManualTimerHandle(self.now + delay_ms, self._seq, callback)
        self._handles.append(handle)
        return handle

    def post(self, callback):
        self._posted.append(callback)

    def monotonic_ms(self) -> float:
        return self.now

    # Test controls ----------------------------------------------------------

    @property
    def pending(self):
        return [h for h in self._handles if h.active]

    def flush(self):
        while self._posted:
            self._posted.popleft()()

    def advance(self, ms: float):
        target = self.now + ms
        self.flush()
        while True:
            due = [h for h in self._handles if h.active and h.due <= target]
            if not due:
                break
            handle = min(due, key=lambda h: (h.due, h.seq))
            self.now = handle.due
            handle.fired = True
            handle.callback()
            self.flush()
        self.now = target
        self._handles = [h for h in self._handles if h.active]
