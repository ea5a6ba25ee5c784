"""
Rhythm Sequencer — scripted step playback for the pet

Drives an ordered list of steps through an injected executor:
- Immediate steps (say / animate / playPlugin) run back-to-back
- Wait steps park dispatch on a single cancellable timer
- pause / resume / stop / append at any time
- A failing step is reported via on_error and skipped, never retried

Key invariant: at most one executor call outstanding and at most one
wait timer pending. Every submit/stop bumps a generation counter; timer
and executor continuations carry the generation they were issued under
and are dropped if it is stale.

Effects go through the executor injected at construction; the UI reads
status() snapshots.
"""

from __future__ import annotations

from concurrent.futures import CancelledError
from dataclasses import dataclass
from functools import partial
from typing import Callable, Iterable, List, Optional

from saintgrid.config import DEFAULT_MAX_STEPS, DEFAULT_WAIT_MS
from saintgrid.engine.timers import TimerBackend, TimerHandle
from saintgrid.model.steps import Step, is_wait
from saintgrid.utils.logger import logger


class SequencerConfigError(ValueError):
    """Raised for invalid sequencer configuration or oversized sequences."""
    pass


class SequenceLimitError(SequencerConfigError):
    """Raised by submit() when a sequence is longer than max_steps."""

    def __init__(self, count: int, limit: int):
        super().__init__(f"Steps count {count} exceeds maximum limit: {limit}")
        self.count = count
        self.limit = limit


@dataclass
class SequencerConfig:
    """Limits and lifecycle callbacks for one sequencer."""
    max_steps: int = DEFAULT_MAX_STEPS
    default_wait_ms: int = DEFAULT_WAIT_MS
    on_complete: Optional[Callable[[], None]] = None
    on_error: Optional[Callable[[BaseException, Step], None]] = None

    def __post_init__(self):
        if isinstance(self.max_steps, bool) or not isinstance(self.max_steps, int) or self.max_steps < 1:
            raise SequencerConfigError(f"max_steps must be a positive int, got {self.max_steps!r}")
        if not isinstance(self.default_wait_ms, (int, float)) or self.default_wait_ms < 0:
            raise SequencerConfigError(f"default_wait_ms must be >= 0, got {self.default_wait_ms!r}")


@dataclass(frozen=True)
class SequencerStatus:
    running: bool
    paused: bool
    cursor: int
    total_steps: int
    progress: float

    def to_dict(self) -> dict:
        return {
            'running': self.running,
            'paused': self.paused,
            'cursor': self.cursor,
            'total_steps': self.total_steps,
            'progress': self.progress,
        }


def _is_future(outcome) -> bool:
    return callable(getattr(outcome, 'add_done_callback', None))


def _future_exception(future) -> Optional[BaseException]:
    if future.cancelled():
        return CancelledError()
    return future.exception()


class RhythmSequencer:
    """
    Plays one step sequence at a time.

    The executor is called with each non-wait step. It may return None
    (done), raise (failed), or return a future-like object (has
    add_done_callback) that settles later, possibly on another thread.
    """

    def __init__(
        self,
        executor: Callable[[Step], object],
        config: Optional[SequencerConfig] = None,
        timers: Optional[TimerBackend] = None,
    ):
        """
        Args:
            executor: Callback performing one non-wait step
            config: Limits and callbacks (defaults to SequencerConfig())
            timers: Deferred-callback backend (defaults to QtTimerBackend)
        """
        if timers is None:
            from saintgrid.engine.timers import QtTimerBackend
            timers = QtTimerBackend()

        self._executor = executor
        self._config = config if config is not None else SequencerConfig()
        self._timers = timers

        self._queue: List[Step] = []
        self._cursor: int = 0
        self._running: bool = False
        self._paused: bool = False

        # The single pending wait timer, if any
        self._timer: Optional[TimerHandle] = None

        # True while an executor future is outstanding
        self._in_flight: bool = False

        self._generation: int = 0

    # =========================================================================
    # PROPERTIES
    # =========================================================================

    @property
    def config(self) -> SequencerConfig:
        return self._config

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def is_paused(self) -> bool:
        return self._paused

    # =========================================================================
    # CONTROL
    # =========================================================================

    def submit(self, steps: Iterable[Step]):
        """
        Replace the current sequence and start playing it.

        The first immediate step is executed before this returns.
        A sequence that is still in flight is discarded without callbacks.

        Raises:
            SequenceLimitError: more than max_steps steps (nothing changes)
        """
        steps = list(steps)
        if len(steps) > self._config.max_steps:
            raise SequenceLimitError(len(steps), self._config.max_steps)

        if self._running:
            logger.seq(f"Sequencer: superseding sequence at step {self._cursor}/{len(self._queue)}")

        self._cancel_timer()
        self._generation += 1
        self._queue = steps
        self._cursor = 0
        self._paused = False
        self._in_flight = False
        self._running = True

        logger.seq(f"Sequencer: submitted {len(steps)} steps")
        self._dispatch(self._generation)

    def pause(self):
        """Freeze at the current cursor. No-op unless running."""
        if not self._running or self._paused:
            return
        self._paused = True
        self._cancel_timer()
        logger.seq(f"Sequencer: paused at step {self._cursor}/{len(self._queue)}")

    def resume(self):
        """Continue from the cursor. No-op unless paused with an active sequence."""
        if not self._paused or not self._running:
            return
        self._paused = False
        logger.seq(f"Sequencer: resumed at step {self._cursor}/{len(self._queue)}")
        # An outstanding executor call continues dispatch when it settles
        if not self._in_flight:
            self._dispatch(self._generation)

    def stop(self):
        """Discard the sequence. Never fires on_complete."""
        self._generation += 1
        self._cancel_timer()
        was_running = self._running
        self._paused = False
        self._running = False
        self._in_flight = False
        self._queue = []
        self._cursor = 0
        if was_running:
            logger.seq("Sequencer: stopped")

    def append_step(self, step: Step):
        """
        Add a step to the tail of the current queue.

        Does not start playback: on an idle, stopped or completed
        sequencer this only lengthens the queue. submit() starts a new run.
        """
        self._queue.append(step)

    def status(self) -> SequencerStatus:
        """Snapshot for UI rendering."""
        total = len(self._queue)
        return SequencerStatus(
            running=self._running,
            paused=self._paused,
            cursor=self._cursor,
            total_steps=total,
            progress=self._cursor / total if total > 0 else 0.0,
        )

    # =========================================================================
    # DISPATCH
    # =========================================================================

    def _dispatch(self, generation: int):
        """Advance through immediate steps until a wait, a future, a pause, or the end."""
        while generation == self._generation:
            if self._cursor >= len(self._queue):
                self._finish()
                return
            if self._paused:
                return

            step = self._queue[self._cursor]
            self._cursor += 1

            if is_wait(step):
                delay = step.duration or self._config.default_wait_ms
                self._timer = self._timers.call_later(
                    delay, partial(self._on_wait_elapsed, generation)
                )
                return

            try:
                outcome = self._executor(step)
            except Exception as e:
                if generation != self._generation:
                    return
                self._report_failure(e, step)
                continue

            # The executor may have submitted or stopped re-entrantly
            if generation != self._generation:
                return

            if _is_future(outcome):
                self._in_flight = True
                outcome.add_done_callback(partial(self._on_outcome, generation, step))
                return

    def _on_wait_elapsed(self, generation: int):
        if generation != self._generation:
            return
        self._timer = None
        self._dispatch(generation)

    def _on_outcome(self, generation: int, step: Step, future):
        """Future done-callback. May run on a worker thread."""
        self._timers.post(partial(self._settle, generation, step, future))

    def _settle(self, generation: int, step: Step, future):
        if generation != self._generation:
            return
        self._in_flight = False
        exc = _future_exception(future)
        if exc is not None:
            self._report_failure(exc, step)
        self._dispatch(generation)

    def _finish(self):
        self._running = False
        self._paused = False
        self._timer = None
        logger.seq(f"Sequencer: completed {len(self._queue)} steps")
        if self._config.on_complete is not None:
            try:
                self._config.on_complete()
            except Exception as e:
                logger.error("on_complete callback failed", component="SEQ", details=str(e))

    def _report_failure(self, exc: BaseException, step: Step):
        logger.warning(
            f"Step {self._cursor - 1} ({step.kind.value}) failed",
            component="SEQ", details=str(exc)
        )
        if self._config.on_error is not None:
            try:
                self._config.on_error(exc, step)
            except Exception as e:
                logger.error("on_error callback failed", component="SEQ", details=str(e))

    def _cancel_timer(self):
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None


def create_rhythm_sequencer(
    executor: Callable[[Step], object],
    config: Optional[SequencerConfig] = None,
    timers: Optional[TimerBackend] = None,
) -> RhythmSequencer:
    """Factory mirroring the constructor, for callers that prefer functions."""
    return RhythmSequencer(executor, config, timers)
