"""
Rhythm Clock — the pet's behavior metronome

Emits ticks whose spacing depends on the rhythm mode:
- STEADY:   base interval with small random jitter
- PULSE:    heartbeat shape over a 4-tick cycle
- SEQUENCE: cycles through an explicit list of intervals
- ADAPTIVE: interval shortened by emotion intensity (adapt_to_emotion)
- SYNC:     exact interval locked to an external source

Clock model:
- One single-shot timer per tick, rescheduled after each tick
- Intervals are floored at MIN_TICK_INTERVAL_MS
- Tick callbacks receive (timestamp_ms, actual_interval_ms)
"""

from __future__ import annotations

import dataclasses
import math
import random
from dataclasses import dataclass
from enum import Enum
from functools import partial
from typing import Callable, List, Optional, Tuple, Union

from saintgrid.config import (
    DEFAULT_RHYTHM_CONFIGS, RHYTHM_PROFILES, MIN_TICK_INTERVAL_MS, SYNC_VARIATION,
    ADAPTIVE_MIN_FACTOR, ADAPTIVE_INTENSITY_SCALE,
    PULSE_CYCLE_TICKS, PULSE_BASE_FACTOR, PULSE_DEPTH, TICK_STATS_EVERY,
)
from saintgrid.engine.timers import TimerBackend, TimerHandle
from saintgrid.utils.logger import logger

TickCallback = Callable[[float, float], None]


class RhythmConfigError(ValueError):
    """Raised for invalid rhythm configuration."""
    pass


class RhythmMode(Enum):
    STEADY = 'steady'
    PULSE = 'pulse'
    SEQUENCE = 'sequence'
    ADAPTIVE = 'adaptive'
    SYNC = 'sync'


class RhythmIntensity(Enum):
    LOW = 'low'
    MEDIUM = 'medium'
    HIGH = 'high'
    BURST = 'burst'


@dataclass(frozen=True)
class RhythmConfig:
    """Interval parameters for one rhythm mode."""
    mode: RhythmMode
    base_interval_ms: float
    intensity: RhythmIntensity = RhythmIntensity.MEDIUM
    variation: float = 0.1      # 0-1 jitter fraction
    sync_source: Optional[str] = None
    sequence: Tuple[float, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, 'mode', RhythmMode(self.mode))
        object.__setattr__(self, 'intensity', RhythmIntensity(self.intensity))
        object.__setattr__(self, 'sequence', tuple(self.sequence))
        if self.base_interval_ms <= 0:
            raise RhythmConfigError(f"base_interval_ms must be > 0, got {self.base_interval_ms}")
        if not (0.0 <= self.variation <= 1.0):
            raise RhythmConfigError(f"variation must be 0-1, got {self.variation}")
        if any(v <= 0 for v in self.sequence):
            raise RhythmConfigError(f"sequence intervals must be > 0, got {list(self.sequence)}")

    @classmethod
    def default_for(cls, mode: Union[RhythmMode, str]) -> "RhythmConfig":
        mode = RhythmMode(mode)
        return cls(mode=mode, **DEFAULT_RHYTHM_CONFIGS[mode.value])

    @classmethod
    def from_profile(cls, name: str) -> "RhythmConfig":
        """Build from a named profile (development / production / demo)."""
        try:
            profile = RHYTHM_PROFILES[name]
        except KeyError:
            raise RhythmConfigError(f"Unknown rhythm profile: {name!r}")
        return cls(**profile)

    def with_overrides(self, **overrides) -> "RhythmConfig":
        return dataclasses.replace(self, **overrides)


@dataclass(frozen=True)
class RhythmState:
    """Snapshot of the clock."""
    active: bool
    mode: RhythmMode
    current_interval_ms: float
    last_tick_ms: float
    tick_count: int
    config: RhythmConfig


class RhythmClock:
    """
    Tick source for rhythm-driven behaviors.

    Owns its timer; several clocks can run side by side.
    """

    def __init__(
        self,
        mode: Union[RhythmMode, str] = RhythmMode.STEADY,
        timers: Optional[TimerBackend] = None,
        rng: Optional[random.Random] = None,
        config: Optional[RhythmConfig] = None,
    ):
        """
        Args:
            mode: Initial mode (ignored when config is given)
            timers: Deferred-callback backend (defaults to QtTimerBackend)
            rng: Random source for jitter (seed it for reproducible ticks)
            config: Full initial config, e.g. RhythmConfig.from_profile('demo')
        """
        if timers is None:
            from saintgrid.engine.timers import QtTimerBackend
            timers = QtTimerBackend()

        self._timers = timers
        self._rng = rng or random.Random()
        self._config = config if config is not None else RhythmConfig.default_for(mode)

        self._active: bool = False
        self._current_interval: float = self._config.base_interval_ms
        self._tick_count: int = 0
        self._last_tick_ms: float = 0.0

        self._timer: Optional[TimerHandle] = None
        self._generation: int = 0

        self._tick_callbacks: List[TickCallback] = []
        self._mode_listeners: List[Callable[[RhythmMode, RhythmConfig], None]] = []

        logger.rhythm(f"RhythmClock: initialized, mode={self._config.mode.value}")

    # =========================================================================
    # PROPERTIES
    # =========================================================================

    @property
    def is_active(self) -> bool:
        return self._active

    @property
    def mode(self) -> RhythmMode:
        return self._config.mode

    @property
    def config(self) -> RhythmConfig:
        return self._config

    def state(self) -> RhythmState:
        return RhythmState(
            active=self._active,
            mode=self._config.mode,
            current_interval_ms=self._current_interval,
            last_tick_ms=self._last_tick_ms,
            tick_count=self._tick_count,
            config=self._config,
        )

    # =========================================================================
    # LISTENERS
    # =========================================================================

    def on_tick(self, callback: TickCallback):
        if callback not in self._tick_callbacks:
            self._tick_callbacks.append(callback)
        logger.rhythm(f"RhythmClock: tick callbacks={len(self._tick_callbacks)}")

    def off_tick(self, callback: TickCallback):
        if callback in self._tick_callbacks:
            self._tick_callbacks.remove(callback)

    def on_mode_change(self, listener: Callable[[RhythmMode, RhythmConfig], None]):
        if listener not in self._mode_listeners:
            self._mode_listeners.append(listener)

    def off_mode_change(self, listener: Callable[[RhythmMode, RhythmConfig], None]):
        if listener in self._mode_listeners:
            self._mode_listeners.remove(listener)

    # =========================================================================
    # MODE
    # =========================================================================

    def set_mode(self, mode: Union[RhythmMode, str], **overrides):
        """
        Switch mode, starting from that mode's defaults plus overrides.
        Resets the tick count. A running clock restarts on the new mode.
        """
        mode = RhythmMode(mode)
        new_config = RhythmConfig.default_for(mode).with_overrides(**overrides)
        logger.rhythm(f"RhythmClock: mode {self._config.mode.value} -> {mode.value}")

        was_active = self._active
        if was_active:
            self.stop()

        self._config = new_config
        self._current_interval = new_config.base_interval_ms
        self._tick_count = 0

        for listener in list(self._mode_listeners):
            try:
                listener(mode, new_config)
            except Exception as e:
                logger.error("Mode listener failed", component="RHYTHM", details=str(e))

        if was_active:
            self.start()

    def sync_with_external(self, source: str, interval_ms: float):
        """Lock ticks to an external source's interval."""
        logger.info(f"RhythmClock: sync with {source} every {interval_ms}ms", component="RHYTHM")
        self.set_mode(
            RhythmMode.SYNC,
            sync_source=source,
            base_interval_ms=interval_ms,
            variation=SYNC_VARIATION,
        )

    def adapt_to_emotion(self, intensity: float):
        """ADAPTIVE mode only: stronger emotion -> shorter interval."""
        if self._config.mode is not RhythmMode.ADAPTIVE:
            return
        intensity = max(0.0, min(1.0, intensity))
        base = self._config.base_interval_ms
        factor = max(ADAPTIVE_MIN_FACTOR, 1 - intensity * ADAPTIVE_INTENSITY_SCALE)
        new_interval = round(base * factor)
        logger.rhythm(f"RhythmClock: emotion {intensity:.2f}, interval {base} -> {new_interval}ms")
        self._current_interval = new_interval

    # =========================================================================
    # TRANSPORT
    # =========================================================================

    def start(self):
        if self._active:
            logger.warning("RhythmClock: already running", component="RHYTHM")
            return
        logger.rhythm(f"RhythmClock: start, mode={self._config.mode.value}")
        self._active = True
        self._generation += 1
        self._last_tick_ms = self._timers.monotonic_ms()
        self._schedule_next(self._generation)

    def stop(self):
        if not self._active:
            return
        logger.rhythm("RhythmClock: stop")
        self._active = False
        self._generation += 1
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def pause(self):
        if self._active:
            self.stop()

    def resume(self):
        if not self._active:
            self.start()

    def dispose(self):
        self.stop()
        self._tick_callbacks.clear()
        self._mode_listeners.clear()
        logger.rhythm("RhythmClock: disposed")

    # =========================================================================
    # TICKING
    # =========================================================================

    def next_interval(self) -> float:
        """Interval before the next tick, before the MIN_TICK_INTERVAL_MS floor."""
        config = self._config
        mode = config.mode

        if mode is RhythmMode.STEADY:
            jitter = (self._rng.random() - 0.5) * config.base_interval_ms * config.variation
            return config.base_interval_ms + jitter

        if mode is RhythmMode.PULSE:
            phase = (self._tick_count % PULSE_CYCLE_TICKS) / PULSE_CYCLE_TICKS * math.pi * 2
            return config.base_interval_ms * (PULSE_BASE_FACTOR + PULSE_DEPTH * math.sin(phase))

        if mode is RhythmMode.SEQUENCE:
            if config.sequence:
                return config.sequence[self._tick_count % len(config.sequence)]
            return config.base_interval_ms

        if mode is RhythmMode.ADAPTIVE:
            jitter = (self._rng.random() - 0.5) * self._current_interval * config.variation
            return self._current_interval + jitter

        return config.base_interval_ms

    def _schedule_next(self, generation: int):
        if not self._active or generation != self._generation:
            return
        interval = max(MIN_TICK_INTERVAL_MS, self.next_interval())
        self._timer = self._timers.call_later(interval, partial(self._on_timer, generation))

    def _on_timer(self, generation: int):
        if generation != self._generation:
            return
        self._timer = None
        self._execute_tick()
        self._schedule_next(generation)

    def _execute_tick(self):
        now = self._timers.monotonic_ms()
        actual_interval = now - self._last_tick_ms
        self._last_tick_ms = now
        self._tick_count += 1

        for callback in list(self._tick_callbacks):
            try:
                callback(now, actual_interval)
            except Exception as e:
                logger.error("Tick callback failed", component="RHYTHM", details=str(e))

        if self._tick_count % TICK_STATS_EVERY == 0:
            logger.rhythm(
                f"RhythmClock: mode={self._config.mode.value} "
                f"ticks={self._tick_count} interval={actual_interval:.0f}ms"
            )
