"""
Step Data Models — Scripted Pet Behavior

Data models for the behavior rhythm subsystem:
- StepKind: SAY / WAIT / ANIMATE / PLAY_PLUGIN
- Say, Wait, Animate, PlayPlugin: immutable step variants
- step_to_dict / step_from_dict: routine JSON format
- RhythmSteps: builders and canned composite sequences
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import ClassVar, List, Mapping, Optional, Union

from saintgrid.config import (
    GREETING_DEFAULT_NAME, GREETING_PAUSE_MS, GREETING_WAVE_HOLD_MS, GREETING_QUESTION,
    CELEBRATION_JUMP_HOLD_MS, CELEBRATION_SPARKLE_HOLD_MS,
)


class StepFormatError(ValueError):
    """Raised when step data cannot be turned into a step."""
    pass


class StepKind(Enum):
    """Step variant tag. Values are the routine JSON type names."""
    SAY = 'say'
    WAIT = 'wait'
    ANIMATE = 'animate'
    PLAY_PLUGIN = 'playPlugin'


@dataclass(frozen=True)
class Say:
    """Speech/utterance request."""
    content: str
    kind: ClassVar[StepKind] = StepKind.SAY


@dataclass(frozen=True)
class Wait:
    """Pure delay. A zero duration means "use the sequencer default"."""
    duration: int = 0  # ms
    kind: ClassVar[StepKind] = StepKind.WAIT

    def __post_init__(self):
        if isinstance(self.duration, bool) or not isinstance(self.duration, int):
            raise StepFormatError(f"wait duration must be an int (ms), got {self.duration!r}")
        if self.duration < 0:
            raise StepFormatError(f"wait duration must be >= 0, got {self.duration}")


@dataclass(frozen=True)
class Animate:
    """Named animation to play."""
    name: str
    kind: ClassVar[StepKind] = StepKind.ANIMATE


@dataclass(frozen=True)
class PlayPlugin:
    """External action by plugin id. params is stored as a read-only copy."""
    plugin_id: str
    params: Optional[Mapping] = field(default=None)
    kind: ClassVar[StepKind] = StepKind.PLAY_PLUGIN

    def __post_init__(self):
        if self.params is not None:
            object.__setattr__(self, 'params', MappingProxyType(dict(self.params)))


Step = Union[Say, Wait, Animate, PlayPlugin]


def is_wait(step: Step) -> bool:
    return step.kind is StepKind.WAIT


# =============================================================================
# SERIALIZATION
# =============================================================================

def step_to_dict(step: Step) -> dict:
    """Serialize a step to its routine JSON form."""
    if isinstance(step, Say):
        return {"type": StepKind.SAY.value, "content": step.content}
    if isinstance(step, Wait):
        return {"type": StepKind.WAIT.value, "duration": step.duration}
    if isinstance(step, Animate):
        return {"type": StepKind.ANIMATE.value, "name": step.name}
    if isinstance(step, PlayPlugin):
        data = {"type": StepKind.PLAY_PLUGIN.value, "pluginId": step.plugin_id}
        if step.params is not None:
            data["params"] = dict(step.params)
        return data
    raise StepFormatError(f"Not a step: {step!r}")


def _require_str(data: dict, key: str, step_type: str) -> str:
    value = data.get(key)
    if not isinstance(value, str):
        raise StepFormatError(f"'{step_type}' step needs a string '{key}', got {value!r}")
    return value


def step_from_dict(data: dict) -> Step:
    """
    Build a step from its routine JSON form.

    Raises:
        StepFormatError: unknown type, missing payload, or bad duration
    """
    if not isinstance(data, dict):
        raise StepFormatError(f"step must be an object, got {type(data).__name__}")

    step_type = data.get("type")
    try:
        kind = StepKind(step_type)
    except ValueError:
        raise StepFormatError(f"Unknown step type: {step_type!r}")

    if kind is StepKind.SAY:
        return Say(_require_str(data, "content", step_type))
    if kind is StepKind.WAIT:
        duration = data.get("duration")
        return Wait(0 if duration is None else duration)
    if kind is StepKind.ANIMATE:
        return Animate(_require_str(data, "name", step_type))

    params = data.get("params")
    if params is not None and not isinstance(params, dict):
        raise StepFormatError(f"playPlugin params must be an object, got {params!r}")
    return PlayPlugin(_require_str(data, "pluginId", step_type), params)


# =============================================================================
# BUILDERS
# =============================================================================

class RhythmSteps:
    """Shorthand builders for steps and canned sequences."""

    @staticmethod
    def say(content: str) -> Say:
        return Say(content)

    @staticmethod
    def wait(duration: int) -> Wait:
        return Wait(duration)

    @staticmethod
    def animate(name: str) -> Animate:
        return Animate(name)

    @staticmethod
    def play_plugin(plugin_id: str, params: Optional[Mapping] = None) -> PlayPlugin:
        return PlayPlugin(plugin_id, params)

    @staticmethod
    def greeting(name: str = GREETING_DEFAULT_NAME) -> List[Step]:
        """say hello -> wait -> wave -> wait -> ask."""
        return [
            Say(f"Hello, {name}!"),
            Wait(GREETING_PAUSE_MS),
            Animate("wave"),
            Wait(GREETING_WAVE_HOLD_MS),
            Say(GREETING_QUESTION),
        ]

    @staticmethod
    def celebration() -> List[Step]:
        return [
            Say("Awesome!"),
            Animate("jump"),
            Wait(CELEBRATION_JUMP_HOLD_MS),
            Animate("sparkle"),
            Wait(CELEBRATION_SPARKLE_HOLD_MS),
            Say("You did great!"),
        ]
