"""
Routine schema definition and validation.

A routine is a named step sequence stored as JSON:

    {
      "version": 1,
      "name": "greeting",
      "description": "...",
      "steps": [{"type": "say", "content": "Hello!"}, {"type": "wait", "duration": 800}]
    }
"""

from dataclasses import dataclass, field
from typing import List
import json

from saintgrid.config import DEFAULT_MAX_STEPS, ROUTINE_VERSION
from saintgrid.model.steps import RhythmSteps, Step, StepFormatError, step_from_dict, step_to_dict


@dataclass
class Routine:
    name: str
    steps: List[Step] = field(default_factory=list)
    description: str = ""

    def to_dict(self) -> dict:
        return {
            "version": ROUTINE_VERSION,
            "name": self.name,
            "description": self.description,
            "steps": [step_to_dict(s) for s in self.steps],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Routine":
        return cls(
            name=data.get("name", "Untitled"),
            steps=[step_from_dict(s) for s in data.get("steps", [])],
            description=data.get("description", ""),
        )

    def to_json(self, indent: int = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent, ensure_ascii=False)

    @classmethod
    def from_json(cls, json_str: str) -> "Routine":
        data = json.loads(json_str)
        return cls.from_dict(data)


class RoutineValidationError(Exception):
    """Raised when routine validation fails in strict mode."""
    pass


def validate_routine(data: dict, max_steps: int = DEFAULT_MAX_STEPS, strict: bool = False) -> tuple:
    """
    Validate routine data.

    Args:
        data: Routine dictionary
        max_steps: Longest sequence the sequencer will accept
        strict: If True, raise RoutineValidationError on any error

    Returns:
        (is_valid, errors_and_warnings)
    """
    errors = []
    warnings = []

    version = data.get("version", 1)
    if isinstance(version, bool) or not isinstance(version, int):
        errors.append(f"version must be an integer, got {version!r}")
    elif version > ROUTINE_VERSION:
        warnings.append(f"Routine version {version} is newer than supported {ROUTINE_VERSION}")

    name = data.get("name")
    if not isinstance(name, str) or not name.strip():
        errors.append("name must be a non-empty string")

    steps = data.get("steps")
    if not isinstance(steps, list):
        errors.append("steps must be a list")
        steps = []
    elif not steps:
        warnings.append("routine has no steps")

    if len(steps) > max_steps:
        errors.append(f"steps has {len(steps)} items, maximum is {max_steps}")

    for i, step in enumerate(steps):
        try:
            step_from_dict(step)
        except StepFormatError as e:
            errors.append(f"steps[{i}]: {e}")

    is_valid = len(errors) == 0

    if strict and not is_valid:
        raise RoutineValidationError(f"Invalid routine: {'; '.join(errors)}")

    return is_valid, errors + warnings


def builtin_routines() -> List[Routine]:
    """Routines that ship with the pet."""
    return [
        Routine("greeting", RhythmSteps.greeting(), "Say hello, wave, ask how you are"),
        Routine("celebration", RhythmSteps.celebration(), "Cheer with a jump and sparkles"),
    ]
