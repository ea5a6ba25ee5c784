"""
Routines module - named step sequences saved as JSON.
"""

from .routine_schema import (
    Routine,
    RoutineValidationError,
    validate_routine,
    builtin_routines,
)

from .routine_manager import (
    RoutineManager,
    RoutineError,
    routine_filename,
)

__all__ = [
    "Routine",
    "RoutineValidationError",
    "validate_routine",
    "builtin_routines",
    "RoutineManager",
    "RoutineError",
    "routine_filename",
]
