"""
Routine manager - handles save/load of routine files.
"""

import json
import os
import re
import tempfile
from pathlib import Path
from typing import List, Optional, Union

from saintgrid.config import ROUTINE_FILE_SUFFIX
from saintgrid.model.steps import StepFormatError
from saintgrid.utils.logger import logger
from .routine_schema import Routine, validate_routine, RoutineValidationError


class RoutineError(Exception):
    """Raised when routine operations fail."""
    pass


def routine_filename(name: str) -> str:
    """Filesystem-safe file name for a routine name."""
    slug = re.sub(r"[^\w\-]+", "_", name.strip()).strip("_")
    return (slug or "routine") + ROUTINE_FILE_SUFFIX


class RoutineManager:
    """
    Manages routine save/load operations.

    Usage:
        manager = RoutineManager()
        manager.save(Routine("morning", RhythmSteps.greeting("Ada")))

        routine = manager.load("morning")
        sequencer.submit(routine.steps)
    """

    def __init__(self, routines_dir: Optional[Path] = None):
        if routines_dir is None:
            from saintgrid.utils.app_paths import get_routines_dir
            routines_dir = get_routines_dir()
        self.routines_dir = Path(routines_dir)
        self.routines_dir.mkdir(parents=True, exist_ok=True)

    def path_for(self, name: str) -> Path:
        return self.routines_dir / routine_filename(name)

    def save(self, routine: Routine, *, allow_overwrite: bool = True) -> Path:
        """
        Write routine to file atomically.

        Raises:
            RoutineError: If write fails or file exists when allow_overwrite=False
        """
        dest_path = self.path_for(routine.name)

        if not allow_overwrite and dest_path.exists():
            raise RoutineError(f"File already exists: {dest_path}")

        json_str = routine.to_json()

        try:
            fd, temp_path = tempfile.mkstemp(
                suffix='.tmp',
                prefix='.routine_',
                dir=dest_path.parent
            )
            try:
                with os.fdopen(fd, 'w', encoding='utf-8') as f:
                    f.write(json_str)
                os.replace(temp_path, dest_path)
            except Exception:
                try:
                    os.unlink(temp_path)
                except OSError:
                    pass
                raise
        except OSError as e:
            raise RoutineError(f"Failed to write routine: {e}")

        logger.info(f"Saved routine '{routine.name}' ({len(routine.steps)} steps)", component="ROUTINE")
        return dest_path

    def load(self, name_or_path: Union[str, Path], max_steps: Optional[int] = None) -> Routine:
        """
        Load a routine by name (from routines_dir) or by file path.

        Raises:
            RoutineError: If the file is missing, unreadable, or invalid
        """
        path = Path(name_or_path)
        if path.suffix != ROUTINE_FILE_SUFFIX:
            path = self.path_for(str(name_or_path))

        if not path.exists():
            raise RoutineError(f"Routine not found: {path}")

        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise RoutineError(f"Failed to read routine: {e}")

        if not isinstance(data, dict):
            raise RoutineError(f"Invalid routine: expected an object in {path.name}")

        try:
            kwargs = {} if max_steps is None else {"max_steps": max_steps}
            _, messages = validate_routine(data, strict=True, **kwargs)
            routine = Routine.from_dict(data)
        except (RoutineValidationError, StepFormatError) as e:
            raise RoutineError(str(e))

        for msg in messages:
            logger.warning(msg, component="ROUTINE", details=path.name)

        logger.info(f"Loaded routine '{routine.name}'", component="ROUTINE")
        return routine

    def list_routines(self) -> List[str]:
        """Routine names found in routines_dir, sorted."""
        names = []
        for path in sorted(self.routines_dir.glob(f"*{ROUTINE_FILE_SUFFIX}")):
            try:
                with open(path, 'r', encoding='utf-8') as f:
                    data = json.load(f)
            except (OSError, json.JSONDecodeError) as e:
                logger.warning(f"Skipping unreadable routine {path.name}", component="ROUTINE", details=str(e))
                continue
            if isinstance(data, dict) and isinstance(data.get("name"), str):
                names.append(data["name"])
        return sorted(names)

    def delete(self, name: str) -> bool:
        path = self.path_for(name)
        if not path.exists():
            return False
        try:
            path.unlink()
        except OSError as e:
            raise RoutineError(f"Failed to delete routine: {e}")
        logger.info(f"Deleted routine '{name}'", component="ROUTINE")
        return True
