"""App path helpers (cross-platform).

Single place for SaintGrid app data paths.

Environment overrides (useful for portable/dev launches):
- SAINTGRID_DATA_DIR: base data dir (routines/ lives under it)
"""

from __future__ import annotations

import os
from pathlib import Path

from platformdirs import user_data_dir

APP_NAME = "SaintGrid"


def _env_path(name: str) -> Path | None:
    v = os.environ.get(name)
    if not v:
        return None
    return Path(os.path.expanduser(v)).resolve()


def get_app_data_dir() -> Path:
    """Base app data dir."""
    data_dir = _env_path("SAINTGRID_DATA_DIR")
    if data_dir is not None:
        return data_dir
    return Path(user_data_dir(APP_NAME, appauthor=False, roaming=True)).resolve()


def get_routines_dir() -> Path:
    """Saved routines dir under the app data dir."""
    routines_dir = get_app_data_dir() / "routines"
    routines_dir.mkdir(parents=True, exist_ok=True)
    return routines_dir
