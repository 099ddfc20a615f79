from __future__ import annotations
import json
import logging
import math
from dataclasses import dataclass, asdict, fields
from pathlib import Path
from typing import Optional

from models.constants import DeltaRange

logger = logging.getLogger(__name__)

SETTINGS_FILENAME = "settings.json"

# keys read back from settings.json; folder/filename come from the file location
_PERSISTED_KEYS = ("snap_to_grid", "default_delta", "last_session_file", "default_session_folder")


@dataclass
class Config:
    # round dropped/dragged points to the grid
    snap_to_grid: bool = False
    # uncertainty given to new points; None uses the model default
    default_delta: Optional[float] = None
    last_session_file: Optional[str] = None
    default_session_folder: str = ""
    config_folder: str = ""
    config_filename: str = SETTINGS_FILENAME

    def __post_init__(self):
        self.default_session_folder = str(self.default_session_folder or "")
        self.config_folder = str(self.config_folder or "")
        self.snap_to_grid = bool(self.snap_to_grid)
        if self.last_session_file is not None:
            self.last_session_file = str(self.last_session_file)
        if self.default_delta is not None:
            delta = float(self.default_delta)
            if not math.isfinite(delta) or delta <= 0:
                logger.warning("Ignoring invalid default_delta %r", self.default_delta)
                delta = None
            self.default_delta = delta

    @property
    def config_path(self) -> Path:
        return Path(self.config_folder) / self.config_filename

    def to_dict(self) -> dict:
        return asdict(self)

    def new_point_delta(self, delta_range: DeltaRange) -> float:
        """Delta for a newly dropped point, kept inside *delta_range*."""
        if self.default_delta is None:
            return delta_range.default
        clamped = delta_range.clamp(self.default_delta)
        if clamped != self.default_delta:
            logger.debug("Configured default_delta %r clamped to %r", self.default_delta, clamped)
        return clamped

    def save(self) -> None:
        cfg_path = self.config_path
        cfg_path.parent.mkdir(parents=True, exist_ok=True)
        tmp = cfg_path.with_suffix(cfg_path.suffix + ".tmp")
        with tmp.open("w", encoding="utf-8") as f:
            json.dump(self.to_dict(), f, indent=2)
        tmp.replace(cfg_path)

    @classmethod
    def load(cls, path: Optional[Path] = None) -> "Config":
        """Read settings from *path*; a missing or unreadable file gives defaults."""
        if path is None:
            raise ValueError("path must be provided for load()")
        path = Path(path)
        location = {"config_folder": str(path.parent), "config_filename": path.name}
        if not path.exists():
            return cls(**location)
        try:
            with path.open("r", encoding="utf-8") as f:
                data = json.load(f)
            if not isinstance(data, dict):
                raise ValueError("settings must be a JSON object")
            known = {f.name for f in fields(cls)}
            unknown = sorted(set(data) - known)
            if unknown:
                logger.debug("Ignoring unknown settings in %s: %s", path, unknown)
            values = {k: data[k] for k in _PERSISTED_KEYS if k in data}
            return cls(**values, **location)
        except (OSError, ValueError, TypeError) as exc:
            logger.warning("Could not read settings %s (%s); using defaults", path, exc)
            return cls(**location)


# Module-level singleton accessor
_config_singleton: Optional[Config] = None


def _default_repo_config_folder() -> Path:
    # repo root is two levels up from this file: .../dataio/configuration.py
    return Path(__file__).resolve().parent.parent / "config"


def get_config(recreate: bool = False, folder: Optional[Path] = None) -> Config:
    """
    Return the shared Config, loading settings.json on first use.
    A fresh settings file is written when none exists yet.
    Set recreate=True to reload from disk.
    """
    global _config_singleton
    if _config_singleton is not None and not recreate:
        return _config_singleton

    cfg_file = Path(folder or _default_repo_config_folder()) / SETTINGS_FILENAME
    if cfg_file.exists():
        cfg = Config.load(cfg_file)
    else:
        cfg = Config(default_session_folder=str(Path.home()),
                     config_folder=str(cfg_file.parent))
        cfg.save()
    _config_singleton = cfg
    return _config_singleton
