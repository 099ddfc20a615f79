# dataio/session_persistence.py
"""
Session persistence for saving and loading the curve-fitting state.

A session holds the points (position, delta, returning flag), the polynomial
order, the fit mode and the adjustable coefficients. Sessions are stored as
JSON files; without an explicit path the default file in the 'sessions/'
folder under the repo root is used.
"""
import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional, Union

logger = logging.getLogger(__name__)

# Constants
DEFAULT_SESSION_FILENAME = "default_session.json"
SESSION_FILE_VERSION = 1

PathLike = Union[str, Path]


def _get_sessions_folder() -> Path:
    """Get the sessions folder path (repo_root/sessions/)."""
    # repo root is two levels up from this file: .../dataio/session_persistence.py
    repo_root = Path(__file__).resolve().parent.parent
    return repo_root / "sessions"


def _resolve_path(path: Optional[PathLike]) -> Path:
    if path:
        return Path(path)
    return _get_sessions_folder() / DEFAULT_SESSION_FILENAME


def _build_session_data(curve_model) -> Dict[str, Any]:
    """Wrap the model snapshot with file metadata."""
    snap = curve_model.snapshot()
    return {
        "version": SESSION_FILE_VERSION,
        "saved_at": datetime.now(timezone.utc).isoformat(),
        "statistics": {
            "chi_squared": curve_model.chi_squared,
            # NaN is not valid JSON; undefined r^2 is stored as null
            "r_squared": curve_model.r_squared if curve_model.statistics.r_squared_defined else None,
        },
        "coefficients": [float(c) for c in curve_model.coefficients],
        "state": snap,
    }


def save_session(curve_model, path: Optional[PathLike] = None) -> bool:
    """Save the current session.

    Args:
        curve_model: The CurveModel to save
        path: Target file; the default session file when omitted

    Returns:
        True if save succeeded, False otherwise
    """
    session_path = _resolve_path(path)
    try:
        session_path.parent.mkdir(parents=True, exist_ok=True)
        data = _build_session_data(curve_model)
        tmp_path = session_path.with_suffix(session_path.suffix + ".tmp")

        with tmp_path.open("w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)

        tmp_path.replace(session_path)
        logger.debug("Saved session to %s", session_path)
        return True

    except OSError as exc:
        logger.warning("Could not save session to %s: %s", session_path, exc)
        return False


def load_session(curve_model, path: Optional[PathLike] = None) -> bool:
    """Load a saved session into the curve model.

    Args:
        curve_model: The CurveModel to load into
        path: Session file; the default session file when omitted

    Returns:
        True if a session was found and applied, False otherwise
    """
    session_path = _resolve_path(path)
    if not session_path.exists():
        return False

    try:
        with session_path.open("r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as exc:
        logger.warning("Could not read session %s: %s", session_path, exc)
        return False

    if not isinstance(data, dict) or not isinstance(data.get("state"), dict):
        logger.warning("Session %s has no state block", session_path)
        return False

    version = data.get("version", SESSION_FILE_VERSION)
    if not isinstance(version, int) or version > SESSION_FILE_VERSION:
        logger.warning("Session %s has an unsupported version (%s)", session_path, version)
        return False

    try:
        curve_model.load_from_snapshot(data["state"])
    except (KeyError, TypeError, ValueError) as exc:
        logger.warning("Invalid session %s: %s", session_path, exc)
        return False
    return True


def has_session(path: Optional[PathLike] = None) -> bool:
    """Check if a saved session exists."""
    return _resolve_path(path).exists()


def reset_session(path: Optional[PathLike] = None) -> bool:
    """Delete a saved session.

    Returns:
        True if the session file was deleted, False otherwise
    """
    session_path = _resolve_path(path)
    try:
        if session_path.exists():
            session_path.unlink()
            return True
        return False
    except OSError as exc:
        logger.warning("Could not delete session %s: %s", session_path, exc)
        return False
