# Lazy wrapper to avoid importing configuration at package import time (prevents circular imports)
def get_config(*args, **kwargs):
    from .configuration import get_config as _get_config
    return _get_config(*args, **kwargs)

# Lazy wrappers for session persistence to avoid circular imports
def save_session(*args, **kwargs):
    from .session_persistence import save_session as _save_session
    return _save_session(*args, **kwargs)

def load_session(*args, **kwargs):
    from .session_persistence import load_session as _load_session
    return _load_session(*args, **kwargs)

def has_session(*args, **kwargs):
    from .session_persistence import has_session as _has_session
    return _has_session(*args, **kwargs)

def reset_session(*args, **kwargs):
    from .session_persistence import reset_session as _reset_session
    return _reset_session(*args, **kwargs)

__all__ = [
    "get_config",
    "save_session",
    "load_session",
    "has_session",
    "reset_session",
]
