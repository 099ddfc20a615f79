"""Utility helpers for routing log messages and exceptions through the ViewModel.

These helpers centralize how we surface log output to the GUI. They attempt to
emit messages via a viewmodel's ``log_message`` signal when available and fall
back to the module logger so messages are never lost silently.
"""
from __future__ import annotations

import logging
import sys
import traceback
from typing import Optional

logger = logging.getLogger(__name__)


def log_message(message: str, vm: Optional[object] = None) -> None:
    """Emit *message* through ``vm.log_message`` when possible, else log it."""
    text = str(message)
    signal = getattr(vm, "log_message", None) if vm is not None else None
    if signal is not None and hasattr(signal, "emit"):
        try:
            signal.emit(text)
            return
        except RuntimeError as exc:
            # underlying QObject already deleted; fall through to the logger
            logger.debug("log_message signal unavailable: %s", exc)
    logger.info(text)


def log_exception(context: str, exc: Optional[BaseException] = None, vm: Optional[object] = None) -> None:
    """Format *exc* with traceback and delegate to :func:`log_message`."""
    if exc is None:
        exc = sys.exc_info()[1]
    if exc is None:
        payload = f"{context}: (no exception details available)"
    else:
        tb = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
        payload = f"{context}: {exc}\n{tb}"
    log_message(payload, vm=vm)


def safe_call(func, *args, default=None, context: str = "operation", vm: Optional[object] = None, **kwargs):
    """Safely call a function, logging exceptions and returning default on failure.

    Only ordinary input errors (ValueError, TypeError, OSError) are caught;
    anything else, including internal consistency errors, propagates.

    Args:
        func: Callable to execute
        *args: Positional arguments for func
        default: Value to return on exception (default: None)
        context: Description for error logging
        vm: ViewModel instance for logging
        **kwargs: Keyword arguments for func

    Returns:
        Result of func(*args, **kwargs) or default on exception
    """
    try:
        return func(*args, **kwargs)
    except (ValueError, TypeError, OSError) as e:
        log_exception(f"Failed during {context}", e, vm=vm)
        return default


def safe_emit(signal, *args, vm: Optional[object] = None, signal_name: str = "signal"):
    """Safely emit a Qt signal, catching and logging any exceptions.

    Args:
        signal: Qt signal to emit
        *args: Arguments to pass to signal.emit()
        vm: ViewModel instance for logging
        signal_name: Name of signal for error messages
    """
    try:
        signal.emit(*args)
    except RuntimeError as e:
        log_exception(f"Failed to emit {signal_name}", e, vm=vm)
