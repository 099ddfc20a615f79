# viewmodel/curve_vm.py
from PySide6.QtCore import QObject, Signal
from pathlib import Path
import typing as _typing

from models import CurveModel, FitMode, WeightedPoint
from dataio.configuration import Config, get_config
from dataio.session_persistence import save_session as _save_session, load_session as _load_session
from .logging_helpers import log_exception, log_message, safe_call, safe_emit


class CurveFittingViewModel(QObject):
    """
    Logic layer between the curve model and the view: forwards user actions to
    the model, reports bad input through ``log_message`` and re-publishes
    every recompute as Qt signals.
    """

    curve_updated = Signal()                        # emitted after every recompute
    statistics_updated = Signal(float, float)       # chi_squared, r_squared (NaN when undefined)
    points_changed = Signal(int)                    # number of relevant points
    log_message = Signal(str)

    def __init__(self, curve_model: _typing.Optional[CurveModel] = None,
                 config: _typing.Optional[Config] = None):
        super().__init__()
        self.config = config if config is not None else get_config()
        if curve_model is None:
            curve_model = CurveModel(snap_to_grid=self.config.snap_to_grid)
        self.model = curve_model
        self.model.add_listener(self._on_model_changed)

    def _log_message(self, message: str) -> None:
        """Emit a message via the shared logging helper."""
        log_message(message, vm=self)

    def _on_model_changed(self) -> None:
        safe_emit(self.curve_updated, vm=self, signal_name="curve_updated")
        safe_emit(self.statistics_updated, self.model.chi_squared, self.model.r_squared,
                  vm=self, signal_name="statistics_updated")
        safe_emit(self.points_changed, self.model.number_of_relevant_points(),
                  vm=self, signal_name="points_changed")

    # --------------------------
    # Read access for the view
    # --------------------------
    @property
    def coefficients(self):
        return self.model.coefficients

    @property
    def chi_squared(self) -> float:
        return self.model.chi_squared

    @property
    def r_squared(self) -> float:
        return self.model.r_squared

    @property
    def order(self) -> int:
        return self.model.order

    @property
    def fit_mode(self) -> FitMode:
        return self.model.fit_mode

    def is_curve_present(self) -> bool:
        return self.model.is_curve_present()

    def evaluate(self, x):
        return self.model.evaluate(x)

    def residuals(self):
        return self.model.residuals()

    def sample_curve(self, num: int = 200):
        return self.model.sample_curve(num)

    # --------------------------
    # Points
    # --------------------------
    def add_point(self, x: float, y: float, delta: _typing.Optional[float] = None) -> _typing.Optional[WeightedPoint]:
        """Add a point dropped on the graph; uses the configured default delta."""
        if delta is None:
            delta = self.config.new_point_delta(self.model.constants.delta)
        return safe_call(self.model.add_point, (x, y), delta, context="adding point", vm=self)

    def remove_point(self, point: WeightedPoint) -> None:
        safe_call(self.model.remove_point, point, context="removing point", vm=self)

    def move_point(self, point: WeightedPoint, x: float, y: float) -> None:
        safe_call(self.model.set_point_position, point, (x, y), context="moving point", vm=self)

    def set_point_delta(self, point: WeightedPoint, delta: float) -> None:
        safe_call(self.model.set_point_delta, point, delta, context="changing point delta", vm=self)

    def set_point_relevance(self, point: WeightedPoint, relevant: bool) -> None:
        safe_call(self.model.set_point_relevance, point, relevant,
                  context="changing point relevance", vm=self)

    # --------------------------
    # Curve settings
    # --------------------------
    def set_order(self, order: int) -> None:
        safe_call(self.model.set_order, order, context="changing curve order", vm=self)

    def set_fit_mode(self, fit_mode) -> None:
        safe_call(self.model.set_fit_mode, fit_mode, context="changing fit mode", vm=self)

    def set_manual_coefficients(self, coefficients) -> None:
        safe_call(self.model.set_manual_coefficients, coefficients,
                  context="setting coefficients", vm=self)

    def set_manual_coefficient(self, power: int, value: float) -> None:
        safe_call(self.model.set_manual_coefficient, power, value,
                  context="setting coefficient", vm=self)

    def set_snap_to_grid(self, enabled: bool) -> None:
        """Toggle snap-to-grid for subsequent drops/moves and remember it."""
        self.model.snap_to_grid = bool(enabled)
        self.config.snap_to_grid = bool(enabled)
        safe_call(self.config.save, context="saving settings", vm=self)

    def reset(self) -> None:
        self.model.reset()
        self._log_message("Reset curve fitting.")

    # --------------------------
    # Sessions
    # --------------------------
    def save_session(self, path=None) -> bool:
        ok = _save_session(self.model, path)
        if not ok:
            self._log_message("Could not save session.")
            return False
        if path:
            self.config.last_session_file = str(path)
            safe_call(self.config.save, context="saving settings", vm=self)
        self._log_message(f"Saved session{' to ' + Path(path).name if path else ''}.")
        return True

    def load_session(self, path=None) -> bool:
        try:
            ok = _load_session(self.model, path)
        except RuntimeError as exc:
            log_exception("Could not load session", exc, vm=self)
            return False
        if not ok:
            self._log_message("No session could be loaded.")
            return False
        if path:
            self.config.last_session_file = str(path)
            safe_call(self.config.save, context="saving settings", vm=self)
        self._log_message(f"Loaded session with {len(self.model.points)} point(s).")
        return True

    def restore_last_session(self) -> bool:
        """Reload the session recorded in the settings, if any."""
        last = self.config.last_session_file
        if not last or not Path(last).is_file():
            return False
        return self.load_session(last)
