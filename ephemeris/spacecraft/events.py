from __future__ import annotations

from ephemeris.core import EventEvaluator, InterpState, MILLISECOND_S, StateParameter


def _wrap_deg(angle_deg: float) -> float:
    """Wrap onto (-180, 180]."""
    wrapped = (angle_deg + 180.0) % 360.0 - 180.0
    return 180.0 if wrapped == -180.0 else wrapped


class OrbitalEvent(EventEvaluator):
    """Zero when ``parameter`` of the state equals ``desired_value``."""

    def __init__(
        self,
        parameter: StateParameter,
        desired_value: float,
        epoch_precision_s: float = MILLISECOND_S,
        value_precision: float = 1e-3,
    ) -> None:
        self.parameter = parameter
        self.desired_value = float(desired_value)
        self._epoch_precision_s = float(epoch_precision_s)
        self._value_precision = float(value_precision)

    @classmethod
    def periapsis(cls) -> "OrbitalEvent":
        return cls(StateParameter.TRUE_ANOMALY, 0.0)

    @classmethod
    def apoapsis(cls) -> "OrbitalEvent":
        return cls(StateParameter.TRUE_ANOMALY, 180.0)

    def eval(self, state: InterpState) -> float:
        delta = state.value(self.parameter) - self.desired_value
        if self.parameter.is_angle:
            return _wrap_deg(delta)
        return delta

    @property
    def epoch_precision(self) -> float:
        return self._epoch_precision_s

    @property
    def value_precision(self) -> float:
        return self._value_precision

    def __str__(self) -> str:
        return f"{self.parameter} = {self.desired_value:g}"
