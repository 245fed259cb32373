from __future__ import annotations

from typing import Any


class TrajectoryError(Exception):
    pass


class EmptyTrajectory(TrajectoryError):
    def __init__(self, operation: str) -> None:
        super().__init__(f"cannot {operation} on an empty trajectory")
        self.operation = operation


class NoInterpolationData(TrajectoryError):
    def __init__(self, epoch: float, reason: str = "") -> None:
        msg = f"no interpolation data at {float(epoch):.6f} s"
        if reason:
            msg = f"{msg}: {reason}"
        super().__init__(msg)
        self.epoch = float(epoch)


class EventNotFound(TrajectoryError):
    def __init__(self, start: float, end: float, event: Any) -> None:
        super().__init__(f"{event} not found in [{float(start):.6f}, {float(end):.6f}] s")
        self.start = float(start)
        self.end = float(end)
        self.event = str(event)


class MaxIterReached(TrajectoryError):
    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class CreationError(TrajectoryError):
    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ParameterUnavailable(TrajectoryError):
    def __init__(self, param: Any, state_type: type) -> None:
        super().__init__(f"{param} is not available for {state_type.__name__}")
        self.param = param
        self.state_type = state_type


class EventEvaluationError(TrajectoryError):
    """Raised when an event function returns a non-finite value."""

    def __init__(self, epoch: float, event: Any, value: float) -> None:
        super().__init__(f"{event} evaluated to {value} at {float(epoch):.6f} s")
        self.epoch = float(epoch)
        self.event = str(event)
        self.value = value


# Failures a best-effort search may discard and retry around.
RECOVERABLE_ERRORS = (EventNotFound, MaxIterReached, NoInterpolationData)
