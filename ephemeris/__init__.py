from .core import (
    CreationError,
    EmptyTrajectory,
    EventEvaluationError,
    EventEvaluator,
    EventNotFound,
    FunctionEvent,
    InterpState,
    MaxIterReached,
    NoInterpolationData,
    StateParameter,
    Trajectory,
    TrajectoryError,
    TrajectorySettings,
)

__all__ = [
    "CreationError",
    "EmptyTrajectory",
    "EventEvaluationError",
    "EventEvaluator",
    "EventNotFound",
    "FunctionEvent",
    "InterpState",
    "MaxIterReached",
    "NoInterpolationData",
    "StateParameter",
    "Trajectory",
    "TrajectoryError",
    "TrajectorySettings",
]
