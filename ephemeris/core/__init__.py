from .config_validation import ConfigValidationError, validate_config
from .errors import (
    CreationError,
    EmptyTrajectory,
    EventEvaluationError,
    EventNotFound,
    MaxIterReached,
    NoInterpolationData,
    ParameterUnavailable,
    TrajectoryError,
)
from .events import EventEvaluator, FunctionEvent, find_all, find_bracketed, find_minmax
from .interpolation import hermite_interpolate
from .io import load_config, load_settings, settings_from_config
from .models import (
    BRENT_MAX_ITER,
    DEFAULT_SETTINGS,
    FIND_ALL_DIVISIONS,
    INTERPOLATION_SAMPLES,
    MILLISECOND_S,
    TrajectorySettings,
)
from .state import InterpState, StateParameter
from .trajectory import Trajectory, TrajectoryIterator

__all__ = [
    "BRENT_MAX_ITER",
    "ConfigValidationError",
    "CreationError",
    "DEFAULT_SETTINGS",
    "EmptyTrajectory",
    "EventEvaluationError",
    "EventEvaluator",
    "EventNotFound",
    "FIND_ALL_DIVISIONS",
    "FunctionEvent",
    "INTERPOLATION_SAMPLES",
    "InterpState",
    "MILLISECOND_S",
    "MaxIterReached",
    "NoInterpolationData",
    "ParameterUnavailable",
    "StateParameter",
    "Trajectory",
    "TrajectoryError",
    "TrajectoryIterator",
    "TrajectorySettings",
    "find_all",
    "find_bracketed",
    "find_minmax",
    "hermite_interpolate",
    "load_config",
    "load_settings",
    "settings_from_config",
    "validate_config",
]
