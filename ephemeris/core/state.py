from __future__ import annotations

from abc import ABC, abstractmethod
from enum import Enum
from typing import List, Sequence, Tuple, TypeVar

import numpy as np

from .errors import ParameterUnavailable


class StateParameter(Enum):
    X = "x"
    Y = "y"
    Z = "z"
    VX = "vx"
    VY = "vy"
    VZ = "vz"
    RMAG = "rmag"
    VMAG = "vmag"
    ENERGY = "energy"
    SMA = "sma"
    ECC = "ecc"
    INC = "inc"
    TRUE_ANOMALY = "true_anomaly"
    PERIAPSIS = "periapsis"
    APOAPSIS = "apoapsis"
    FUEL_MASS = "fuel_mass"
    DRY_MASS = "dry_mass"
    CR = "cr"
    CD = "cd"

    @property
    def is_angle(self) -> bool:
        return self in (StateParameter.INC, StateParameter.TRUE_ANOMALY)

    def __str__(self) -> str:
        return self.value


S = TypeVar("S", bound="InterpState")


class InterpState(ABC):
    """
    Immutable, time-tagged sample that a Trajectory can store and interpolate.

    Concrete types expose a float ``epoch`` (seconds), as a dataclass field or
    a read-only property, and declare, through ``params()``, which parameters
    are rebuilt by Hermite interpolation. Every other attribute of an
    interpolated state is carried over from the anchor sample nearest to the
    query.
    """

    epoch: float

    @classmethod
    @abstractmethod
    def params(cls) -> List[StateParameter]:
        raise NotImplementedError

    @abstractmethod
    def value_and_deriv(self, param: StateParameter) -> Tuple[float, float]:
        raise NotImplementedError

    def value(self, param: StateParameter) -> float:
        return self.value_and_deriv(param)[0]

    def deriv(self, param: StateParameter) -> float:
        return self.value_and_deriv(param)[1]

    @abstractmethod
    def set_value_and_deriv(self: S, param: StateParameter, value: float, value_dt: float) -> S:
        raise NotImplementedError

    @abstractmethod
    def with_epoch(self: S, epoch: float) -> S:
        raise NotImplementedError

    @abstractmethod
    def as_vector(self) -> np.ndarray:
        raise NotImplementedError

    @abstractmethod
    def from_vector(self: S, epoch: float, vector: Sequence[float]) -> S:
        raise NotImplementedError

    def interpolate(self: S, epoch: float, window: Sequence[S]) -> S:
        from .interpolation import hermite_interpolate

        return hermite_interpolate(self, epoch, window)

    def _unavailable(self, param: StateParameter) -> ParameterUnavailable:
        return ParameterUnavailable(param, type(self))
