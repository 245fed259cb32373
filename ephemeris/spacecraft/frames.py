from __future__ import annotations

from typing import Union

import numpy as np

from .model import Frame, Orbit, Spacecraft
from .propagation import _rotation_r3


class FrameService:
    """
    Converts states between an inertial frame and body-fixed frames spinning
    about +Z, all sharing one center.

    A body-fixed frame is aligned with the inertial axes at
    ``reference_epoch_s`` rotated by ``theta0_rad``.
    """

    def __init__(self, theta0_rad: float = 0.0, reference_epoch_s: float = 0.0) -> None:
        self.theta0_rad = float(theta0_rad)
        self.reference_epoch_s = float(reference_epoch_s)

    def rotation_angle_rad(self, frame: Frame, epoch: float) -> float:
        if frame.is_inertial:
            return 0.0
        return self.theta0_rad + frame.rotation_rate_rad_s * (float(epoch) - self.reference_epoch_s)

    def _to_inertial(self, orbit: Orbit) -> tuple[np.ndarray, np.ndarray]:
        r = orbit.radius()
        v = orbit.velocity()
        if orbit.frame.is_inertial:
            return r, v
        rot = _rotation_r3(self.rotation_angle_rad(orbit.frame, orbit.epoch))
        omega = np.array([0.0, 0.0, orbit.frame.rotation_rate_rad_s], dtype=float)
        return rot @ r, rot @ (v + np.cross(omega, r))

    def _from_inertial(self, r: np.ndarray, v: np.ndarray, epoch: float, frame: Frame) -> tuple[np.ndarray, np.ndarray]:
        if frame.is_inertial:
            return r, v
        rot_t = _rotation_r3(self.rotation_angle_rad(frame, epoch)).T
        omega = np.array([0.0, 0.0, frame.rotation_rate_rad_s], dtype=float)
        r_f = rot_t @ r
        return r_f, rot_t @ v - np.cross(omega, r_f)

    def convert_orbit(self, orbit: Orbit, target: Frame) -> Orbit:
        if orbit.frame == target:
            return orbit
        if orbit.frame.center != target.center:
            raise ValueError(f"cannot convert from {orbit.frame} to {target}: centers differ")
        r_i, v_i = self._to_inertial(orbit)
        r_t, v_t = self._from_inertial(r_i, v_i, orbit.epoch, target)
        return Orbit.from_vectors(orbit.epoch, r_t, v_t, frame=target)

    def convert(self, state: Union[Orbit, Spacecraft], target: Frame) -> Union[Orbit, Spacecraft]:
        if isinstance(state, Spacecraft):
            return state.with_orbit(self.convert_orbit(state.orbit, target))
        if isinstance(state, Orbit):
            return self.convert_orbit(state, target)
        raise TypeError(f"cannot convert {type(state).__name__} between frames")
