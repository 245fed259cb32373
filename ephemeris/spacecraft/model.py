from __future__ import annotations

from dataclasses import dataclass, replace
import logging
import math
from typing import List, Sequence, Tuple

import numpy as np

from ephemeris.core import InterpState, StateParameter

logger = logging.getLogger(__name__)

MU_EARTH_M3_S2 = 3.986004418e14
R_EARTH_M = 6378137.0
OMEGA_EARTH_RAD_S = 7.2921159e-5
J2_EARTH = 1.08262668e-3

ECC_EPSILON = 1e-11


def _norm(v: np.ndarray) -> float:
    return float(np.linalg.norm(v))


@dataclass(frozen=True)
class Frame:
    name: str
    center: str = "Earth"
    gm_m3_s2: float = MU_EARTH_M3_S2
    equatorial_radius_m: float = R_EARTH_M
    # Zero for inertial frames; body-fixed frames spin about +Z.
    rotation_rate_rad_s: float = 0.0

    @property
    def is_inertial(self) -> bool:
        return self.rotation_rate_rad_s == 0.0

    def __str__(self) -> str:
        return self.name


EME2000 = Frame("EME2000")
IAU_EARTH = Frame("IAU Earth", rotation_rate_rad_s=OMEGA_EARTH_RAD_S)

_ORBIT_VALUE_PARAMS = {
    StateParameter.X: "x_m",
    StateParameter.Y: "y_m",
    StateParameter.Z: "z_m",
    StateParameter.VX: "vx_mps",
    StateParameter.VY: "vy_mps",
    StateParameter.VZ: "vz_mps",
}

_ORBIT_INTERP = {
    StateParameter.X: ("x_m", "vx_mps"),
    StateParameter.Y: ("y_m", "vy_mps"),
    StateParameter.Z: ("z_m", "vz_mps"),
}


@dataclass(frozen=True)
class Orbit(InterpState):
    epoch: float
    x_m: float
    y_m: float
    z_m: float
    vx_mps: float
    vy_mps: float
    vz_mps: float
    frame: Frame = EME2000

    @classmethod
    def from_vectors(
        cls,
        epoch: float,
        r_m: Sequence[float],
        v_mps: Sequence[float],
        frame: Frame = EME2000,
    ) -> "Orbit":
        return cls(
            epoch=float(epoch),
            x_m=float(r_m[0]),
            y_m=float(r_m[1]),
            z_m=float(r_m[2]),
            vx_mps=float(v_mps[0]),
            vy_mps=float(v_mps[1]),
            vz_mps=float(v_mps[2]),
            frame=frame,
        )

    @classmethod
    def params(cls) -> List[StateParameter]:
        return [StateParameter.X, StateParameter.Y, StateParameter.Z]

    def radius(self) -> np.ndarray:
        return np.array([self.x_m, self.y_m, self.z_m], dtype=float)

    def velocity(self) -> np.ndarray:
        return np.array([self.vx_mps, self.vy_mps, self.vz_mps], dtype=float)

    def value_and_deriv(self, param: StateParameter) -> Tuple[float, float]:
        fields = _ORBIT_INTERP.get(param)
        if fields is None:
            raise self._unavailable(param)
        return float(getattr(self, fields[0])), float(getattr(self, fields[1]))

    def value(self, param: StateParameter) -> float:
        field_name = _ORBIT_VALUE_PARAMS.get(param)
        if field_name is not None:
            return float(getattr(self, field_name))
        if param == StateParameter.RMAG:
            return self.rmag_m()
        if param == StateParameter.VMAG:
            return self.vmag_mps()
        if param == StateParameter.ENERGY:
            return self.energy_m2_s2()
        if param == StateParameter.SMA:
            return self.sma_m()
        if param == StateParameter.ECC:
            return self.ecc()
        if param == StateParameter.INC:
            return self.inc_deg()
        if param == StateParameter.TRUE_ANOMALY:
            return self.ta_deg()
        if param == StateParameter.PERIAPSIS:
            return self.periapsis_m()
        if param == StateParameter.APOAPSIS:
            return self.apoapsis_m()
        raise self._unavailable(param)

    def set_value_and_deriv(self, param: StateParameter, value: float, value_dt: float) -> "Orbit":
        fields = _ORBIT_INTERP.get(param)
        if fields is None:
            raise self._unavailable(param)
        return replace(self, **{fields[0]: float(value), fields[1]: float(value_dt)})

    def with_epoch(self, epoch: float) -> "Orbit":
        return replace(self, epoch=float(epoch))

    def as_vector(self) -> np.ndarray:
        return np.hstack((self.radius(), self.velocity()))

    def from_vector(self, epoch: float, vector: Sequence[float]) -> "Orbit":
        vec = np.asarray(vector, dtype=float)
        if vec.shape != (6,):
            raise ValueError(f"Orbit vector must have 6 components, got shape {vec.shape}")
        return Orbit.from_vectors(epoch, vec[:3], vec[3:], frame=self.frame)

    def rmag_m(self) -> float:
        return _norm(self.radius())

    def vmag_mps(self) -> float:
        return _norm(self.velocity())

    def energy_m2_s2(self) -> float:
        return 0.5 * self.vmag_mps() ** 2 - self.frame.gm_m3_s2 / self.rmag_m()

    def sma_m(self) -> float:
        return -self.frame.gm_m3_s2 / (2.0 * self.energy_m2_s2())

    def evec(self) -> np.ndarray:
        r = self.radius()
        v = self.velocity()
        mu = self.frame.gm_m3_s2
        return ((float(np.dot(v, v)) - mu / _norm(r)) * r - float(np.dot(r, v)) * v) / mu

    def ecc(self) -> float:
        return _norm(self.evec())

    def hvec(self) -> np.ndarray:
        return np.cross(self.radius(), self.velocity())

    def inc_deg(self) -> float:
        h = self.hvec()
        return math.degrees(math.acos(float(np.clip(h[2] / _norm(h), -1.0, 1.0))))

    def ta_deg(self) -> float:
        ecc = self.ecc()
        if ecc < ECC_EPSILON:
            logger.warning("true anomaly ill-defined for circular orbit (e = %g)", ecc)
            if ecc == 0.0:
                return 0.0
        cos_nu = float(np.dot(self.evec(), self.radius())) / (ecc * self.rmag_m())
        if abs(abs(cos_nu) - 1.0) < np.finfo(float).eps:
            # acos is ill-conditioned at +-1: snap onto the apsides.
            return 0.0 if cos_nu > 0.0 else 180.0
        ta = math.acos(max(-1.0, min(1.0, cos_nu)))
        if float(np.dot(self.radius(), self.velocity())) < 0.0:
            return math.degrees(2.0 * math.pi - ta)
        return math.degrees(ta)

    def periapsis_m(self) -> float:
        return self.sma_m() * (1.0 - self.ecc())

    def apoapsis_m(self) -> float:
        return self.sma_m() * (1.0 + self.ecc())

    def rss(self, other: "Orbit") -> Tuple[float, float]:
        """Root sum square of the position (m) and velocity (m/s) differences."""
        return (
            _norm(self.radius() - other.radius()),
            _norm(self.velocity() - other.velocity()),
        )

    def __str__(self) -> str:
        return (
            f"[{self.frame}] {self.epoch:.6f} s\t"
            f"position = [{self.x_m:.6f}, {self.y_m:.6f}, {self.z_m:.6f}] m\t"
            f"velocity = [{self.vx_mps:.6f}, {self.vy_mps:.6f}, {self.vz_mps:.6f}] m/s"
        )


@dataclass(frozen=True)
class Spacecraft(InterpState):
    orbit: Orbit
    dry_mass_kg: float = 0.0
    fuel_mass_kg: float = 0.0
    cr: float = 1.8
    cd: float = 2.2

    @property
    def epoch(self) -> float:
        return self.orbit.epoch

    @property
    def frame(self) -> Frame:
        return self.orbit.frame

    @property
    def total_mass_kg(self) -> float:
        return self.dry_mass_kg + self.fuel_mass_kg

    @classmethod
    def params(cls) -> List[StateParameter]:
        return [StateParameter.X, StateParameter.Y, StateParameter.Z, StateParameter.FUEL_MASS]

    def value_and_deriv(self, param: StateParameter) -> Tuple[float, float]:
        if param == StateParameter.FUEL_MASS:
            return float(self.fuel_mass_kg), 0.0
        return self.orbit.value_and_deriv(param)

    def value(self, param: StateParameter) -> float:
        if param == StateParameter.FUEL_MASS:
            return float(self.fuel_mass_kg)
        if param == StateParameter.DRY_MASS:
            return float(self.dry_mass_kg)
        if param == StateParameter.CR:
            return float(self.cr)
        if param == StateParameter.CD:
            return float(self.cd)
        return self.orbit.value(param)

    def set_value_and_deriv(self, param: StateParameter, value: float, value_dt: float) -> "Spacecraft":
        if param in _ORBIT_INTERP:
            return self.with_orbit(self.orbit.set_value_and_deriv(param, value, value_dt))
        if param == StateParameter.FUEL_MASS:
            return replace(self, fuel_mass_kg=float(value))
        if param == StateParameter.CR:
            return replace(self, cr=float(value))
        if param == StateParameter.CD:
            return replace(self, cd=float(value))
        raise self._unavailable(param)

    def with_orbit(self, orbit: Orbit) -> "Spacecraft":
        return replace(self, orbit=orbit)

    def with_epoch(self, epoch: float) -> "Spacecraft":
        return self.with_orbit(self.orbit.with_epoch(epoch))

    def as_vector(self) -> np.ndarray:
        return np.hstack((self.orbit.as_vector(), [float(self.fuel_mass_kg)]))

    def from_vector(self, epoch: float, vector: Sequence[float]) -> "Spacecraft":
        vec = np.asarray(vector, dtype=float)
        if vec.shape != (7,):
            raise ValueError(f"Spacecraft vector must have 7 components, got shape {vec.shape}")
        return replace(self, orbit=self.orbit.from_vector(epoch, vec[:6]), fuel_mass_kg=float(vec[6]))

    def rss(self, other: "Spacecraft") -> Tuple[float, float, float]:
        pos, vel = self.orbit.rss(other.orbit)
        return pos, vel, abs(self.fuel_mass_kg - other.fuel_mass_kg)

    def __str__(self) -> str:
        return f"{self.orbit}\t{self.total_mass_kg:.6f} kg"
