from __future__ import annotations

from dataclasses import dataclass
import math
from typing import Any, Dict, Optional

import numpy as np

from ephemeris.core import Trajectory, TrajectorySettings

from .model import EME2000, J2_EARTH, Frame, Orbit, R_EARTH_M, Spacecraft, _norm


@dataclass
class OrbitConfig:
    sma_m: float
    eccentricity: float = 0.0
    inclination_deg: float = 0.0
    raan_deg: float = 0.0
    arg_perigee_deg: float = 0.0
    mean_anomaly0_deg: float = 0.0
    epoch_s: float = 0.0
    horizon_s: float = 3600.0
    step_s: float = 10.0
    j2_enabled: bool = False
    frame: Frame = EME2000

    @property
    def mean_motion_rad_s(self) -> float:
        return math.sqrt(self.frame.gm_m3_s2 / (self.sma_m ** 3))

    @property
    def orbit_period_s(self) -> float:
        return 2.0 * math.pi / self.mean_motion_rad_s

    @classmethod
    def from_mapping(cls, cfg: Dict[str, Any]) -> "OrbitConfig":
        if "sma_m" in cfg:
            sma = float(cfg["sma_m"])
        else:
            sma = R_EARTH_M + float(cfg.get("altitude_m", 550000.0))
        return cls(
            sma_m=sma,
            eccentricity=float(cfg.get("eccentricity", 0.0)),
            inclination_deg=float(cfg.get("inclination_deg", 0.0)),
            raan_deg=float(cfg.get("raan_deg", 0.0)),
            arg_perigee_deg=float(cfg.get("arg_perigee_deg", 0.0)),
            mean_anomaly0_deg=float(cfg.get("mean_anomaly0_deg", 0.0)),
            epoch_s=float(cfg.get("epoch_s", 0.0)),
            horizon_s=float(cfg.get("horizon_s", 3600.0)),
            step_s=float(cfg.get("step_s", 10.0)),
            j2_enabled=bool(cfg.get("j2_enabled", False)),
        )


def _solve_kepler_eccentric_anomaly(mean_anomaly_rad: float, e: float) -> float:
    m = (mean_anomaly_rad + math.pi) % (2.0 * math.pi) - math.pi
    if e < 1e-10:
        return m
    E = m
    for _ in range(10):
        f = E - e * math.sin(E) - m
        fp = 1.0 - e * math.cos(E)
        dE = -f / max(1e-12, fp)
        E += dE
        if abs(dE) < 1e-12:
            break
    return E


def _rotation_r3(angle_rad: float) -> np.ndarray:
    c = math.cos(angle_rad)
    s = math.sin(angle_rad)
    return np.array([[c, -s, 0.0], [s, c, 0.0], [0.0, 0.0, 1.0]], dtype=float)


def _rotation_r1(angle_rad: float) -> np.ndarray:
    c = math.cos(angle_rad)
    s = math.sin(angle_rad)
    return np.array([[1.0, 0.0, 0.0], [0.0, c, -s], [0.0, s, c]], dtype=float)


def elements_to_orbit(config: OrbitConfig) -> Orbit:
    a = float(config.sma_m)
    e = float(config.eccentricity)
    if not 0.0 <= e < 1.0:
        raise ValueError(f"eccentricity must be in [0, 1), got {e}")
    mu = config.frame.gm_m3_s2

    E = _solve_kepler_eccentric_anomaly(math.radians(config.mean_anomaly0_deg), e)
    sqrt_one_minus_e2 = math.sqrt(max(1e-12, 1.0 - e * e))
    true_anom = math.atan2(sqrt_one_minus_e2 * math.sin(E), math.cos(E) - e)
    p = a * (1.0 - e * e)
    r_mag = p / (1.0 + e * math.cos(true_anom))

    r_pqw = np.array([r_mag * math.cos(true_anom), r_mag * math.sin(true_anom), 0.0], dtype=float)
    v_pqw = np.array(
        [
            -math.sqrt(mu / p) * math.sin(true_anom),
            math.sqrt(mu / p) * (e + math.cos(true_anom)),
            0.0,
        ],
        dtype=float,
    )

    rot = (
        _rotation_r3(math.radians(config.raan_deg))
        @ _rotation_r1(math.radians(config.inclination_deg))
        @ _rotation_r3(math.radians(config.arg_perigee_deg))
    )
    return Orbit.from_vectors(config.epoch_s, rot @ r_pqw, rot @ v_pqw, frame=config.frame)


def _orbital_acceleration(r_m: np.ndarray, config: OrbitConfig) -> np.ndarray:
    mu = config.frame.gm_m3_s2
    r_norm = max(1.0, _norm(r_m))
    a = (-mu / (r_norm ** 3)) * r_m

    if config.j2_enabled:
        x, y, z = float(r_m[0]), float(r_m[1]), float(r_m[2])
        r2 = x * x + y * y + z * z
        r5 = r2 ** 2.5
        z2 = z * z
        f = 1.5 * J2_EARTH * mu * (config.frame.equatorial_radius_m ** 2) / r5
        a = a + np.array(
            [
                f * x * (5.0 * z2 / r2 - 1.0),
                f * y * (5.0 * z2 / r2 - 1.0),
                f * z * (5.0 * z2 / r2 - 3.0),
            ],
            dtype=float,
        )
    return a


def _rk4_orbit_step(y0: np.ndarray, dt_s: float, config: OrbitConfig) -> np.ndarray:
    def f(state: np.ndarray) -> np.ndarray:
        return np.hstack((state[3:], _orbital_acceleration(state[:3], config)))

    k1 = f(y0)
    k2 = f(y0 + 0.5 * dt_s * k1)
    k3 = f(y0 + 0.5 * dt_s * k2)
    k4 = f(y0 + dt_s * k3)
    return y0 + (dt_s / 6.0) * (k1 + 2.0 * k2 + 2.0 * k3 + k4)


def propagate(
    config: OrbitConfig,
    name: Optional[str] = None,
    settings: Optional[TrajectorySettings] = None,
) -> Trajectory[Orbit]:
    """Fixed-step RK4 two-body (optionally J2) ephemeris, one sample per step."""
    step_s = float(config.step_s)
    if step_s <= 0.0:
        raise ValueError(f"step_s must be > 0, got {step_s}")
    n_steps = int(math.ceil(max(0.0, float(config.horizon_s)) / step_s))

    orbit = elements_to_orbit(config)
    traj: Trajectory[Orbit] = Trajectory(name=name, settings=settings)
    traj.append(orbit)
    y = orbit.as_vector()
    for i in range(1, n_steps + 1):
        y = _rk4_orbit_step(y, step_s, config)
        traj.append(orbit.from_vector(config.epoch_s + i * step_s, y))
    traj.finalize()
    return traj


def propagate_spacecraft(
    config: OrbitConfig,
    dry_mass_kg: float,
    fuel_mass_kg: float,
    fuel_flow_kg_s: float = 0.0,
    name: Optional[str] = None,
    settings: Optional[TrajectorySettings] = None,
) -> Trajectory[Spacecraft]:
    """Wrap a coasting ephemeris with a constant fuel depletion rate."""
    orbits = propagate(config, settings=settings)
    traj: Trajectory[Spacecraft] = Trajectory(name=name, settings=settings)
    for orbit in orbits:
        elapsed = orbit.epoch - config.epoch_s
        fuel = max(0.0, float(fuel_mass_kg) - float(fuel_flow_kg_s) * elapsed)
        traj.append(Spacecraft(orbit=orbit, dry_mass_kg=float(dry_mass_kg), fuel_mass_kg=fuel))
    traj.finalize()
    return traj
