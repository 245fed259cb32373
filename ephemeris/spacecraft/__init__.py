from .events import OrbitalEvent
from .frames import FrameService
from .model import (
    EME2000,
    IAU_EARTH,
    J2_EARTH,
    MU_EARTH_M3_S2,
    OMEGA_EARTH_RAD_S,
    R_EARTH_M,
    Frame,
    Orbit,
    Spacecraft,
)
from .propagation import OrbitConfig, elements_to_orbit, propagate, propagate_spacecraft

__all__ = [
    "EME2000",
    "IAU_EARTH",
    "J2_EARTH",
    "MU_EARTH_M3_S2",
    "OMEGA_EARTH_RAD_S",
    "R_EARTH_M",
    "Frame",
    "FrameService",
    "Orbit",
    "OrbitConfig",
    "OrbitalEvent",
    "Spacecraft",
    "elements_to_orbit",
    "propagate",
    "propagate_spacecraft",
]
