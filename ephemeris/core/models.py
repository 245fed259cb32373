from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional

MILLISECOND_S = 1e-3
INTERPOLATION_SAMPLES = 6
BRENT_MAX_ITER = 50
FIND_ALL_DIVISIONS = 100

PARALLEL_BACKENDS = ("threading", "loky", "sequential")


@dataclass(frozen=True)
class TrajectorySettings:
    interpolation_samples: int = INTERPOLATION_SAMPLES
    max_iter: int = BRENT_MAX_ITER
    find_all_divisions: int = FIND_ALL_DIVISIONS
    # Half-width of the window searched on each side of an extremum.
    fallback_window_s: float = MILLISECOND_S
    minmax_step_s: float = 1.0
    n_jobs: int = 2
    parallel_backend: str = "threading"
    # Merge gaps shorter than this are not reported.
    gap_tolerance_s: float = 0.0
    # None serves degraded interpolation across gaps of any size.
    max_gap_s: Optional[float] = None

    @classmethod
    def from_mapping(cls, cfg: Mapping[str, Any]) -> "TrajectorySettings":
        max_gap = cfg.get("max_gap_s")
        return cls(
            interpolation_samples=int(cfg.get("interpolation_samples", INTERPOLATION_SAMPLES)),
            max_iter=int(cfg.get("max_iter", BRENT_MAX_ITER)),
            find_all_divisions=int(cfg.get("find_all_divisions", FIND_ALL_DIVISIONS)),
            fallback_window_s=float(cfg.get("fallback_window_s", MILLISECOND_S)),
            minmax_step_s=float(cfg.get("minmax_step_s", 1.0)),
            n_jobs=int(cfg.get("n_jobs", 2)),
            parallel_backend=str(cfg.get("parallel_backend", "threading")).lower(),
            gap_tolerance_s=float(cfg.get("gap_tolerance_s", 0.0)),
            max_gap_s=None if max_gap is None else float(max_gap),
        )


DEFAULT_SETTINGS = TrajectorySettings()
