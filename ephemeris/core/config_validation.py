from __future__ import annotations

from typing import Any, Dict, List

from .models import PARALLEL_BACKENDS


class ConfigValidationError(ValueError):
    pass


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _validate_trajectory(cfg: Dict[str, Any], errors: List[str]) -> None:
    known_keys = {
        "interpolation_samples",
        "max_iter",
        "find_all_divisions",
        "fallback_window_s",
        "minmax_step_s",
        "n_jobs",
        "parallel_backend",
        "gap_tolerance_s",
        "max_gap_s",
    }
    for key in sorted(set(cfg.keys()) - known_keys):
        errors.append(f"Unknown key: trajectory.{key}")

    samples = cfg.get("interpolation_samples", 6)
    if not _is_int(samples) or samples < 2:
        errors.append("trajectory.interpolation_samples must be an integer >= 2")

    for key in ["max_iter", "find_all_divisions"]:
        if key in cfg and (not _is_int(cfg[key]) or cfg[key] <= 0):
            errors.append(f"trajectory.{key} must be a positive integer")

    for key in ["fallback_window_s", "minmax_step_s"]:
        if key in cfg and (not _is_number(cfg[key]) or float(cfg[key]) <= 0.0):
            errors.append(f"trajectory.{key} must be > 0")

    if "gap_tolerance_s" in cfg and (not _is_number(cfg["gap_tolerance_s"]) or float(cfg["gap_tolerance_s"]) < 0.0):
        errors.append("trajectory.gap_tolerance_s must be >= 0")

    max_gap = cfg.get("max_gap_s")
    if max_gap is not None and (not _is_number(max_gap) or float(max_gap) <= 0.0):
        errors.append("trajectory.max_gap_s must be > 0 or null")

    n_jobs = cfg.get("n_jobs", 2)
    # joblib accepts negative counts relative to the CPU count, never zero.
    if not _is_int(n_jobs) or n_jobs == 0:
        errors.append("trajectory.n_jobs must be a non-zero integer")

    backend = str(cfg.get("parallel_backend", "threading")).lower()
    if backend not in PARALLEL_BACKENDS:
        errors.append(f"trajectory.parallel_backend must be one of {', '.join(PARALLEL_BACKENDS)}")


def validate_config(cfg: Dict[str, Any]) -> None:
    errors: List[str] = []
    if not isinstance(cfg, dict):
        raise ConfigValidationError("Config root must be a mapping")

    trajectory_cfg = cfg.get("trajectory", {})
    if trajectory_cfg is None:
        trajectory_cfg = {}
    if not isinstance(trajectory_cfg, dict):
        errors.append("trajectory must be a mapping")
    else:
        _validate_trajectory(trajectory_cfg, errors)

    if errors:
        raise ConfigValidationError("\n".join(errors))
