from __future__ import annotations

from pathlib import Path
from typing import Any, Dict

import yaml

from .config_validation import validate_config
from .models import TrajectorySettings


def load_config(config_path: Path) -> Dict[str, Any]:
    with Path(config_path).open("r", encoding="utf-8") as f:
        cfg = yaml.safe_load(f)
    if cfg is None:
        cfg = {}
    if not isinstance(cfg, dict):
        raise ValueError(f"Config at {config_path} must parse to a mapping")
    return cfg


def settings_from_config(cfg: Dict[str, Any]) -> TrajectorySettings:
    validate_config(cfg)
    return TrajectorySettings.from_mapping(cfg.get("trajectory") or {})


def load_settings(config_path: Path) -> TrajectorySettings:
    return settings_from_config(load_config(config_path))
