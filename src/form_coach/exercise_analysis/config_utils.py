import json
import os
from dataclasses import dataclass, fields
from typing import Any, Dict, Optional


def _load_json(config_path: str) -> Dict[str, Any]:
    with open(config_path, "r", encoding="utf-8") as f:
        return json.load(f)


def load_pushup_config(config_path: Optional[str] = None) -> Dict[str, Any]:
    """Load pushup config from JSON file."""
    if config_path is None:
        config_path = os.path.join(os.path.dirname(__file__), "pushup_config.json")
    return _load_json(config_path)


def load_squat_config(config_path: Optional[str] = None) -> Dict[str, Any]:
    """Load squat config from JSON file."""
    if config_path is None:
        config_path = os.path.join(os.path.dirname(__file__), "squat_config.json")
    return _load_json(config_path)


def _require(config: Dict[str, Any], section: str, key: str) -> float:
    try:
        return float(config[section][key])
    except KeyError as e:
        raise ValueError(f"Missing config value: {section}.{key}") from e


@dataclass(frozen=True)
class SquatThresholds:
    """Angle (degrees) and offset (normalized units) limits for squat analysis."""
    confidence_threshold: float
    standing_knee_angle: float      # phase: above this the user is standing
    motion_knee_angle: float        # phase: below this the user is moving/at depth
    min_knee_angle: float
    max_knee_angle: float
    min_hip_angle: float
    max_hip_angle: float
    max_back_lean: float
    max_knee_forward: float
    max_knee_inward: float
    standing_min_knee_angle: float
    standing_max_back_lean: float

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> "SquatThresholds":
        values = {"confidence_threshold": float(config.get("confidence_threshold", 0.5))}
        for name in ("standing_knee_angle", "motion_knee_angle"):
            values[name] = _require(config, "phase_thresholds", name)
        for field in fields(cls):
            if field.name not in values:
                values[field.name] = _require(config, "form_rules", field.name)
        return cls(**values)


@dataclass(frozen=True)
class PushupThresholds:
    """Angle limits (degrees) for push-up analysis."""
    confidence_threshold: float
    top_elbow_angle: float          # phase: above this the arms are extended
    motion_elbow_angle: float       # phase: below this the user is moving/at depth
    min_elbow_angle: float
    max_elbow_angle: float
    min_top_elbow_angle: float
    max_back_sag: float
    max_back_pike: float
    max_neck_angle: float

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> "PushupThresholds":
        values = {"confidence_threshold": float(config.get("confidence_threshold", 0.5))}
        for name in ("top_elbow_angle", "motion_elbow_angle"):
            values[name] = _require(config, "phase_thresholds", name)
        for field in fields(cls):
            if field.name not in values:
                values[field.name] = _require(config, "form_rules", field.name)
        return cls(**values)
