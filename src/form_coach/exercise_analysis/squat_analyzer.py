from enum import Enum
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

from ..log_utils import get_logger
from .base_analyzer import BaseExerciseAnalyzer, EvaluationResult, PhaseState, register_exercise
from .config_utils import SquatThresholds, load_squat_config
from .pose_utils import Point3D, calculate_angle_2d, calculate_angle_3d, get_midpoint

_SQUAT_CONFIG = load_squat_config()
DEFAULT_SQUAT_THRESHOLDS = SquatThresholds.from_config(_SQUAT_CONFIG)

logger = get_logger("SquatAnalyzer")


# --- Phase Enum ---
class SquatPhase(Enum):
    STANDING = "standing"
    DESCENDING = "descending"
    BOTTOM = "bottom"
    ASCENDING = "ascending"


# --- Main Analyzer ---
@register_exercise("squat")
class SquatAnalyzer(BaseExerciseAnalyzer):
    """Squat phase tracking from knee angle and hip height, with per-phase form rules."""

    phase_enum = SquatPhase

    def __init__(self, thresholds: Optional[SquatThresholds] = None, config: Optional[Dict[str, Any]] = None):
        config = _SQUAT_CONFIG if config is None else config
        if thresholds is None:
            thresholds = DEFAULT_SQUAT_THRESHOLDS if config is _SQUAT_CONFIG else SquatThresholds.from_config(config)
        super().__init__(thresholds, config)

    @classmethod
    def from_config_file(cls, config_path: str) -> "SquatAnalyzer":
        return cls(config=load_squat_config(config_path))

    @property
    def rest_phase(self) -> SquatPhase:
        return SquatPhase.STANDING

    def get_exercise_name(self) -> str:
        return "squat"

    def get_phase_landmarks(self) -> List[str]:
        return [
            "left_hip", "right_hip",
            "left_knee", "right_knee",
            "left_ankle", "right_ankle"
        ]

    def get_required_landmarks(self) -> List[str]:
        return [
            "left_shoulder", "right_shoulder",
            "left_hip", "right_hip",
            "left_knee", "right_knee",
            "left_ankle", "right_ankle"
        ]

    def classify_phase(self, landmarks: Optional[Sequence[Any]], state: Optional[PhaseState] = None) -> PhaseState:
        """
        Phase from the average knee angle, direction from the average hip height.

        Hip y grows as the body goes down in image coordinates. The frame in
        which the hips first rise again after a descent is reported as BOTTOM.
        """
        state = state or self.initial_state()
        prev_phase = self.coerce_phase(state.phase)
        prev_hip_height = state.metric

        named, visible = self._lookup_visible(landmarks, self.get_phase_landmarks())
        if not visible:
            logger.debug("Squat phase: required landmarks not visible, keeping %s", prev_phase.value)
            return PhaseState(prev_phase, prev_hip_height)

        hip_height = (named["left_hip"].y + named["right_hip"].y) / 2
        left_knee_angle = calculate_angle_3d(named["left_hip"], named["left_knee"], named["left_ankle"])
        right_knee_angle = calculate_angle_3d(named["right_hip"], named["right_knee"], named["right_ankle"])
        avg_knee_angle = (left_knee_angle + right_knee_angle) / 2

        t = self.thresholds
        going_down = hip_height > (prev_hip_height if prev_hip_height is not None else 0.0)
        going_up = hip_height < (prev_hip_height if prev_hip_height is not None else 1.0)

        phase = prev_phase
        if avg_knee_angle > t.standing_knee_angle:
            phase = SquatPhase.STANDING
        elif avg_knee_angle < t.motion_knee_angle and going_down:
            phase = SquatPhase.DESCENDING
        elif avg_knee_angle < t.motion_knee_angle and going_up:
            phase = SquatPhase.ASCENDING

        # Turnaround: hips start rising right after a descent
        if (prev_phase == SquatPhase.DESCENDING and avg_knee_angle < t.motion_knee_angle
                and prev_hip_height is not None and hip_height < prev_hip_height):
            phase = SquatPhase.BOTTOM

        if phase != prev_phase:
            logger.debug("Squat phase %s -> %s (knee %.1f, hip height %.3f)",
                         prev_phase.value, phase.value, avg_knee_angle, hip_height)
        return PhaseState(phase, hip_height)

    def evaluate_form(self, landmarks: Optional[Sequence[Any]], phase: Union[SquatPhase, str]) -> EvaluationResult:
        phase = self.coerce_phase(phase)
        named, visible = self._lookup_visible(landmarks, self.get_required_landmarks())
        if not visible:
            logger.debug("Squat form: frame skipped, landmarks missing or not visible")
            return self._unmeasurable_result(named)

        left_knee, right_knee = named["left_knee"], named["right_knee"]
        left_ankle, right_ankle = named["left_ankle"], named["right_ankle"]

        left_knee_angle = calculate_angle_3d(named["left_hip"], left_knee, left_ankle)
        right_knee_angle = calculate_angle_3d(named["right_hip"], right_knee, right_ankle)
        left_hip_angle = calculate_angle_3d(named["left_shoulder"], named["left_hip"], left_knee)
        right_hip_angle = calculate_angle_3d(named["right_shoulder"], named["right_hip"], right_knee)
        back_angle = self._back_lean(named)

        t = self.thresholds
        knees_misaligned = (abs(left_knee.x - left_ankle.x) > t.max_knee_inward
                            or abs(right_knee.x - right_ankle.x) > t.max_knee_inward)

        issues = []
        if phase == SquatPhase.BOTTOM:
            if left_knee_angle > t.max_knee_angle or right_knee_angle > t.max_knee_angle:
                issues.append("Knees not bent enough")
            if left_knee_angle < t.min_knee_angle or right_knee_angle < t.min_knee_angle:
                issues.append("Knees bent too much")
            if left_hip_angle > t.max_hip_angle or right_hip_angle > t.max_hip_angle:
                issues.append("Hips not bent enough")
            if left_hip_angle < t.min_hip_angle or right_hip_angle < t.min_hip_angle:
                issues.append("Hips bent too much")
            if back_angle > t.max_back_lean:
                issues.append("Back leaning too far forward")
            if (left_knee.z < left_ankle.z - t.max_knee_forward
                    or right_knee.z < right_ankle.z - t.max_knee_forward):
                issues.append("Knees too far forward of toes")
            if knees_misaligned:
                issues.append("Knees not aligned with toes")
        elif phase in (SquatPhase.DESCENDING, SquatPhase.ASCENDING):
            if back_angle > t.max_back_lean:
                issues.append("Back leaning too far forward")
            if knees_misaligned:
                issues.append("Knees not aligned with toes")
        elif phase == SquatPhase.STANDING:
            if left_knee_angle < t.standing_min_knee_angle or right_knee_angle < t.standing_min_knee_angle:
                issues.append("Not fully standing between reps")
            if back_angle > t.standing_max_back_lean:
                issues.append("Not standing upright between reps")

        angles = {
            "left_knee": left_knee_angle,
            "right_knee": right_knee_angle,
            "left_hip": left_hip_angle,
            "right_hip": right_hip_angle,
            "back": back_angle,
        }
        nan_angles = self._nan_angles(angles)
        if nan_angles:
            logger.warning("Squat form: degenerate geometry, angles not measurable: %s", ", ".join(nan_angles))
        return EvaluationResult(is_correct=not issues, issues=issues, angles=angles)

    @staticmethod
    def _back_lean(named) -> float:
        """Torso lean from vertical in the image plane, measured at the mid-hip."""
        mid_shoulder = get_midpoint(named["left_shoulder"], named["right_shoulder"])
        mid_hip = get_midpoint(named["left_hip"], named["right_hip"])
        vertical_ref = Point3D(mid_hip.x, 0.0, mid_hip.z)
        return calculate_angle_2d(vertical_ref, mid_hip, mid_shoulder)


_DEFAULT_ANALYZER = SquatAnalyzer()


def determine_squat_phase(landmarks: Optional[Sequence[Any]],
                          prev_phase: Union[SquatPhase, str] = SquatPhase.STANDING,
                          prev_hip_height: Optional[float] = None) -> Tuple[SquatPhase, Optional[float]]:
    """Functional form of SquatAnalyzer.classify_phase returning (phase, hip_height)."""
    state = _DEFAULT_ANALYZER.classify_phase(landmarks, PhaseState(_DEFAULT_ANALYZER.coerce_phase(prev_phase),
                                                                   prev_hip_height))
    return state.phase, state.metric


def evaluate_squat_form(landmarks: Optional[Sequence[Any]], phase: Union[SquatPhase, str]) -> EvaluationResult:
    """Functional form of SquatAnalyzer.evaluate_form using the packaged thresholds."""
    return _DEFAULT_ANALYZER.evaluate_form(landmarks, phase)
