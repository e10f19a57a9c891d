from enum import Enum
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

from ..log_utils import get_logger
from .base_analyzer import BaseExerciseAnalyzer, EvaluationResult, PhaseState, register_exercise
from .config_utils import PushupThresholds, load_pushup_config
from .pose_utils import Point3D, calculate_angle_2d, calculate_angle_3d, get_midpoint

_PUSHUP_CONFIG = load_pushup_config()
DEFAULT_PUSHUP_THRESHOLDS = PushupThresholds.from_config(_PUSHUP_CONFIG)

logger = get_logger("PushupAnalyzer")


class PushupPhase(Enum):
    """Push-up exercise phases."""
    TOP = "top"                 # Arms extended, plank position
    DESCENDING = "descending"   # Lowering phase
    BOTTOM = "bottom"           # Chest near floor
    ASCENDING = "ascending"     # Pressing back up


@register_exercise("pushup")
class PushupAnalyzer(BaseExerciseAnalyzer):
    """Push-up phase tracking from the elbow angle, with per-phase form rules."""

    phase_enum = PushupPhase

    def __init__(self, thresholds: Optional[PushupThresholds] = None, config: Optional[Dict[str, Any]] = None):
        config = _PUSHUP_CONFIG if config is None else config
        if thresholds is None:
            thresholds = DEFAULT_PUSHUP_THRESHOLDS if config is _PUSHUP_CONFIG else PushupThresholds.from_config(config)
        super().__init__(thresholds, config)

    @classmethod
    def from_config_file(cls, config_path: str) -> "PushupAnalyzer":
        return cls(config=load_pushup_config(config_path))

    @property
    def rest_phase(self) -> PushupPhase:
        return PushupPhase.TOP

    def get_exercise_name(self) -> str:
        return "pushup"

    def get_phase_landmarks(self) -> List[str]:
        return [
            "left_shoulder", "right_shoulder",
            "left_elbow", "right_elbow",
            "left_wrist", "right_wrist"
        ]

    def get_required_landmarks(self) -> List[str]:
        # Face points feed the neck angle only and are not required
        return [
            "left_shoulder", "right_shoulder",
            "left_elbow", "right_elbow",
            "left_wrist", "right_wrist",
            "left_hip", "right_hip"
        ]

    def classify_phase(self, landmarks: Optional[Sequence[Any]], state: Optional[PhaseState] = None) -> PhaseState:
        """
        Phase from the average elbow angle and its change since the last frame.

        The elbow angle shrinks while lowering. The frame in which it first
        grows again after a descent is reported as BOTTOM.
        """
        state = state or self.initial_state()
        prev_phase = self.coerce_phase(state.phase)
        prev_elbow_angle = state.metric

        named, visible = self._lookup_visible(landmarks, self.get_phase_landmarks())
        if not visible:
            logger.debug("Push-up phase: required landmarks not visible, keeping %s", prev_phase.value)
            return PhaseState(prev_phase, prev_elbow_angle)

        left_elbow_angle = calculate_angle_3d(named["left_shoulder"], named["left_elbow"], named["left_wrist"])
        right_elbow_angle = calculate_angle_3d(named["right_shoulder"], named["right_elbow"], named["right_wrist"])
        avg_elbow_angle = (left_elbow_angle + right_elbow_angle) / 2

        t = self.thresholds
        bending = prev_elbow_angle is None or avg_elbow_angle < prev_elbow_angle
        extending = prev_elbow_angle is not None and avg_elbow_angle > prev_elbow_angle

        phase = prev_phase
        if avg_elbow_angle > t.top_elbow_angle:
            phase = PushupPhase.TOP
        elif avg_elbow_angle < t.motion_elbow_angle and bending:
            phase = PushupPhase.DESCENDING
        elif avg_elbow_angle < t.motion_elbow_angle and extending:
            phase = PushupPhase.ASCENDING

        # Turnaround: elbows start extending right after a descent
        if prev_phase == PushupPhase.DESCENDING and avg_elbow_angle < t.motion_elbow_angle and extending:
            phase = PushupPhase.BOTTOM

        if phase != prev_phase:
            logger.debug("Push-up phase %s -> %s (elbow %.1f)", prev_phase.value, phase.value, avg_elbow_angle)
        return PhaseState(phase, avg_elbow_angle)

    def evaluate_form(self, landmarks: Optional[Sequence[Any]], phase: Union[PushupPhase, str]) -> EvaluationResult:
        phase = self.coerce_phase(phase)
        named, visible = self._lookup_visible(landmarks, self.get_required_landmarks())
        if not visible:
            logger.debug("Push-up form: frame skipped, landmarks missing or not visible")
            return self._unmeasurable_result(named)

        left_elbow_angle = calculate_angle_3d(named["left_shoulder"], named["left_elbow"], named["left_wrist"])
        right_elbow_angle = calculate_angle_3d(named["right_shoulder"], named["right_elbow"], named["right_wrist"])

        mid_shoulder = get_midpoint(named["left_shoulder"], named["right_shoulder"])
        mid_hip = get_midpoint(named["left_hip"], named["right_hip"])
        # Body line against a horizontal reference through the shoulders
        horizontal_ref = Point3D(mid_shoulder.x + 1, mid_shoulder.y, mid_shoulder.z)
        back_angle = calculate_angle_2d(horizontal_ref, mid_shoulder, mid_hip)
        hips_above_shoulders = mid_hip.y < mid_shoulder.y

        angles = {
            "left_elbow": left_elbow_angle,
            "right_elbow": right_elbow_angle,
            "back": back_angle,
        }
        nan_angles = self._nan_angles(angles)

        nose, left_eye, right_eye = named["nose"], named["left_eye"], named["right_eye"]
        if nose is not None and left_eye is not None and right_eye is not None:
            neck_angle = calculate_angle_2d(mid_shoulder, nose, get_midpoint(left_eye, right_eye))
        else:
            logger.debug("Push-up form: face landmarks absent, neck angle not measured")
            neck_angle = float("nan")
        angles["neck"] = neck_angle

        t = self.thresholds
        issues = []
        if phase == PushupPhase.BOTTOM:
            if left_elbow_angle > t.max_elbow_angle or right_elbow_angle > t.max_elbow_angle:
                issues.append("Not going deep enough")
            if left_elbow_angle < t.min_elbow_angle or right_elbow_angle < t.min_elbow_angle:
                issues.append("Elbows bent too much")
            self._check_back(back_angle, hips_above_shoulders, issues)
            self._check_neck(neck_angle, issues)
        elif phase == PushupPhase.TOP:
            if left_elbow_angle < t.min_top_elbow_angle or right_elbow_angle < t.min_top_elbow_angle:
                issues.append("Arms not fully extended at top")
            self._check_back(back_angle, hips_above_shoulders, issues)
        elif phase in (PushupPhase.DESCENDING, PushupPhase.ASCENDING):
            self._check_back(back_angle, hips_above_shoulders, issues)
            self._check_neck(neck_angle, issues)

        if nan_angles:
            logger.warning("Push-up form: degenerate geometry, angles not measurable: %s", ", ".join(nan_angles))
        return EvaluationResult(is_correct=not issues, issues=issues, angles=angles)

    def _check_back(self, back_angle: float, hips_above_shoulders: bool, issues: List[str]) -> None:
        limit = self.thresholds.max_back_pike if hips_above_shoulders else self.thresholds.max_back_sag
        if back_angle > limit:
            issues.append("Hips too high (piking)" if hips_above_shoulders else "Back sagging too much")

    def _check_neck(self, neck_angle: float, issues: List[str]) -> None:
        if abs(neck_angle) > self.thresholds.max_neck_angle:
            issues.append("Neck not in neutral position")


_DEFAULT_ANALYZER = PushupAnalyzer()


def determine_pushup_phase(landmarks: Optional[Sequence[Any]],
                           prev_phase: Union[PushupPhase, str] = PushupPhase.TOP,
                           prev_elbow_angle: Optional[float] = None) -> Tuple[PushupPhase, Optional[float]]:
    """Functional form of PushupAnalyzer.classify_phase returning (phase, elbow_angle)."""
    state = _DEFAULT_ANALYZER.classify_phase(landmarks, PhaseState(_DEFAULT_ANALYZER.coerce_phase(prev_phase),
                                                                   prev_elbow_angle))
    return state.phase, state.metric


def evaluate_pushup_form(landmarks: Optional[Sequence[Any]], phase: Union[PushupPhase, str]) -> EvaluationResult:
    """Functional form of PushupAnalyzer.evaluate_form using the packaged thresholds."""
    return _DEFAULT_ANALYZER.evaluate_form(landmarks, phase)
