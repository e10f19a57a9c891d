from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Type, Union

import numpy as np

from .landmarks import NamedLandmarks, get_named_landmarks
from .pose_utils import check_landmark_visibility


@dataclass(frozen=True)
class PhaseState:
    """Phase and tracked metric carried by the caller from one frame to the next."""
    phase: Enum
    metric: Optional[float] = None  # hip height (squat) or elbow angle (push-up)


@dataclass(frozen=True)
class EvaluationResult:
    """Form evaluation of a single frame. Issues and angles are read-only views."""
    is_correct: bool
    issues: Tuple[str, ...] = ()
    angles: Optional[Mapping[str, float]] = None  # None when the frame could not be measured

    def __post_init__(self):
        object.__setattr__(self, "issues", tuple(self.issues))
        if self.angles is not None:
            object.__setattr__(self, "angles", MappingProxyType(dict(self.angles)))

    def to_dict(self) -> Dict[str, Any]:
        result = {"is_correct": self.is_correct, "issues": list(self.issues)}
        if self.angles is not None:
            result["angles"] = dict(self.angles)
        return result


# --- Feedback Templates ---
class FeedbackGenerator:
    @staticmethod
    def no_landmarks():
        return "No landmarks detected"

    @staticmethod
    def landmarks_not_visible():
        return "Some key landmarks not visible"


# --- Exercise Analyzer Registry ---
EXERCISE_ANALYZER_REGISTRY = {}


def register_exercise(exercise_type):
    def decorator(cls):
        EXERCISE_ANALYZER_REGISTRY[exercise_type] = cls
        return cls
    return decorator


def get_exercise_analyzer(exercise_type: str, config_path: Optional[str] = None) -> "BaseExerciseAnalyzer":
    """
    Instantiate the analyzer registered for an exercise type.

    Raises:
        ValueError: if no analyzer is registered under that name
    """
    try:
        analyzer_cls = EXERCISE_ANALYZER_REGISTRY[exercise_type]
    except KeyError:
        raise ValueError(f"Unsupported exercise type: {exercise_type}") from None
    return analyzer_cls.from_config_file(config_path) if config_path else analyzer_cls()


class BaseExerciseAnalyzer(ABC):
    """
    Base class for per-exercise phase classification and form evaluation.

    Analyzers hold only read-only configuration. The running phase and tracked
    metric live in a PhaseState that the caller passes in and receives back on
    every frame, so one analyzer can serve any number of sessions.
    """

    phase_enum: Type[Enum]

    def __init__(self, thresholds, config: Dict[str, Any]):
        """
        Args:
            thresholds: Frozen threshold set for this exercise
            config: Full exercise config (descriptions, tips, coaching cues)
        """
        self.thresholds = thresholds
        self._config = config

    @property
    @abstractmethod
    def rest_phase(self) -> Enum:
        """Phase a session starts in."""

    @abstractmethod
    def get_exercise_name(self) -> str:
        """Get the name of the exercise being analyzed."""

    @abstractmethod
    def get_phase_landmarks(self) -> List[str]:
        """Landmarks that must be visible for phase classification."""

    @abstractmethod
    def get_required_landmarks(self) -> List[str]:
        """Landmarks that must be visible for form evaluation."""

    @abstractmethod
    def classify_phase(self, landmarks: Optional[Sequence[Any]], state: Optional[PhaseState] = None) -> PhaseState:
        """
        Classify the movement phase of one frame.

        Args:
            landmarks: Landmark frame (empty or None when no body was detected)
            state: Phase and metric returned for the previous frame

        Returns:
            New PhaseState; the input state unchanged when the frame is unusable
        """

    @abstractmethod
    def evaluate_form(self, landmarks: Optional[Sequence[Any]], phase: Union[Enum, str]) -> EvaluationResult:
        """
        Check one frame against the rules of the given phase.

        Args:
            landmarks: Landmark frame (empty or None when no body was detected)
            phase: Phase already classified for this frame

        Returns:
            EvaluationResult with issues in rule order
        """

    @classmethod
    @abstractmethod
    def from_config_file(cls, config_path: str) -> "BaseExerciseAnalyzer":
        """Build an analyzer from a JSON config file instead of the packaged defaults."""

    def initial_state(self) -> PhaseState:
        return PhaseState(self.rest_phase, None)

    def analyze_frame(self, landmarks: Optional[Sequence[Any]],
                      state: Optional[PhaseState] = None) -> Tuple[PhaseState, EvaluationResult]:
        """Classify the phase of a frame, then evaluate its form in that phase."""
        new_state = self.classify_phase(landmarks, state)
        return new_state, self.evaluate_form(landmarks, new_state.phase)

    def coerce_phase(self, phase: Union[Enum, str]) -> Enum:
        """Accept a phase enum member or its string value."""
        if isinstance(phase, self.phase_enum):
            return phase
        return self.phase_enum(phase)

    def get_phase_description(self, phase: Union[Enum, str]) -> str:
        return self._config.get("phase_descriptions", {}).get(self.coerce_phase(phase).value, "")

    def get_form_tips(self) -> List[str]:
        return list(self._config.get("tips", []))

    def get_coaching_cue(self, issue: str) -> str:
        """Spoken-style cue for an issue, or the issue itself when none is configured."""
        return self._config.get("coaching_cues", {}).get(issue, issue)

    def _lookup_visible(self, landmarks: Optional[Sequence[Any]],
                        required: Sequence[str]) -> Tuple[Optional[NamedLandmarks], bool]:
        """Named landmarks for a frame and whether every required one is visible."""
        named = get_named_landmarks(landmarks)
        if named is None:
            return None, False
        return named, check_landmark_visibility(named, required, self.thresholds.confidence_threshold)

    def _unmeasurable_result(self, named: Optional[NamedLandmarks]) -> EvaluationResult:
        if named is None:
            return EvaluationResult(False, [FeedbackGenerator.no_landmarks()])
        return EvaluationResult(False, [FeedbackGenerator.landmarks_not_visible()])

    @staticmethod
    def _nan_angles(angles: Dict[str, float]) -> List[str]:
        return [name for name, value in angles.items() if np.isnan(value)]
