"""
Exercise analysis package for phase classification and form evaluation.
"""

from .base_analyzer import (
    EXERCISE_ANALYZER_REGISTRY,
    BaseExerciseAnalyzer,
    EvaluationResult,
    PhaseState,
    get_exercise_analyzer,
    register_exercise,
)
from .landmarks import LANDMARK_INDICES, get_named_landmarks, parse_frame
from .pose_utils import Point3D
from .pushup_analyzer import PushupAnalyzer, PushupPhase, determine_pushup_phase, evaluate_pushup_form
from .squat_analyzer import SquatAnalyzer, SquatPhase, determine_squat_phase, evaluate_squat_form

__all__ = [
    'EXERCISE_ANALYZER_REGISTRY',
    'BaseExerciseAnalyzer',
    'EvaluationResult',
    'PhaseState',
    'get_exercise_analyzer',
    'register_exercise',
    'LANDMARK_INDICES',
    'get_named_landmarks',
    'parse_frame',
    'Point3D',
    'PushupAnalyzer',
    'PushupPhase',
    'determine_pushup_phase',
    'evaluate_pushup_form',
    'SquatAnalyzer',
    'SquatPhase',
    'determine_squat_phase',
    'evaluate_squat_form',
]
