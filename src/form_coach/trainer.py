from collections import deque
from typing import Any, Dict, Iterable, List, Optional, Sequence

from .exercise_analysis import get_exercise_analyzer
from .exercise_analysis.base_analyzer import BaseExerciseAnalyzer
from .feedback.coach_feedback import CoachFeedback
from .log_utils import get_logger

logger = get_logger("FormTrainer")


class FormTrainer:
    """
    Per-session driver: runs phase classification then form evaluation on
    every frame and carries the phase state between frames.

    Not safe to share between concurrent callers.
    """

    def __init__(self, exercise_type: str = "squat", analyzer: Optional[BaseExerciseAnalyzer] = None,
                 feedback: Optional[CoachFeedback] = None, missing_landmarks_threshold: int = 30):
        """
        Initialize the trainer.

        Args:
            exercise_type: Type of exercise to analyze ("squat" or "pushup")
            analyzer: Analyzer to use instead of the registered default
            feedback: Feedback generator to use instead of the default
            missing_landmarks_threshold: Consecutive unusable frames before warning the user
        """
        self.exercise_analyzer = analyzer or get_exercise_analyzer(exercise_type)
        self.feedback = feedback or CoachFeedback(self.exercise_analyzer)
        self.state = self.exercise_analyzer.initial_state()

        # Recent per-frame results, about one second at 30fps
        self.frame_buffer = deque(maxlen=30)
        self.frame_count = 0
        self.missing_landmarks_counter = 0
        self.missing_landmarks_threshold = missing_landmarks_threshold

    @property
    def exercise_name(self) -> str:
        return self.exercise_analyzer.get_exercise_name()

    def process_frame(self, landmarks: Optional[Sequence[Any]]) -> Dict[str, Any]:
        """
        Process a single landmark frame.

        Args:
            landmarks: Landmark frame, empty or None when no body was detected

        Returns:
            Dictionary containing processing results
        """
        previous_phase = self.state.phase
        self.state, evaluation = self.exercise_analyzer.analyze_frame(landmarks, self.state)
        self.frame_count += 1

        if evaluation.angles is None:
            self.missing_landmarks_counter += 1
            if self.missing_landmarks_counter == self.missing_landmarks_threshold:
                logger.warning("We can't see your full body. Please adjust your position or camera.")
        else:
            self.missing_landmarks_counter = 0

        phase_changed = self.state.phase != previous_phase
        if phase_changed:
            logger.info(f"Phase: {previous_phase.value} -> {self.state.phase.value}")

        feedback = self.feedback.generate_feedback(evaluation)
        if feedback:
            logger.info(f"Feedback: {feedback}")

        result = {
            "frame": self.frame_count,
            "exercise": self.exercise_name,
            "phase": self.state.phase.value,
            "phase_changed": phase_changed,
            "phase_description": self.feedback.phase_description(self.state.phase),
            "evaluation": evaluation,
            "feedback": feedback,
        }
        self.frame_buffer.append(result)
        return result

    def run(self, frames: Iterable[Sequence[Any]]) -> List[Dict[str, Any]]:
        """Process every frame from an iterable (e.g. a pose source) in order."""
        return [self.process_frame(frame) for frame in frames]

    def is_body_visible(self) -> bool:
        """False once the missing-landmark threshold has been reached."""
        return self.missing_landmarks_counter < self.missing_landmarks_threshold

    def reset(self) -> None:
        """Start a new session: rest phase, no tracked metric, empty history."""
        self.state = self.exercise_analyzer.initial_state()
        self.frame_buffer.clear()
        self.frame_count = 0
        self.missing_landmarks_counter = 0
        self.feedback.reset()
        logger.info(f"Session reset ({self.exercise_name})")
