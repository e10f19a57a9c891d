import time
from typing import Callable, List, Optional

from ..exercise_analysis.base_analyzer import BaseExerciseAnalyzer, EvaluationResult, FeedbackGenerator


class CoachFeedback:
    """Text coaching cues for form correction, throttled for a live session."""

    # Evaluations that describe the input rather than the user's form
    _UNMEASURABLE = {FeedbackGenerator.no_landmarks(), FeedbackGenerator.landmarks_not_visible()}

    def __init__(self, analyzer: BaseExerciseAnalyzer, cooldown: float = 4.0, debounce_frames: int = 2,
                 clock: Callable[[], float] = time.monotonic):
        """
        Initialize the feedback system.

        Args:
            analyzer: Exercise analyzer supplying descriptions, tips and cues
            cooldown: Minimum seconds between two emitted cues
            debounce_frames: Frames an issue must persist before it is voiced
            clock: Time source, in seconds
        """
        self.analyzer = analyzer
        self.cooldown = cooldown
        self.debounce_frames = debounce_frames
        self._clock = clock
        self.last_feedback_time = None
        self._last_feedback_message = None
        self._last_issue = None
        self._issue_persist_count = 0

    def phase_description(self, phase) -> str:
        return self.analyzer.get_phase_description(phase)

    def tips(self) -> List[str]:
        return self.analyzer.get_form_tips()

    def generate_feedback(self, evaluation: EvaluationResult) -> Optional[str]:
        """
        Generate a coaching cue for the first issue of an evaluation.

        A cue is returned only when the same issue has been seen for
        debounce_frames consecutive frames, differs from the last cue given,
        and the cooldown since the last cue has elapsed.

        Returns:
            Feedback message if any, None otherwise
        """
        issue = evaluation.issues[0] if evaluation.issues else None
        if issue is None or issue in self._UNMEASURABLE:
            self._last_issue = None
            self._issue_persist_count = 0
            return None

        if issue == self._last_issue:
            self._issue_persist_count += 1
        else:
            self._last_issue = issue
            self._issue_persist_count = 1
        if self._issue_persist_count < self.debounce_frames:
            return None

        now = self._clock()
        if self.last_feedback_time is not None and now - self.last_feedback_time < self.cooldown:
            return None

        feedback = self.analyzer.get_coaching_cue(issue)
        if feedback == self._last_feedback_message:
            return None
        self._last_feedback_message = feedback
        self.last_feedback_time = now
        return feedback

    def reset(self) -> None:
        self.last_feedback_time = None
        self._last_feedback_message = None
        self._last_issue = None
        self._issue_persist_count = 0
