from .coach_feedback import CoachFeedback

__all__ = ['CoachFeedback']
