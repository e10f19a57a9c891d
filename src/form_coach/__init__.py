"""
Exercise form coaching from body-landmark frames: squat and push-up phase
tracking and per-phase form evaluation.
"""

__version__ = "0.1.0"
