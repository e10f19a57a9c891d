"""
landmarks.py - Fixed index layout of a landmark frame and named lookup.
"""
from typing import Any, Dict, Iterable, Optional, Tuple

from .pose_utils import Point3D

FRAME_SIZE = 33

# Positional layout of the points within a frame
LANDMARK_INDICES = {
    "nose": 0,
    "left_eye": 1,
    "right_eye": 2,
    "left_ear": 3,
    "right_ear": 4,
    "left_shoulder": 5,
    "right_shoulder": 6,
    "left_elbow": 7,
    "right_elbow": 8,
    "left_wrist": 9,
    "right_wrist": 10,
    "left_hip": 11,
    "right_hip": 12,
    "left_knee": 13,
    "right_knee": 14,
    "left_ankle": 15,
    "right_ankle": 16,
}

LandmarkFrame = Tuple[Optional[Point3D], ...]
NamedLandmarks = Dict[str, Optional[Point3D]]


def parse_frame(raw_points: Optional[Iterable[Any]]) -> LandmarkFrame:
    """
    Convert one detector output into a LandmarkFrame.

    None or an empty iterable means no body was detected and yields an empty
    frame. Each point may be any shape accepted by Point3D.from_any; a None
    entry stays None and counts as a missing landmark.
    """
    if raw_points is None:
        return ()
    return tuple(None if point is None else Point3D.from_any(point) for point in raw_points)


def get_named_landmarks(frame: Optional[Iterable[Any]]) -> Optional[NamedLandmarks]:
    """
    Map a frame to anatomical names by fixed index lookup.

    Returns None (no landmarks) for an absent or empty frame. Null entries and
    indices past the end of a short frame map to None, which every visibility
    check treats as not visible.
    """
    points = parse_frame(frame)
    if not points:
        return None
    return {
        name: points[index] if index < len(points) else None
        for name, index in LANDMARK_INDICES.items()
    }
