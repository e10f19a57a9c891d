"""
pose_utils.py - Shared point type and geometry helpers for landmark analysis.
"""
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Sequence

import numpy as np

DEFAULT_MIN_CONFIDENCE = 0.5


@dataclass(frozen=True)
class Point3D:
    """A single landmark: normalized image x/y, depth-like z and a visibility score."""
    x: float
    y: float
    z: float = 0.0
    visibility: float = 0.0

    @classmethod
    def from_any(cls, raw: Any) -> "Point3D":
        """
        Build a Point3D from the shapes pose estimators commonly emit.

        Accepts an existing Point3D, a mapping with x/y[/z/visibility] keys,
        a sequence [x, y, z, visibility] (z and visibility optional), or any
        object exposing x/y/z/visibility attributes.

        Raises:
            ValueError: if the value has no usable x/y coordinates
        """
        if isinstance(raw, Point3D):
            return raw
        try:
            if isinstance(raw, Mapping):
                return cls(
                    float(raw["x"]),
                    float(raw["y"]),
                    float(raw.get("z", 0.0)),
                    float(raw.get("visibility", 0.0)),
                )
            if isinstance(raw, (Sequence, np.ndarray)) and not isinstance(raw, str):
                values = [float(v) for v in raw[:4]]
                if len(values) < 2:
                    raise ValueError(f"Point needs at least x and y, got {raw!r}")
                values += [0.0] * (4 - len(values))
                return cls(*values)
            return cls(
                float(raw.x),
                float(raw.y),
                float(getattr(raw, "z", 0.0)),
                float(getattr(raw, "visibility", 0.0)),
            )
        except (KeyError, AttributeError, TypeError) as e:
            raise ValueError(f"Cannot interpret {raw!r} as a landmark point") from e

    def as_array(self) -> np.ndarray:
        return np.array([self.x, self.y, self.z], dtype=float)


# --- Math & Geometry Utilities ---
def calculate_angle_2d(a: Point3D, b: Point3D, c: Point3D) -> float:
    """
    Planar angle at vertex b between the rays b->a and b->c, in degrees.

    Computed from the difference of the two atan2 bearings; a raw value above
    180 is reflected to 360 - value, so the result is always in [0, 180].
    Only x and y take part.
    """
    radians = np.arctan2(c.y - b.y, c.x - b.x) - np.arctan2(a.y - b.y, a.x - b.x)
    angle = abs(float(np.degrees(radians)))
    if angle > 180.0:
        angle = 360.0 - angle
    return angle


def calculate_angle_3d(a: Point3D, b: Point3D, c: Point3D) -> float:
    """
    Angle at vertex b between the 3D vectors b->a and b->c, in degrees.

    Point ordering convention:
    - a: First point (e.g., hip for knee angle)
    - b: Middle point (e.g., knee for knee angle) - angle is calculated here
    - c: Last point (e.g., ankle for knee angle)

    Returns NaN when either vector has zero length. The cosine is clipped into
    [-1, 1] so rounding on (anti)parallel vectors cannot produce NaN.
    """
    ba = a.as_array() - b.as_array()
    bc = c.as_array() - b.as_array()
    norm_ba = np.linalg.norm(ba)
    norm_bc = np.linalg.norm(bc)
    if norm_ba == 0 or norm_bc == 0:
        return float("nan")
    cosine_angle = np.clip(np.dot(ba, bc) / (norm_ba * norm_bc), -1.0, 1.0)
    return float(np.degrees(np.arccos(cosine_angle)))


def calculate_distance_2d(a: Point3D, b: Point3D) -> float:
    """Euclidean distance between two points using x and y only."""
    return float(np.hypot(b.x - a.x, b.y - a.y))


def calculate_distance_3d(a: Point3D, b: Point3D) -> float:
    """Euclidean distance between two points using x, y and z."""
    return float(np.linalg.norm(b.as_array() - a.as_array()))


def is_point_visible(point: Optional[Point3D], min_confidence: float = DEFAULT_MIN_CONFIDENCE) -> bool:
    """True iff the point exists and its visibility is strictly above min_confidence."""
    return point is not None and point.visibility > min_confidence


def check_landmark_visibility(named_landmarks: Mapping[str, Optional[Point3D]], names: Sequence[str],
                              min_confidence: float = DEFAULT_MIN_CONFIDENCE) -> bool:
    """Check if all named landmarks are present and visible above threshold."""
    return all(is_point_visible(named_landmarks.get(name), min_confidence) for name in names)


def get_midpoint(a: Point3D, b: Point3D) -> Point3D:
    """Componentwise average of two points; visibility is the lower of the two."""
    return Point3D(
        (a.x + b.x) / 2,
        (a.y + b.y) / 2,
        (a.z + b.z) / 2,
        min(a.visibility, b.visibility),
    )
