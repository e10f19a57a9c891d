import json
from typing import Iterator

from ..exercise_analysis.landmarks import LandmarkFrame, parse_frame
from ..log_utils import get_logger
from .base_detector import BasePoseSource

logger = get_logger("PoseSource")


class JsonLinesPoseSource(BasePoseSource):
    """
    Replays a recorded session stored as JSON lines.

    Each line holds one frame: either a JSON array of points or an object with
    a "landmarks" array. Points may be [x, y, z, visibility] arrays or objects
    with x/y/z/visibility keys; a null point is a missing landmark. A blank
    line, [] or null means no body was detected in that frame.
    """

    def __init__(self, path: str):
        self.path = path

    def frames(self) -> Iterator[LandmarkFrame]:
        """
        Raises:
            ValueError: on a line that is not valid JSON or holds malformed points
        """
        with open(self.path, "r", encoding="utf-8") as f:
            for line_number, line in enumerate(f, start=1):
                line = line.strip()
                if not line:
                    yield ()
                    continue
                try:
                    record = json.loads(line)
                    if isinstance(record, dict):
                        record = record.get("landmarks")
                    frame = parse_frame(record)
                except (ValueError, TypeError) as e:
                    # json.JSONDecodeError is a ValueError too
                    raise ValueError(f"{self.path}:{line_number}: {e}") from e
                yield frame
        logger.debug(f"Finished replaying {self.path}")
