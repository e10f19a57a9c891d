from abc import ABC, abstractmethod
from typing import Iterator

from ..exercise_analysis.landmarks import LandmarkFrame


class BasePoseSource(ABC):
    """Base class for anything that supplies landmark frames to the trainer."""

    @abstractmethod
    def frames(self) -> Iterator[LandmarkFrame]:
        """
        Yield landmark frames in capture order.

        Returns:
            Iterator of LandmarkFrame; an empty frame means no body was detected
        """
        pass

    def __iter__(self) -> Iterator[LandmarkFrame]:
        return self.frames()
