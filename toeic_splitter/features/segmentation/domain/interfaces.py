from abc import ABC, abstractmethod
from typing import Sequence
from toeic_splitter.features.silence_detection.domain.models import SilenceEvent
from .models import CutPlan

class ICutPointSelector(ABC):
    """
    Contract for turning silence events into a window partition.
    """

    @abstractmethod
    def select(self, events: Sequence[SilenceEvent], total_duration: float, segment_count: int) -> CutPlan:
        """
        Partitions [0, total_duration] into exactly segment_count contiguous windows.

        Args:
            events: Silence edges in any order.
            total_duration: Length of the recording in seconds.
            segment_count: Number of windows to produce (flat parts budget one
                extra for the directions; grouped parts pass the group count).
        """
        pass
