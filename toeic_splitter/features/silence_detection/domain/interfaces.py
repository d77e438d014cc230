from abc import ABC, abstractmethod
from pathlib import Path
from typing import List
from .models import SilenceEvent, DetectionConfig

class ISilenceEventSource(ABC):
    """
    Contract for the external silence detector.
    The splitting engine only ever sees the events, never audio samples.
    """

    @abstractmethod
    def detect(self, audio_path: Path, config: DetectionConfig) -> List[SilenceEvent]:
        """
        Scans audio and returns every silence start/end edge found.

        Raises:
            SilenceDetectionError: If the underlying tool fails.
        """
        pass
