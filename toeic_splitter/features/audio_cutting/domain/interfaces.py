from abc import ABC, abstractmethod
from pathlib import Path
from .models import CutRequest, EncodingConfig

class IMediaCutter(ABC):
    """
    Contract for the audio cutting engine.
    Abstracts away the underlying tool (FFmpeg) from the splitting logic.
    """

    @abstractmethod
    def cut(self, request: CutRequest, config: EncodingConfig) -> None:
        """
        Encodes the requested window of the source into the output file.

        Args:
            request: Source, output and window.
            config: Encoding parameters.

        Raises:
            MediaCutFailure: If the underlying cutting process fails.
        """
        pass

class IDurationProbe(ABC):
    @abstractmethod
    def probe_duration(self, audio_path: Path) -> float:
        """
        Returns the duration of the audio file in seconds.

        Raises:
            InvalidInputError: If the file is missing or cannot be probed.
        """
        pass
