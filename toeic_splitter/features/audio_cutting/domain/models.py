from dataclasses import dataclass
from pathlib import Path
from toeic_splitter.core.shared_types import MediaFile, TimeWindow

@dataclass(frozen=True)
class EncodingConfig:
    """
    Encoding parameters for every cut segment.
    MP3 keeps the files playable in any browser audio player.
    """
    codec: str = "libmp3lame"
    bitrate: str = "128k"
    sample_rate_hz: int = 44100
    format: str = "mp3"

@dataclass(frozen=True)
class CutRequest:
    source_audio: MediaFile
    output_audio: MediaFile
    window: TimeWindow

    def __post_init__(self):
        if not self.source_audio.exists():
            raise FileNotFoundError(f"Source audio missing: {self.source_audio.path}")

@dataclass(frozen=True)
class CutResult:
    """
    One finished cut, tied back to the segment it was made for.
    """
    segment: object
    output_path: Path

    @property
    def filename(self) -> str:
        return self.output_path.name
