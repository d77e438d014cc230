from pathlib import Path
from typing import List, Optional
from toeic_splitter.core.config.settings import settings
from toeic_splitter.core.shared_types import MediaFile, TimeWindow
from ..domain.models import CutRequest, EncodingConfig
from ..data.ffmpeg_adapter import FFmpegCutAdapter
from ..data.ffprobe_adapter import FFprobeDurationProbe

AUDIO_EXTENSIONS = {".mp3", ".wav", ".m4a", ".ogg", ".aac", ".flac"}

def probe_duration(audio_path: str) -> float:
    """
    Public Service API: Duration of an audio file, in seconds.
    """
    return FFprobeDurationProbe().probe_duration(Path(audio_path))

def cut_audio_window(source_path: str, start: float, end: float, dest_path: str) -> None:
    """
    Public Service API: Extract one window of an audio file.

    Args:
        source_path: Path to the source recording.
        start: Start timestamp in seconds.
        end: End timestamp in seconds.
        dest_path: Where the MP3 should be saved.

    Raises:
        InvalidWindowError: If the window is empty or negative.
        MediaCutFailure: If FFmpeg fails.
    """
    window = TimeWindow(start=start, end=end)
    window.validate()

    request = CutRequest(
        source_audio=MediaFile(Path(source_path)),
        output_audio=MediaFile(Path(dest_path)),
        window=window
    )
    FFmpegCutAdapter().cut(request, EncodingConfig())

def part_output_dir(part_number: int, output_root: Optional[Path] = None) -> Path:
    return (output_root or settings.OUTPUT_DIR) / f"part{part_number}"

def list_part_audio(part_number: int, output_root: Optional[Path] = None) -> List[dict]:
    """
    Public Service API: Audio files already produced for a part, sorted by
    name so they come out in question order.
    """
    part_dir = part_output_dir(part_number, output_root)
    if not part_dir.is_dir():
        return []

    files = sorted(
        p for p in part_dir.iterdir()
        if p.is_file() and p.suffix.lower() in AUDIO_EXTENSIONS
    )
    return [{"name": p.name, "url": f"/part{part_number}/{p.name}"} for p in files]
