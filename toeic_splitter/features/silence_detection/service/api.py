from pathlib import Path
from typing import Iterable, List, Optional
from toeic_splitter.core.config.settings import settings
from ..domain.models import SilenceEvent, SilenceEventKind, SilencePeriod, DetectionConfig
from ..data.ffmpeg_adapter import FFmpegSilenceDetector

def default_detection_config() -> DetectionConfig:
    return DetectionConfig(
        noise_threshold_db=settings.SILENCE_NOISE_DB,
        min_silence_duration=settings.SILENCE_MIN_DURATION
    )

def detect_silence(audio_path: str, config: Optional[DetectionConfig] = None) -> List[SilenceEvent]:
    """
    Public Service API: Run the silence detector over an audio file.
    """
    adapter = FFmpegSilenceDetector()
    return adapter.detect(Path(audio_path), config or default_detection_config())

def sorted_times(events: Iterable[SilenceEvent], kind: SilenceEventKind) -> List[float]:
    return sorted(e.time for e in events if e.kind == kind)

def sorted_end_times(events: Iterable[SilenceEvent]) -> List[float]:
    return sorted_times(events, SilenceEventKind.END)

def pair_silence_periods(events: Iterable[SilenceEvent]) -> List[SilencePeriod]:
    """
    Pairs every start edge with the first end edge strictly after it.
    A start with no later end is dropped. Result is ordered by start.
    """
    events = list(events)
    starts = sorted_times(events, SilenceEventKind.START)
    ends = sorted_times(events, SilenceEventKind.END)

    periods: List[SilencePeriod] = []
    for start in starts:
        end = next((e for e in ends if e > start), None)
        if end is not None:
            periods.append(SilencePeriod(start=start, end=end))
    return periods
