import re
import subprocess
import logging
from pathlib import Path
from typing import List
from toeic_splitter.core.config.settings import settings
from toeic_splitter.core.errors import SilenceDetectionError
from ..domain.interfaces import ISilenceEventSource
from ..domain.models import SilenceEvent, SilenceEventKind, DetectionConfig

logger = logging.getLogger(__name__)

# ffmpeg prints times with %g, so small values come out as e.g. 2.26757e-05
_SECONDS = r"(-?\d+(?:\.\d*)?(?:[eE][-+]?\d+)?)"
_SILENCE_START = re.compile(r"silence_start:\s*" + _SECONDS)
_SILENCE_END = re.compile(r"silence_end:\s*" + _SECONDS)


def _clamp(raw: str) -> float:
    # silencedetect can report a slightly negative start at the head of a file
    return max(0.0, float(raw))


def parse_silencedetect_output(stderr: str) -> List[SilenceEvent]:
    """
    Extracts silence edges from ffmpeg's silencedetect log lines, e.g.
    "[silencedetect @ 0x..] silence_end: 12.5 | silence_duration: 1.2".
    """
    events: List[SilenceEvent] = []
    for line in stderr.splitlines():
        start_match = _SILENCE_START.search(line)
        if start_match:
            events.append(SilenceEvent(SilenceEventKind.START, _clamp(start_match.group(1))))
        end_match = _SILENCE_END.search(line)
        if end_match:
            events.append(SilenceEvent(SilenceEventKind.END, _clamp(end_match.group(1))))
    return events


class FFmpegSilenceDetector(ISilenceEventSource):
    """
    Concrete implementation of ISilenceEventSource using FFmpeg's silencedetect filter.
    """

    def detect(self, audio_path: Path, config: DetectionConfig) -> List[SilenceEvent]:
        if not audio_path.exists():
            raise FileNotFoundError(f"Audio not found: {audio_path}")

        # -af silencedetect: log silence edges to stderr
        # -f null -: decode only, discard output
        cmd = [
            settings.FFMPEG_BINARY,
            "-hide_banner",
            "-i", str(audio_path),
            "-af", f"silencedetect=noise={config.noise_threshold_db:g}dB:d={config.min_silence_duration:g}",
            "-f", "null",
            "-"
        ]

        logger.info(
            f"Detecting silence with threshold={config.noise_threshold_db:g}dB, "
            f"minDuration={config.min_silence_duration:g}s: {audio_path}"
        )

        try:
            result = subprocess.run(
                cmd,
                check=True,
                capture_output=True,
                text=True
            )
        except subprocess.CalledProcessError as e:
            error_message = e.stderr if e.stderr else "Unknown FFmpeg error"
            logger.error(f"FFmpeg silencedetect failed. STDERR: {error_message}")
            raise SilenceDetectionError(f"Silence detection failed: {error_message}") from e
        except OSError as e:
            raise SilenceDetectionError(f"Could not run {settings.FFMPEG_BINARY}: {e}") from e

        events = parse_silencedetect_output(result.stderr)
        logger.info(f"Silence detection complete: found {len(events)} silence events")
        return events
