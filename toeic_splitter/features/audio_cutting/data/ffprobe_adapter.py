import subprocess
import logging
from pathlib import Path
from toeic_splitter.core.config.settings import settings
from toeic_splitter.core.errors import InvalidInputError
from ..domain.interfaces import IDurationProbe

logger = logging.getLogger(__name__)

class FFprobeDurationProbe(IDurationProbe):
    def probe_duration(self, audio_path: Path) -> float:
        if not audio_path.exists():
            raise InvalidInputError(f"Audio file not found: {audio_path}")

        cmd = [
            settings.FFPROBE_BINARY,
            "-v", "error",
            "-show_entries", "format=duration",
            "-of", "default=noprint_wrappers=1:nokey=1",
            str(audio_path)
        ]

        try:
            result = subprocess.run(cmd, check=True, capture_output=True, text=True)
        except subprocess.CalledProcessError as e:
            error_message = e.stderr if e.stderr else "Unknown ffprobe error"
            logger.error(f"ffprobe failed for {audio_path}: {error_message}")
            raise InvalidInputError(f"Failed to get audio duration: {error_message.strip()}") from e
        except OSError as e:
            raise InvalidInputError(f"Could not run {settings.FFPROBE_BINARY}: {e}") from e

        try:
            return float(result.stdout.strip())
        except ValueError as e:
            raise InvalidInputError(f"Unable to parse duration from ffprobe for {audio_path}") from e
