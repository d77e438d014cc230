import subprocess
import logging
from toeic_splitter.core.config.settings import settings
from toeic_splitter.core.errors import MediaCutFailure
from ..domain.interfaces import IMediaCutter
from ..domain.models import CutRequest, EncodingConfig

logger = logging.getLogger(__name__)

class FFmpegCutAdapter(IMediaCutter):
    """
    Concrete implementation of IMediaCutter using FFmpeg.
    Re-encodes every window so cuts land exactly on the requested timestamps.
    """

    def cut(self, request: CutRequest, config: EncodingConfig) -> None:
        # 1. Ensure the directory for the output file exists
        request.output_audio.ensure_parent_dir()

        # 2. Construct the FFmpeg Command
        # -ss before -i: input seeking (reliable for formats without output seeking)
        # -map 0:a: audio stream only (drops cover art in tagged MP3s)
        # -avoid_negative_ts make_zero: segment timestamps start at zero
        cmd = [
            settings.FFMPEG_BINARY,
            "-y",
            "-ss", f"{request.window.start:.3f}",
            "-i", str(request.source_audio.path),
            "-t", f"{request.window.duration:.3f}",
            "-map", "0:a",
            "-avoid_negative_ts", "make_zero",
            "-acodec", config.codec,
            "-b:a", config.bitrate,
            "-af", f"aresample={config.sample_rate_hz}",
            "-f", config.format,
            str(request.output_audio.path)
        ]

        logger.info(f"Executing FFmpeg Cut: {' '.join(cmd)}")

        try:
            # 3. Execute
            # capture_output=True allows us to log stderr if it fails
            subprocess.run(
                cmd,
                check=True,
                capture_output=True,
                text=True
            )
        except subprocess.CalledProcessError as e:
            error_message = e.stderr if e.stderr else "Unknown FFmpeg error"
            logger.error(f"FFmpeg Cut Failed. STDERR: {error_message}")
            raise MediaCutFailure(f"Audio cutting failed: {error_message}") from e
        except OSError as e:
            raise MediaCutFailure(f"Could not run {settings.FFMPEG_BINARY}: {e}") from e
