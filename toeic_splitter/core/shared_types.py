import math
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from toeic_splitter.core.errors import InvalidWindowError

@dataclass(frozen=True)
class TimeWindow:
    """
    Value Object representing a span of a recording, in seconds.

    Raw window lists are built before numbering, so construction does not
    validate; call validate() at the point where a window must be usable.
    """
    start: float
    end: float

    @property
    def duration(self) -> float:
        return self.end - self.start

    def validate(self, total_duration: Optional[float] = None, label: str = "window") -> None:
        """Raises InvalidWindowError unless 0 <= start < end (<= total_duration)."""
        if not math.isfinite(self.start) or self.start < 0:
            raise InvalidWindowError(f"Invalid start for {label}: start={self.start}")
        if not math.isfinite(self.end):
            raise InvalidWindowError(f"Invalid end for {label}: end={self.end}")
        if self.duration <= 0:
            raise InvalidWindowError(
                f"Invalid timestamps for {label}: start={self.start}, duration={self.duration}"
            )
        # Tolerate float noise from probe output vs. summed boundaries
        if total_duration is not None and self.end > total_duration + 1e-6:
            raise InvalidWindowError(
                f"Window for {label} ends after the recording: end={self.end}, total={total_duration}"
            )

    def shifted(self, offset: float) -> "TimeWindow":
        return TimeWindow(self.start + offset, self.end + offset)

    def as_dict(self) -> dict:
        return {"start": round(self.start, 2), "end": round(self.end, 2)}

@dataclass(frozen=True)
class MediaFile:
    """
    Entity representing a media file on the filesystem.
    Encapsulates path validation and directory creation.
    """
    path: Path

    def __post_init__(self):
        if str(self.path).strip() == "." or str(self.path).strip() == "":
             raise ValueError("File path cannot be empty.")

    def exists(self) -> bool:
        return self.path.exists()

    def ensure_parent_dir(self) -> None:
        """Creates the directory structure for this file if it doesn't exist."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
