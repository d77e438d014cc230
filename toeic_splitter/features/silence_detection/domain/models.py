# File: toeic_splitter/features/silence_detection/domain/models.py
import math
from dataclasses import dataclass
from enum import Enum

class SilenceEventKind(str, Enum):
    START = "start"
    END = "end"

@dataclass(frozen=True)
class SilenceEvent:
    """
    One edge reported by the silence detector.
    Detectors may emit these in any order.
    """
    kind: SilenceEventKind
    time: float

    def __post_init__(self):
        if not math.isfinite(self.time) or self.time < 0:
            raise ValueError(f"Silence event time must be a finite, non-negative number: {self.time}")

@dataclass(frozen=True)
class SilencePeriod:
    """
    A stretch of sub-threshold audio, built by pairing a start edge
    with the next end edge.
    """
    start: float
    end: float

    @property
    def duration(self) -> float:
        return self.end - self.start

@dataclass(frozen=True)
class DetectionConfig:
    """
    Parameters handed to the detector.
    Defaults match the recordings the heuristics were tuned on.
    """
    noise_threshold_db: float = -40.0
    min_silence_duration: float = 0.3
