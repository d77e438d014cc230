# File: toeic_splitter/core/common/enums.py

from enum import Enum, unique

@unique
class SplitMethod(str, Enum):
    """
    How the windows of one split were chosen.
    Chosen once per split and stored with its metadata.
    """
    SILENCE_DETECTION = "silence-detection"
    EVEN_DIVISION = "even-division"
    TIME_WEIGHTED_SILENCE = "time-weighted-silence"
    HYBRID_TIMING = "hybrid-timing"
    MANUAL = "manual"

@unique
class SplitMode(str, Enum):
    AUTOMATIC = "automatic"
    MANUAL = "manual"
    FULL_RUN = "full_run"
