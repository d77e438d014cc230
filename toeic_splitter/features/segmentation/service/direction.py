import logging
from typing import Optional, Sequence

from toeic_splitter.core.shared_types import TimeWindow
from ..domain.models import HeuristicConfig

logger = logging.getLogger(__name__)


class DirectionDetector:
    """
    Decides whether the first window of a part is the spoken directions
    and must be left out of numbering.

    Conservative on purpose: with exactly one extra window, the first is only
    dropped when it is clearly longer than the average content window.
    """

    def __init__(self, config: Optional[HeuristicConfig] = None):
        self.config = config or HeuristicConfig()

    def start_index(self, windows: Sequence[TimeWindow], expected_count: int) -> int:
        """
        Args:
            windows: Raw window list of the part, in order.
            expected_count: Content windows the part should have (no directions).

        Returns:
            0 to number every window, 1 to skip the first.
        """
        if len(windows) == expected_count + 1 and len(windows) > 1:
            first = windows[0].duration
            rest = [w.duration for w in windows[1:]]
            avg_duration = sum(rest) / len(rest)
            threshold = avg_duration * self.config.direction_duration_ratio

            if first > threshold:
                logger.info(f"Skipping direction segment ({first:.2f}s vs avg {avg_duration:.2f}s)")
                return 1
            logger.info(
                f"Keeping first segment ({first:.2f}s is within {self.config.direction_duration_ratio}x "
                f"of avg {avg_duration:.2f}s)"
            )
            return 0

        if len(windows) > expected_count:
            logger.info(
                f"Skipping first segment (direction) - have {len(windows)} segments, need {expected_count}"
            )
            return 1

        return 0
