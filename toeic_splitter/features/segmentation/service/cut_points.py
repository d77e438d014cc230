import math
import logging
from typing import List, Optional, Sequence, Tuple

from toeic_splitter.core.common.enums import SplitMethod
from toeic_splitter.core.errors import InvalidInputError
from toeic_splitter.core.shared_types import TimeWindow
from toeic_splitter.features.silence_detection.domain.models import SilenceEvent, SilencePeriod
from toeic_splitter.features.silence_detection.service.api import pair_silence_periods, sorted_end_times
from ..domain.interfaces import ICutPointSelector
from ..domain.models import CutPlan, HeuristicConfig

logger = logging.getLogger(__name__)


def _check_inputs(total_duration: float, segment_count: int) -> None:
    if not isinstance(total_duration, (int, float)) or not math.isfinite(total_duration) or total_duration <= 0:
        raise InvalidInputError(f"Audio duration must be a positive number of seconds, got {total_duration!r}")
    if segment_count < 1:
        raise InvalidInputError(f"Segment count must be at least 1, got {segment_count}")


def interior_end_times(events: Sequence[SilenceEvent], total_duration: float) -> List[float]:
    # An end at 0 or at the end of the file (trailing silence) separates nothing,
    # and a repeated end would make an empty window
    return sorted({t for t in sorted_end_times(events) if 0 < t < total_duration})


def build_windows(cut_points: Sequence[float], total_duration: float, segment_count: int) -> List[TimeWindow]:
    """
    Builds segment_count windows left to right. Window i runs from the
    previous cut (or 0) to cut_points[i] (or the end), clamped to the recording.
    """
    windows: List[TimeWindow] = []
    last_end = 0.0
    for i in range(segment_count):
        start = max(last_end, 0.0)
        end = min(cut_points[i] if i < len(cut_points) else total_duration, total_duration)
        windows.append(TimeWindow(start=start, end=end))
        last_end = end
    return windows


def even_cut_points(total_duration: float, segment_count: int) -> List[float]:
    step = total_duration / segment_count
    return [step * i for i in range(1, segment_count)]


def longest_gap_cut_points(end_times: Sequence[float], cut_count: int) -> List[float]:
    """
    Uses the distance between consecutive silence ends as a proxy for how
    long the pause before each end was, and keeps the cut_count longest.

    Args:
        end_times: Silence end times, ascending.
        cut_count: Number of cut points wanted.

    Returns:
        The chosen end times, ascending.
    """
    gaps: List[Tuple[float, float]] = []
    previous = 0.0
    for end in end_times:
        gaps.append((end - previous, end))
        previous = end

    # sorted() is stable, so equal gaps keep their temporal order
    longest = sorted(gaps, key=lambda gap: gap[0], reverse=True)[:cut_count]
    return sorted(end for _, end in longest)


class FlatCutPointSelector(ICutPointSelector):
    """
    Parts 1 and 2: every question is its own window.
    Callers pass the question count + 1 so the directions get a window too.
    """

    def select(self, events: Sequence[SilenceEvent], total_duration: float, segment_count: int) -> CutPlan:
        _check_inputs(total_duration, segment_count)
        end_times = interior_end_times(events, total_duration)
        cut_count = segment_count - 1

        if len(end_times) >= cut_count:
            cut_points = longest_gap_cut_points(end_times, cut_count)
            method = SplitMethod.SILENCE_DETECTION
        else:
            logger.info(
                f"Only {len(end_times)} silence ends for {cut_count} cuts, dividing {total_duration:.2f}s evenly"
            )
            cut_points = even_cut_points(total_duration, segment_count)
            method = SplitMethod.EVEN_DIVISION

        windows = build_windows(cut_points, total_duration, segment_count)
        logger.info(f"Generated {len(windows)} windows using {method.value}")
        return CutPlan(windows=windows, method=method, cut_points=cut_points)


class GroupedCutPointSelector(ICutPointSelector):
    """
    Parts 3 and 4: one window per conversation / talk.

    Longest-silence matching alone is unreliable here because answer choices
    also leave long pauses, so each boundary is searched near the position the
    group cadence predicts and scored by silence length against distance.
    """

    def __init__(self, config: Optional[HeuristicConfig] = None):
        self.config = config or HeuristicConfig()

    def select(self, events: Sequence[SilenceEvent], total_duration: float, segment_count: int) -> CutPlan:
        _check_inputs(total_duration, segment_count)
        group_count = segment_count
        periods = [p for p in pair_silence_periods(events) if p.end < total_duration]

        # 1. Where do the directions end?
        direction_end = self.estimate_direction_end(periods, total_duration)

        # 2. Expected cadence over the rest of the recording
        effective_duration = total_duration - direction_end
        expected_interval = effective_duration / group_count
        logger.info(
            f"Effective duration: {effective_duration:.2f}s, Expected interval: {expected_interval:.2f}s"
        )

        # 3. One boundary per gap between groups
        cut_points: List[float] = []
        method = SplitMethod.TIME_WEIGHTED_SILENCE
        for i in range(1, group_count):
            expected_time = direction_end + i * expected_interval
            # A silence already closing one group cannot close the next
            best = self.pick_boundary(periods, expected_time, taken=cut_points)

            if best is not None:
                cut_points.append(best.end)
                logger.info(
                    f"Group {i} boundary found at {best.end:.2f}s "
                    f"(score: {self.score(best, expected_time):.2f}, dist: {abs(best.end - expected_time):.2f}s)"
                )
            else:
                cut_points.append(expected_time)
                method = SplitMethod.HYBRID_TIMING
                logger.info(f"Group {i} no free silence in window, using expected time {expected_time:.2f}s")

        cut_points.sort()
        windows = build_windows(cut_points, total_duration, group_count)
        logger.info(f"Generated {len(windows)} windows using {method.value}")
        return CutPlan(windows=windows, method=method, cut_points=cut_points, direction_end=direction_end)

    def estimate_direction_end(self, periods: Sequence[SilencePeriod], total_duration: float) -> float:
        """
        The first long pause ending between 20s and a quarter of the way in
        usually closes the directions.
        """
        cfg = self.config
        latest_end = total_duration * cfg.direction_max_end_ratio
        long_silences = sorted(
            (p for p in periods if p.duration > cfg.long_silence_min_duration),
            key=lambda p: p.start
        )

        for period in long_silences:
            if cfg.direction_min_end < period.end < latest_end:
                logger.info(f"Identified Direction end at {period.end:.2f}s")
                return period.end

        fallback = min(cfg.direction_fallback_seconds, total_duration * cfg.direction_fallback_ratio)
        logger.info(f"Direction not clearly found, assuming end at {fallback:.2f}s")
        return fallback

    def score(self, period: SilencePeriod, expected_time: float) -> float:
        """Long silences close to the expected time score highest."""
        return self.config.silence_duration_weight * period.duration - abs(period.end - expected_time)

    def pick_boundary(self,
                      periods: Sequence[SilencePeriod],
                      expected_time: float,
                      taken: Sequence[float] = ()) -> Optional[SilencePeriod]:
        """
        Best-scoring silence whose end lies within the search radius of
        expected_time and is not one of the taken boundaries, or None.
        Ties go to the earliest period.
        """
        radius = self.config.boundary_search_radius
        candidates = [
            p for p in periods
            if expected_time - radius <= p.end <= expected_time + radius and p.end not in taken
        ]
        if not candidates:
            return None
        return max(candidates, key=lambda p: self.score(p, expected_time))
