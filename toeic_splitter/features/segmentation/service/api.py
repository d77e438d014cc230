import json
import math
import logging
from dataclasses import dataclass
from typing import Any, List, Optional, Sequence, Union

from toeic_splitter.core.common.enums import SplitMethod
from toeic_splitter.core.errors import InvalidInputError
from toeic_splitter.core.shared_types import TimeWindow
from toeic_splitter.features.exam_parts.domain.models import PartSpec
from toeic_splitter.features.silence_detection.domain.models import SilenceEvent
from ..domain.interfaces import ICutPointSelector
from ..domain.models import AssignmentResult, CutPlan, HeuristicConfig
from .assigner import SegmentAssigner
from .cut_points import FlatCutPointSelector, GroupedCutPointSelector
from .direction import DirectionDetector

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PartPlan:
    """Everything decided for one part before any audio is cut."""
    spec: PartSpec
    method: SplitMethod
    windows: List[TimeWindow]
    assignment: AssignmentResult
    direction_end: Optional[float] = None


def selector_for(spec: PartSpec, config: Optional[HeuristicConfig] = None) -> ICutPointSelector:
    if spec.is_grouped:
        return GroupedCutPointSelector(config)
    return FlatCutPointSelector()


def plan_automatic_split(spec: PartSpec,
                         events: Sequence[SilenceEvent],
                         total_duration: float,
                         config: Optional[HeuristicConfig] = None) -> PartPlan:
    """
    Public Service API: silence events + duration -> numbered segments.
    Pure computation; no audio is touched.
    """
    selector = selector_for(spec, config)
    # Flat parts budget one extra window for the directions; grouped parts
    # leave the directions inside the first window.
    segment_count = spec.expected_segment_count if spec.is_grouped else spec.total_question_count + 1
    plan: CutPlan = selector.select(events, total_duration, segment_count)

    assigner = SegmentAssigner(DirectionDetector(config))
    assignment = assigner.assign(spec, plan.windows, total_duration)

    return PartPlan(
        spec=spec,
        method=plan.method,
        windows=plan.windows,
        assignment=assignment,
        direction_end=plan.direction_end
    )


def parse_manual_timestamps(spec: PartSpec, timestamps: Union[str, Sequence[Any]]) -> List[TimeWindow]:
    """
    Validates a manual request body: a list (or JSON text of a list) of
    {start, end} objects, exactly one per question (flat) or group (grouped).

    Raises:
        InvalidInputError: Missing, malformed, or wrongly counted timestamps.
    """
    if timestamps is None or timestamps == "":
        raise InvalidInputError("Timestamps are required")

    if isinstance(timestamps, str):
        try:
            timestamps = json.loads(timestamps)
        except ValueError as e:
            raise InvalidInputError(f"Timestamps are not valid JSON: {e}") from e

    expected = spec.expected_segment_count
    unit = "group timestamps" if spec.is_grouped else "timestamps"
    if not isinstance(timestamps, list) or len(timestamps) != expected:
        raise InvalidInputError(f"Part {spec.part_number} requires exactly {expected} {unit}")

    windows: List[TimeWindow] = []
    for position, entry in enumerate(timestamps, start=1):
        if not isinstance(entry, dict) or "start" not in entry or "end" not in entry:
            raise InvalidInputError(f"Timestamp {position} must be an object with 'start' and 'end'")
        try:
            start = float(entry["start"])
            end = float(entry["end"])
        except (TypeError, ValueError) as e:
            raise InvalidInputError(f"Timestamp {position} has a non-numeric start or end") from e
        if math.isnan(start) or math.isnan(end):
            raise InvalidInputError(f"Timestamp {position} has a non-numeric start or end")
        windows.append(TimeWindow(start=start, end=end))
    return windows


def plan_manual_split(spec: PartSpec,
                      timestamps: Union[str, Sequence[Any]],
                      total_duration: Optional[float] = None) -> PartPlan:
    """
    Public Service API: user-supplied windows -> numbered segments.

    Raises:
        InvalidInputError: Bad timestamp payload.
        InvalidWindowError: A window with non-positive duration or out-of-range bounds.
        CountMismatchError: Manual mode requires exact counts.
    """
    windows = parse_manual_timestamps(spec, timestamps)
    return plan_manual_windows(spec, windows, total_duration)


def plan_manual_windows(spec: PartSpec,
                        windows: Sequence[TimeWindow],
                        total_duration: Optional[float] = None) -> PartPlan:
    """Numbers already-parsed manual windows; see plan_manual_split."""
    assignment = SegmentAssigner().assign(spec, windows, total_duration)
    if assignment.count_mismatch is not None:
        raise assignment.count_mismatch

    return PartPlan(spec=spec, method=SplitMethod.MANUAL, windows=list(windows), assignment=assignment)
