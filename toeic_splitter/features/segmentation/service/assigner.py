import logging
from typing import List, Optional, Sequence

from toeic_splitter.core.errors import CountMismatchError
from toeic_splitter.core.shared_types import TimeWindow
from toeic_splitter.features.exam_parts.domain.models import PartSpec
from ..domain.models import AssignmentResult, GroupSegment, QuestionSegment, Segment
from .direction import DirectionDetector

logger = logging.getLogger(__name__)


class SegmentAssigner:
    """
    Maps a part's window list to question (or question-group) numbers.
    """

    def __init__(self, direction_detector: Optional[DirectionDetector] = None):
        self.direction_detector = direction_detector or DirectionDetector()

    def assign(self,
               spec: PartSpec,
               windows: Sequence[TimeWindow],
               total_duration: Optional[float] = None) -> AssignmentResult:
        """
        Numbers the windows after the (optional) direction window, at most
        the part's fixed count of them. Surplus windows are left unnumbered
        and reported, so no number past the part's last question is issued.

        Raises:
            InvalidWindowError: If any window to be numbered is unusable.
                Nothing is numbered in that case.

        Returns:
            AssignmentResult; its count_mismatch is set (not raised) when the
            number of content windows differs from the part's fixed count.
        """
        expected = spec.expected_segment_count
        start_index = self.direction_detector.start_index(windows, expected)

        content = list(windows[start_index:])
        unnumbered = max(0, len(content) - expected)

        segments: List[Segment] = []
        for offset, window in enumerate(content[:expected]):
            segment = self._number(spec, offset, window)
            window.validate(total_duration, label=segment.label)
            segments.append(segment)

        result = AssignmentResult(
            part_number=spec.part_number,
            segments=segments,
            start_index=start_index,
            expected_count=expected
        )

        if len(content) != expected:
            result.count_mismatch = CountMismatchError(
                spec.part_number, expected, len(content), segments, unnumbered=unnumbered
            )
            logger.warning(f"Warning: {result.count_mismatch.message}")

        return result

    @staticmethod
    def _number(spec: PartSpec, offset: int, window: TimeWindow) -> Segment:
        if not spec.is_grouped:
            return QuestionSegment(question_number=spec.first_question + offset, window=window)

        first_question = spec.first_question + offset * spec.questions_per_group
        return GroupSegment(
            group_index=offset,
            first_question=first_question,
            last_question=first_question + spec.questions_per_group - 1,
            window=window
        )
