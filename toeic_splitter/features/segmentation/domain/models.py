# File: toeic_splitter/features/segmentation/domain/models.py
from dataclasses import dataclass, field
from typing import List, Optional, Union

from toeic_splitter.core.common.enums import SplitMethod
from toeic_splitter.core.errors import CountMismatchError
from toeic_splitter.core.shared_types import TimeWindow

@dataclass(frozen=True)
class HeuristicConfig:
    """
    Tunable thresholds of the boundary heuristics.
    Defaults were tuned empirically on real exam recordings; they carry no
    meaning beyond that.
    """
    # Direction detection on a finished window list
    direction_duration_ratio: float = 1.5

    # Grouped parts: where the spoken directions end
    long_silence_min_duration: float = 0.8
    direction_min_end: float = 20.0
    direction_max_end_ratio: float = 0.25
    direction_fallback_seconds: float = 35.0
    direction_fallback_ratio: float = 0.1

    # Grouped parts: boundary search around the expected cadence
    boundary_search_radius: float = 20.0
    silence_duration_weight: float = 5.0

@dataclass(frozen=True)
class CutPlan:
    """
    Output of a cut point selector: a contiguous partition of the
    recording plus the method that produced it.
    """
    windows: List[TimeWindow]
    method: SplitMethod
    cut_points: List[float] = field(default_factory=list)
    # Grouped parts only: estimated end of the spoken directions
    direction_end: Optional[float] = None

@dataclass(frozen=True)
class QuestionSegment:
    """One individually numbered question (Parts 1 and 2)."""
    question_number: int
    window: TimeWindow

    @property
    def sort_key(self) -> int:
        return self.question_number

    @property
    def label(self) -> str:
        return f"question {self.question_number}"

    def output_filename(self, base_name: str, extension: str = "mp3") -> str:
        return f"{base_name}_q{self.question_number}.{extension}"

    def as_record(self) -> dict:
        return {"question": self.question_number, **self.window.as_dict()}

@dataclass(frozen=True)
class GroupSegment:
    """One conversation or talk plus its questions (Parts 3 and 4)."""
    group_index: int
    first_question: int
    last_question: int
    window: TimeWindow

    @property
    def group_number(self) -> int:
        return self.group_index + 1

    @property
    def question_range(self) -> str:
        return f"{self.first_question}-{self.last_question}"

    @property
    def sort_key(self) -> int:
        return self.first_question

    @property
    def label(self) -> str:
        return f"group {self.group_number} (questions {self.question_range})"

    def output_filename(self, base_name: str, extension: str = "mp3") -> str:
        return f"{base_name}_q{self.question_range}.{extension}"

    def as_record(self) -> dict:
        return {
            "group": self.group_number,
            "questionRange": self.question_range,
            "firstQuestion": self.first_question,
            "lastQuestion": self.last_question,
            **self.window.as_dict(),
        }

Segment = Union[QuestionSegment, GroupSegment]

@dataclass
class AssignmentResult:
    """
    Numbered segments of one part.
    A count mismatch is reported here instead of raised, so the caller
    decides whether it is fatal.
    """
    part_number: int
    segments: List[Segment]
    start_index: int
    expected_count: int
    count_mismatch: Optional[CountMismatchError] = None

    @property
    def is_complete(self) -> bool:
        return self.count_mismatch is None

    @property
    def direction_skipped(self) -> bool:
        return self.start_index > 0
