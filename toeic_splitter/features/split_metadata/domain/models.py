# File: toeic_splitter/features/split_metadata/domain/models.py
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
from uuid import UUID

from toeic_splitter.core.common.enums import SplitMethod, SplitMode

def utc_now():
    return datetime.now(timezone.utc)

@dataclass(frozen=True)
class SegmentRecord:
    """
    One produced file. Flat parts fill `question`, grouped parts fill
    `group` and the question range.
    """
    filename: str
    path: str
    start: float
    end: float
    question: Optional[int] = None
    group: Optional[int] = None
    first_question: Optional[int] = None
    last_question: Optional[int] = None

@dataclass(frozen=True)
class PartSplitRecord:
    """
    The result of splitting one part, as it is persisted.
    """
    original_file: str
    method: SplitMethod
    mode: SplitMode
    question_range: str
    segments: List[SegmentRecord] = field(default_factory=list)
    group_count: Optional[int] = None
    questions_per_group: Optional[int] = None
    # Full runs only: where the part sits in the full recording
    part_start: Optional[float] = None
    part_end: Optional[float] = None
    full_run_id: Optional[UUID] = None
    warning: Optional[str] = None
    split_date: datetime = field(default_factory=utc_now)

    @property
    def is_grouped(self) -> bool:
        return self.group_count is not None

@dataclass(frozen=True)
class FullRunRecord:
    """
    Summary of a full Listening Comprehension split across all four parts.
    """
    original_file: str
    total_duration: float
    parts: List[Dict[str, Any]] = field(default_factory=list)
    part_boundaries: List[float] = field(default_factory=list)
    split_date: datetime = field(default_factory=utc_now)
