# File: toeic_splitter/features/exam_parts/domain/models.py
from dataclasses import dataclass
from typing import Optional

@dataclass(frozen=True)
class PartSpec:
    """
    Numbering structure of one exam part.
    Grouped parts (conversations / talks) also carry their group layout.
    """
    part_number: int
    first_question: int
    last_question: int
    total_question_count: int
    group_count: Optional[int] = None
    questions_per_group: Optional[int] = None

    def __post_init__(self):
        if self.last_question - self.first_question + 1 != self.total_question_count:
            raise ValueError(f"Part {self.part_number}: question range does not match count {self.total_question_count}")
        if (self.group_count is None) != (self.questions_per_group is None):
            raise ValueError(f"Part {self.part_number}: group_count and questions_per_group go together")
        if self.is_grouped and self.group_count * self.questions_per_group != self.total_question_count:
            raise ValueError(
                f"Part {self.part_number}: {self.group_count} groups x {self.questions_per_group} "
                f"!= {self.total_question_count} questions"
            )

    @property
    def is_grouped(self) -> bool:
        return self.group_count is not None

    @property
    def expected_segment_count(self) -> int:
        """Number of windows a finished split must produce."""
        return self.group_count if self.is_grouped else self.total_question_count

    @property
    def question_range(self) -> str:
        return f"{self.first_question}-{self.last_question}"
