from types import MappingProxyType
from typing import Iterable, Iterator, Mapping

from toeic_splitter.core.errors import InvalidPartError
from ..domain.interfaces import IPartSpecTable
from ..domain.models import PartSpec

# TOEIC Listening numbering. Versioned constant: edit here when the exam changes.
TOEIC_LISTENING_PARTS = (
    PartSpec(part_number=1, first_question=1, last_question=6, total_question_count=6),
    PartSpec(part_number=2, first_question=7, last_question=31, total_question_count=25),
    PartSpec(part_number=3, first_question=32, last_question=70, total_question_count=39,
             group_count=13, questions_per_group=3),
    PartSpec(part_number=4, first_question=71, last_question=100, total_question_count=30,
             group_count=10, questions_per_group=3),
)


class PartSpecTable(IPartSpecTable):
    """
    Immutable part-number -> PartSpec mapping.
    Safe to share between requests without locking.
    """

    def __init__(self, specs: Iterable[PartSpec] = TOEIC_LISTENING_PARTS):
        by_number = {}
        for spec in specs:
            if spec.part_number in by_number:
                raise ValueError(f"Duplicate part number in table: {spec.part_number}")
            by_number[spec.part_number] = spec
        self._specs: Mapping[int, PartSpec] = MappingProxyType(by_number)

    def lookup(self, part_number: int) -> PartSpec:
        # bool is an int subclass; True must not resolve to Part 1
        if isinstance(part_number, bool) or not isinstance(part_number, int):
            raise InvalidPartError(part_number)
        try:
            return self._specs[part_number]
        except KeyError:
            raise InvalidPartError(part_number) from None

    def all(self) -> Iterator[PartSpec]:
        for number in sorted(self._specs):
            yield self._specs[number]
