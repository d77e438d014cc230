from abc import ABC, abstractmethod
from typing import Iterator
from .models import PartSpec

class IPartSpecTable(ABC):
    """
    Contract for the read-only exam structure lookup.
    Changing the exam layout means swapping the table, not the algorithms.
    """

    @abstractmethod
    def lookup(self, part_number: int) -> PartSpec:
        """
        Raises:
            InvalidPartError: If the part number is not in the table.
        """
        pass

    @abstractmethod
    def all(self) -> Iterator[PartSpec]:
        """Yields every part in part-number order."""
        pass
