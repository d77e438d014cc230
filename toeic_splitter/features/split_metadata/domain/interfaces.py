from abc import ABC, abstractmethod
from uuid import UUID
from typing import Any, Dict, List
from .models import PartSplitRecord, FullRunRecord

class IMetadataRecorder(ABC):
    """
    Contract for persisting split results.
    Duplicate entries are tolerable; lost entries are not, so every append
    must be atomic on its own.
    """

    @abstractmethod
    def append_part_segments(self, part_number: int, record: PartSplitRecord) -> UUID:
        """Stores one part split and its segments. Returns the record ID."""
        pass

    @abstractmethod
    def append_full_run_record(self, record: FullRunRecord) -> UUID:
        """Stores the summary of a full-recording split. Returns the record ID."""
        pass

    @abstractmethod
    def get_part_records(self, part_number: int) -> List[Dict[str, Any]]:
        """All stored splits of one part, oldest first."""
        pass

    @abstractmethod
    def get_all_metadata(self) -> Dict[str, Any]:
        """
        Everything stored, as
        {"parts": {"part1": [...], ..., "part4": [...]}, "fullLC": [...]}.
        """
        pass
