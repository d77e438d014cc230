# File: toeic_splitter/features/split_pipeline/domain/models.py
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple
from uuid import UUID

from toeic_splitter.core.common.enums import SplitMethod, SplitMode
from toeic_splitter.core.errors import CountMismatchError

# Share of the full recording that precedes Parts 2, 3 and 4 when no
# silence evidence is available.
DEFAULT_PART_BOUNDARY_FRACTIONS: Tuple[float, ...] = (0.15, 0.40, 0.75)

@dataclass
class SplitOutcome:
    """
    What one part split hands back to its caller.
    `files` and `timestamps` use absolute times in the input recording.
    """
    part_number: int
    mode: SplitMode
    method: SplitMethod
    files: List[Dict[str, Any]] = field(default_factory=list)
    timestamps: List[Dict[str, float]] = field(default_factory=list)
    direction_skipped: bool = False
    count_mismatch: Optional[CountMismatchError] = None
    record_id: Optional[UUID] = None

    @property
    def warnings(self) -> List[str]:
        return [self.count_mismatch.message] if self.count_mismatch else []

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "success": True,
            "part": self.part_number,
            "mode": self.mode.value,
            "method": self.method.value,
            "directionSkipped": self.direction_skipped,
            "files": self.files,
            "timestamps": self.timestamps,
            "warnings": self.warnings,
        }
        if self.count_mismatch is not None:
            payload["countMismatch"] = self.count_mismatch.to_dict()
        if self.record_id is not None:
            payload["recordId"] = str(self.record_id)
        return payload

@dataclass
class FullRunOutcome:
    """
    Result of splitting a complete Listening recording into all four parts.
    """
    original_file: str
    total_duration: float
    part_boundaries: List[float]
    parts: Dict[str, SplitOutcome] = field(default_factory=dict)
    record_id: Optional[UUID] = None

    @property
    def warnings(self) -> List[str]:
        return [w for outcome in self.parts.values() for w in outcome.warnings]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": True,
            "originalFile": self.original_file,
            "totalDuration": self.total_duration,
            "partBoundaries": [round(b, 2) for b in self.part_boundaries],
            "results": {key: outcome.to_dict() for key, outcome in self.parts.items()},
            "warnings": self.warnings,
            "recordId": str(self.record_id) if self.record_id else None,
        }
