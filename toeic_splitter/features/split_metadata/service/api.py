from typing import Any, Dict, List
from ..data.repository import SqlMetadataRepository

def get_all_metadata() -> Dict[str, Any]:
    """
    Public Service API: Every recorded split, grouped by part, plus full runs.
    """
    return SqlMetadataRepository().get_all_metadata()

def get_part_metadata(part_number: int) -> List[Dict[str, Any]]:
    """
    Public Service API: Recorded splits of one part, oldest first.
    """
    return SqlMetadataRepository().get_part_records(part_number)
