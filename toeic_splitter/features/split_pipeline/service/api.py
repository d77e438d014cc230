from typing import Any, Optional, Sequence, Union
from .orchestrator import SplitOrchestrator
from ..domain.models import FullRunOutcome, SplitOutcome

def auto_split_part(audio_path: str,
                    part_number: int,
                    original_name: Optional[str] = None,
                    cleanup_input: bool = False) -> SplitOutcome:
    """
    Public Service API: Split one part automatically.

    Args:
        audio_path: Recording of a single part.
        part_number: 1-4.
        original_name: Name used for output files and metadata (defaults to the file name).
        cleanup_input: Remove the input file once the request ends, successful or not.
    """
    return SplitOrchestrator().auto_split_part(audio_path, part_number, original_name, cleanup_input)

def manual_split_part(audio_path: str,
                      part_number: int,
                      timestamps: Union[str, Sequence[Any]],
                      original_name: Optional[str] = None,
                      cleanup_input: bool = False) -> SplitOutcome:
    """
    Public Service API: Split one part at user-supplied {start, end} windows.
    """
    return SplitOrchestrator().manual_split_part(audio_path, part_number, timestamps, original_name, cleanup_input)

def split_full_run(audio_path: str,
                   original_name: Optional[str] = None,
                   cleanup_input: bool = False) -> FullRunOutcome:
    """
    Public Service API: Split a full Listening recording into all four parts.
    """
    return SplitOrchestrator().split_full_run(audio_path, original_name, cleanup_input)
