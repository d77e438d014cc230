from typing import List, Optional


class SplitterError(RuntimeError):
    """
    Base of every failure a split request can surface.
    Carries a stable code so callers can report a structured error.
    """
    code = "splitter_error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"error": self.code, "message": self.message}


class InvalidPartError(SplitterError):
    code = "invalid_part"

    def __init__(self, part_number) -> None:
        super().__init__(f"Invalid part number: {part_number!r}. Expected one of 1, 2, 3, 4")
        self.part_number = part_number


class InvalidInputError(SplitterError):
    """Missing audio, malformed timestamps, or a wrong manual timestamp count."""
    code = "invalid_input"


class InvalidWindowError(SplitterError):
    code = "invalid_window"


class SilenceDetectionError(SplitterError):
    code = "silence_detection_failed"


class MediaCutFailure(SplitterError):
    code = "media_cut_failed"

    def __init__(self, message: str, label: Optional[str] = None) -> None:
        super().__init__(message)
        self.label = label


class CountMismatchError(SplitterError):
    """
    The numbered segments do not match the part's fixed count.
    The segments that were produced travel with the error for inspection.
    """
    code = "count_mismatch"

    def __init__(self,
                 part_number: int,
                 expected: int,
                 actual: int,
                 segments: Optional[List] = None,
                 unnumbered: int = 0) -> None:
        message = f"Part {part_number}: expected {expected} segments but got {actual}"
        if unnumbered:
            message += f"; {unnumbered} extra window(s) left unnumbered"
        super().__init__(message)
        self.part_number = part_number
        self.expected = expected
        self.actual = actual
        self.segments = list(segments or [])
        self.unnumbered = unnumbered

    def to_dict(self) -> dict:
        payload = super().to_dict()
        payload.update({"expected": self.expected, "actual": self.actual, "unnumbered": self.unnumbered})
        return payload
