import threading
import uuid
import pytest
from pathlib import Path

from toeic_splitter.core.common.enums import SplitMethod, SplitMode
from toeic_splitter.core.errors import (
    InvalidInputError,
    InvalidPartError,
    InvalidWindowError,
    MediaCutFailure,
)
from toeic_splitter.features.audio_cutting.domain.interfaces import IDurationProbe, IMediaCutter
from toeic_splitter.features.silence_detection.domain.interfaces import ISilenceEventSource
from toeic_splitter.features.silence_detection.domain.models import SilenceEvent, SilenceEventKind
from toeic_splitter.features.split_metadata.data.repository import SqlMetadataRepository
from toeic_splitter.features.split_metadata.domain.interfaces import IMetadataRecorder
from toeic_splitter.features.split_metadata.service.api import get_part_metadata
from toeic_splitter.features.split_pipeline.service.orchestrator import SplitOrchestrator


# --- Fakes ---

class FakeProbe(IDurationProbe):
    def __init__(self, durations):
        self.durations = durations
        self.calls = []

    def probe_duration(self, audio_path):
        self.calls.append(audio_path)
        return self.durations[Path(audio_path).name]


class FakeSilence(ISilenceEventSource):
    """Silence end times per file name; every end gets a 1s silence before it."""

    def __init__(self, ends_by_name):
        self.ends_by_name = ends_by_name

    def detect(self, audio_path, config):
        events = []
        for end in self.ends_by_name.get(Path(audio_path).name, []):
            events.append(SilenceEvent(SilenceEventKind.START, end - 1.0))
            events.append(SilenceEvent(SilenceEventKind.END, end))
        return events


class FakeCutter(IMediaCutter):
    def __init__(self, fail_when=None):
        self.fail_when = fail_when
        self.calls = []
        self.lock = threading.Lock()

    def cut(self, request, config):
        with self.lock:
            self.calls.append(request)
        if self.fail_when and self.fail_when in request.output_audio.path.name:
            raise MediaCutFailure(f"cannot write {request.output_audio.path.name}")
        request.output_audio.ensure_parent_dir()
        request.output_audio.path.write_bytes(b"ID3")


class InMemoryRecorder(IMetadataRecorder):
    def __init__(self):
        self.parts = []
        self.runs = []

    def append_part_segments(self, part_number, record):
        self.parts.append((part_number, record))
        return uuid.uuid4()

    def append_full_run_record(self, record):
        run_id = uuid.uuid4()
        self.runs.append((run_id, record))
        return run_id

    def get_part_records(self, part_number):
        return [r for n, r in self.parts if n == part_number]

    def get_all_metadata(self):
        return {"parts": self.parts, "fullLC": self.runs}


# Six questions after 30s of directions, each ending in a pause
PART1_ENDS = [30.0, 40.0, 50.0, 60.0, 70.0, 80.0]


def make_orchestrator(tmp_path, durations, ends=None, cutter=None, recorder=None):
    return SplitOrchestrator(
        cutter=cutter or FakeCutter(),
        silence_source=FakeSilence(ends or {}),
        recorder=recorder or InMemoryRecorder(),
        probe=FakeProbe(durations),
        output_dir=tmp_path / "audio",
        max_workers=4
    )


# --- Automatic ---

def test_auto_split_part1(silent_audio, tmp_path):
    recorder = InMemoryRecorder()
    orchestrator = make_orchestrator(
        tmp_path, {"input.mp3": 100.0}, {"input.mp3": PART1_ENDS}, recorder=recorder
    )

    outcome = orchestrator.auto_split_part(silent_audio, 1, original_name="mock_test.mp3")

    assert outcome.method == SplitMethod.SILENCE_DETECTION
    assert outcome.direction_skipped
    assert outcome.count_mismatch is None
    assert [f["filename"] for f in outcome.files] == [f"mock_test_q{n}.mp3" for n in range(1, 7)]
    assert outcome.files[0]["url"] == "/part1/mock_test_q1.mp3"
    assert (outcome.files[0]["start"], outcome.files[0]["end"]) == (30.0, 40.0)
    assert (tmp_path / "audio" / "part1" / "mock_test_q6.mp3").exists()

    part_number, record = recorder.parts[0]
    assert part_number == 1
    assert record.mode == SplitMode.AUTOMATIC
    assert record.original_file == "mock_test.mp3"
    assert [s.question for s in record.segments] == [1, 2, 3, 4, 5, 6]
    assert record.warning is None


def test_auto_split_reports_count_mismatch(silent_audio, tmp_path):
    recorder = InMemoryRecorder()
    orchestrator = make_orchestrator(tmp_path, {"input.mp3": 70.0}, recorder=recorder)

    outcome = orchestrator.auto_split_part(silent_audio, 1)

    warning = "Part 1: expected 6 segments but got 7; 1 extra window(s) left unnumbered"
    assert outcome.method == SplitMethod.EVEN_DIVISION
    assert [f["filename"] for f in outcome.files] == [f"input_q{n}.mp3" for n in range(1, 7)]
    assert not (tmp_path / "audio" / "part1" / "input_q7.mp3").exists()
    assert outcome.warnings == [warning]
    payload = outcome.to_dict()
    assert payload["countMismatch"]["expected"] == 6
    assert payload["countMismatch"]["actual"] == 7
    assert payload["countMismatch"]["unnumbered"] == 1
    assert recorder.parts[0][1].warning == warning


def test_auto_split_grouped_part(silent_audio, tmp_path):
    orchestrator = make_orchestrator(tmp_path, {"input.mp3": 400.0})

    outcome = orchestrator.auto_split_part(silent_audio, 4, original_name="exam.mp3")

    assert outcome.method == SplitMethod.HYBRID_TIMING
    assert [f["questionRange"] for f in outcome.files][:2] == ["71-73", "74-76"]
    assert outcome.files[-1]["filename"] == "exam_q98-100.mp3"
    assert len(outcome.files) == 10


def test_auto_split_records_to_database(silent_audio, tmp_path):
    orchestrator = make_orchestrator(
        tmp_path, {"input.mp3": 100.0}, {"input.mp3": PART1_ENDS}, recorder=SqlMetadataRepository()
    )

    outcome = orchestrator.auto_split_part(silent_audio, 1, original_name="db_test.mp3")

    records = get_part_metadata(1)
    assert len(records) == 1
    assert records[0]["id"] == str(outcome.record_id)
    assert records[0]["segments"][0]["filename"] == "db_test_q1.mp3"


def test_invalid_part_still_removes_input(silent_audio, tmp_path):
    cutter = FakeCutter()
    orchestrator = make_orchestrator(tmp_path, {"input.mp3": 100.0}, cutter=cutter)

    with pytest.raises(InvalidPartError):
        orchestrator.auto_split_part(silent_audio, 5, cleanup_input=True)

    assert not silent_audio.exists()
    assert cutter.calls == []


def test_invalid_part_rejected_before_the_file_is_checked(tmp_path):
    probe = FakeProbe({})
    orchestrator = SplitOrchestrator(
        cutter=FakeCutter(), silence_source=FakeSilence({}), recorder=InMemoryRecorder(),
        probe=probe, output_dir=tmp_path / "audio"
    )

    with pytest.raises(InvalidPartError):
        orchestrator.auto_split_part(tmp_path / "missing.mp3", 9)
    with pytest.raises(InvalidPartError):
        orchestrator.manual_split_part(None, 0, [])

    assert probe.calls == []


def test_cleanup_after_success(silent_audio, tmp_path):
    orchestrator = make_orchestrator(tmp_path, {"input.mp3": 100.0}, {"input.mp3": PART1_ENDS})

    orchestrator.auto_split_part(silent_audio, 1, cleanup_input=True)

    assert not silent_audio.exists()


def test_missing_input(tmp_path):
    orchestrator = make_orchestrator(tmp_path, {})

    with pytest.raises(InvalidInputError):
        orchestrator.auto_split_part(tmp_path / "missing.mp3", 1)
    with pytest.raises(InvalidInputError):
        orchestrator.auto_split_part(None, 1)


def test_failed_cut_leaves_no_outputs(silent_audio, tmp_path):
    recorder = InMemoryRecorder()
    orchestrator = make_orchestrator(
        tmp_path, {"input.mp3": 100.0}, {"input.mp3": PART1_ENDS},
        cutter=FakeCutter(fail_when="_q4."), recorder=recorder
    )

    with pytest.raises(MediaCutFailure):
        orchestrator.auto_split_part(silent_audio, 1, cleanup_input=True)

    assert list((tmp_path / "audio").rglob("*.mp3")) == []
    assert recorder.parts == []
    assert not silent_audio.exists()


# --- Manual ---

def test_manual_wrong_count_rejected_before_cutting(silent_audio, tmp_path):
    cutter = FakeCutter()
    probe = FakeProbe({"input.mp3": 60.0})
    orchestrator = SplitOrchestrator(
        cutter=cutter, silence_source=FakeSilence({}), recorder=InMemoryRecorder(),
        probe=probe, output_dir=tmp_path / "audio"
    )
    timestamps = [{"start": i * 5.0, "end": (i + 1) * 5.0} for i in range(5)]

    with pytest.raises(InvalidInputError, match="Part 1 requires exactly 6 timestamps"):
        orchestrator.manual_split_part(silent_audio, 1, timestamps)

    assert cutter.calls == []
    assert probe.calls == []


def test_manual_split_grouped(silent_audio, tmp_path):
    recorder = InMemoryRecorder()
    orchestrator = make_orchestrator(tmp_path, {"input.mp3": 300.0}, recorder=recorder)
    timestamps = [{"start": 5.0 + i * 29.0, "end": 5.0 + (i + 1) * 29.0} for i in range(10)]

    outcome = orchestrator.manual_split_part(silent_audio, 4, timestamps, original_name="talks.mp3")

    assert outcome.mode == SplitMode.MANUAL
    assert outcome.method == SplitMethod.MANUAL
    assert outcome.files[0]["filename"] == "talks_q71-73.mp3"
    assert outcome.files[0]["start"] == 5.0
    record = recorder.parts[0][1]
    assert record.group_count == 10
    assert record.segments[-1].last_question == 100


def test_manual_window_past_end_rejected(silent_audio, tmp_path):
    cutter = FakeCutter()
    orchestrator = make_orchestrator(tmp_path, {"input.mp3": 20.0}, cutter=cutter)
    timestamps = [{"start": i * 5.0, "end": (i + 1) * 5.0} for i in range(6)]

    with pytest.raises(InvalidWindowError):
        orchestrator.manual_split_part(silent_audio, 1, timestamps)

    assert cutter.calls == []


# --- Full run ---

FULL_DURATIONS = {"input.mp3": 1000.0}
# Longest gaps end at 100s, 300s and 600s
FULL_ENDS = {"input.mp3": [100.0, 300.0, 600.0], "part1.mp3": PART1_ENDS}


def test_full_run(silent_audio, tmp_path):
    recorder = InMemoryRecorder()
    cutter = FakeCutter()
    orchestrator = make_orchestrator(tmp_path, FULL_DURATIONS, FULL_ENDS, cutter=cutter, recorder=recorder)

    outcome = orchestrator.split_full_run(silent_audio, original_name="full.mp3")

    assert outcome.part_boundaries == [100.0, 300.0, 600.0]
    assert list(outcome.parts) == ["part1", "part2", "part3", "part4"]

    part1 = outcome.parts["part1"]
    assert part1.mode == SplitMode.FULL_RUN
    assert part1.files[0]["filename"] == "full_part1_q1.mp3"
    assert (part1.files[0]["start"], part1.files[0]["end"]) == (30.0, 40.0)

    # No silence inside Part 2: even division, times shifted to the full recording
    part2 = outcome.parts["part2"]
    assert part2.method == SplitMethod.EVEN_DIVISION
    assert part2.timestamps[0]["start"] == 100.0
    assert outcome.warnings == ["Part 2: expected 25 segments but got 26; 1 extra window(s) left unnumbered"]
    assert part2.files[-1]["filename"] == "full_part2_q31.mp3"

    assert len(outcome.parts["part3"].files) == 13
    assert outcome.parts["part4"].files[-1]["filename"] == "full_part4_q98-100.mp3"
    assert outcome.parts["part4"].files[-1]["end"] == 1000.0
    assert (tmp_path / "audio" / "part3" / "full_part3_q32-34.mp3").exists()

    run_id, run = recorder.runs[0]
    assert outcome.record_id == run_id
    assert run.part_boundaries == [100.0, 300.0, 600.0]
    assert [p["part"] for p in run.parts] == [1, 2, 3, 4]
    assert run.parts[2]["groupCount"] == 13
    assert [n for n, _ in recorder.parts] == [1, 2, 3, 4]
    assert all(r.full_run_id == run_id for _, r in recorder.parts)
    assert recorder.parts[1][1].part_start == 100.0


def test_full_run_without_silence_uses_default_boundaries(silent_audio, tmp_path):
    orchestrator = make_orchestrator(tmp_path, FULL_DURATIONS)

    outcome = orchestrator.split_full_run(silent_audio)

    assert outcome.part_boundaries == pytest.approx([150.0, 400.0, 750.0])


def test_full_run_failure_removes_earlier_parts(silent_audio, tmp_path):
    recorder = InMemoryRecorder()
    orchestrator = make_orchestrator(
        tmp_path, FULL_DURATIONS, FULL_ENDS, cutter=FakeCutter(fail_when="_q35-37."), recorder=recorder
    )

    with pytest.raises(MediaCutFailure):
        orchestrator.split_full_run(silent_audio)

    assert list((tmp_path / "audio").rglob("*.mp3")) == []
    assert recorder.runs == []
    assert recorder.parts == []
