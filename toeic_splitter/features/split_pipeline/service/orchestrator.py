import logging
import tempfile
from contextlib import contextmanager
from functools import partial
from pathlib import Path
from typing import Any, Callable, Iterator, List, Optional, Sequence, Tuple, Union

from toeic_splitter.core.common.enums import SplitMode
from toeic_splitter.core.config.settings import settings
from toeic_splitter.core.errors import InvalidInputError
from toeic_splitter.core.shared_types import MediaFile, TimeWindow

from toeic_splitter.features.exam_parts.data.toeic_table import PartSpecTable
from toeic_splitter.features.exam_parts.domain.interfaces import IPartSpecTable
from toeic_splitter.features.exam_parts.domain.models import PartSpec
from toeic_splitter.features.silence_detection.data.ffmpeg_adapter import FFmpegSilenceDetector
from toeic_splitter.features.silence_detection.domain.interfaces import ISilenceEventSource
from toeic_splitter.features.silence_detection.domain.models import DetectionConfig, SilenceEvent
from toeic_splitter.features.silence_detection.service.api import default_detection_config
from toeic_splitter.features.segmentation.domain.models import HeuristicConfig
from toeic_splitter.features.segmentation.service.api import (
    PartPlan,
    parse_manual_timestamps,
    plan_automatic_split,
    plan_manual_windows,
)
from toeic_splitter.features.segmentation.service.cut_points import (
    build_windows,
    interior_end_times,
    longest_gap_cut_points,
)
from toeic_splitter.features.audio_cutting.data.ffmpeg_adapter import FFmpegCutAdapter
from toeic_splitter.features.audio_cutting.data.ffprobe_adapter import FFprobeDurationProbe
from toeic_splitter.features.audio_cutting.domain.interfaces import IDurationProbe, IMediaCutter
from toeic_splitter.features.audio_cutting.domain.models import CutRequest, CutResult, EncodingConfig
from toeic_splitter.features.audio_cutting.service.runner import ConcurrentCutRunner
from toeic_splitter.features.split_metadata.data.repository import SqlMetadataRepository
from toeic_splitter.features.split_metadata.domain.interfaces import IMetadataRecorder
from toeic_splitter.features.split_metadata.domain.models import FullRunRecord, PartSplitRecord, SegmentRecord

from ..domain.models import DEFAULT_PART_BOUNDARY_FRACTIONS, FullRunOutcome, SplitOutcome

logger = logging.getLogger(__name__)


class SplitOrchestrator:
    """
    Drives one split request end to end:
    probe -> detect silence -> plan windows -> cut concurrently -> record.

    Every collaborator is injectable; the defaults talk to FFmpeg and the
    metadata database.
    """

    def __init__(self,
                 cutter: Optional[IMediaCutter] = None,
                 silence_source: Optional[ISilenceEventSource] = None,
                 recorder: Optional[IMetadataRecorder] = None,
                 probe: Optional[IDurationProbe] = None,
                 part_table: Optional[IPartSpecTable] = None,
                 config: Optional[HeuristicConfig] = None,
                 detection_config: Optional[DetectionConfig] = None,
                 encoding: Optional[EncodingConfig] = None,
                 output_dir: Optional[Path] = None,
                 max_workers: Optional[int] = None):
        self.cutter = cutter or FFmpegCutAdapter()
        self.silence_source = silence_source or FFmpegSilenceDetector()
        self.recorder = recorder or SqlMetadataRepository()
        self.probe = probe or FFprobeDurationProbe()
        self.part_table = part_table or PartSpecTable()
        self.config = config or HeuristicConfig()
        self.detection_config = detection_config or default_detection_config()
        self.encoding = encoding or EncodingConfig()
        self.output_dir = Path(output_dir) if output_dir else settings.OUTPUT_DIR
        self.runner = ConcurrentCutRunner(self.cutter, self.encoding, max_workers)

    # --- Public operations ---

    def auto_split_part(self,
                        audio_path: Union[str, Path],
                        part_number: int,
                        original_name: Optional[str] = None,
                        cleanup_input: bool = False) -> SplitOutcome:
        """
        Splits one part using silence detection (or even division).
        A count mismatch does not fail the request: the outcome carries it as
        a warning next to the segments that were produced.
        """
        lookup = partial(self.part_table.lookup, part_number)
        with self._scoped_input(audio_path, cleanup_input, lookup) as (source, spec):
            original_file = original_name or source.name
            duration = self.probe.probe_duration(source)
            logger.info(f"Splitting Part {spec.part_number} ({spec.question_range}, duration: {duration:.2f}s)...")

            events = self.silence_source.detect(source, self.detection_config)
            plan = plan_automatic_split(spec, events, duration, self.config)
            logger.info(f"Using method: {plan.method.value}")

            results = self.runner.run(source, plan.assignment.segments, self._part_dir(spec), Path(original_file).stem)

        return self._finish(plan, results, original_file, SplitMode.AUTOMATIC)

    def manual_split_part(self,
                          audio_path: Union[str, Path],
                          part_number: int,
                          timestamps: Union[str, Sequence[Any]],
                          original_name: Optional[str] = None,
                          cleanup_input: bool = False) -> SplitOutcome:
        """
        Splits one part at user-supplied windows, one per question (Parts 1-2)
        or per group (Parts 3-4). Every check runs before any cut starts.
        """
        lookup = partial(self.part_table.lookup, part_number)
        with self._scoped_input(audio_path, cleanup_input, lookup) as (source, spec):
            original_file = original_name or source.name
            windows = parse_manual_timestamps(spec, timestamps)
            duration = self.probe.probe_duration(source)
            plan = plan_manual_windows(spec, windows, duration)

            results = self.runner.run(source, plan.assignment.segments, self._part_dir(spec), Path(original_file).stem)

        return self._finish(plan, results, original_file, SplitMode.MANUAL)

    def split_full_run(self,
                       audio_path: Union[str, Path],
                       original_name: Optional[str] = None,
                       cleanup_input: bool = False) -> FullRunOutcome:
        """
        Splits a complete Listening recording: finds the part boundaries,
        extracts each part to a temporary file, and auto-splits it.

        If any part fails, the files already produced for earlier parts are
        removed and nothing is recorded.
        """
        specs = list(self.part_table.all())

        with self._scoped_input(audio_path, cleanup_input) as (source, _):
            original_file = original_name or source.name
            base_name = Path(original_file).stem
            duration = self.probe.probe_duration(source)

            logger.info("Detecting silence in full LC audio...")
            events = self.silence_source.detect(source, self.detection_config)
            boundaries = self.find_part_boundaries(events, duration, len(specs))
            part_windows = build_windows(boundaries, duration, len(specs))

            for spec, window in zip(specs, part_windows):
                window.validate(duration, label=f"Part {spec.part_number}")

            completed: List[Tuple[PartPlan, List[CutResult], TimeWindow]] = []
            try:
                with tempfile.TemporaryDirectory(prefix="toeic_parts_") as tmp_dir:
                    for spec, window in zip(specs, part_windows):
                        plan, results = self._split_extracted_part(
                            source, spec, window, Path(tmp_dir), f"{base_name}_part{spec.part_number}"
                        )
                        completed.append((plan, results, window))
            except Exception:
                produced = [r.output_path for _, results, _ in completed for r in results]
                logger.error(f"Full run failed; removing {len(produced)} files from completed parts")
                for path in produced:
                    path.unlink(missing_ok=True)
                raise

        parts_summary = [self._part_summary(plan.spec, window) for plan, _, window in completed]
        run_id = self.recorder.append_full_run_record(FullRunRecord(
            original_file=original_file,
            total_duration=duration,
            parts=parts_summary,
            part_boundaries=[round(b, 2) for b in boundaries]
        ))

        outcome = FullRunOutcome(
            original_file=original_file,
            total_duration=duration,
            part_boundaries=boundaries,
            record_id=run_id
        )
        for plan, results, window in completed:
            outcome.parts[f"part{plan.spec.part_number}"] = self._finish(
                plan, results, original_file, SplitMode.FULL_RUN,
                offset=window.start, part_window=window, full_run_id=run_id
            )
        return outcome

    def find_part_boundaries(self, events: Sequence[SilenceEvent], duration: float, part_count: int) -> List[float]:
        """
        Part boundaries of a full recording: the longest pauses when there
        are enough silences, fixed shares of the duration otherwise.
        """
        cut_count = part_count - 1
        end_times = interior_end_times(events, duration)

        if cut_count > 0 and len(end_times) >= cut_count:
            boundaries = longest_gap_cut_points(end_times, cut_count)
            logger.info(f"Part boundaries from silence: {', '.join(f'{b:.2f}s' for b in boundaries)}")
            return boundaries

        fractions = DEFAULT_PART_BOUNDARY_FRACTIONS[:cut_count]
        boundaries = [duration * f for f in fractions]
        logger.info(f"Not enough silence for part boundaries, using estimates: {boundaries}")
        return boundaries

    # --- Internals ---

    @contextmanager
    def _scoped_input(self,
                      audio_path: Union[str, Path, None],
                      cleanup: bool,
                      resolve_part: Optional[Callable[[], PartSpec]] = None) -> Iterator[Tuple[Path, Optional[PartSpec]]]:
        """
        Yields the inbound audio with its part spec (when resolve_part is given)
        and, if asked, removes the audio however the request ends.
        The part is resolved first, before the file is looked at.
        """
        try:
            spec = resolve_part() if resolve_part is not None else None
            if not audio_path:
                raise InvalidInputError("No audio file uploaded")
            source = Path(audio_path)
            if not source.is_file():
                raise InvalidInputError(f"Audio file not found: {source}")
            yield source, spec
        finally:
            if cleanup and audio_path:
                Path(audio_path).unlink(missing_ok=True)

    def _split_extracted_part(self,
                              source: Path,
                              spec: PartSpec,
                              window: TimeWindow,
                              tmp_dir: Path,
                              base_name: str) -> Tuple[PartPlan, List[CutResult]]:
        part_file = tmp_dir / f"part{spec.part_number}.{self.encoding.format}"
        self.cutter.cut(
            CutRequest(source_audio=MediaFile(source), output_audio=MediaFile(part_file), window=window),
            self.encoding
        )

        part_events = self.silence_source.detect(part_file, self.detection_config)
        plan = plan_automatic_split(spec, part_events, window.duration, self.config)

        results = self.runner.run(part_file, plan.assignment.segments, self._part_dir(spec), base_name)
        return plan, results

    def _finish(self,
                plan: PartPlan,
                results: List[CutResult],
                original_file: str,
                mode: SplitMode,
                offset: float = 0.0,
                part_window: Optional[TimeWindow] = None,
                full_run_id=None) -> SplitOutcome:
        spec = plan.spec
        mismatch = plan.assignment.count_mismatch

        files = []
        segment_records = []
        for result in results:
            segment = result.segment
            window = segment.window.shifted(offset)
            url = f"/part{spec.part_number}/{result.filename}"
            files.append({**segment.as_record(), **window.as_dict(), "filename": result.filename, "url": url})
            segment_records.append(SegmentRecord(
                filename=result.filename,
                path=url,
                start=round(window.start, 2),
                end=round(window.end, 2),
                question=getattr(segment, "question_number", None),
                group=getattr(segment, "group_number", None),
                first_question=getattr(segment, "first_question", None),
                last_question=getattr(segment, "last_question", None)
            ))

        record_id = self.recorder.append_part_segments(spec.part_number, PartSplitRecord(
            original_file=original_file,
            method=plan.method,
            mode=mode,
            question_range=spec.question_range,
            segments=segment_records,
            group_count=spec.group_count,
            questions_per_group=spec.questions_per_group,
            part_start=part_window.start if part_window else None,
            part_end=part_window.end if part_window else None,
            full_run_id=full_run_id,
            warning=mismatch.message if mismatch else None
        ))

        return SplitOutcome(
            part_number=spec.part_number,
            mode=mode,
            method=plan.method,
            files=files,
            timestamps=[w.shifted(offset).as_dict() for w in plan.windows],
            direction_skipped=plan.assignment.direction_skipped,
            count_mismatch=mismatch,
            record_id=record_id
        )

    def _part_dir(self, spec: PartSpec) -> Path:
        return self.output_dir / f"part{spec.part_number}"

    @staticmethod
    def _part_summary(spec: PartSpec, window: TimeWindow) -> dict:
        summary = {
            "part": spec.part_number,
            "start": round(window.start, 2),
            "end": round(window.end, 2),
            "isGrouped": spec.is_grouped,
        }
        if spec.is_grouped:
            summary.update({
                "groupCount": spec.group_count,
                "questionsPerGroup": spec.questions_per_group,
                "totalSegments": spec.group_count,
            })
        else:
            summary["segmentCount"] = spec.total_question_count
        return summary
