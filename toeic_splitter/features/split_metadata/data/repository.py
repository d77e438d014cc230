import logging
from uuid import UUID
from typing import Any, Callable, Dict, List, Optional
from sqlalchemy.orm import Session, selectinload
from toeic_splitter.core.database.connection import SessionLocal
from .sql_models import FullRunModel, PartSplitModel, SplitSegmentModel
from ..domain.interfaces import IMetadataRecorder
from ..domain.models import FullRunRecord, PartSplitRecord

logger = logging.getLogger(__name__)

PART_NUMBERS = (1, 2, 3, 4)


class SqlMetadataRepository(IMetadataRecorder):
    """
    Each append runs in its own transaction, so concurrent splits cannot
    overwrite each other's entries.
    """

    def __init__(self, session_factory: Optional[Callable[[], Session]] = None):
        self.session_factory = session_factory or SessionLocal

    def append_part_segments(self, part_number: int, record: PartSplitRecord) -> UUID:
        with self.session_factory() as db:
            try:
                split = PartSplitModel(
                    part_number=part_number,
                    original_file=record.original_file,
                    split_date=record.split_date,
                    method=record.method,
                    mode=record.mode,
                    question_range=record.question_range,
                    is_grouped=record.is_grouped,
                    group_count=record.group_count,
                    questions_per_group=record.questions_per_group,
                    full_run_id=record.full_run_id,
                    part_start=record.part_start,
                    part_end=record.part_end,
                    warning=record.warning
                )
                split.segments = [
                    SplitSegmentModel(
                        position=position,
                        question=seg.question,
                        group=seg.group,
                        first_question=seg.first_question,
                        last_question=seg.last_question,
                        filename=seg.filename,
                        path=seg.path,
                        start_time=seg.start,
                        end_time=seg.end
                    )
                    for position, seg in enumerate(record.segments)
                ]
                db.add(split)
                db.commit()
                db.refresh(split)
                logger.info(f"Recorded Part {part_number} split {split.id} ({len(record.segments)} segments)")
                return split.id
            except Exception:
                db.rollback()
                raise

    def append_full_run_record(self, record: FullRunRecord) -> UUID:
        with self.session_factory() as db:
            try:
                run = FullRunModel(
                    original_file=record.original_file,
                    split_date=record.split_date,
                    total_duration=record.total_duration,
                    part_boundaries=list(record.part_boundaries),
                    parts=list(record.parts)
                )
                db.add(run)
                db.commit()
                db.refresh(run)
                logger.info(f"Recorded full run {run.id} for {record.original_file}")
                return run.id
            except Exception:
                db.rollback()
                raise

    def get_part_records(self, part_number: int) -> List[Dict[str, Any]]:
        with self.session_factory() as db:
            splits = (
                db.query(PartSplitModel)
                .options(selectinload(PartSplitModel.segments))
                .filter(PartSplitModel.part_number == part_number)
                .order_by(PartSplitModel.split_date)
                .all()
            )
            return [self._serialize_split(s) for s in splits]

    def get_all_metadata(self) -> Dict[str, Any]:
        with self.session_factory() as db:
            runs = db.query(FullRunModel).order_by(FullRunModel.split_date).all()
            full_runs = [self._serialize_run(r) for r in runs]

        return {
            "parts": {f"part{n}": self.get_part_records(n) for n in PART_NUMBERS},
            "fullLC": full_runs
        }

    @staticmethod
    def _serialize_split(split: PartSplitModel) -> Dict[str, Any]:
        entry: Dict[str, Any] = {
            "id": str(split.id),
            "originalFile": split.original_file,
            "splitDate": split.split_date.isoformat() if split.split_date else None,
            "method": split.method.value,
            "mode": split.mode.value,
            "questionRange": split.question_range,
            "isGrouped": split.is_grouped,
        }
        if split.is_grouped:
            entry["groupCount"] = split.group_count
            entry["questionsPerGroup"] = split.questions_per_group
        if split.full_run_id is not None:
            entry["fullRunId"] = str(split.full_run_id)
            entry["partStart"] = split.part_start
            entry["partEnd"] = split.part_end
        if split.warning:
            entry["warning"] = split.warning

        segments = []
        for seg in split.segments:
            if split.is_grouped:
                item = {
                    "group": seg.group,
                    "questionRange": f"{seg.first_question}-{seg.last_question}",
                    "firstQuestion": seg.first_question,
                    "lastQuestion": seg.last_question,
                }
            else:
                item = {"question": seg.question}
            item.update({
                "filename": seg.filename,
                "path": seg.path,
                "start": seg.start_time,
                "end": seg.end_time,
            })
            segments.append(item)
        entry["segments"] = segments
        return entry

    @staticmethod
    def _serialize_run(run: FullRunModel) -> Dict[str, Any]:
        return {
            "id": str(run.id),
            "originalFile": run.original_file,
            "splitDate": run.split_date.isoformat() if run.split_date else None,
            "totalDuration": run.total_duration,
            "parts": run.parts or [],
            "partBoundaries": run.part_boundaries or [],
        }
