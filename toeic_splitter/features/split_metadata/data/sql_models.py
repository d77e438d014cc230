import uuid
from datetime import datetime, timezone
from sqlalchemy import Column, String, Integer, Float, DateTime, ForeignKey, Boolean, JSON, Uuid, Enum as SQLEnum
from sqlalchemy.orm import relationship
from toeic_splitter.core.database.base import Base
from toeic_splitter.core.common.enums import SplitMethod, SplitMode

def utc_now():
    return datetime.now(timezone.utc)

class FullRunModel(Base):
    """
    One split of a complete Listening recording into its four parts.
    """
    __tablename__ = "full_runs"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    original_file = Column(String, nullable=False)
    split_date = Column(DateTime(timezone=True), default=utc_now, index=True)
    total_duration = Column(Float, nullable=False)
    part_boundaries = Column(JSON, default=list)
    parts = Column(JSON, default=list)

    part_splits = relationship("PartSplitModel", back_populates="full_run")

class PartSplitModel(Base):
    """
    The High-Level Result of splitting one part.
    """
    __tablename__ = "part_splits"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    part_number = Column(Integer, nullable=False, index=True)
    original_file = Column(String, nullable=False)
    split_date = Column(DateTime(timezone=True), default=utc_now, index=True)
    method = Column(SQLEnum(SplitMethod), nullable=False)
    mode = Column(SQLEnum(SplitMode), nullable=False)
    question_range = Column(String, nullable=False)
    is_grouped = Column(Boolean, nullable=False, default=False)
    group_count = Column(Integer, nullable=True)
    questions_per_group = Column(Integer, nullable=True)

    # Full runs only: absolute position of the part in the full recording
    full_run_id = Column(Uuid(as_uuid=True), ForeignKey("full_runs.id"), nullable=True)
    part_start = Column(Float, nullable=True)
    part_end = Column(Float, nullable=True)

    # Set when the split finished with a count mismatch
    warning = Column(String, nullable=True)

    full_run = relationship("FullRunModel", back_populates="part_splits")
    segments = relationship(
        "SplitSegmentModel",
        back_populates="part_split",
        cascade="all, delete-orphan",
        order_by="SplitSegmentModel.position"
    )

class SplitSegmentModel(Base):
    """
    One produced audio file.
    """
    __tablename__ = "split_segments"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    part_split_id = Column(Uuid(as_uuid=True), ForeignKey("part_splits.id"), nullable=False)
    position = Column(Integer, nullable=False)

    question = Column(Integer, nullable=True)
    group = Column(Integer, nullable=True)
    first_question = Column(Integer, nullable=True)
    last_question = Column(Integer, nullable=True)

    filename = Column(String, nullable=False)
    path = Column(String, nullable=False)
    start_time = Column(Float, nullable=False)
    end_time = Column(Float, nullable=False)

    part_split = relationship("PartSplitModel", back_populates="segments")
