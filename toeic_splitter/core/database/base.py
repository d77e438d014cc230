# File: toeic_splitter/core/database/base.py

from sqlalchemy.orm import declarative_base

# The shared registry. Metadata models (part splits, segments, full runs) inherit from this.
Base = declarative_base()
