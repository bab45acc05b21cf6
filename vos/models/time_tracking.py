"""
TimeTracking database model
"""
import uuid
from datetime import datetime
from sqlalchemy import Column, String, Integer, DateTime, ForeignKey, JSON
from vos.core.database import Base

STAGE_TIME_KEYS = (
    "intake",
    "scheduleInspection",
    "inspection",
    "quotePreparation",
    "offerDecision",
    "paperwork",
    "completion",
)


class TimeTracking(Base):
    """Per-case time spent in each stage, in milliseconds."""
    __tablename__ = "time_tracking"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()), index=True)
    case_id = Column(String(36), ForeignKey("cases.id", ondelete="CASCADE"), nullable=False, unique=True, index=True)
    stage_times = Column(JSON, default=dict, nullable=False)
    total_time = Column(Integer, default=0, nullable=False)
    last_updated = Column(DateTime, default=datetime.utcnow, nullable=False)

    def __repr__(self):
        return f"<TimeTracking(case_id={self.case_id}, total_time={self.total_time})>"
