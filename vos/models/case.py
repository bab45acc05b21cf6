"""
Case database model
"""
import uuid
from datetime import datetime
from sqlalchemy import Column, String, Integer, Float, Boolean, DateTime, ForeignKey, JSON
from vos.core.database import Base
from vos.models.enums import CaseStatus, CasePriority, StageStatus, Stage, db_enum


def default_stage_statuses() -> dict:
    """Fresh case: intake active, every later stage pending"""
    return {
        str(stage.value): (StageStatus.ACTIVE.value if stage == Stage.INTAKE else StageStatus.PENDING.value)
        for stage in Stage
    }


def default_completion() -> dict:
    return {
        "thankYouSent": False,
        "sentAt": None,
        "leaveBehinds": {
            "vehicleLeft": False,
            "keysHandedOver": False,
            "documentsReceived": False,
        },
        "pdfGenerated": False,
        "completedAt": None,
        "titleConfirmation": False,
    }


class Case(Base):
    """
    Case model, the aggregate root of one vehicle-purchase workflow.

    Stage tuple:
    - current_stage: 1..7 (intake → completion)
    - stage_statuses: {"1".."7": pending|active|complete}
    - status: overall disposition

    The inspection/quote/transaction ids are forward references only. Each
    sub-record carries the authoritative case_id; the workflow services write
    both sides and repair the forward side by re-querying case_id.
    """
    __tablename__ = "cases"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()), index=True)
    customer_id = Column(String(36), ForeignKey("customers.id", ondelete="SET NULL"), nullable=True, index=True)
    vehicle_id = Column(String(36), ForeignKey("vehicles.id", ondelete="SET NULL"), nullable=True, index=True)
    inspection_id = Column(String(36), nullable=True, index=True)
    quote_id = Column(String(36), nullable=True, index=True)
    transaction_id = Column(String(36), nullable=True, index=True)
    estimator_id = Column(String(36), nullable=True)  # best-effort link to a User

    current_stage = Column(Integer, default=Stage.INTAKE.value, nullable=False)
    stage_statuses = Column(JSON, default=default_stage_statuses, nullable=False)
    status = Column(db_enum(CaseStatus), default=CaseStatus.NEW, nullable=False, index=True)
    priority = Column(db_enum(CasePriority), default=CasePriority.MEDIUM, nullable=False)
    estimated_value = Column(Float, nullable=True)

    documents = Column(JSON, default=dict, nullable=False)
    thank_you_sent = Column(Boolean, default=False, nullable=False)
    completion = Column(JSON, default=default_completion, nullable=False)
    last_activity = Column(JSON, nullable=True)
    pdf_case_file = Column(String, nullable=True)

    created_by = Column(String(36), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    def __repr__(self):
        return f"<Case(id={self.id}, stage={self.current_stage}, status={self.status})>"

    def note_activity(self, description: str):
        """Record the latest activity shown on the case dashboard"""
        self.last_activity = {
            "description": description,
            "timestamp": datetime.utcnow().isoformat(),
        }
