"""
Inspection database model
"""
import uuid
from datetime import datetime
from sqlalchemy import Column, String, Integer, Float, Boolean, DateTime, ForeignKey, JSON, Text
from vos.core.database import Base
from vos.models.enums import InspectionStatus, db_enum
from vos.utils.tokens import generate_access_token


class Inspection(Base):
    """
    Inspection model, created when staff schedule the inspection (stage 2 → 3).

    Features:
    - inspector stored as an embedded contact {firstName, lastName, email, phone}
    - access_token authorizes the external inspector without a login
    - sections: section → question → sub-question answer tree, stored as JSON
    - completed/completed_at/overall_score are written once, by submission
    """
    __tablename__ = "inspections"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()), index=True)
    case_id = Column(String(36), ForeignKey("cases.id", ondelete="CASCADE"), nullable=False, unique=True, index=True)
    vehicle_id = Column(String(36), nullable=True)
    customer_id = Column(String(36), nullable=True)

    inspector = Column(JSON, nullable=True)
    scheduled_date = Column(DateTime, nullable=True)
    scheduled_time = Column(String(16), nullable=True)
    due_by_date = Column(DateTime, nullable=True)
    due_by_time = Column(String(16), nullable=True)
    notes_for_inspector = Column(Text, nullable=True)

    status = Column(db_enum(InspectionStatus), default=InspectionStatus.SCHEDULED, nullable=False)
    access_token = Column(String(40), default=generate_access_token, nullable=False, unique=True, index=True)

    sections = Column(JSON, default=list, nullable=False)
    overall_rating = Column(Integer, nullable=True)
    overall_score = Column(Float, default=0, nullable=False)
    max_possible_score = Column(Float, default=0, nullable=False)
    completed = Column(Boolean, default=False, nullable=False)
    completed_at = Column(DateTime, nullable=True)
    inspection_notes = Column(Text, nullable=True)
    recommendations = Column(JSON, default=list, nullable=False)
    safety_issues = Column(JSON, default=list, nullable=False)
    maintenance_items = Column(JSON, default=list, nullable=False)
    vin_verification = Column(JSON, nullable=True)

    email_sent = Column(Boolean, default=False, nullable=False)
    created_by = Column(String(36), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    def __repr__(self):
        return f"<Inspection(id={self.id}, case_id={self.case_id}, status={self.status})>"

    @property
    def inspector_name(self):
        contact = self.inspector or {}
        if contact.get("firstName") and contact.get("lastName"):
            return f"{contact['firstName']} {contact['lastName']}"
        return None

    @property
    def inspector_email(self):
        return (self.inspector or {}).get("email")
