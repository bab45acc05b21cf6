"""
Quote database model
"""
import uuid
from datetime import datetime
from sqlalchemy import Column, String, Float, Boolean, DateTime, ForeignKey, JSON, Text
from vos.core.database import Base
from vos.models.enums import QuoteStatus, OfferDecision, db_enum
from vos.utils.tokens import generate_access_token


def default_offer_decision() -> dict:
    return {"decision": OfferDecision.PENDING.value}


class Quote(Base):
    """
    Quote model, one per case.

    Created when an estimator is assigned, or by an authenticated estimator
    submitting a quote for a case that has none yet. Once the offer decision
    (or status) is accepted/declined the offer terms are frozen; see
    vos.services.quote_guard.
    """
    __tablename__ = "quotes"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()), index=True)
    case_id = Column(String(36), ForeignKey("cases.id", ondelete="CASCADE"), nullable=False, unique=True, index=True)
    vehicle_id = Column(String(36), nullable=True)
    customer_id = Column(String(36), nullable=True)
    inspection_id = Column(String(36), nullable=True)

    estimator = Column(JSON, nullable=True)
    offer_amount = Column(Float, nullable=True)
    expiry_date = Column(DateTime, nullable=True)
    notes = Column(Text, nullable=True)
    title_reminder = Column(Boolean, default=True, nullable=False)
    estimated_value = Column(Float, nullable=True)
    status = Column(db_enum(QuoteStatus), default=QuoteStatus.DRAFT, nullable=False)
    access_token = Column(String(40), default=generate_access_token, nullable=False, unique=True, index=True)
    offer_decision = Column(JSON, default=default_offer_decision, nullable=False)
    paperwork = Column(JSON, nullable=True)

    email_sent = Column(Boolean, default=False, nullable=False)
    generated_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    created_by = Column(String(36), nullable=True)

    def __repr__(self):
        return f"<Quote(id={self.id}, case_id={self.case_id}, status={self.status}, decision={self.decision})>"

    @property
    def decision(self) -> str:
        return (self.offer_decision or {}).get("decision") or OfferDecision.PENDING.value

    @property
    def estimator_email(self):
        return (self.estimator or {}).get("email")

    @property
    def agreed_amount(self):
        """Final amount when the decision recorded one, else the offer"""
        final_amount = (self.offer_decision or {}).get("finalAmount")
        return final_amount if final_amount is not None else self.offer_amount
