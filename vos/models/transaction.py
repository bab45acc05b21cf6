"""
Transaction database model
"""
import uuid
from datetime import datetime
from sqlalchemy import Column, String, Boolean, DateTime, ForeignKey, JSON, Text
from vos.core.database import Base
from vos.models.enums import PaymentStatus, PayoffStatus, db_enum


class Transaction(Base):
    """
    Transaction model holding the bill of sale, bank payoff details and signed
    document references for a case.

    Created when a quote gets an offer amount or when paperwork is first saved;
    updated in place afterwards, never replaced.
    """
    __tablename__ = "transactions"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()), index=True)
    case_id = Column(String(36), ForeignKey("cases.id", ondelete="CASCADE"), nullable=False, unique=True, index=True)
    vehicle_id = Column(String(36), nullable=True)
    customer_id = Column(String(36), nullable=True)
    quote_id = Column(String(36), nullable=True, index=True)

    bill_of_sale = Column(JSON, default=dict, nullable=False)
    bank_details = Column(JSON, default=dict, nullable=False)
    preferred_payment_method = Column(String, default="Wire", nullable=False)
    documents = Column(JSON, default=dict, nullable=False)

    payment_status = Column(db_enum(PaymentStatus), default=PaymentStatus.PENDING, nullable=False)
    payoff_status = Column(db_enum(PayoffStatus), default=PayoffStatus.NOT_REQUIRED, nullable=False)
    payoff_notes = Column(Text, nullable=True)
    payoff_confirmed_by = Column(String(36), nullable=True)
    payoff_confirmed_at = Column(DateTime, nullable=True)
    payoff_completed_at = Column(DateTime, nullable=True)

    pdf_generated = Column(Boolean, default=False, nullable=False)
    pdf_path = Column(String, nullable=True)
    submitted_at = Column(DateTime, nullable=True)
    completed_at = Column(DateTime, nullable=True)
    created_by = Column(String(36), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    def __repr__(self):
        return f"<Transaction(id={self.id}, case_id={self.case_id}, sale_price={self.sale_price})>"

    @property
    def sale_price(self):
        return (self.bill_of_sale or {}).get("salePrice")
