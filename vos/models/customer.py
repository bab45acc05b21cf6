"""
Customer database model
"""
import uuid
from datetime import datetime
from sqlalchemy import Column, String, Float, Boolean, DateTime, Text
from vos.core.database import Base
from vos.models.enums import CustomerSource, db_enum


class Customer(Base):
    """Seller of the vehicle; created together with its Case at intake."""
    __tablename__ = "customers"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()), index=True)
    first_name = Column(String, nullable=True)
    middle_initial = Column(String(4), nullable=True)
    last_name = Column(String, nullable=True)
    cell_phone = Column(String, nullable=True)
    home_phone = Column(String, nullable=True)
    email1 = Column(String, nullable=True, index=True)
    email2 = Column(String, nullable=True)
    email3 = Column(String, nullable=True)
    hear_about_vos = Column(String, nullable=True)
    source = Column(db_enum(CustomerSource), nullable=True)
    received_other_quote = Column(Boolean, default=False, nullable=False)
    other_quote_offerer = Column(String, nullable=True)
    other_quote_amount = Column(Float, nullable=True)
    notes = Column(Text, nullable=True)
    agent_id = Column(String(36), nullable=True)
    store_location = Column(String, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    def __repr__(self):
        return f"<Customer(id={self.id}, name={self.full_name})>"

    @property
    def full_name(self) -> str:
        return " ".join(part for part in (self.first_name, self.last_name) if part)

    @property
    def primary_email(self):
        return self.email1 or self.email2 or self.email3
