"""
Vehicle database model
"""
import uuid
from datetime import datetime
from sqlalchemy import Column, String, Float, Boolean, DateTime, ForeignKey, Text
from vos.core.database import Base
from vos.models.enums import TitleStatus, LoanStatus, db_enum


class Vehicle(Base):
    """Vehicle offered by the customer; paperwork may correct its fields later."""
    __tablename__ = "vehicles"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()), index=True)
    customer_id = Column(String(36), ForeignKey("customers.id", ondelete="SET NULL"), nullable=True, index=True)
    year = Column(String(8), nullable=True)
    make = Column(String, nullable=True)
    model = Column(String, nullable=True)
    current_mileage = Column(String, nullable=True)
    vin = Column(String(32), nullable=True, index=True)
    color = Column(String, nullable=True)
    body_style = Column(String, nullable=True)
    license_plate = Column(String, nullable=True)
    license_state = Column(String, nullable=True)
    title_number = Column(String, nullable=True)
    title_status = Column(db_enum(TitleStatus), default=TitleStatus.CLEAN, nullable=False)
    loan_status = Column(db_enum(LoanStatus), default=LoanStatus.PAID_OFF, nullable=False)
    loan_amount = Column(Float, nullable=True)
    second_set_of_keys = Column(Boolean, default=False, nullable=False)
    has_title_in_possession = Column(Boolean, default=False, nullable=False)
    title_in_own_name = Column(Boolean, default=False, nullable=False)
    known_defects = Column(Text, nullable=True)
    estimated_value = Column(Float, nullable=True)
    pricing_source = Column(String, nullable=True)
    pricing_last_updated = Column(DateTime, nullable=True)
    is_electric = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    def __repr__(self):
        return f"<Vehicle(id={self.id}, {self.description})>"

    @property
    def description(self) -> str:
        return " ".join(part for part in (self.year, self.make, self.model) if part)
