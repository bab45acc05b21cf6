"""
Transaction Pydantic schemas
"""
from datetime import datetime
from typing import Any, Dict, Optional
from pydantic import Field
from vos.models.enums import PaymentStatus, PayoffStatus
from vos.schemas.common import CamelModel


class PayoffConfirmation(CamelModel):
    """Schema for confirming the lender payoff"""
    payoff_status: PayoffStatus
    payoff_notes: Optional[str] = None


class TransactionResponse(CamelModel):
    """Schema for transaction response"""
    id: str
    case_id: str
    vehicle_id: Optional[str] = None
    customer_id: Optional[str] = None
    quote_id: Optional[str] = None
    bill_of_sale: Dict[str, Any] = Field(default_factory=dict)
    bank_details: Dict[str, Any] = Field(default_factory=dict)
    preferred_payment_method: str
    documents: Dict[str, Any] = Field(default_factory=dict)
    payment_status: PaymentStatus
    payoff_status: PayoffStatus
    payoff_notes: Optional[str] = None
    payoff_confirmed_by: Optional[str] = None
    payoff_confirmed_at: Optional[datetime] = None
    payoff_completed_at: Optional[datetime] = None
    pdf_generated: bool
    pdf_path: Optional[str] = None
    submitted_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    created_at: datetime
