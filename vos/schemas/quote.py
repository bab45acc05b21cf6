"""
Quote Pydantic schemas
"""
from datetime import datetime
from typing import Any, Dict, Optional
from pydantic import Field
from vos.models.enums import OfferDecision, PaymentStatus, PayoffStatus, QuoteStatus
from vos.schemas.common import CamelModel, ContactInfo


class EstimatorAssignment(CamelModel):
    """Schema for assigning an estimator to a case"""
    estimator: ContactInfo


class QuoteSubmission(CamelModel):
    """
    Offer terms an estimator may set.

    Status and offer decision are deliberately absent: status is forced to
    'ready' and the decision can only change through the decision endpoint.
    """
    offer_amount: Optional[float] = Field(None, ge=0)
    expiry_date: Optional[datetime] = None
    notes: Optional[str] = None
    title_reminder: Optional[bool] = None
    estimated_value: Optional[float] = Field(None, ge=0)
    estimator: Optional[ContactInfo] = None


class OfferDecisionIn(CamelModel):
    decision: OfferDecision
    counter_offer: Optional[float] = Field(None, ge=0)
    customer_notes: Optional[str] = None
    final_amount: Optional[float] = Field(None, ge=0)
    reason: Optional[str] = None


class OfferDecisionRequest(CamelModel):
    offer_decision: OfferDecisionIn


class OfferDecisionOut(CamelModel):
    decision: OfferDecision = OfferDecision.PENDING
    counter_offer: Optional[float] = None
    customer_notes: Optional[str] = None
    final_amount: Optional[float] = None
    decision_date: Optional[datetime] = None
    reason: Optional[str] = None


class BillOfSaleIn(CamelModel):
    """Bill of sale fields; keys follow the form's spelling (sellerDLNumber, vehicleVIN)"""
    seller_name: Optional[str] = None
    seller_address: Optional[str] = None
    seller_city: Optional[str] = None
    seller_state: Optional[str] = None
    seller_zip: Optional[str] = None
    seller_phone: Optional[str] = None
    seller_email: Optional[str] = None
    seller_dl_number: Optional[str] = Field(None, alias="sellerDLNumber")
    seller_dl_state: Optional[str] = Field(None, alias="sellerDLState")
    vehicle_vin: Optional[str] = Field(None, alias="vehicleVIN")
    vehicle_year: Optional[str] = None
    vehicle_make: Optional[str] = None
    vehicle_model: Optional[str] = None
    vehicle_color: Optional[str] = None
    vehicle_body_style: Optional[str] = None
    vehicle_license_plate: Optional[str] = None
    vehicle_license_state: Optional[str] = None
    vehicle_title_number: Optional[str] = None
    vehicle_mileage: Optional[str] = None
    sale_date: Optional[str] = None
    sale_time: Optional[str] = None
    sale_price: Optional[float] = Field(None, ge=0)
    odometer_reading: Optional[str] = None
    odometer_accurate: bool = True
    title_status: Optional[str] = None
    known_defects: Optional[str] = None
    as_is_acknowledgment: bool = False
    notary_required: bool = False
    notary_name: Optional[str] = None
    notary_commission_expiry: Optional[str] = None
    witness_name: Optional[str] = None
    witness_phone: Optional[str] = None


class BankDetailsIn(CamelModel):
    bank_name: str = ""
    loan_number: str = ""
    payoff_amount: float = Field(0, ge=0)


class PaperworkSubmission(CamelModel):
    """Paperwork & payment stage form"""
    bill_of_sale: BillOfSaleIn = Field(default_factory=BillOfSaleIn)
    bank_details: BankDetailsIn = Field(default_factory=BankDetailsIn)
    payoff_status: PayoffStatus = PayoffStatus.NOT_REQUIRED
    payoff_notes: str = ""
    preferred_payment_method: str = "Wire"
    status: PaymentStatus = PaymentStatus.PENDING
    submitted_at: Optional[datetime] = None


class QuoteResponse(CamelModel):
    """Schema for quote response"""
    id: str
    case_id: str
    vehicle_id: Optional[str] = None
    customer_id: Optional[str] = None
    inspection_id: Optional[str] = None
    estimator: Optional[ContactInfo] = None
    offer_amount: Optional[float] = None
    expiry_date: Optional[datetime] = None
    notes: Optional[str] = None
    title_reminder: bool
    estimated_value: Optional[float] = None
    status: QuoteStatus
    access_token: str = Field(..., description="40-hex-character link token")
    offer_decision: OfferDecisionOut = Field(default_factory=OfferDecisionOut)
    paperwork: Optional[Dict[str, Any]] = None
    email_sent: bool
    generated_at: datetime


class QuoteTokenView(QuoteResponse):
    """Quote as seen through its token link"""
    vehicle: Optional[Dict[str, Any]] = None
    customer: Optional[Dict[str, Any]] = None
    inspection: Optional[Dict[str, Any]] = None
