"""
Case Pydantic schemas
"""
from datetime import datetime
from typing import Any, Dict, List, Optional
from pydantic import EmailStr, Field, field_validator
from vos.models.enums import (
    CaseStatus,
    CasePriority,
    CustomerSource,
    LoanStatus,
    StageStatus,
    TitleStatus,
)
from vos.schemas.common import CamelModel

STAGE_KEYS = {str(n) for n in range(1, 8)}


class CustomerIn(CamelModel):
    """Customer fields captured at intake"""
    first_name: Optional[str] = Field(None, max_length=100)
    middle_initial: Optional[str] = Field(None, max_length=4)
    last_name: Optional[str] = Field(None, max_length=100)
    cell_phone: Optional[str] = None
    home_phone: Optional[str] = None
    email1: Optional[EmailStr] = None
    email2: Optional[EmailStr] = None
    email3: Optional[EmailStr] = None
    hear_about_vos: Optional[str] = Field(None, alias="hearAboutVOS")
    source: Optional[CustomerSource] = None
    received_other_quote: bool = False
    other_quote_offerer: Optional[str] = None
    other_quote_amount: Optional[float] = Field(None, ge=0)
    notes: Optional[str] = None

    @field_validator("source", mode="before")
    @classmethod
    def blank_source(cls, v):
        return v or None


class VehicleIn(CamelModel):
    """Vehicle fields captured at intake"""
    year: Optional[str] = None
    make: Optional[str] = None
    model: Optional[str] = None
    current_mileage: Optional[str] = None
    vin: Optional[str] = Field(None, max_length=32)
    color: Optional[str] = None
    body_style: Optional[str] = None
    license_plate: Optional[str] = None
    license_state: Optional[str] = None
    title_number: Optional[str] = None
    title_status: TitleStatus = TitleStatus.CLEAN
    loan_status: LoanStatus = LoanStatus.PAID_OFF
    loan_amount: Optional[float] = Field(None, ge=0)
    second_set_of_keys: bool = False
    has_title_in_possession: bool = False
    title_in_own_name: bool = False
    known_defects: Optional[str] = None
    estimated_value: Optional[float] = None
    is_electric: bool = False

    @field_validator("year", "current_mileage", mode="before")
    @classmethod
    def numeric_to_str(cls, v):
        if isinstance(v, (int, float)):
            return str(v)
        return v


class AgentInfo(CamelModel):
    store_location: Optional[str] = None


class CaseDocuments(CamelModel):
    """Uploaded file references; opaque to the workflow"""
    driver_license_front: Optional[Any] = None
    driver_license_rear: Optional[Any] = None
    vehicle_title: Optional[Any] = None


class CaseCreate(CamelModel):
    """Schema for staff intake"""
    customer: CustomerIn
    vehicle: VehicleIn
    documents: Optional[CaseDocuments] = None
    agent_info: Optional[AgentInfo] = None


class CustomerIntake(CamelModel):
    """Schema for public self-service intake"""
    customer: CustomerIn
    vehicle: VehicleIn


class CaseUpdate(CamelModel):
    """Schema for editing intake data of an existing case"""
    customer: Optional[CustomerIn] = None
    vehicle: Optional[VehicleIn] = None
    documents: Optional[CaseDocuments] = None
    agent_info: Optional[AgentInfo] = None


class StageOverride(CamelModel):
    """
    Administrative stage override.

    Only the shape is checked (stage 1..7, keys "1".."7"); the values are
    written as given, without consulting the transition table.
    """
    current_stage: int = Field(..., ge=1, le=7)
    stage_statuses: Optional[Dict[str, StageStatus]] = None

    @field_validator("stage_statuses")
    @classmethod
    def validate_stage_keys(cls, v):
        if v is not None and not set(v).issubset(STAGE_KEYS):
            raise ValueError('stageStatuses keys must be "1" through "7"')
        return v


class StatusOverride(CamelModel):
    status: CaseStatus


class LeaveBehinds(CamelModel):
    vehicle_left: bool = False
    keys_handed_over: bool = False
    documents_received: bool = False


class CompletionChecklist(CamelModel):
    """Leave-behind checklist recorded at the customer's location"""
    leave_behinds: LeaveBehinds = Field(default_factory=LeaveBehinds)
    title_confirmation: bool = False


class CustomerResponse(CamelModel):
    id: str
    first_name: Optional[str] = None
    middle_initial: Optional[str] = None
    last_name: Optional[str] = None
    cell_phone: Optional[str] = None
    home_phone: Optional[str] = None
    email1: Optional[str] = None
    email2: Optional[str] = None
    email3: Optional[str] = None
    hear_about_vos: Optional[str] = Field(None, alias="hearAboutVOS")
    source: Optional[CustomerSource] = None
    received_other_quote: bool = False
    other_quote_offerer: Optional[str] = None
    other_quote_amount: Optional[float] = None
    notes: Optional[str] = None
    agent_id: Optional[str] = None
    store_location: Optional[str] = None
    created_at: datetime


class VehicleResponse(CamelModel):
    id: str
    customer_id: Optional[str] = None
    year: Optional[str] = None
    make: Optional[str] = None
    model: Optional[str] = None
    current_mileage: Optional[str] = None
    vin: Optional[str] = None
    color: Optional[str] = None
    body_style: Optional[str] = None
    license_plate: Optional[str] = None
    license_state: Optional[str] = None
    title_number: Optional[str] = None
    title_status: TitleStatus
    loan_status: LoanStatus
    loan_amount: Optional[float] = None
    second_set_of_keys: bool
    has_title_in_possession: bool
    title_in_own_name: bool
    known_defects: Optional[str] = None
    estimated_value: Optional[float] = None
    is_electric: bool
    created_at: datetime
    updated_at: datetime


class CaseResponse(CamelModel):
    """
    Case with its linked sub-records.

    Nested records are filled from the loaded case graph; ids are always
    present so clients can tell "not loaded" from "not created".
    """
    id: str
    customer_id: Optional[str] = None
    vehicle_id: Optional[str] = None
    inspection_id: Optional[str] = None
    quote_id: Optional[str] = None
    transaction_id: Optional[str] = None
    estimator_id: Optional[str] = None
    current_stage: int
    stage_statuses: Dict[str, StageStatus]
    status: CaseStatus
    priority: CasePriority
    estimated_value: Optional[float] = None
    documents: Dict[str, Any] = Field(default_factory=dict)
    thank_you_sent: bool
    completion: Dict[str, Any] = Field(default_factory=dict)
    last_activity: Optional[Dict[str, Any]] = None
    pdf_case_file: Optional[str] = None
    created_by: Optional[str] = None
    created_at: datetime

    customer: Optional[CustomerResponse] = None
    vehicle: Optional[VehicleResponse] = None
    inspection: Optional["InspectionResponse"] = None
    quote: Optional["QuoteResponse"] = None
    transaction: Optional["TransactionResponse"] = None


class CaseCompletionResponse(CamelModel):
    case: CaseResponse
    pdf_url: Optional[str] = None


class GeneratedDocument(CamelModel):
    file_name: str
    pdf_url: str


class CaseListResponse(CamelModel):
    total: int
    cases: List[CaseResponse]


class IntakeReceipt(CamelModel):
    """Public intake acknowledgement; no internal details"""
    case_id: str
    customer_id: str
    vehicle_id: str


from vos.schemas.inspection import InspectionResponse  # noqa: E402
from vos.schemas.quote import QuoteResponse  # noqa: E402
from vos.schemas.transaction import TransactionResponse  # noqa: E402

CaseResponse.model_rebuild()
CaseCompletionResponse.model_rebuild()
CaseListResponse.model_rebuild()


class PaperworkResult(CamelModel):
    case: CaseResponse
    transaction: TransactionResponse


class PayoffResult(CamelModel):
    case: CaseResponse
    transaction: TransactionResponse


def case_response(graph) -> CaseResponse:
    """Build a CaseResponse from a loaded case graph, nesting what is present."""
    response = CaseResponse.model_validate(graph.case)
    if graph.customer is not None:
        response.customer = CustomerResponse.model_validate(graph.customer)
    if graph.vehicle is not None:
        response.vehicle = VehicleResponse.model_validate(graph.vehicle)
    if graph.inspection is not None:
        response.inspection = InspectionResponse.model_validate(graph.inspection)
    if graph.quote is not None:
        response.quote = QuoteResponse.model_validate(graph.quote)
    if graph.transaction is not None:
        response.transaction = TransactionResponse.model_validate(graph.transaction)
    return response
