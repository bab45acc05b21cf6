"""
Pydantic schemas for request/response validation
"""
from vos.schemas.common import ApiResponse, CamelModel, ContactInfo
from vos.schemas.case import (
    CaseCreate,
    CaseUpdate,
    CaseResponse,
    CaseListResponse,
    CaseCompletionResponse,
    CustomerIntake,
    IntakeReceipt,
    StageOverride,
    StatusOverride,
    CompletionChecklist,
    PaperworkResult,
    PayoffResult,
)
from vos.schemas.inspection import (
    InspectionSchedule,
    InspectionSubmission,
    InspectionResponse,
    InspectionTokenView,
)
from vos.schemas.quote import (
    EstimatorAssignment,
    QuoteSubmission,
    OfferDecisionRequest,
    PaperworkSubmission,
    QuoteResponse,
    QuoteTokenView,
)
from vos.schemas.transaction import PayoffConfirmation, TransactionResponse
from vos.schemas.user import UserCreate, UserResponse, UserCreatedResponse
from vos.schemas.signing import SigningRequest, SignatureSubmission, SigningSessionResponse, SigningLink
from vos.schemas.time_tracking import StageTimeIn, TimeTrackingResponse

__all__ = [
    "ApiResponse",
    "CamelModel",
    "ContactInfo",
    "CaseCreate",
    "CaseUpdate",
    "CaseResponse",
    "CaseListResponse",
    "CaseCompletionResponse",
    "CustomerIntake",
    "IntakeReceipt",
    "StageOverride",
    "StatusOverride",
    "CompletionChecklist",
    "PaperworkResult",
    "PayoffResult",
    "InspectionSchedule",
    "InspectionSubmission",
    "InspectionResponse",
    "InspectionTokenView",
    "EstimatorAssignment",
    "QuoteSubmission",
    "OfferDecisionRequest",
    "PaperworkSubmission",
    "QuoteResponse",
    "QuoteTokenView",
    "PayoffConfirmation",
    "TransactionResponse",
    "UserCreate",
    "UserResponse",
    "UserCreatedResponse",
    "SigningRequest",
    "SignatureSubmission",
    "SigningSessionResponse",
    "SigningLink",
    "StageTimeIn",
    "TimeTrackingResponse",
]
