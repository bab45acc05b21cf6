"""
Database models package
"""
from vos.models.enums import (
    Stage,
    StageStatus,
    CaseStatus,
    InspectionStatus,
    QuoteStatus,
    OfferDecision,
    PaymentStatus,
    PayoffStatus,
    UserRole,
    SigningStatus,
    SigningDocumentType,
)
from vos.models.customer import Customer
from vos.models.vehicle import Vehicle
from vos.models.case import Case
from vos.models.inspection import Inspection
from vos.models.quote import Quote
from vos.models.transaction import Transaction
from vos.models.time_tracking import TimeTracking
from vos.models.user import User
from vos.models.signing_session import SigningSession

__all__ = [
    "Stage",
    "StageStatus",
    "CaseStatus",
    "InspectionStatus",
    "QuoteStatus",
    "OfferDecision",
    "PaymentStatus",
    "PayoffStatus",
    "UserRole",
    "SigningStatus",
    "SigningDocumentType",
    "Customer",
    "Vehicle",
    "Case",
    "Inspection",
    "Quote",
    "Transaction",
    "TimeTracking",
    "User",
    "SigningSession",
]
