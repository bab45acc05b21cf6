"""
Enum definitions for database models
"""
import enum
from sqlalchemy import Enum


class Stage(int, enum.Enum):
    """Fixed pipeline stages; the numbers are a client-facing contract"""
    INTAKE = 1
    INSPECTION_SCHEDULING = 2
    INSPECTION = 3
    QUOTE_PREPARATION = 4
    OFFER_DECISION = 5
    PAPERWORK = 6
    COMPLETION = 7


class StageStatus(str, enum.Enum):
    """Per-stage progress marker"""
    PENDING = "pending"
    ACTIVE = "active"
    COMPLETE = "complete"


class CaseStatus(str, enum.Enum):
    """Overall case disposition"""
    NEW = "new"
    ACTIVE = "active"
    SCHEDULED = "scheduled"
    QUOTE_READY = "quote-ready"
    NEGOTIATING = "negotiating"
    QUOTE_DECLINED = "quote-declined"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class CasePriority(str, enum.Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class InspectionStatus(str, enum.Enum):
    SCHEDULED = "scheduled"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class QuoteStatus(str, enum.Enum):
    DRAFT = "draft"
    READY = "ready"
    PRESENTED = "presented"
    ACCEPTED = "accepted"
    NEGOTIATING = "negotiating"
    DECLINED = "declined"
    EXPIRED = "expired"


class OfferDecision(str, enum.Enum):
    """Customer response to a quote; accepted/declined lock the quote"""
    PENDING = "pending"
    ACCEPTED = "accepted"
    NEGOTIATING = "negotiating"
    DECLINED = "declined"


class PaymentStatus(str, enum.Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


class PayoffStatus(str, enum.Enum):
    NOT_REQUIRED = "not_required"
    PENDING = "pending"
    CONFIRMED = "confirmed"
    COMPLETED = "completed"


class UserRole(str, enum.Enum):
    ADMIN = "admin"
    AGENT = "agent"
    ESTIMATOR = "estimator"
    INSPECTOR = "inspector"


class SigningDocumentType(str, enum.Enum):
    BILL_OF_SALE = "bill-of-sale"
    TITLE_TRANSFER = "title-transfer"
    OTHER = "other"


class SigningStatus(str, enum.Enum):
    PENDING = "pending"
    SENT = "sent"
    VIEWED = "viewed"
    SIGNED = "signed"
    EXPIRED = "expired"
    CANCELLED = "cancelled"


class CustomerSource(str, enum.Enum):
    CONTACT_FORM = "contact_form"
    WALK_IN = "walk_in"
    PHONE = "phone"
    ONLINE = "online"
    ON_THE_ROAD = "on_the_road"
    SOCIAL_MEDIA = "social_media"
    OTHER = "other"


class TitleStatus(str, enum.Enum):
    CLEAN = "clean"
    SALVAGE = "salvage"
    REBUILT = "rebuilt"
    LEMON = "lemon"
    FLOOD = "flood"
    JUNK = "junk"
    NOT_SURE = "not-sure"


class LoanStatus(str, enum.Enum):
    PAID_OFF = "paid-off"
    STILL_HAS_LOAN = "still-has-loan"
    NOT_SURE = "not-sure"


def db_enum(enum_cls: type) -> Enum:
    """Column type that stores the enum's value (e.g. "quote-ready"), not its name"""
    return Enum(
        enum_cls,
        values_callable=lambda members: [m.value for m in members],
        native_enum=False,
        validate_strings=True,
        length=32,
    )
