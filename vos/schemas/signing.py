"""
Signing session Pydantic schemas
"""
from datetime import datetime
from typing import Any, Dict, Optional
from pydantic import EmailStr, Field
from vos.models.enums import SigningDocumentType, SigningStatus
from vos.schemas.common import CamelModel


class SigningRequest(CamelModel):
    recipient_name: str = Field(..., min_length=1)
    recipient_email: EmailStr
    document_type: SigningDocumentType = SigningDocumentType.BILL_OF_SALE


class SignatureSubmission(CamelModel):
    signature: str = Field(..., min_length=1, description="Signature image as a data URL")
    signer_type: Optional[str] = None


class SigningSessionResponse(CamelModel):
    id: str
    case_id: str
    document_type: SigningDocumentType
    recipient: Dict[str, Any]
    token: str
    status: SigningStatus
    document_url: Optional[str] = None
    signed_document_url: Optional[str] = None
    email_sent_at: Optional[datetime] = None
    viewed_at: Optional[datetime] = None
    signed_at: Optional[datetime] = None
    expires_at: datetime
    created_at: datetime


class SigningLink(CamelModel):
    sign_url: str
    expires_at: datetime
    session: SigningSessionResponse
