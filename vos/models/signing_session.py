"""
SigningSession database model
"""
import uuid
from datetime import datetime, timedelta
from sqlalchemy import Column, String, DateTime, ForeignKey, JSON, Text
from vos.core.config import settings
from vos.core.database import Base
from vos.models.enums import SigningDocumentType, SigningStatus, db_enum
from vos.utils.tokens import generate_signing_token


def default_expiry() -> datetime:
    return datetime.utcnow() + timedelta(days=settings.SIGNING_SESSION_TTL_DAYS)


class SigningSession(Base):
    """
    Tokenized link sent to a signer for one generated document.

    Unlike inspection/quote tokens, signing tokens expire; the first access
    after expires_at moves the session to 'expired'.
    """
    __tablename__ = "signing_sessions"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()), index=True)
    case_id = Column(String(36), ForeignKey("cases.id", ondelete="CASCADE"), nullable=False, index=True)
    document_type = Column(db_enum(SigningDocumentType), nullable=False)
    recipient = Column(JSON, nullable=False)
    token = Column(String(64), default=generate_signing_token, nullable=False, unique=True, index=True)
    status = Column(db_enum(SigningStatus), default=SigningStatus.PENDING, nullable=False)
    document_url = Column(String, nullable=True)
    signed_document_url = Column(String, nullable=True)
    signature = Column(Text, nullable=True)
    email_sent_at = Column(DateTime, nullable=True)
    viewed_at = Column(DateTime, nullable=True)
    signed_at = Column(DateTime, nullable=True)
    expires_at = Column(DateTime, default=default_expiry, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    created_by = Column(String(36), nullable=True)

    def __repr__(self):
        return f"<SigningSession(id={self.id}, case_id={self.case_id}, status={self.status})>"

    def is_expired(self, now: datetime = None) -> bool:
        return (now or datetime.utcnow()) > self.expires_at
