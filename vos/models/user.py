"""
User database model
"""
import uuid
from datetime import datetime
from sqlalchemy import Column, String, DateTime
from vos.core.database import Base
from vos.models.enums import UserRole, db_enum
from vos.utils.tokens import generate_session_token


class User(Base):
    """Staff member: admin, agent, estimator or inspector."""
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()), index=True)
    email = Column(String, nullable=False, unique=True, index=True)
    first_name = Column(String, nullable=True)
    last_name = Column(String, nullable=True)
    role = Column(db_enum(UserRole), default=UserRole.AGENT, nullable=False)
    location = Column(String, nullable=True)
    session_token = Column(String(64), default=generate_session_token, nullable=False, unique=True, index=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    def __repr__(self):
        return f"<User(id={self.id}, email={self.email}, role={self.role})>"

    @property
    def full_name(self) -> str:
        return " ".join(part for part in (self.first_name, self.last_name) if part)
