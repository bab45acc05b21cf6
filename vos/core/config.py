"""
Application configuration settings
"""
from pathlib import Path
from typing import List, Optional
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings"""

    PROJECT_NAME: str = "VOS Case Workflow API"
    VERSION: str = "1.0.0"
    DATABASE_URL: str = "sqlite+aiosqlite:///./vos_cases.db"
    LOG_LEVEL: str = "INFO"

    # Links embedded in notifications
    FRONTEND_URL: str = "http://localhost:3000"
    API_URL: str = "http://localhost:8000"

    # Generated documents
    PDF_DIR: Path = Path("./uploads/pdfs")

    # Signing sessions
    SIGNING_SESSION_TTL_DAYS: int = 7

    # Outbound mail (log-only delivery when SMTP_HOST is unset)
    SMTP_HOST: Optional[str] = None
    SMTP_PORT: int = 587
    SMTP_USER: Optional[str] = None
    SMTP_PASSWORD: Optional[str] = None
    SMTP_USE_TLS: bool = True
    MAIL_FROM: str = "no-reply@vos.local"
    ADMIN_EMAILS: List[str] = []

    # Bill of sale buyer defaults
    BUYER_NAME: str = "VOS - Vehicle Offer Service"
    BUYER_ADDRESS: str = "123 Business Ave"
    BUYER_CITY: str = "Business City"
    BUYER_STATE: str = "BC"
    BUYER_ZIP: str = "12345"
    BUYER_BUSINESS_LICENSE: str = "VOS-12345-AB"

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"

settings = Settings()
