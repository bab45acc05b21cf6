"""Resolution of tokenized links.

Each resolver searches only its own table, so an inspection token can never
open a quote and vice versa. Inspection and quote tokens do not expire;
signing tokens do.
"""

import logging
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from vos.core.errors import NotFoundError, ValidationFailedError
from vos.models.enums import SigningStatus
from vos.models.inspection import Inspection
from vos.models.quote import Quote
from vos.models.signing_session import SigningSession

logger = logging.getLogger(__name__)


def _invalid(kind: str, token: str) -> NotFoundError:
    logger.warning("Rejected %s token %s...", kind, (token or "")[:8])
    return NotFoundError(f"Invalid or expired {kind} token")


async def resolve_inspection_token(db: AsyncSession, token: str) -> Inspection:
    result = await db.execute(select(Inspection).where(Inspection.access_token == token))
    inspection = result.scalar_one_or_none()
    if not inspection:
        raise _invalid("inspection", token)
    return inspection


async def resolve_quote_token(db: AsyncSession, token: str) -> Quote:
    result = await db.execute(select(Quote).where(Quote.access_token == token))
    quote = result.scalar_one_or_none()
    if not quote:
        raise _invalid("quote", token)
    return quote


async def resolve_signing_token(db: AsyncSession, token: str, now: datetime = None) -> SigningSession:
    """Resolve a signing token, expiring the session on first late access.

    Raises:
        NotFoundError: unknown token
        ValidationFailedError: session expired (status is persisted as 'expired')
    """
    result = await db.execute(select(SigningSession).where(SigningSession.token == token))
    session = result.scalar_one_or_none()
    if not session:
        raise _invalid("signing", token)

    if session.status == SigningStatus.EXPIRED:
        raise ValidationFailedError("Signing session has expired")

    if session.status != SigningStatus.SIGNED and session.is_expired(now):
        session.status = SigningStatus.EXPIRED
        await db.commit()
        logger.info("Signing session %s expired", session.id)
        raise ValidationFailedError("Signing session has expired")

    return session
