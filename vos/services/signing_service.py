"""Document signing sessions."""

import logging
from datetime import datetime
from typing import Optional, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from vos.core.errors import ConflictError, ExternalFailureError, ValidationFailedError
from vos.models.enums import SigningDocumentType, SigningStatus
from vos.models.signing_session import SigningSession
from vos.models.user import User
from vos.schemas.signing import SignatureSubmission, SigningRequest
from vos.services.access_tokens import resolve_signing_token
from vos.services.graph import CaseGraph, load_case_graph
from vos.services.side_effects import DispatchReport, SideEffectDispatcher

logger = logging.getLogger(__name__)


async def create_signing_request(
    db: AsyncSession,
    case_id: str,
    data: SigningRequest,
    dispatcher: SideEffectDispatcher,
    user: Optional[User] = None,
) -> Tuple[SigningSession, DispatchReport]:
    """
    Render the document to sign and send its signing link.

    Only bills of sale can be generated. The document itself is required, so
    a rendering failure fails the request; the email is a side effect.

    Raises:
        NotFoundError: If the case does not exist
        ValidationFailedError: For unsupported document types
        ExternalFailureError: If the document cannot be rendered
    """
    if data.document_type != SigningDocumentType.BILL_OF_SALE:
        raise ValidationFailedError("Unsupported document type")

    graph = await load_case_graph(db, case_id)
    try:
        rendered = await dispatcher.renderer.render_bill_of_sale(graph)
    except ExternalFailureError:
        raise
    except Exception as e:
        logger.exception("Bill of sale rendering failed for case %s", case_id)
        raise ExternalFailureError(f"Failed to generate bill of sale: {e}") from e

    session = SigningSession(
        case_id=graph.case.id,
        document_type=data.document_type,
        recipient={"name": data.recipient_name, "email": data.recipient_email},
        document_url=rendered.url,
        status=SigningStatus.PENDING,
        created_by=user.id if user else None,
    )
    db.add(session)
    await db.commit()
    logger.info("Signing session %s created for case %s", session.id, graph.case.id)

    report = await dispatcher.signing_requested(graph, session)
    if report.succeeded("signing-link"):
        session.status = SigningStatus.SENT
        session.email_sent_at = datetime.utcnow()
        await db.commit()
    return session, report


async def view_signing_session(db: AsyncSession, token: str) -> Tuple[SigningSession, CaseGraph]:
    """Open a signing link; the first view of a sent session marks it viewed."""
    session = await resolve_signing_token(db, token)
    if session.status == SigningStatus.SENT:
        session.status = SigningStatus.VIEWED
        session.viewed_at = datetime.utcnow()
        await db.commit()
    graph = await load_case_graph(db, session.case_id)
    return session, graph


async def sign_document(db: AsyncSession, token: str, data: SignatureSubmission) -> SigningSession:
    """
    Record the signature and reference the signed document on the transaction.

    Raises:
        ConflictError: If the document was already signed
    """
    session = await resolve_signing_token(db, token)
    if session.status == SigningStatus.SIGNED:
        raise ConflictError("Document already signed")

    now = datetime.utcnow()
    session.signature = data.signature
    session.signed_at = now
    session.status = SigningStatus.SIGNED
    session.signed_document_url = session.document_url

    graph = await load_case_graph(db, session.case_id)
    if graph.transaction is not None:
        documents = dict(graph.transaction.documents or {})
        documents[session.document_type.value] = {
            "url": session.signed_document_url,
            "signedAt": now.isoformat(),
            "signerType": data.signer_type,
            "signingSessionId": session.id,
        }
        graph.transaction.documents = documents
    graph.case.note_activity(f"{session.document_type.value} signed")
    await db.commit()

    logger.info("Signing session %s signed", session.id)
    return session
