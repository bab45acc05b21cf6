"""
Signing API endpoints (public, authorized by the signing token)
"""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from vos.core.database import get_db
from vos.schemas.common import ApiResponse
from vos.schemas.signing import SignatureSubmission, SigningSessionResponse
from vos.services import signing_service

router = APIRouter()


@router.get("/{token}", response_model=ApiResponse[SigningSessionResponse])
async def get_signing_session(
    token: str,
    db: AsyncSession = Depends(get_db),
):
    """
    Open a signing link.

    Raises:
        NotFoundError 404: Unknown token
        ValidationFailedError 400: Link expired
    """
    session, _ = await signing_service.view_signing_session(db, token)
    return ApiResponse(data=SigningSessionResponse.model_validate(session))


@router.post("/{token}/sign", response_model=ApiResponse[SigningSessionResponse])
async def sign_document(
    token: str,
    submission: SignatureSubmission,
    db: AsyncSession = Depends(get_db),
):
    """
    Raises:
        ConflictError 409: Already signed
        ValidationFailedError 400: Link expired
    """
    session = await signing_service.sign_document(db, token, submission)
    return ApiResponse(data=SigningSessionResponse.model_validate(session))
