"""
Inspection API endpoints

The token routes are public: the 40-character access token in the path is
the only credential the external inspector has.
"""
from typing import List
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from vos.api.deps import dispatch_message, get_dispatcher, require_roles
from vos.core.database import get_db
from vos.models.enums import UserRole
from vos.models.user import User
from vos.schemas.case import CustomerResponse, VehicleResponse
from vos.schemas.common import ApiResponse
from vos.schemas.inspection import InspectionResponse, InspectionSubmission, InspectionTokenView
from vos.services import inspection_service
from vos.services.side_effects import SideEffectDispatcher
from vos.services.users import resolve_user_id

router = APIRouter()


@router.get("/assigned", response_model=ApiResponse[List[InspectionResponse]])
async def assigned_inspections(
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_roles(UserRole.INSPECTOR)),
):
    """Inspections assigned to the current inspector (matched by email)."""
    inspections = await inspection_service.list_assigned_inspections(db, user)
    return ApiResponse(data=[InspectionResponse.model_validate(i) for i in inspections])


@router.get("/{token}", response_model=ApiResponse[InspectionTokenView])
async def get_inspection_by_token(
    token: str,
    db: AsyncSession = Depends(get_db),
):
    """
    Open an inspection through its link.

    The response adds the inspector's display name, a best-effort user id
    for the inspector, and the vehicle and customer being inspected.

    Raises:
        NotFoundError 404: If the token does not match an inspection
    """
    inspection, graph = await inspection_service.get_inspection_by_token(db, token)
    view = InspectionTokenView.model_validate(inspection)
    view.inspector_name = inspection.inspector_name
    view.inspector_id = await resolve_user_id(db, inspection.inspector_email)
    if graph.vehicle is not None:
        view.vehicle = VehicleResponse.model_validate(graph.vehicle).model_dump(mode="json", by_alias=True)
    if graph.customer is not None:
        view.customer = CustomerResponse.model_validate(graph.customer).model_dump(mode="json", by_alias=True)
    return ApiResponse(data=view)


@router.post("/{token}/submit", response_model=ApiResponse[InspectionResponse])
async def submit_inspection(
    token: str,
    submission: InspectionSubmission,
    db: AsyncSession = Depends(get_db),
    dispatcher: SideEffectDispatcher = Depends(get_dispatcher),
):
    """
    Submit the completed inspection.

    Moves the case to stage 4 with status 'quote-ready'. An inspection can
    be submitted only once.

    Raises:
        NotFoundError 404: Unknown token
        ConflictError 409: Already completed
        ValidationFailedError 400: No sections
    """
    graph, report = await inspection_service.submit_inspection(db, token, submission, dispatcher)
    return ApiResponse(
        data=InspectionResponse.model_validate(graph.inspection),
        message=dispatch_message(report),
    )


@router.put("/{token}/draft", response_model=ApiResponse[InspectionResponse])
async def save_inspection_draft(
    token: str,
    submission: InspectionSubmission,
    db: AsyncSession = Depends(get_db),
):
    """Save answers so far; the inspection stays open."""
    inspection = await inspection_service.save_inspection_draft(db, token, submission)
    return ApiResponse(data=InspectionResponse.model_validate(inspection))
