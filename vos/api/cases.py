"""
Case API endpoints
"""
from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from vos.api.deps import dispatch_message, get_current_user, get_dispatcher, require_roles
from vos.core.database import get_db
from vos.models.enums import CaseStatus, UserRole
from vos.models.user import User
from vos.schemas.case import (
    CaseCompletionResponse,
    CaseCreate,
    CaseListResponse,
    CaseResponse,
    CaseUpdate,
    CompletionChecklist,
    CustomerIntake,
    GeneratedDocument,
    IntakeReceipt,
    PayoffResult,
    StageOverride,
    StatusOverride,
    case_response,
)
from vos.schemas.common import ApiResponse
from vos.schemas.inspection import InspectionSchedule
from vos.schemas.quote import EstimatorAssignment
from vos.schemas.signing import SigningLink, SigningRequest, SigningSessionResponse
from vos.schemas.time_tracking import TimeTrackingResponse
from vos.schemas.transaction import PayoffConfirmation, TransactionResponse
from vos.services import case_service, inspection_service, quote_service, signing_service, transaction_service
from vos.services.graph import load_case_graph
from vos.services.side_effects import SideEffectDispatcher, signing_link
from vos.services.time_tracking_service import get_time_tracking

router = APIRouter()
intake_router = APIRouter()


@intake_router.post("/customer-intake", response_model=ApiResponse[IntakeReceipt], status_code=201)
async def customer_intake(
    intake: CustomerIntake,
    db: AsyncSession = Depends(get_db),
    dispatcher: SideEffectDispatcher = Depends(get_dispatcher),
):
    """
    Public self-service intake form.

    Creates Customer, Vehicle and Case exactly like a staff intake, without
    an agent. Only the new ids are returned.
    """
    graph, report = await case_service.create_case(
        db, CaseCreate(customer=intake.customer, vehicle=intake.vehicle), dispatcher
    )
    receipt = IntakeReceipt(
        case_id=graph.case.id,
        customer_id=graph.customer.id,
        vehicle_id=graph.vehicle.id,
    )
    return ApiResponse(data=receipt, message=dispatch_message(report))


@router.post("", response_model=ApiResponse[CaseResponse], status_code=201)
async def create_case(
    case_data: CaseCreate,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
    dispatcher: SideEffectDispatcher = Depends(get_dispatcher),
):
    """
    Staff intake: create Customer, Vehicle and Case.

    The case starts at stage 2 (intake complete, inspection scheduling
    active) with status 'new'.

    Args:
        case_data: Customer, vehicle, document references and agent info
        db: Database session
        user: Authenticated staff user
        dispatcher: Side-effect dispatcher

    Returns:
        The created case with customer and vehicle
    """
    graph, report = await case_service.create_case(db, case_data, dispatcher, user=user)
    return ApiResponse(data=case_response(graph), message=dispatch_message(report))


@router.get("", response_model=ApiResponse[CaseListResponse])
async def list_cases(
    status: Optional[CaseStatus] = Query(None, description="Filter by case status"),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """List all cases, newest first."""
    total, graphs = await case_service.list_cases(db, status=status, skip=skip, limit=limit)
    return ApiResponse(data=CaseListResponse(total=total, cases=[case_response(g) for g in graphs]))


@router.get("/estimator", response_model=ApiResponse[CaseListResponse])
async def list_estimator_cases(
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """Cases assigned to the current user as estimator."""
    total, graphs = await case_service.list_cases(db, estimator_id=user.id, skip=skip, limit=limit)
    return ApiResponse(data=CaseListResponse(total=total, cases=[case_response(g) for g in graphs]))


@router.get("/{case_id}", response_model=ApiResponse[CaseResponse])
async def get_case(
    case_id: str,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """
    Get a case with all linked records.

    Raises:
        NotFoundError 404: If case not found
    """
    graph = await load_case_graph(db, case_id)
    return ApiResponse(data=case_response(graph))


@router.put("/{case_id}", response_model=ApiResponse[CaseResponse])
async def update_case(
    case_id: str,
    case_data: CaseUpdate,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """Edit customer, vehicle or document data; the stage is not changed."""
    graph = await case_service.update_case(db, case_id, case_data)
    return ApiResponse(data=case_response(graph))


@router.delete("/{case_id}", response_model=ApiResponse[None])
async def delete_case(
    case_id: str,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_roles(UserRole.ADMIN)),
):
    """
    Delete a case and its time tracking, quote, inspection, transaction,
    signing sessions, vehicle and customer.

    Raises:
        NotFoundError 404: If case not found
        UnauthorizedError 403: If the caller is not an admin
    """
    await case_service.delete_case(db, case_id)
    return ApiResponse(message="Case deleted")


@router.post("/{case_id}/inspection", response_model=ApiResponse[CaseResponse])
async def schedule_inspection(
    case_id: str,
    schedule: InspectionSchedule,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
    dispatcher: SideEffectDispatcher = Depends(get_dispatcher),
):
    """
    Schedule the inspection and email the inspector a tokenized link.

    Moves the case to stage 3 with status 'scheduled'.

    Raises:
        NotFoundError 404: If case not found
        ValidationFailedError 400: If the case has no customer or vehicle
        ConflictError 409: If the inspection is already completed
    """
    graph, report = await inspection_service.schedule_inspection(db, case_id, schedule, dispatcher, user=user)
    return ApiResponse(data=case_response(graph), message=dispatch_message(report))


@router.post("/{case_id}/estimator", response_model=ApiResponse[CaseResponse])
async def assign_estimator(
    case_id: str,
    assignment: EstimatorAssignment,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
    dispatcher: SideEffectDispatcher = Depends(get_dispatcher),
):
    """Assign an estimator; creates the case's quote if it has none."""
    graph, report = await quote_service.assign_estimator(db, case_id, assignment, dispatcher, user=user)
    return ApiResponse(data=case_response(graph), message=dispatch_message(report))


@router.put("/{case_id}/stage", response_model=ApiResponse[CaseResponse])
async def override_stage(
    case_id: str,
    override: StageOverride,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """
    Administrative stage override.

    Writes currentStage/stageStatuses as given. Unlike the workflow
    endpoints, no transition rule is checked.
    """
    await case_service.override_stage(db, case_id, override)
    return ApiResponse(data=case_response(await load_case_graph(db, case_id)))


@router.put("/{case_id}/status", response_model=ApiResponse[CaseResponse])
async def override_status(
    case_id: str,
    override: StatusOverride,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """Administrative status override."""
    await case_service.set_status(db, case_id, override.status)
    return ApiResponse(data=case_response(await load_case_graph(db, case_id)))


@router.post("/{case_id}/complete", response_model=ApiResponse[CaseCompletionResponse])
async def complete_case(
    case_id: str,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
    dispatcher: SideEffectDispatcher = Depends(get_dispatcher),
):
    """
    Complete the case (or cancel it when the offer was declined).

    The case PDF and thank-you email follow the commit; pdfUrl is null when
    rendering failed.
    """
    graph, report = await case_service.complete_case(db, case_id, dispatcher)
    rendered = report.outcome("case-pdf")
    pdf_url = rendered.result.url if rendered and rendered.ok else None
    return ApiResponse(
        data=CaseCompletionResponse(case=case_response(graph), pdf_url=pdf_url),
        message=dispatch_message(report),
    )


@router.get("/{case_id}/pdf", response_model=ApiResponse[CaseCompletionResponse])
async def generate_case_pdf(
    case_id: str,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
    dispatcher: SideEffectDispatcher = Depends(get_dispatcher),
):
    """
    Render the case file PDF now.

    Raises:
        ExternalFailureError 502: If rendering fails
    """
    rendered = await case_service.render_case_pdf(db, case_id, dispatcher.renderer)
    graph = await load_case_graph(db, case_id)
    return ApiResponse(data=CaseCompletionResponse(case=case_response(graph), pdf_url=rendered.url))


@router.get("/{case_id}/bill-of-sale", response_model=ApiResponse[GeneratedDocument])
async def generate_bill_of_sale(
    case_id: str,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
    dispatcher: SideEffectDispatcher = Depends(get_dispatcher),
):
    """
    Render the bill of sale PDF now.

    Raises:
        ExternalFailureError 502: If rendering fails
    """
    rendered = await case_service.render_bill_of_sale(db, case_id, dispatcher.renderer)
    return ApiResponse(data=GeneratedDocument(file_name=rendered.file_name, pdf_url=rendered.url))


@router.post("/{case_id}/completion", response_model=ApiResponse[CaseResponse])
async def record_completion_checklist(
    case_id: str,
    checklist: CompletionChecklist,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """Record the leave-behind checklist."""
    await case_service.record_completion_checklist(db, case_id, checklist)
    return ApiResponse(data=case_response(await load_case_graph(db, case_id)))


@router.post("/{case_id}/payoff-confirmation", response_model=ApiResponse[PayoffResult])
async def confirm_payoff(
    case_id: str,
    confirmation: PayoffConfirmation,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """
    Confirm the lender payoff.

    Raises:
        NotFoundError 404: If the case has no transaction
    """
    graph = await transaction_service.confirm_payoff(db, case_id, confirmation, user=user)
    return ApiResponse(data=PayoffResult(
        case=case_response(graph),
        transaction=TransactionResponse.model_validate(graph.transaction),
    ))


@router.get("/{case_id}/time-tracking", response_model=ApiResponse[TimeTrackingResponse])
async def case_time_tracking(
    case_id: str,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """Per-stage time spent on the case."""
    tracking = await get_time_tracking(db, case_id)
    return ApiResponse(data=TimeTrackingResponse.model_validate(tracking))


@router.post("/{case_id}/signing", response_model=ApiResponse[SigningLink], status_code=201)
async def create_signing_request(
    case_id: str,
    request: SigningRequest,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
    dispatcher: SideEffectDispatcher = Depends(get_dispatcher),
):
    """
    Generate the bill of sale and email a signing link valid for 7 days.

    Raises:
        ValidationFailedError 400: For unsupported document types
        ExternalFailureError 502: If the document cannot be generated
    """
    session, report = await signing_service.create_signing_request(db, case_id, request, dispatcher, user=user)
    link = SigningLink(
        sign_url=signing_link(session.token),
        expires_at=session.expires_at,
        session=SigningSessionResponse.model_validate(session),
    )
    return ApiResponse(data=link, message=dispatch_message(report))
