"""
Quote API endpoints

Two families of routes reach the same operations:
- /quotes/case/{case_id}/...: staff session (admin, agent, estimator)
- /quotes/{token}/...: public, authorized by the quote's access token
"""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from vos.api.deps import dispatch_message, get_dispatcher, require_roles
from vos.core.database import get_db
from vos.models.enums import UserRole
from vos.models.user import User
from vos.schemas.case import (
    CaseCompletionResponse,
    CaseResponse,
    CustomerResponse,
    PaperworkResult,
    StageOverride,
    VehicleResponse,
    case_response,
)
from vos.schemas.common import ApiResponse
from vos.schemas.inspection import InspectionResponse
from vos.schemas.quote import (
    OfferDecisionRequest,
    PaperworkSubmission,
    QuoteResponse,
    QuoteSubmission,
    QuoteTokenView,
)
from vos.schemas.transaction import TransactionResponse
from vos.services import case_service, quote_service, transaction_service
from vos.services.access_tokens import resolve_quote_token
from vos.services.graph import load_case_graph
from vos.services.side_effects import SideEffectDispatcher

router = APIRouter()

staff = require_roles(UserRole.ADMIN, UserRole.AGENT, UserRole.ESTIMATOR)


def _paperwork_result(graph) -> PaperworkResult:
    return PaperworkResult(
        case=case_response(graph),
        transaction=TransactionResponse.model_validate(graph.transaction),
    )


async def _completion(db, case_id: str, dispatcher: SideEffectDispatcher) -> ApiResponse:
    graph, report = await case_service.complete_case(db, case_id, dispatcher)
    rendered = report.outcome("case-pdf")
    pdf_url = rendered.result.url if rendered and rendered.ok else None
    return ApiResponse(
        data=CaseCompletionResponse(case=case_response(graph), pdf_url=pdf_url),
        message=dispatch_message(report),
    )


# Staff routes, by case id

@router.post("/case/{case_id}/submit", response_model=ApiResponse[CaseResponse])
async def submit_quote_for_case(
    case_id: str,
    submission: QuoteSubmission,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(staff),
    dispatcher: SideEffectDispatcher = Depends(get_dispatcher),
):
    """
    Create or update the case's quote and mark it ready.

    Moves the case to stage 4 with status 'quote-ready'; the offer amount
    becomes the transaction's sale price.

    Raises:
        NotFoundError 404: If case not found
        ConflictError 409: If the quote has already been accepted or declined
    """
    graph, report = await quote_service.submit_quote_for_case(db, case_id, submission, dispatcher, user)
    return ApiResponse(data=case_response(graph), message=dispatch_message(report))


@router.put("/case/{case_id}/decision", response_model=ApiResponse[CaseResponse])
async def record_decision_for_case(
    case_id: str,
    request: OfferDecisionRequest,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(staff),
    dispatcher: SideEffectDispatcher = Depends(get_dispatcher),
):
    """Record the customer's decision on the offer."""
    graph, report = await quote_service.record_decision_for_case(db, case_id, request.offer_decision, dispatcher)
    return ApiResponse(data=case_response(graph), message=dispatch_message(report))


@router.put("/case/{case_id}/paperwork", response_model=ApiResponse[PaperworkResult])
async def save_paperwork_for_case(
    case_id: str,
    paperwork: PaperworkSubmission,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(staff),
):
    """Save bill of sale, bank and payoff details."""
    graph = await transaction_service.save_paperwork_for_case(db, case_id, paperwork, user=user)
    return ApiResponse(data=_paperwork_result(graph))


@router.post("/case/{case_id}/complete", response_model=ApiResponse[CaseCompletionResponse])
async def complete_case_for_case(
    case_id: str,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(staff),
    dispatcher: SideEffectDispatcher = Depends(get_dispatcher),
):
    return await _completion(db, case_id, dispatcher)


# Token routes

@router.get("/{token}", response_model=ApiResponse[QuoteTokenView])
async def get_quote_by_token(
    token: str,
    db: AsyncSession = Depends(get_db),
):
    """
    Open a quote through its link, with the vehicle, customer and inspection.

    Raises:
        NotFoundError 404: If the token does not match a quote
    """
    quote, graph = await quote_service.get_quote_by_token(db, token)
    view = QuoteTokenView.model_validate(quote)
    if graph.vehicle is not None:
        view.vehicle = VehicleResponse.model_validate(graph.vehicle).model_dump(mode="json", by_alias=True)
    if graph.customer is not None:
        view.customer = CustomerResponse.model_validate(graph.customer).model_dump(mode="json", by_alias=True)
    if graph.inspection is not None:
        view.inspection = InspectionResponse.model_validate(graph.inspection).model_dump(mode="json", by_alias=True)
    return ApiResponse(data=view)


@router.post("/{token}/submit", response_model=ApiResponse[QuoteResponse])
async def submit_quote_by_token(
    token: str,
    submission: QuoteSubmission,
    db: AsyncSession = Depends(get_db),
    dispatcher: SideEffectDispatcher = Depends(get_dispatcher),
):
    """
    Submit offer terms and email the quote to the customer.

    Raises:
        ConflictError 409: If the quote has already been accepted or declined
    """
    graph, report = await quote_service.submit_quote_by_token(db, token, submission, dispatcher)
    return ApiResponse(data=QuoteResponse.model_validate(graph.quote), message=dispatch_message(report))


@router.put("/{token}/decision", response_model=ApiResponse[QuoteResponse])
async def record_decision_by_token(
    token: str,
    request: OfferDecisionRequest,
    db: AsyncSession = Depends(get_db),
    dispatcher: SideEffectDispatcher = Depends(get_dispatcher),
):
    """Record the customer's decision on the offer."""
    graph, report = await quote_service.record_decision_by_token(db, token, request.offer_decision, dispatcher)
    return ApiResponse(data=QuoteResponse.model_validate(graph.quote), message=dispatch_message(report))


@router.put("/{token}/paperwork", response_model=ApiResponse[PaperworkResult])
async def submit_paperwork_by_token(
    token: str,
    paperwork: PaperworkSubmission,
    db: AsyncSession = Depends(get_db),
):
    """Submit paperwork; the case moves to stage 6."""
    graph = await transaction_service.submit_paperwork_by_token(db, token, paperwork)
    return ApiResponse(data=_paperwork_result(graph))


@router.put("/{token}/stage", response_model=ApiResponse[CaseResponse])
async def override_stage_by_token(
    token: str,
    override: StageOverride,
    db: AsyncSession = Depends(get_db),
):
    """Administrative stage override through the quote link; no transition rule is checked."""
    quote = await resolve_quote_token(db, token)
    await case_service.override_stage(db, quote.case_id, override)
    return ApiResponse(data=case_response(await load_case_graph(db, quote.case_id)))


@router.post("/{token}/complete", response_model=ApiResponse[CaseCompletionResponse])
async def complete_case_by_token(
    token: str,
    db: AsyncSession = Depends(get_db),
    dispatcher: SideEffectDispatcher = Depends(get_dispatcher),
):
    quote = await resolve_quote_token(db, token)
    return await _completion(db, quote.case_id, dispatcher)


@router.get("/{token}/pdf", response_model=ApiResponse[CaseCompletionResponse])
async def generate_case_pdf_by_token(
    token: str,
    db: AsyncSession = Depends(get_db),
    dispatcher: SideEffectDispatcher = Depends(get_dispatcher),
):
    """
    Raises:
        ExternalFailureError 502: If rendering fails
    """
    quote = await resolve_quote_token(db, token)
    rendered = await case_service.render_case_pdf(db, quote.case_id, dispatcher.renderer)
    graph = await load_case_graph(db, quote.case_id)
    return ApiResponse(data=CaseCompletionResponse(case=case_response(graph), pdf_url=rendered.url))
