"""Quotes: estimator assignment, offer terms and the customer's decision."""

import logging
from datetime import datetime
from typing import Optional, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from vos.core.errors import NotFoundError
from vos.models.enums import CaseStatus, OfferDecision, QuoteStatus, Stage
from vos.models.quote import Quote, default_offer_decision
from vos.models.transaction import Transaction
from vos.models.user import User
from vos.schemas.quote import EstimatorAssignment, OfferDecisionIn, QuoteSubmission
from vos.services.access_tokens import resolve_quote_token
from vos.services.graph import CaseGraph, find_or_create, get_case, load_case_graph
from vos.services.quote_guard import ensure_quote_mutable
from vos.services.side_effects import DispatchReport, SideEffectDispatcher
from vos.services.stages import move_stage, to_quote_preparation
from vos.services.transaction_service import default_bill_of_sale
from vos.services.users import admin_recipients, resolve_user_id

logger = logging.getLogger(__name__)


def _contact_from_user(user: User) -> dict:
    return {
        "firstName": user.first_name,
        "lastName": user.last_name,
        "email": user.email,
        "phone": None,
    }


async def _ensure_quote(db: AsyncSession, case_id: str, estimator: Optional[dict] = None,
                        user: Optional[User] = None) -> CaseGraph:
    """Find-or-create the case's quote and return the reloaded graph."""
    case = await get_case(db, case_id)
    await find_or_create(
        db,
        Quote,
        case.id,
        vehicle_id=case.vehicle_id,
        customer_id=case.customer_id,
        inspection_id=case.inspection_id,
        estimator=estimator,
        offer_decision=default_offer_decision(),
        created_by=user.id if user else None,
    )
    graph = await load_case_graph(db, case_id)
    if graph.case.quote_id is None:
        graph.case.quote_id = graph.quote.id
    return graph


async def _ensure_transaction(db: AsyncSession, graph: CaseGraph, user: Optional[User] = None) -> CaseGraph:
    if graph.transaction is not None:
        return graph
    case = graph.case
    await find_or_create(
        db,
        Transaction,
        case.id,
        vehicle_id=case.vehicle_id,
        customer_id=case.customer_id,
        quote_id=graph.quote.id if graph.quote else None,
        bill_of_sale=default_bill_of_sale(),
        bank_details={},
        documents={},
        created_by=user.id if user else None,
    )
    return await load_case_graph(db, case.id)


async def assign_estimator(
    db: AsyncSession,
    case_id: str,
    data: EstimatorAssignment,
    dispatcher: SideEffectDispatcher,
    user: Optional[User] = None,
) -> Tuple[CaseGraph, DispatchReport]:
    """
    Assign an estimator, creating the case's single quote if needed.

    The estimator is stored as an embedded contact; Case.estimator_id is a
    best-effort link to a User with the same email.
    """
    estimator = data.estimator.to_record()
    graph = await _ensure_quote(db, case_id, estimator=estimator, user=user)
    quote, case = graph.quote, graph.case

    quote.estimator = estimator
    estimator_id = await resolve_user_id(db, data.estimator.email)
    if estimator_id:
        case.estimator_id = estimator_id
    case.note_activity(f"Estimator assigned: {data.estimator.full_name or data.estimator.email}")
    await db.commit()

    logger.info("Estimator assigned to case %s (quote %s)", case.id, quote.id)
    report = await dispatcher.estimator_assigned(graph)
    return graph, report


def _apply_offer(quote: Quote, data: QuoteSubmission) -> None:
    fields = data.model_dump(exclude_unset=True, exclude={"estimator"})
    for key, value in fields.items():
        if key == "title_reminder" and value is None:
            continue
        setattr(quote, key, value)
    if data.estimator is not None:
        quote.estimator = data.estimator.to_record()
    quote.status = QuoteStatus.READY
    quote.generated_at = datetime.utcnow()


def _sync_sale_price(graph: CaseGraph) -> None:
    """Carry the offer amount into the transaction's bill of sale."""
    quote, transaction = graph.quote, graph.transaction
    if quote.offer_amount is None or transaction is None:
        return
    transaction.bill_of_sale = {**(transaction.bill_of_sale or {}), "salePrice": quote.offer_amount}
    transaction.quote_id = quote.id
    graph.case.transaction_id = transaction.id


async def _dispatch_quote_ready(db: AsyncSession, graph: CaseGraph, dispatcher: SideEffectDispatcher) -> DispatchReport:
    report = await dispatcher.quote_ready(graph)
    if report.succeeded("customer-quote"):
        graph.quote.email_sent = True
        await db.commit()
    return report


async def get_quote_by_token(db: AsyncSession, token: str) -> Tuple[Quote, CaseGraph]:
    quote = await resolve_quote_token(db, token)
    graph = await load_case_graph(db, quote.case_id)
    return quote, graph


async def submit_quote_by_token(
    db: AsyncSession,
    token: str,
    data: QuoteSubmission,
    dispatcher: SideEffectDispatcher,
) -> Tuple[CaseGraph, DispatchReport]:
    """
    Estimator submits offer terms through the quote link.

    Raises:
        NotFoundError: If the token is unknown
        ConflictError: If the quote has been decided
    """
    quote = await resolve_quote_token(db, token)
    ensure_quote_mutable(quote)

    graph = await load_case_graph(db, quote.case_id)
    if data.offer_amount is not None:
        graph = await _ensure_transaction(db, graph)
    quote = graph.quote
    ensure_quote_mutable(quote)

    _apply_offer(quote, data)
    _sync_sale_price(graph)
    graph.case.note_activity("Quote submitted")
    await db.commit()

    logger.info("Quote %s submitted for case %s", quote.id, graph.case.id)
    report = await _dispatch_quote_ready(db, graph, dispatcher)
    return graph, report


async def submit_quote_for_case(
    db: AsyncSession,
    case_id: str,
    data: QuoteSubmission,
    dispatcher: SideEffectDispatcher,
    user: User,
) -> Tuple[CaseGraph, DispatchReport]:
    """
    Staff variant of quote submission.

    Creates the quote with the current user as estimator when the case has
    none, then moves the case to stage 4 with status 'quote-ready'.

    Raises:
        NotFoundError: If the case does not exist
        ConflictError: If the quote has been decided
    """
    graph = await load_case_graph(db, case_id)
    ensure_quote_mutable(graph.quote)

    if graph.quote is None:
        graph = await _ensure_quote(db, case_id, estimator=_contact_from_user(user), user=user)
        if graph.case.estimator_id is None:
            graph.case.estimator_id = user.id
    if data.offer_amount is not None:
        graph = await _ensure_transaction(db, graph, user)
    ensure_quote_mutable(graph.quote)

    _apply_offer(graph.quote, data)
    _sync_sale_price(graph)
    to_quote_preparation(graph.case)
    graph.case.note_activity("Quote submitted")
    await db.commit()

    logger.info("Quote %s submitted by %s for case %s", graph.quote.id, user.id, graph.case.id)
    report = await _dispatch_quote_ready(db, graph, dispatcher)
    return graph, report


def apply_decision_to_case(graph: CaseGraph, decision: str) -> None:
    """
    Case effect of an offer decision.

    - accepted: stage 4 active, status 'negotiating'
    - declined: stage 6, 4 complete and 6 active, status 'quote-declined'
    - negotiating: status only
    - pending: nothing
    """
    case = graph.case
    if decision == OfferDecision.ACCEPTED.value:
        move_stage(case, Stage.QUOTE_PREPARATION, activate=[Stage.QUOTE_PREPARATION],
                   status=CaseStatus.NEGOTIATING)
    elif decision == OfferDecision.DECLINED.value:
        move_stage(case, Stage.PAPERWORK, complete=[Stage.QUOTE_PREPARATION], activate=[Stage.PAPERWORK],
                   status=CaseStatus.QUOTE_DECLINED)
    elif decision == OfferDecision.NEGOTIATING.value:
        case.status = CaseStatus.NEGOTIATING


async def _record_decision(
    db: AsyncSession,
    graph: CaseGraph,
    data: OfferDecisionIn,
    dispatcher: SideEffectDispatcher,
) -> Tuple[CaseGraph, DispatchReport]:
    quote = graph.quote
    decision = data.decision.value
    record = data.model_dump(mode="json", by_alias=True, exclude_none=True)
    record["decisionDate"] = datetime.utcnow().isoformat()
    quote.offer_decision = record

    if graph.case.quote_id is None:
        graph.case.quote_id = quote.id
    apply_decision_to_case(graph, decision)
    graph.case.note_activity(f"Offer {decision}")
    await db.commit()

    logger.info("Quote %s decision recorded: %s", quote.id, decision)
    report = await dispatcher.offer_decided(graph, await admin_recipients(db))
    return graph, report


async def record_decision_by_token(
    db: AsyncSession,
    token: str,
    data: OfferDecisionIn,
    dispatcher: SideEffectDispatcher,
) -> Tuple[CaseGraph, DispatchReport]:
    quote = await resolve_quote_token(db, token)
    graph = await load_case_graph(db, quote.case_id)
    return await _record_decision(db, graph, data, dispatcher)


async def record_decision_for_case(
    db: AsyncSession,
    case_id: str,
    data: OfferDecisionIn,
    dispatcher: SideEffectDispatcher,
) -> Tuple[CaseGraph, DispatchReport]:
    """
    Raises:
        NotFoundError: If the case or its quote does not exist
    """
    graph = await load_case_graph(db, case_id)
    if graph.quote is None:
        raise NotFoundError("No quote found for this case")
    return await _record_decision(db, graph, data, dispatcher)
