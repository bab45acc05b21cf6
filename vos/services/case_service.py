"""Case lifecycle: intake, edits, overrides, completion and deletion."""

import logging
from datetime import datetime
from typing import List, Optional, Tuple

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from vos.core.errors import ExternalFailureError
from vos.models.case import Case, default_completion, default_stage_statuses
from vos.models.customer import Customer
from vos.models.enums import CaseStatus, OfferDecision
from vos.models.inspection import Inspection
from vos.models.quote import Quote
from vos.models.signing_session import SigningSession
from vos.models.time_tracking import TimeTracking
from vos.models.transaction import Transaction
from vos.models.user import User
from vos.models.vehicle import Vehicle
from vos.schemas.case import (
    CaseCreate,
    CaseUpdate,
    CompletionChecklist,
    StageOverride,
)
from vos.services.documents import DocumentRenderer, RenderedDocument
from vos.services.graph import CaseGraph, get_case, load_case_graph
from vos.services.side_effects import DispatchReport, SideEffectDispatcher
from vos.services.stages import complete_all_stages, to_intake_complete
from vos.services.users import admin_recipients

logger = logging.getLogger(__name__)


def _documents_record(documents) -> dict:
    if documents is None:
        return {}
    return documents.model_dump(mode="json", by_alias=True, exclude_none=True)


async def create_case(
    db: AsyncSession,
    data: CaseCreate,
    dispatcher: SideEffectDispatcher,
    user: Optional[User] = None,
) -> Tuple[CaseGraph, DispatchReport]:
    """
    Create Customer, Vehicle and Case from an intake form.

    The case starts at stage 2 with intake complete and status 'new'. A staff
    intake records the agent and store; the public intake passes no user.

    Returns:
        Loaded case graph and the side-effect report
    """
    store_location = None
    if data.agent_info and data.agent_info.store_location:
        store_location = data.agent_info.store_location
    elif user is not None:
        store_location = user.location

    customer = Customer(
        **data.customer.model_dump(),
        agent_id=user.id if user else None,
        store_location=store_location,
    )
    db.add(customer)
    await db.flush()

    vehicle = Vehicle(**data.vehicle.model_dump(), customer_id=customer.id)
    db.add(vehicle)
    await db.flush()

    case = Case(
        customer_id=customer.id,
        vehicle_id=vehicle.id,
        estimated_value=vehicle.estimated_value,
        stage_statuses=default_stage_statuses(),
        documents=_documents_record(data.documents),
        completion=default_completion(),
        created_by=user.id if user else None,
    )
    db.add(case)
    await db.flush()

    to_intake_complete(case)
    case.note_activity("Case created from intake" if user else "Customer submitted intake form")
    await db.commit()

    logger.info("Created case %s for customer %s", case.id, customer.id)

    graph = CaseGraph(case=case, customer=customer, vehicle=vehicle)
    report = await dispatcher.case_created(graph, await admin_recipients(db))
    return graph, report


def _apply_fields(record, fields: dict) -> None:
    for key, value in fields.items():
        setattr(record, key, value)


async def update_case(db: AsyncSession, case_id: str, data: CaseUpdate) -> CaseGraph:
    """Edit intake data of an existing case; the stage tuple is untouched."""
    graph = await load_case_graph(db, case_id)
    case = graph.case

    if data.customer is not None:
        fields = data.customer.model_dump(exclude_unset=True)
        if graph.customer is None:
            graph.customer = Customer(**fields)
            db.add(graph.customer)
            await db.flush()
            case.customer_id = graph.customer.id
        else:
            _apply_fields(graph.customer, fields)

    if data.vehicle is not None:
        fields = data.vehicle.model_dump(exclude_unset=True)
        if graph.vehicle is None:
            graph.vehicle = Vehicle(**fields, customer_id=case.customer_id)
            db.add(graph.vehicle)
            await db.flush()
            case.vehicle_id = graph.vehicle.id
        else:
            _apply_fields(graph.vehicle, fields)
        if "estimated_value" in fields:
            case.estimated_value = fields["estimated_value"]

    if data.documents is not None:
        case.documents = {**(case.documents or {}), **_documents_record(data.documents)}

    if data.agent_info is not None and graph.customer is not None:
        graph.customer.store_location = data.agent_info.store_location

    case.note_activity("Case details updated")
    await db.commit()
    return graph


async def list_cases(
    db: AsyncSession,
    status: Optional[CaseStatus] = None,
    estimator_id: Optional[str] = None,
    skip: int = 0,
    limit: int = 100,
) -> Tuple[int, List[CaseGraph]]:
    """List cases newest first, with their linked records."""
    query = select(Case)
    count_query = select(func.count()).select_from(Case)
    if status is not None:
        query = query.where(Case.status == status)
        count_query = count_query.where(Case.status == status)
    if estimator_id is not None:
        query = query.where(Case.estimator_id == estimator_id)
        count_query = count_query.where(Case.estimator_id == estimator_id)

    total = (await db.execute(count_query)).scalar_one()
    result = await db.execute(query.order_by(Case.created_at.desc()).offset(skip).limit(limit))

    graphs = []
    for case in result.scalars().all():
        graphs.append(await load_case_graph(db, case.id))
    return total, graphs


async def override_stage(db: AsyncSession, case_id: str, data: StageOverride) -> Case:
    """
    Administrative stage override.

    Writes current_stage and the given stage statuses as-is; no transition
    rule is consulted.
    """
    case = await get_case(db, case_id)
    case.current_stage = data.current_stage
    if data.stage_statuses:
        statuses = dict(case.stage_statuses or {})
        statuses.update({k: v.value for k, v in data.stage_statuses.items()})
        case.stage_statuses = statuses
    case.note_activity(f"Stage manually set to {data.current_stage}")
    await db.commit()
    logger.info("Case %s stage overridden to %s", case.id, data.current_stage)
    return case


async def set_status(db: AsyncSession, case_id: str, status: CaseStatus) -> Case:
    case = await get_case(db, case_id)
    case.status = status
    case.note_activity(f"Status set to {status.value}")
    await db.commit()
    logger.info("Case %s status overridden to %s", case.id, status.value)
    return case


async def complete_case(
    db: AsyncSession,
    case_id: str,
    dispatcher: SideEffectDispatcher,
) -> Tuple[CaseGraph, DispatchReport]:
    """
    Close a case.

    The case is 'cancelled' when the customer declined the offer, otherwise
    'completed'; either way it moves to stage 7 with every stage complete.
    The PDF and thank-you email run after the commit; their results are
    written back only when they succeed.
    """
    graph = await load_case_graph(db, case_id)
    case = graph.case

    declined = (
        case.status == CaseStatus.QUOTE_DECLINED
        or (graph.quote is not None and graph.quote.decision == OfferDecision.DECLINED.value)
    )
    now = datetime.utcnow()
    complete_all_stages(case, CaseStatus.CANCELLED if declined else CaseStatus.COMPLETED)
    completion = {**default_completion(), **(case.completion or {})}
    completion["completedAt"] = now.isoformat()
    case.completion = completion
    case.note_activity("Case cancelled after declined offer" if declined else "Case completed")
    await db.commit()

    report = await dispatcher.case_completed(graph)

    completion = dict(case.completion)
    rendered = report.outcome("case-pdf")
    if rendered and rendered.ok:
        case.pdf_case_file = str(rendered.result.file_path)
        completion["pdfGenerated"] = True
    if report.succeeded("customer-thank-you"):
        case.thank_you_sent = True
        completion["thankYouSent"] = True
        completion["sentAt"] = datetime.utcnow().isoformat()
    case.completion = completion
    await db.commit()

    return graph, report


async def _render(graph: CaseGraph, render, label: str) -> RenderedDocument:
    try:
        return await render(graph)
    except ExternalFailureError:
        raise
    except Exception as e:
        logger.exception("%s rendering failed for %s", label, graph.case.id)
        raise ExternalFailureError(f"Failed to generate {label}: {e}") from e


async def render_case_pdf(db: AsyncSession, case_id: str, renderer: DocumentRenderer) -> RenderedDocument:
    """Render the case file on demand.

    Raises:
        NotFoundError: If the case does not exist
        ExternalFailureError: If rendering fails
    """
    graph = await load_case_graph(db, case_id)
    rendered = await _render(graph, renderer.render_case_file, "case PDF")

    graph.case.pdf_case_file = str(rendered.file_path)
    graph.case.completion = {**(graph.case.completion or {}), "pdfGenerated": True}
    await db.commit()
    return rendered


async def render_bill_of_sale(db: AsyncSession, case_id: str, renderer: DocumentRenderer) -> RenderedDocument:
    """Render the bill of sale from the case's vehicle, quote and paperwork; nothing is stored.

    Raises:
        NotFoundError: If the case does not exist
        ExternalFailureError: If rendering fails
    """
    graph = await load_case_graph(db, case_id)
    return await _render(graph, renderer.render_bill_of_sale, "bill of sale")


async def record_completion_checklist(db: AsyncSession, case_id: str, data: CompletionChecklist) -> Case:
    """Store the leave-behind checklist; stage and status are unchanged."""
    case = await get_case(db, case_id)
    checklist = data.model_dump(mode="json", by_alias=True)
    case.completion = {**default_completion(), **(case.completion or {}), **checklist}
    case.note_activity("Completion checklist recorded")
    await db.commit()
    return case


async def delete_case(db: AsyncSession, case_id: str) -> None:
    """
    Delete a case and everything it owns.

    Order: time tracking, quote, inspection, transaction, signing sessions,
    vehicle, customer, then the case itself.
    """
    case = await get_case(db, case_id)
    customer_id, vehicle_id = case.customer_id, case.vehicle_id

    for model in (TimeTracking, Quote, Inspection, Transaction, SigningSession):
        await db.execute(delete(model).where(model.case_id == case.id))
    if vehicle_id:
        await db.execute(delete(Vehicle).where(Vehicle.id == vehicle_id))
    if customer_id:
        await db.execute(delete(Customer).where(Customer.id == customer_id))
    await db.delete(case)
    await db.commit()

    logger.info("Deleted case %s", case_id)
