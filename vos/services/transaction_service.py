"""Paperwork, bill of sale and lender payoff."""

import logging
from datetime import datetime
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from vos.core.config import settings
from vos.core.errors import ConflictError, NotFoundError, ValidationFailedError
from vos.models.enums import PayoffStatus
from vos.models.transaction import Transaction
from vos.models.user import User
from vos.models.vehicle import Vehicle
from vos.schemas.quote import BillOfSaleIn, PaperworkSubmission
from vos.schemas.transaction import PayoffConfirmation
from vos.services.access_tokens import resolve_quote_token
from vos.services.graph import CaseGraph, find_or_create, load_case_graph
from vos.services.quote_guard import decided_outcome
from vos.services.stages import to_paperwork

logger = logging.getLogger(__name__)

# bill of sale field -> vehicle column
VEHICLE_FIELDS = {
    "vehicle_vin": "vin",
    "vehicle_year": "year",
    "vehicle_make": "make",
    "vehicle_model": "model",
    "vehicle_color": "color",
    "vehicle_body_style": "body_style",
    "vehicle_license_plate": "license_plate",
    "vehicle_license_state": "license_state",
    "vehicle_title_number": "title_number",
    "vehicle_mileage": "current_mileage",
}


def default_bill_of_sale() -> dict:
    return {
        "buyerName": settings.BUYER_NAME,
        "buyerAddress": settings.BUYER_ADDRESS,
        "buyerCity": settings.BUYER_CITY,
        "buyerState": settings.BUYER_STATE,
        "buyerZip": settings.BUYER_ZIP,
        "buyerBusinessLicense": settings.BUYER_BUSINESS_LICENSE,
    }


def _check_sale_price(graph: CaseGraph, bill: BillOfSaleIn) -> None:
    """A decided quote fixes the sale price; paperwork may not change it."""
    quote = graph.quote
    outcome = decided_outcome(quote)
    if not outcome or bill.sale_price is None:
        return
    agreed = quote.agreed_amount
    if agreed is not None and abs(float(bill.sale_price) - float(agreed)) > 0.005:
        raise ConflictError(
            f"Quote has already been {outcome}. Cannot modify a quote that has been decided."
        )


def _update_vehicle(vehicle: Vehicle, bill: BillOfSaleIn) -> None:
    for field, column in VEHICLE_FIELDS.items():
        value = getattr(bill, field)
        if value:
            setattr(vehicle, column, value)
    if not bill.vehicle_mileage and bill.odometer_reading:
        vehicle.current_mileage = bill.odometer_reading


async def _prepare(db: AsyncSession, graph: CaseGraph, data: PaperworkSubmission,
                   user: Optional[User]) -> CaseGraph:
    if graph.vehicle is None:
        raise ValidationFailedError("Case has no vehicle")
    _check_sale_price(graph, data.bill_of_sale)

    if graph.transaction is None:
        await find_or_create(
            db,
            Transaction,
            graph.case.id,
            vehicle_id=graph.case.vehicle_id,
            customer_id=graph.case.customer_id,
            bill_of_sale=default_bill_of_sale(),
            bank_details={},
            documents={},
            created_by=user.id if user else None,
        )
        graph = await load_case_graph(db, graph.case.id)
    return graph


def _apply_paperwork(graph: CaseGraph, data: PaperworkSubmission) -> Transaction:
    transaction = graph.transaction
    bill = data.bill_of_sale.model_dump(mode="json", by_alias=True, exclude_none=True)

    transaction.bill_of_sale = {**default_bill_of_sale(), **(transaction.bill_of_sale or {}), **bill}
    transaction.bank_details = data.bank_details.model_dump(mode="json", by_alias=True)
    transaction.preferred_payment_method = data.preferred_payment_method
    transaction.payoff_status = data.payoff_status
    transaction.payoff_notes = data.payoff_notes
    transaction.payment_status = data.status
    transaction.submitted_at = data.submitted_at or datetime.utcnow()
    if graph.quote is not None:
        transaction.quote_id = graph.quote.id

    _update_vehicle(graph.vehicle, data.bill_of_sale)
    graph.case.transaction_id = transaction.id
    return transaction


async def save_paperwork_for_case(
    db: AsyncSession,
    case_id: str,
    data: PaperworkSubmission,
    user: Optional[User] = None,
) -> CaseGraph:
    """
    Staff saves the paperwork form: vehicle corrections plus transaction.

    Raises:
        NotFoundError: If the case does not exist
        ValidationFailedError: If the case has no vehicle
        ConflictError: If the sale price contradicts a decided quote
    """
    graph = await load_case_graph(db, case_id)
    graph = await _prepare(db, graph, data, user)

    transaction = _apply_paperwork(graph, data)
    graph.case.note_activity("Paperwork saved")
    await db.commit()

    logger.info("Paperwork saved for case %s (transaction %s)", graph.case.id, transaction.id)
    return graph


async def submit_paperwork_by_token(db: AsyncSession, token: str, data: PaperworkSubmission) -> CaseGraph:
    """
    Paperwork submitted through the quote link.

    Besides the transaction, a snapshot is kept on the quote and the case
    moves to stage 6 with stages 4 and 5 complete.
    """
    quote = await resolve_quote_token(db, token)
    graph = await load_case_graph(db, quote.case_id)
    graph = await _prepare(db, graph, data, None)

    transaction = _apply_paperwork(graph, data)
    graph.quote.paperwork = data.model_dump(mode="json", by_alias=True)
    to_paperwork(graph.case)
    graph.case.note_activity("Paperwork submitted")
    await db.commit()

    logger.info("Paperwork submitted for case %s (transaction %s)", graph.case.id, transaction.id)
    return graph


async def confirm_payoff(
    db: AsyncSession,
    case_id: str,
    data: PayoffConfirmation,
    user: Optional[User] = None,
) -> CaseGraph:
    """
    Record the lender payoff status.

    'confirmed' stamps the confirmation time; 'completed' stamps completion
    and, when missing, the confirmation as well.

    Raises:
        NotFoundError: If the case or its transaction does not exist
    """
    graph = await load_case_graph(db, case_id)
    transaction = graph.transaction
    if transaction is None:
        raise NotFoundError("No transaction found for this case")

    now = datetime.utcnow()
    transaction.payoff_status = data.payoff_status
    if data.payoff_notes is not None:
        transaction.payoff_notes = data.payoff_notes

    if data.payoff_status == PayoffStatus.CONFIRMED:
        transaction.payoff_confirmed_at = now
        transaction.payoff_confirmed_by = user.id if user else None
    elif data.payoff_status == PayoffStatus.COMPLETED:
        transaction.payoff_completed_at = now
        if transaction.payoff_confirmed_at is None:
            transaction.payoff_confirmed_at = now
            transaction.payoff_confirmed_by = user.id if user else None

    graph.case.note_activity(f"Payoff {data.payoff_status.value}")
    await db.commit()

    logger.info("Payoff %s for case %s", data.payoff_status.value, graph.case.id)
    return graph
