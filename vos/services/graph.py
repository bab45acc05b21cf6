"""Loading a case together with its linked records."""

import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from vos.core.errors import NotFoundError
from vos.models.case import Case
from vos.models.customer import Customer
from vos.models.inspection import Inspection
from vos.models.quote import Quote
from vos.models.transaction import Transaction
from vos.models.vehicle import Vehicle

logger = logging.getLogger(__name__)


@dataclass
class CaseGraph:
    """A case and every record it links to (any of which may be missing)."""
    case: Case
    customer: Optional[Customer] = None
    vehicle: Optional[Vehicle] = None
    inspection: Optional[Inspection] = None
    quote: Optional[Quote] = None
    transaction: Optional[Transaction] = None

    @property
    def customer_name(self) -> str:
        return self.customer.full_name if self.customer else ""

    @property
    def customer_email(self):
        return self.customer.primary_email if self.customer else None

    @property
    def vehicle_description(self) -> str:
        return self.vehicle.description if self.vehicle else ""


async def _by_case_id(db: AsyncSession, model, case_id: str):
    result = await db.execute(select(model).where(model.case_id == case_id))
    return result.scalar_one_or_none()


async def _by_id(db: AsyncSession, model, record_id: Optional[str]):
    if not record_id:
        return None
    return await db.get(model, record_id)


async def get_case(db: AsyncSession, case_id: str) -> Case:
    case = await db.get(Case, case_id)
    if not case:
        raise NotFoundError(f"Case with id {case_id} not found")
    return case


async def load_case_graph(db: AsyncSession, case_id: str) -> CaseGraph:
    """
    Load a case and its linked records.

    Sub-records are found through their case_id back-reference, which is
    authoritative. A missing or stale forward reference on the case is
    rewritten in the session (it is persisted with the caller's next commit).

    Raises:
        NotFoundError: If the case does not exist
    """
    case = await get_case(db, case_id)

    inspection = await _by_case_id(db, Inspection, case.id)
    quote = await _by_case_id(db, Quote, case.id)
    transaction = await _by_case_id(db, Transaction, case.id)

    for attr, record in (
        ("inspection_id", inspection),
        ("quote_id", quote),
        ("transaction_id", transaction),
    ):
        if record is not None and getattr(case, attr) != record.id:
            logger.info("Repairing %s on case %s", attr, case.id)
            setattr(case, attr, record.id)

    return CaseGraph(
        case=case,
        customer=await _by_id(db, Customer, case.customer_id),
        vehicle=await _by_id(db, Vehicle, case.vehicle_id),
        inspection=inspection,
        quote=quote,
        transaction=transaction,
    )


async def find_or_create(db: AsyncSession, model, case_id: str, **values):
    """
    Return the case's record of ``model``, creating and committing it if absent.

    case_id is unique on every per-case table: when a concurrent request wins
    the insert, the IntegrityError is rolled back and the winner's row is
    returned instead. The rollback expires loaded objects, so callers reload
    the case graph afterwards.
    """
    record = await _by_case_id(db, model, case_id)
    if record is not None:
        return record

    record = model(case_id=case_id, **values)
    db.add(record)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        logger.info("%s for case %s created concurrently; using existing row", model.__tablename__, case_id)
        record = await _by_case_id(db, model, case_id)
    return record
