"""Inspection scheduling, draft saving and submission."""

import logging
from datetime import datetime
from typing import List, Optional, Tuple

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from vos.core.errors import ConflictError, ValidationFailedError
from vos.models.enums import InspectionStatus
from vos.models.inspection import Inspection
from vos.models.user import User
from vos.schemas.inspection import InspectionSchedule, InspectionSubmission
from vos.services.access_tokens import resolve_inspection_token
from vos.services.graph import CaseGraph, find_or_create, load_case_graph
from vos.services.side_effects import DispatchReport, SideEffectDispatcher
from vos.services.stages import to_inspection_scheduled, to_quote_preparation
from vos.services.users import admin_recipients

logger = logging.getLogger(__name__)


async def schedule_inspection(
    db: AsyncSession,
    case_id: str,
    data: InspectionSchedule,
    dispatcher: SideEffectDispatcher,
    user: Optional[User] = None,
) -> Tuple[CaseGraph, DispatchReport]:
    """
    Assign an inspector and move the case to stage 3.

    An existing, uncompleted inspection for the case is rescheduled in place
    and keeps its access token.

    Raises:
        NotFoundError: If the case does not exist
        ValidationFailedError: If the case has no customer or vehicle
        ConflictError: If the case's inspection was already completed
    """
    graph = await load_case_graph(db, case_id)
    case = graph.case

    if graph.customer is None or graph.vehicle is None:
        raise ValidationFailedError("Case must have a customer and a vehicle before scheduling an inspection")

    if graph.inspection is None:
        await find_or_create(
            db,
            Inspection,
            case.id,
            vehicle_id=case.vehicle_id,
            customer_id=case.customer_id,
            created_by=user.id if user else None,
            sections=[],
            recommendations=[],
            safety_issues=[],
            maintenance_items=[],
        )
        graph = await load_case_graph(db, case_id)
        case = graph.case

    inspection = graph.inspection
    if inspection.completed:
        raise ConflictError("Inspection for this case has already been completed")

    inspection.vehicle_id = case.vehicle_id
    inspection.customer_id = case.customer_id
    inspection.inspector = data.inspector.to_record()
    inspection.scheduled_date = data.scheduled_date
    inspection.scheduled_time = data.scheduled_time
    inspection.due_by_date = data.due_by_date
    inspection.due_by_time = data.due_by_time
    inspection.notes_for_inspector = data.notes_for_inspector
    inspection.status = InspectionStatus.SCHEDULED

    case.inspection_id = inspection.id
    to_inspection_scheduled(case)
    case.note_activity(f"Inspection scheduled with {data.inspector.full_name or data.inspector.email}")
    await db.commit()

    report = await dispatcher.inspection_scheduled(graph)
    if report.succeeded("inspector-assignment"):
        inspection.email_sent = True
        await db.commit()
    return graph, report


def _ensure_open(inspection: Inspection) -> None:
    if inspection.completed:
        raise ConflictError("Inspection has already been completed")


def _apply_answers(inspection: Inspection, data: InspectionSubmission) -> None:
    sections = [s.model_dump(mode="json", by_alias=True) for s in data.sections]
    inspection.sections = sections
    if data.overall_rating is not None:
        inspection.overall_rating = data.overall_rating
    if data.max_possible_score is not None:
        inspection.max_possible_score = data.max_possible_score
    else:
        inspection.max_possible_score = sum(s.max_score for s in data.sections)
    if data.inspection_notes is not None:
        inspection.inspection_notes = data.inspection_notes
    inspection.recommendations = list(data.recommendations)
    inspection.safety_issues = list(data.safety_issues)
    inspection.maintenance_items = list(data.maintenance_items)
    if data.vin_verification is not None:
        inspection.vin_verification = data.vin_verification


async def get_inspection_by_token(db: AsyncSession, token: str) -> Tuple[Inspection, CaseGraph]:
    inspection = await resolve_inspection_token(db, token)
    graph = await load_case_graph(db, inspection.case_id)
    return inspection, graph


async def save_inspection_draft(db: AsyncSession, token: str, data: InspectionSubmission) -> Inspection:
    """Store answers without completing the inspection."""
    inspection = await resolve_inspection_token(db, token)
    _ensure_open(inspection)

    _apply_answers(inspection, data)
    if data.overall_score is not None:
        inspection.overall_score = data.overall_score
    inspection.status = InspectionStatus.IN_PROGRESS
    await db.commit()

    logger.info("Saved inspection draft %s", inspection.id)
    return inspection


async def submit_inspection(
    db: AsyncSession,
    token: str,
    data: InspectionSubmission,
    dispatcher: SideEffectDispatcher,
) -> Tuple[CaseGraph, DispatchReport]:
    """
    Final inspection submission through the inspector's link.

    Marks the inspection completed (once), then moves the case to stage 4
    with status 'quote-ready'.

    Raises:
        NotFoundError: If the token is unknown
        ConflictError: If the inspection was already completed
        ValidationFailedError: If no sections were submitted
    """
    inspection = await resolve_inspection_token(db, token)
    _ensure_open(inspection)

    if not data.sections:
        raise ValidationFailedError("Inspection must contain at least one section")

    _apply_answers(inspection, data)
    if data.overall_score is not None:
        inspection.overall_score = data.overall_score
    else:
        inspection.overall_score = sum(s.score for s in data.sections)
    inspection.completed = True
    inspection.completed_at = datetime.utcnow()
    inspection.status = InspectionStatus.COMPLETED

    graph = await load_case_graph(db, inspection.case_id)
    case = graph.case
    case.inspection_id = inspection.id
    to_quote_preparation(case)
    case.note_activity("Inspection completed")
    await db.commit()

    logger.info("Inspection %s submitted for case %s", inspection.id, case.id)

    report = await dispatcher.inspection_submitted(graph, await admin_recipients(db))
    return graph, report


async def list_assigned_inspections(db: AsyncSession, user: User) -> List[Inspection]:
    """Inspections whose embedded inspector email matches the user."""
    result = await db.execute(select(Inspection).order_by(Inspection.created_at.desc()))
    email = user.email.lower()
    return [
        inspection
        for inspection in result.scalars().all()
        if (inspection.inspector_email or "").lower() == email
    ]
