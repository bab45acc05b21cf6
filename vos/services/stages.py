"""Stage state table.

The seven stages are fixed. A transition writes ``current_stage``, marks some
stages complete and others active, and optionally sets the case status. The
workflow services only move cases through :func:`move_stage`; the
administrative override in case_service writes the tuple directly.
"""

import logging
from typing import Iterable, Optional

from vos.models.case import Case
from vos.models.enums import CaseStatus, Stage, StageStatus

logger = logging.getLogger(__name__)

STAGE_NAMES = {
    Stage.INTAKE: "Intake",
    Stage.INSPECTION_SCHEDULING: "Inspection Scheduling",
    Stage.INSPECTION: "Inspection",
    Stage.QUOTE_PREPARATION: "Quote Preparation",
    Stage.OFFER_DECISION: "Offer Decision",
    Stage.PAPERWORK: "Paperwork & Payment",
    Stage.COMPLETION: "Completion",
}


def stage_key(stage) -> str:
    return str(int(stage))


def move_stage(
    case: Case,
    stage: Stage,
    complete: Iterable[Stage] = (),
    activate: Iterable[Stage] = (),
    status: Optional[CaseStatus] = None,
) -> None:
    """Apply one transition to the case's stage tuple.

    Args:
        case: Case to update (not committed here)
        stage: New current stage
        complete: Stages to mark complete
        activate: Stages to mark active
        status: New case status, or None to leave it
    """
    statuses = dict(case.stage_statuses or {})
    for s in complete:
        statuses[stage_key(s)] = StageStatus.COMPLETE.value
    for s in activate:
        statuses[stage_key(s)] = StageStatus.ACTIVE.value

    case.current_stage = int(stage)
    case.stage_statuses = statuses
    if status is not None:
        case.status = status

    logger.info("Case %s moved to stage %s (%s)", case.id, int(stage), STAGE_NAMES[Stage(int(stage))])


def complete_all_stages(case: Case, status: CaseStatus) -> None:
    """Final transition: stage 7 and every stage complete."""
    move_stage(case, Stage.COMPLETION, complete=list(Stage), status=status)


def to_intake_complete(case: Case) -> None:
    move_stage(
        case,
        Stage.INSPECTION_SCHEDULING,
        complete=[Stage.INTAKE],
        activate=[Stage.INSPECTION_SCHEDULING],
        status=CaseStatus.NEW,
    )


def to_inspection_scheduled(case: Case) -> None:
    move_stage(
        case,
        Stage.INSPECTION,
        complete=[Stage.INSPECTION_SCHEDULING],
        activate=[Stage.INSPECTION],
        status=CaseStatus.SCHEDULED,
    )


def to_quote_preparation(case: Case) -> None:
    """Inspection done (or quote submitted by staff): stage 4, quote-ready."""
    move_stage(
        case,
        Stage.QUOTE_PREPARATION,
        complete=[Stage.INSPECTION],
        activate=[Stage.QUOTE_PREPARATION],
        status=CaseStatus.QUOTE_READY,
    )


def to_paperwork(case: Case) -> None:
    move_stage(
        case,
        Stage.PAPERWORK,
        complete=[Stage.QUOTE_PREPARATION, Stage.OFFER_DECISION],
        activate=[Stage.PAPERWORK],
    )
