"""Per-stage time tracking."""

import logging
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from vos.core.errors import NotFoundError
from vos.models.time_tracking import TimeTracking
from vos.schemas.time_tracking import StageTimeIn
from vos.services.graph import find_or_create, get_case

logger = logging.getLogger(__name__)


def _duration_ms(start: datetime, end: datetime) -> int:
    return int((end - start).total_seconds() * 1000)


async def record_stage_time(db: AsyncSession, data: StageTimeIn) -> TimeTracking:
    """
    Replace one stage's timing and recompute the case total.

    An explicit ``totalTime`` in the extra fields wins over end - start.

    Raises:
        NotFoundError: If the case does not exist
    """
    case = await get_case(db, data.case_id)
    tracking = await find_or_create(db, TimeTracking, case.id, stage_times={}, total_time=0)

    extra = dict(data.extra_fields)
    total = extra.pop("totalTime", None)
    if total is None:
        total = _duration_ms(data.start_time, data.end_time)

    stage_times = dict(tracking.stage_times or {})
    stage_times[data.stage_name] = {
        **extra,
        "startTime": data.start_time.isoformat(),
        "endTime": data.end_time.isoformat(),
        "totalTime": int(total),
    }
    tracking.stage_times = stage_times
    tracking.total_time = sum(int(v.get("totalTime") or 0) for v in stage_times.values())
    tracking.last_updated = datetime.utcnow()
    await db.commit()

    logger.info("Recorded %s time for case %s: %d ms", data.stage_name, case.id, total)
    return tracking


async def get_time_tracking(db: AsyncSession, case_id: str) -> TimeTracking:
    result = await db.execute(select(TimeTracking).where(TimeTracking.case_id == case_id))
    tracking = result.scalar_one_or_none()
    if not tracking:
        raise NotFoundError("No time tracking found for this case")
    return tracking
