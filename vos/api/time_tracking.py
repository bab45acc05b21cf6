"""
Time tracking API endpoints
"""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from vos.api.deps import get_current_user
from vos.core.database import get_db
from vos.models.user import User
from vos.schemas.common import ApiResponse
from vos.schemas.time_tracking import StageTimeIn, TimeTrackingResponse
from vos.services.time_tracking_service import record_stage_time

router = APIRouter()


@router.post("/stage-time", response_model=ApiResponse[TimeTrackingResponse])
async def post_stage_time(
    stage_time: StageTimeIn,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """
    Replace the time recorded for one stage and recompute the case total.

    Raises:
        NotFoundError 404: If case not found
    """
    tracking = await record_stage_time(db, stage_time)
    return ApiResponse(data=TimeTrackingResponse.model_validate(tracking))
