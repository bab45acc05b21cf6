"""
Time tracking Pydantic schemas
"""
from datetime import datetime
from typing import Any, Dict, Optional
from pydantic import Field, field_validator, model_validator
from vos.models.time_tracking import STAGE_TIME_KEYS
from vos.schemas.common import CamelModel


class StageTimeIn(CamelModel):
    """Time spent in one stage, reported by the client when the stage closes"""
    case_id: str
    stage_name: str
    start_time: datetime
    end_time: datetime
    extra_fields: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("stage_name")
    @classmethod
    def validate_stage_name(cls, v: str) -> str:
        if v not in STAGE_TIME_KEYS:
            raise ValueError(f"stageName must be one of {', '.join(STAGE_TIME_KEYS)}")
        return v

    @field_validator("extra_fields")
    @classmethod
    def validate_total_time(cls, v: Dict[str, Any]) -> Dict[str, Any]:
        total = v.get("totalTime")
        if total is None:
            return v
        if isinstance(total, bool) or not isinstance(total, int) or total < 0:
            raise ValueError("extraFields.totalTime must be a non-negative integer of milliseconds")
        return v

    @model_validator(mode="after")
    def validate_window(self):
        if self.end_time < self.start_time:
            raise ValueError("endTime must not be before startTime")
        return self


class TimeTrackingResponse(CamelModel):
    id: str
    case_id: str
    stage_times: Dict[str, Any] = Field(default_factory=dict)
    total_time: int
    last_updated: Optional[datetime] = None
