"""
Inspection Pydantic schemas
"""
from datetime import datetime
from typing import Any, Dict, List, Optional
from pydantic import Field
from vos.models.enums import InspectionStatus
from vos.schemas.common import CamelModel, ContactInfo


class InspectionSchedule(CamelModel):
    """Schema for scheduling an inspection and assigning the inspector"""
    inspector: ContactInfo
    scheduled_date: Optional[datetime] = None
    scheduled_time: Optional[str] = Field(None, max_length=16)
    due_by_date: Optional[datetime] = None
    due_by_time: Optional[str] = Field(None, max_length=16)
    notes_for_inspector: Optional[str] = None


class AnswerOption(CamelModel):
    value: Optional[str] = None
    label: Optional[str] = None
    points: Optional[float] = None


class SubQuestion(CamelModel):
    id: str = ""
    question: str = ""
    type: str = "text"
    options: List[AnswerOption] = Field(default_factory=list)
    answer: Optional[Any] = None
    notes: str = ""
    photos: List[Any] = Field(default_factory=list)


class InspectionQuestion(CamelModel):
    id: str = ""
    question: str = ""
    type: str = "text"
    options: List[AnswerOption] = Field(default_factory=list)
    required: bool = False
    answer: Optional[Any] = None
    notes: str = ""
    photos: List[Any] = Field(default_factory=list)
    sub_questions: List[SubQuestion] = Field(default_factory=list)


class InspectionSection(CamelModel):
    """One inspection section; id and name are mandatory"""
    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    description: str = ""
    icon: str = ""
    questions: List[InspectionQuestion] = Field(default_factory=list)
    rating: Optional[float] = None
    photos: List[Any] = Field(default_factory=list)
    score: float = 0
    max_score: float = 0
    completed: bool = False


class InspectionSubmission(CamelModel):
    """Answer tree posted by the inspector (draft save or final submission)"""
    sections: List[InspectionSection]
    overall_rating: Optional[int] = Field(None, ge=0, le=5)
    overall_score: Optional[float] = None
    max_possible_score: Optional[float] = None
    inspection_notes: Optional[str] = None
    recommendations: List[str] = Field(default_factory=list)
    safety_issues: List[Dict[str, Any]] = Field(default_factory=list)
    maintenance_items: List[Dict[str, Any]] = Field(default_factory=list)
    vin_verification: Optional[Dict[str, Any]] = None


class InspectionResponse(CamelModel):
    """Schema for inspection response"""
    id: str
    case_id: str
    vehicle_id: Optional[str] = None
    customer_id: Optional[str] = None
    inspector: Optional[ContactInfo] = None
    scheduled_date: Optional[datetime] = None
    scheduled_time: Optional[str] = None
    due_by_date: Optional[datetime] = None
    due_by_time: Optional[str] = None
    notes_for_inspector: Optional[str] = None
    status: InspectionStatus
    access_token: str = Field(..., description="40-hex-character link token")
    sections: List[Dict[str, Any]] = Field(default_factory=list)
    overall_rating: Optional[int] = None
    overall_score: float = 0
    max_possible_score: float = 0
    completed: bool
    completed_at: Optional[datetime] = None
    inspection_notes: Optional[str] = None
    recommendations: List[str] = Field(default_factory=list)
    safety_issues: List[Dict[str, Any]] = Field(default_factory=list)
    maintenance_items: List[Dict[str, Any]] = Field(default_factory=list)
    vin_verification: Optional[Dict[str, Any]] = None
    email_sent: bool
    created_at: datetime


class InspectionTokenView(InspectionResponse):
    """Inspection as seen through its token link"""
    inspector_name: Optional[str] = None
    inspector_id: Optional[str] = Field(None, description="User id resolved by inspector email, if any")
    vehicle: Optional[Dict[str, Any]] = None
    customer: Optional[Dict[str, Any]] = None
