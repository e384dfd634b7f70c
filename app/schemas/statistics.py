"""Dashboard statistics schemas."""

from datetime import date, datetime
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field

from app.models.enums import CourseStatus, DashboardPhase
from app.schemas.entities import Course


class StatusCount(BaseModel):
    """One bar of the courses-by-status chart."""
    key: CourseStatus
    name: str
    count: int = Field(..., gt=0)

    model_config = ConfigDict(frozen=True)


class StatisticsSnapshot(BaseModel):
    """
    Aggregated dashboard statistics for one refresh cycle.
    Returned by GET /api/v1/dashboard/stats.
    """

    instructors: int = Field(..., ge=0)
    participants: int = Field(..., ge=0)
    rooms: int = Field(..., ge=0)
    courses: int = Field(..., ge=0)
    enrollments: int = Field(..., ge=0)
    active_courses: int = Field(..., ge=0, description="Courses active under the configured policy")
    paid_enrollments: int = Field(..., ge=0)
    paid_rate: int = Field(..., ge=0, le=100, description="Percentage of paid enrollments")
    total_revenue: float = Field(..., description="Sum of course prices over paid enrollments")
    courses_by_status: List[StatusCount] = Field(default_factory=list)
    upcoming_courses: List[Course] = Field(default_factory=list, max_length=5)
    generated_at: date = Field(..., description="Reference date used for date-based checks")

    model_config = ConfigDict(frozen=True)


class DashboardState(BaseModel):
    """Current dashboard state as seen by the presentation layer."""

    phase: DashboardPhase = DashboardPhase.UNINITIALIZED
    snapshot: Optional[StatisticsSnapshot] = None
    error: Optional[str] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(frozen=True)
