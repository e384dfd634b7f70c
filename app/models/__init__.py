"""Domain enums shared by schemas and services"""

from app.models.enums import (
    CourseStatus,
    REMOTE_STATUS_KEYS,
    ActiveCoursePolicy,
    UpcomingCoursePolicy,
    DashboardPhase,
)

__all__ = [
    "CourseStatus",
    "REMOTE_STATUS_KEYS",
    "ActiveCoursePolicy",
    "UpcomingCoursePolicy",
    "DashboardPhase",
]
