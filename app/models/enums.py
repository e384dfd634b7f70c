"""Centralized Enum Definitions"""

import enum


class CourseStatus(str, enum.Enum):
    """Course lifecycle status, in dashboard display order"""
    PLANNED = "planned"
    ACTIVE = "active"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

    @property
    def label(self) -> str:
        return self.label_for(DEFAULT_LABEL_LOCALE)

    def label_for(self, locale: str) -> str:
        """Display label; unknown locales fall back to English"""
        labels = STATUS_LABELS.get(locale, STATUS_LABELS[DEFAULT_LABEL_LOCALE])
        return labels[self.value]


DEFAULT_LABEL_LOCALE = "en"

# Display labels per locale, keyed by CourseStatus value
STATUS_LABELS = {
    "en": {
        "planned": "Planned",
        "active": "Active",
        "completed": "Completed",
        "cancelled": "Cancelled",
    },
    "de": {
        "planned": "Geplant",
        "active": "Aktiv",
        "completed": "Abgeschlossen",
        "cancelled": "Abgesagt",
    },
}


# Status keys as stored by the record store
REMOTE_STATUS_KEYS = {
    "geplant": CourseStatus.PLANNED,
    "aktiv": CourseStatus.ACTIVE,
    "abgeschlossen": CourseStatus.COMPLETED,
    "abgesagt": CourseStatus.CANCELLED,
}


class ActiveCoursePolicy(str, enum.Enum):
    """How a course is classified as active"""
    STATUS = "status"          # status field equals ACTIVE
    DATE_RANGE = "date_range"  # start < today < end


class UpcomingCoursePolicy(str, enum.Enum):
    """Boundary for courses starting today"""
    INCLUSIVE = "inclusive"  # start >= today
    EXCLUSIVE = "exclusive"  # start > today


class DashboardPhase(str, enum.Enum):
    """Lifecycle of the dashboard state"""
    UNINITIALIZED = "uninitialized"
    LOADING = "loading"
    READY = "ready"
    FAILED = "failed"
