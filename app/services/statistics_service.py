"""Dashboard statistics derived from raw record store collections."""

import math
import re
from datetime import date
from typing import Dict, List, Optional, Sequence

from app.models.enums import (
    DEFAULT_LABEL_LOCALE,
    ActiveCoursePolicy,
    CourseStatus,
    UpcomingCoursePolicy,
)
from app.schemas.entities import Course, Enrollment, Instructor, Participant, Room
from app.schemas.statistics import StatisticsSnapshot, StatusCount
from app.utils.time import get_utc_today

UPCOMING_COURSE_LIMIT = 5

# Course references are record URLs ending in the 24 hex character record id
_RECORD_ID_PATTERN = re.compile(r"([a-f0-9]{24})$", re.IGNORECASE)


def extract_record_id(reference: Optional[str]) -> Optional[str]:
    """
    Extract the trailing record id from a record reference.

    Returns None when the reference is missing or does not end in a record id,
    which callers treat as an unresolved reference.
    """
    if not reference:
        return None
    match = _RECORD_ID_PATTERN.search(reference)
    return match.group(1) if match else None


class StatisticsService:
    @staticmethod
    def compute_statistics(
        instructors: Sequence[Instructor],
        participants: Sequence[Participant],
        rooms: Sequence[Room],
        courses: Sequence[Course],
        enrollments: Sequence[Enrollment],
        *,
        today: Optional[date] = None,
        active_policy: ActiveCoursePolicy = ActiveCoursePolicy.STATUS,
        upcoming_policy: UpcomingCoursePolicy = UpcomingCoursePolicy.INCLUSIVE,
        label_locale: str = DEFAULT_LABEL_LOCALE,
    ) -> StatisticsSnapshot:
        """
        Build a snapshot from complete collections. Pure: inputs are not modified
        and identical inputs give equal snapshots.
        """
        today = today or get_utc_today()
        paid = sum(1 for e in enrollments if e.paid)

        return StatisticsSnapshot(
            instructors=len(instructors),
            participants=len(participants),
            rooms=len(rooms),
            courses=len(courses),
            enrollments=len(enrollments),
            active_courses=StatisticsService.count_active_courses(courses, today, active_policy),
            paid_enrollments=paid,
            paid_rate=StatisticsService._percentage(paid, len(enrollments)),
            total_revenue=StatisticsService.total_revenue(courses, enrollments),
            courses_by_status=StatisticsService.courses_by_status(courses, label_locale),
            upcoming_courses=StatisticsService.upcoming_courses(courses, today, upcoming_policy),
            generated_at=today,
        )

    @staticmethod
    def courses_by_status(
        courses: Sequence[Course],
        label_locale: str = DEFAULT_LABEL_LOCALE,
    ) -> List[StatusCount]:
        """Counts per known status in display order; unknown statuses and empty buckets are left out."""
        counts = {status.value: 0 for status in CourseStatus}
        for course in courses:
            if course.status in counts:
                counts[course.status] += 1
        return [
            StatusCount(key=status, name=status.label_for(label_locale), count=counts[status.value])
            for status in CourseStatus
            if counts[status.value] > 0
        ]

    @staticmethod
    def count_active_courses(
        courses: Sequence[Course],
        today: date,
        policy: ActiveCoursePolicy = ActiveCoursePolicy.STATUS,
    ) -> int:
        if policy == ActiveCoursePolicy.DATE_RANGE:
            return sum(
                1 for c in courses
                if c.start_date and c.end_date and c.start_date < today < c.end_date
            )
        return sum(1 for c in courses if c.status == CourseStatus.ACTIVE.value)

    @staticmethod
    def upcoming_courses(
        courses: Sequence[Course],
        today: date,
        policy: UpcomingCoursePolicy = UpcomingCoursePolicy.INCLUSIVE,
        limit: int = UPCOMING_COURSE_LIMIT,
    ) -> List[Course]:
        """Nearest courses starting from today on; sorted() keeps input order for equal dates."""
        if policy == UpcomingCoursePolicy.EXCLUSIVE:
            candidates = [c for c in courses if c.start_date and c.start_date > today]
        else:
            candidates = [c for c in courses if c.start_date and c.start_date >= today]
        return sorted(candidates, key=lambda c: c.start_date)[:limit]

    @staticmethod
    def total_revenue(courses: Sequence[Course], enrollments: Sequence[Enrollment]) -> float:
        """Sum of course prices over paid enrollments; unresolved or unpriced courses add nothing."""
        by_id: Dict[str, Course] = {}
        for course in courses:
            by_id.setdefault(course.record_id, course)

        revenue = 0.0
        for enrollment in enrollments:
            if not enrollment.paid:
                continue
            course = by_id.get(extract_record_id(enrollment.course))
            if course is not None and course.price is not None:
                revenue += course.price
        return revenue

    @staticmethod
    def _percentage(part: int, total: int) -> int:
        # Half-up rounding; round() would give 12 for 12.5
        if total == 0:
            return 0
        return int(math.floor(part / total * 100 + 0.5))
