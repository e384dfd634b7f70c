"""
Dashboard refresh cycle.

A refresh reads the five collections concurrently, waits for all of them and
only then computes a snapshot. Any failed read fails the whole refresh; no
partial snapshot is ever built.
"""
import asyncio
from datetime import date
from typing import Optional

from app.config import settings
from app.core.logging import get_logger
from app.models.enums import ActiveCoursePolicy, DashboardPhase, UpcomingCoursePolicy
from app.schemas.statistics import DashboardState, StatisticsSnapshot
from app.services.data_service import CourseDataSource
from app.services.statistics_service import StatisticsService
from app.utils.time import get_utc_now

logger = get_logger(__name__)

NO_DATA_MESSAGE = "No data available"


class RefreshFailedError(RuntimeError):
    """A refresh cycle could not complete; the previous snapshot stays replaced."""


async def load_snapshot(
    source: CourseDataSource,
    *,
    timeout: Optional[float] = None,
    today: Optional[date] = None,
    active_policy: Optional[ActiveCoursePolicy] = None,
    upcoming_policy: Optional[UpcomingCoursePolicy] = None,
    label_locale: Optional[str] = None,
) -> StatisticsSnapshot:
    """
    Fetch all collections and compute a snapshot.

    Raises:
        RefreshFailedError: If any read fails or the reads exceed the timeout
    """
    timeout = settings.REFRESH_TIMEOUT_SECONDS if timeout is None else timeout
    reads = [
        asyncio.ensure_future(read)
        for read in (
            source.list_instructors(),
            source.list_participants(),
            source.list_rooms(),
            source.list_courses(),
            source.list_enrollments(),
        )
    ]
    try:
        instructors, participants, rooms, courses, enrollments = await asyncio.wait_for(
            asyncio.gather(*reads),
            timeout=timeout,
        )
    except asyncio.TimeoutError as e:
        raise RefreshFailedError(f"Record store reads timed out after {timeout}s") from e
    except Exception as e:
        raise RefreshFailedError(f"Record store read failed: {e}") from e
    finally:
        # A failed refresh must not leave sibling reads running
        for read in reads:
            if not read.done():
                read.cancel()

    return StatisticsService.compute_statistics(
        instructors,
        participants,
        rooms,
        courses,
        enrollments,
        today=today,
        active_policy=active_policy or settings.ACTIVE_COURSE_POLICY,
        upcoming_policy=upcoming_policy or settings.UPCOMING_COURSE_POLICY,
        label_locale=label_locale or settings.STATUS_LABEL_LOCALE,
    )


class DashboardStore:
    """
    Owns the dashboard state: uninitialized -> loading -> (ready | failed) -> loading ...

    Each refresh gets a generation number. A refresh only publishes its result
    if no newer refresh has started and the store is still open.
    """

    def __init__(self, source: CourseDataSource, timeout: Optional[float] = None):
        self.source = source
        self.timeout = timeout
        self._state = DashboardState()
        self._generation = 0
        self._closed = False

    @property
    def state(self) -> DashboardState:
        return self._state

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        """Stop publishing; results of in-flight refreshes are dropped."""
        self._closed = True

    async def refresh(self, today: Optional[date] = None) -> DashboardState:
        """
        Run one refresh cycle and return the resulting state.

        Failures are logged and turned into the FAILED phase; they never raise.
        """
        if self._closed:
            return self._state

        self._generation += 1
        generation = self._generation
        self._state = DashboardState(phase=DashboardPhase.LOADING, updated_at=get_utc_now())

        try:
            snapshot = await load_snapshot(self.source, timeout=self.timeout, today=today)
        except RefreshFailedError as e:
            logger.error(
                "Dashboard refresh failed",
                extra={"refresh_generation": generation, "error": str(e)},
                exc_info=e.__cause__ or e,
            )
            next_state = DashboardState(
                phase=DashboardPhase.FAILED,
                error=NO_DATA_MESSAGE,
                updated_at=get_utc_now(),
            )
        else:
            logger.info(
                "Dashboard refreshed",
                extra={
                    "refresh_generation": generation,
                    "courses": snapshot.courses,
                    "enrollments": snapshot.enrollments,
                },
            )
            next_state = DashboardState(
                phase=DashboardPhase.READY,
                snapshot=snapshot,
                updated_at=get_utc_now(),
            )

        if self._closed or generation != self._generation:
            logger.info(
                "Discarding superseded dashboard refresh",
                extra={"refresh_generation": generation},
            )
            return self._state

        self._state = next_state
        return self._state
