"""Shared pytest fixtures for unit and integration tests."""

import asyncio
from datetime import date
from typing import Dict, List, Optional

import pytest
from httpx import ASGITransport, AsyncClient

from app.main import app
from app.config import settings
from app.schemas.entities import Course, Enrollment, Instructor, Participant, Room
from app.services.dashboard_service import DashboardStore
from app.services.data_service import DataSourceError

TODAY = date(2025, 6, 15)
RECORD_URL = "https://my.living-apps.de/rest/apps/5f0c0ffee0c0ffee0c0ffee0/records/"


def record_id(n: int) -> str:
    """24 hex character record id derived from a number."""
    return f"{n:024x}"


def course_ref(n: int) -> str:
    return f"{RECORD_URL}{record_id(n)}"


def make_course(n: int, **fields) -> Course:
    return Course(record_id=record_id(n), title=f"Course {n}", **fields)


def make_enrollment(n: int, course: Optional[str] = None, paid: bool = False) -> Enrollment:
    return Enrollment(record_id=record_id(1000 + n), course=course, paid=paid)


class FakeDataSource:
    """In-memory record store. `fail` names entities whose read raises."""

    def __init__(
        self,
        instructors: Optional[List[Instructor]] = None,
        participants: Optional[List[Participant]] = None,
        rooms: Optional[List[Room]] = None,
        courses: Optional[List[Course]] = None,
        enrollments: Optional[List[Enrollment]] = None,
        fail: tuple = (),
        delay: float = 0.0,
    ):
        self.data: Dict[str, list] = {
            "instructors": instructors or [],
            "participants": participants or [],
            "rooms": rooms or [],
            "courses": courses or [],
            "enrollments": enrollments or [],
        }
        self.fail = set(fail)
        self.delay = delay
        self.calls: List[str] = []
        self.finished: List[str] = []

    async def _read(self, entity: str) -> list:
        self.calls.append(entity)
        if entity in self.fail:
            raise DataSourceError(f"{entity} unavailable")
        if self.delay:
            await asyncio.sleep(self.delay)
        self.finished.append(entity)
        return list(self.data[entity])

    async def list_instructors(self) -> List[Instructor]:
        return await self._read("instructors")

    async def list_participants(self) -> List[Participant]:
        return await self._read("participants")

    async def list_rooms(self) -> List[Room]:
        return await self._read("rooms")

    async def list_courses(self) -> List[Course]:
        return await self._read("courses")

    async def list_enrollments(self) -> List[Enrollment]:
        return await self._read("enrollments")


@pytest.fixture
def fake_source() -> FakeDataSource:
    """Small, fully populated record store."""
    return FakeDataSource(
        instructors=[Instructor(record_id=record_id(201)), Instructor(record_id=record_id(202))],
        participants=[Participant(record_id=record_id(301))],
        rooms=[Room(record_id=record_id(401)), Room(record_id=record_id(402)), Room(record_id=record_id(403))],
        courses=[
            make_course(1, status="active", price=100.0, start_date=date(2025, 6, 1), end_date=date(2025, 7, 1)),
            make_course(2, status="planned", price=50.0, start_date=date(2025, 7, 1)),
            make_course(3, status="completed", start_date=date(2025, 1, 1), end_date=date(2025, 2, 1)),
        ],
        enrollments=[
            make_enrollment(1, course=course_ref(1), paid=True),
            make_enrollment(2, course=course_ref(2), paid=False),
            make_enrollment(3, course=course_ref(2), paid=True),
            make_enrollment(4, course=course_ref(99), paid=True),
        ],
    )


@pytest.fixture
def api_base() -> str:
    """Base URL for API requests."""
    return f"http://test{settings.API_V1_PREFIX}"


@pytest.fixture
async def async_client(api_base: str):
    """Async HTTP client against the app, without a dashboard store."""
    transport = ASGITransport(app=app)
    client = AsyncClient(transport=transport, base_url=api_base, timeout=30.0)
    yield client
    await client.aclose()


@pytest.fixture
async def dashboard_client(async_client: AsyncClient, fake_source: FakeDataSource):
    """
    Client whose app serves a store backed by `fake_source`.
    ASGITransport does not run the lifespan, so the store is installed here.
    """
    store = DashboardStore(fake_source)
    app.state.dashboard_store = store
    yield async_client
    store.close()
    del app.state.dashboard_store
