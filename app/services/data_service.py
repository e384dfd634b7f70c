"""
Read-only client for the course record store (Living Apps REST API).
One app per entity type; every list call fetches all records of that app.
"""
from typing import Any, Dict, List, Optional, Protocol, Type, TypeVar

import httpx
from pydantic import ValidationError

from app.config import settings
from app.core.logging import get_logger
from app.schemas.entities import Course, Enrollment, Instructor, Participant, RecordBase, Room

logger = get_logger(__name__)

R = TypeVar("R", bound=RecordBase)


class DataSourceError(RuntimeError):
    """A record store read failed (transport, HTTP status or payload)."""


class CourseDataSource(Protocol):
    async def list_instructors(self) -> List[Instructor]: ...

    async def list_participants(self) -> List[Participant]: ...

    async def list_rooms(self) -> List[Room]: ...

    async def list_courses(self) -> List[Course]: ...

    async def list_enrollments(self) -> List[Enrollment]: ...


def decode_records(payload: Any, model: Type[R]) -> List[R]:
    """
    Decode a records response into entities.

    The store answers with an object keyed by record id,
    ``{"<id>": {"fields": {...}}, ...}``; a list of records carrying
    ``record_id`` (or ``id``) is accepted as well.
    """
    if isinstance(payload, dict):
        items = [(record_id, record) for record_id, record in payload.items()]
    elif isinstance(payload, list):
        items = []
        for record in payload:
            if not isinstance(record, dict):
                raise DataSourceError(f"Unexpected record entry: {record!r}")
            items.append((record.get("record_id") or record.get("id"), record))
    else:
        raise DataSourceError(f"Unexpected records payload type: {type(payload).__name__}")

    records = []
    for record_id, record in items:
        if not record_id or not isinstance(record, dict):
            raise DataSourceError(f"Malformed record: {record!r}")
        try:
            records.append(model.from_record(str(record_id), record.get("fields")))
        except ValidationError as e:
            raise DataSourceError(f"Invalid {model.__name__} record {record_id}: {e}") from e
    return records


class CourseDataService:
    """Service layer for record store reads"""

    def __init__(
        self,
        client: httpx.AsyncClient,
        app_ids: Dict[str, str],
        api_key: str = "",
    ):
        self.client = client
        self.app_ids = app_ids
        self.api_key = api_key

    @classmethod
    def from_settings(cls, client: httpx.AsyncClient) -> "CourseDataService":
        return cls(
            client=client,
            app_ids={
                "instructors": settings.INSTRUCTORS_APP_ID,
                "participants": settings.PARTICIPANTS_APP_ID,
                "rooms": settings.ROOMS_APP_ID,
                "courses": settings.COURSES_APP_ID,
                "enrollments": settings.ENROLLMENTS_APP_ID,
            },
            api_key=settings.LIVING_APPS_API_KEY,
        )

    @staticmethod
    def create_client(
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> httpx.AsyncClient:
        """Shared HTTP client; the application lifespan closes it."""
        return httpx.AsyncClient(
            base_url=(base_url or settings.LIVING_APPS_BASE_URL).rstrip("/"),
            timeout=timeout if timeout is not None else settings.DATA_SOURCE_TIMEOUT_SECONDS,
            headers={"Accept": "application/json"},
        )

    async def list_instructors(self) -> List[Instructor]:
        return await self._list("instructors", Instructor)

    async def list_participants(self) -> List[Participant]:
        return await self._list("participants", Participant)

    async def list_rooms(self) -> List[Room]:
        return await self._list("rooms", Room)

    async def list_courses(self) -> List[Course]:
        return await self._list("courses", Course)

    async def list_enrollments(self) -> List[Enrollment]:
        return await self._list("enrollments", Enrollment)

    async def _list(self, entity: str, model: Type[R]) -> List[R]:
        app_id = self.app_ids.get(entity)
        if not app_id:
            raise DataSourceError(f"Record store app id for {entity} is not configured")

        headers = {"X-API-Key": self.api_key} if self.api_key else {}
        try:
            resp = await self.client.get(f"/apps/{app_id}/records", headers=headers)
            resp.raise_for_status()
            payload = resp.json()
        except httpx.HTTPStatusError as e:
            raise DataSourceError(
                f"Record store returned {e.response.status_code} for {entity}"
            ) from e
        except httpx.HTTPError as e:
            raise DataSourceError(f"Record store request for {entity} failed: {e}") from e
        except ValueError as e:
            raise DataSourceError(f"Record store sent invalid JSON for {entity}") from e

        records = decode_records(payload, model)
        logger.debug("Fetched records", extra={"entity": entity, "count": len(records)})
        return records
