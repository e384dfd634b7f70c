"""Record store entities consumed by the dashboard.

Records arrive as ``{"fields": {...}}`` objects keyed by record id. Field
names on the wire are German (``titel``, ``startdatum``, ...); the English
names are accepted too so fixtures and other sources can use them.
"""

import math
from datetime import date
from typing import Any, Dict, Optional, Type, TypeVar
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationInfo, field_validator

from app.core.logging import get_logger
from app.models.enums import REMOTE_STATUS_KEYS
from app.utils.time import parse_record_date

logger = get_logger(__name__)

R = TypeVar("R", bound="RecordBase")


def _log_dropped_field(info: ValidationInfo, value: Any) -> None:
    """Unreadable optional values are treated as absent, not as a bad record."""
    logger.warning(
        "Ignoring unparseable record field",
        extra={"record_id": info.data.get("record_id"), "field": info.field_name, "value": repr(value)},
    )


class RecordBase(BaseModel):
    record_id: str

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    @classmethod
    def from_record(cls: Type[R], record_id: str, fields: Optional[Dict[str, Any]]) -> R:
        """Build an entity from a record id and its raw field mapping."""
        return cls.model_validate({**(fields or {}), "record_id": record_id})


class OpaqueRecord(RecordBase):
    """Record whose content the dashboard never inspects, only counts."""
    fields: Dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_record(cls, record_id: str, fields: Optional[Dict[str, Any]]) -> "OpaqueRecord":
        return cls(record_id=record_id, fields=dict(fields or {}))


class Instructor(OpaqueRecord):
    pass


class Participant(OpaqueRecord):
    pass


class Room(OpaqueRecord):
    pass


class Course(RecordBase):
    title: Optional[str] = Field(None, validation_alias=AliasChoices("title", "titel"))
    status: Optional[str] = None
    start_date: Optional[date] = Field(None, validation_alias=AliasChoices("start_date", "startdatum"))
    end_date: Optional[date] = Field(None, validation_alias=AliasChoices("end_date", "enddatum"))
    price: Optional[float] = Field(None, validation_alias=AliasChoices("price", "preis"))
    max_participants: Optional[int] = Field(
        None, validation_alias=AliasChoices("max_participants", "max_teilnehmer")
    )

    @field_validator("status", mode="before")
    @classmethod
    def normalize_status(cls, v: Any) -> Optional[str]:
        """Lookup fields may arrive as {"key": ..., "label": ...}; German keys map to CourseStatus values."""
        if isinstance(v, dict):
            v = v.get("key")
        if v is None or v == "":
            return None
        key = str(v).strip()
        remote = REMOTE_STATUS_KEYS.get(key.lower())
        return remote.value if remote else key

    @field_validator("title", mode="before")
    @classmethod
    def title_as_text(cls, v: Any) -> Optional[str]:
        return None if v is None else str(v)

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def parse_dates(cls, v: Any, info: ValidationInfo) -> Optional[date]:
        parsed = parse_record_date(v)
        if parsed is None and v not in (None, ""):
            _log_dropped_field(info, v)
        return parsed

    @field_validator("price", mode="before")
    @classmethod
    def parse_price(cls, v: Any, info: ValidationInfo) -> Optional[float]:
        if v is None or v == "":
            return None
        try:
            price = float(v)
        except (TypeError, ValueError):
            price = None
        if price is None or not math.isfinite(price):
            _log_dropped_field(info, v)
            return None
        return price

    @field_validator("max_participants", mode="before")
    @classmethod
    def parse_max_participants(cls, v: Any, info: ValidationInfo) -> Optional[int]:
        if v is None or v == "":
            return None
        try:
            number = float(v)
        except (TypeError, ValueError):
            number = None
        if number is None or not math.isfinite(number) or not number.is_integer():
            _log_dropped_field(info, v)
            return None
        return int(number)


class Enrollment(RecordBase):
    course: Optional[str] = Field(None, validation_alias=AliasChoices("course", "kurs"))
    paid: bool = Field(False, validation_alias=AliasChoices("paid", "bezahlt"))

    @field_validator("course", mode="before")
    @classmethod
    def reference_as_text(cls, v: Any, info: ValidationInfo) -> Optional[str]:
        if v is None or isinstance(v, str):
            return v
        _log_dropped_field(info, v)
        return None

    @field_validator("paid", mode="before")
    @classmethod
    def missing_is_unpaid(cls, v: Any, info: ValidationInfo) -> bool:
        if v is None or v == "":
            return False
        if isinstance(v, bool):
            return v
        flag = str(v).strip().lower()
        if flag in ("true", "1", "yes", "ja"):
            return True
        if flag not in ("false", "0", "no", "nein"):
            _log_dropped_field(info, v)
        return False
