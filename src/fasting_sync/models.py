"""Fasting session data models.

The wire format mirrors what the browser client stores: camelCase keys and
ISO-8601 timestamps with millisecond precision. Models accept either the
camelCase alias or the Python field name.
"""
from datetime import datetime, timezone
from typing import Annotated, Any, Literal, Optional

from pydantic import (
    AfterValidator,
    BaseModel,
    ConfigDict,
    Field,
    PlainSerializer,
    model_validator,
)

LinkType = Literal["editable", "readonly"]


def ensure_utc(dt: datetime) -> datetime:
    """Naive datetimes are taken to be UTC."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def format_timestamp(dt: datetime) -> str:
    """Render a datetime the way JavaScript's toISOString does."""
    return ensure_utc(dt).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def utc_now() -> datetime:
    """Current UTC time truncated to millisecond precision."""
    now = datetime.now(timezone.utc)
    return now.replace(microsecond=(now.microsecond // 1000) * 1000)


Timestamp = Annotated[
    datetime,
    AfterValidator(ensure_utc),
    PlainSerializer(format_timestamp, return_type=str, when_used="json"),
]

Rating = Annotated[int, Field(ge=1, le=10)]


class CheckinEntry(BaseModel):
    """Point-in-time self-reported wellness ratings."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: str
    timestamp: Timestamp
    energy: Rating
    hunger: Rating
    mental_clarity: Rating = Field(alias="mentalClarity")
    mood: Rating
    physical_comfort: Rating = Field(alias="physicalComfort")
    sleep_quality: Optional[Rating] = Field(default=None, alias="sleepQuality")
    water_intake: Optional[int] = Field(default=None, ge=0, alias="waterIntake")
    electrolytes: Optional[bool] = None


class BodyMetric(BaseModel):
    """Weight and body-fat measurement."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: str
    timestamp: Timestamp
    weight: Optional[float] = Field(default=None, ge=0)
    body_fat_percentage: Optional[float] = Field(
        default=None, ge=0, le=100, alias="bodyFatPercentage"
    )


class JournalEntry(BaseModel):
    """Free-text journal note."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: str
    timestamp: Timestamp
    content: str
    tags: list[str] = Field(default_factory=list)


class FastingSession(BaseModel):
    """One fasting attempt and everything logged against it."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str = ""
    start_time: Timestamp = Field(alias="startTime")
    end_time: Optional[Timestamp] = Field(default=None, alias="endTime")
    target_duration: float = Field(gt=0, alias="targetDuration")
    is_active: bool = Field(default=True, alias="isActive")
    entries: list[CheckinEntry] = Field(default_factory=list)
    body_metrics: list[BodyMetric] = Field(default_factory=list, alias="bodyMetrics")
    notes: list[JournalEntry] = Field(default_factory=list)
    edit_token: Optional[str] = Field(default=None, alias="editToken")
    email: Optional[str] = None
    revision: int = Field(default=0, ge=0)

    @model_validator(mode="after")
    def _active_sessions_have_no_end(self) -> "FastingSession":
        if self.is_active and self.end_time is not None:
            raise ValueError("an active session cannot have an end time")
        return self

    def to_wire(self) -> dict[str, Any]:
        """JSON-ready dict with camelCase keys and ISO timestamps."""
        return self.model_dump(mode="json", by_alias=True)

    @classmethod
    def from_wire(cls, data: dict[str, Any]) -> "FastingSession":
        return cls.model_validate(data)


class SessionLink(BaseModel):
    """Locally remembered pointer to a session this browser has opened."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str = ""
    type: LinkType
    edit_token: Optional[str] = Field(default=None, alias="editToken")
    last_accessed: Timestamp = Field(alias="lastAccessed")
    start_time: Timestamp = Field(alias="startTime")
    target_duration: float = Field(alias="targetDuration")
    is_active: bool = Field(alias="isActive")

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)
