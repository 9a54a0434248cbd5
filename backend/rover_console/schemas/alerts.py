from datetime import datetime, timezone
from typing import Annotated, ClassVar, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from rover_console.models.alert import AlertRecord

Priority = Literal["low", "medium", "high", "critical"]
PriorityFilter = Literal["all", "low", "medium", "high", "critical"]
Status = Literal["active", "resolved"]
Source = Literal["local", "api"]

PRIORITIES: tuple[str, ...] = ("low", "medium", "high", "critical")
STATUSES: tuple[str, ...] = ("active", "resolved")

# display emphasis only, never a sort key
PRIORITY_RANK = {name: rank for rank, name in enumerate(PRIORITIES)}


def as_utc(dt: datetime) -> datetime:
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


class _AlertBase(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    message: str
    priority: Priority
    category: str
    status: Status
    created_at: datetime
    updated_at: datetime


class LocalAlert(_AlertBase):
    """Alert logged by an operator and kept in the local database."""

    source: Literal["local"] = "local"
    mutable: ClassVar[bool] = True

    @property
    def row_id(self) -> int:
        return int(self.id)

    @classmethod
    def from_record(cls, record: AlertRecord) -> "LocalAlert":
        return cls(
            id=str(record.id),
            title=record.title,
            message=record.message,
            priority=record.priority,
            category=record.category,
            status=record.status,
            created_at=as_utc(record.created_at),
            updated_at=as_utc(record.updated_at),
        )


class RemoteAlert(_AlertBase):
    """Alert derived from a rover detection report. Read-only."""

    source: Literal["api"] = "api"
    mutable: ClassVar[bool] = False


Alert = Annotated[Union[LocalAlert, RemoteAlert], Field(discriminator="source")]


class AlertCreate(BaseModel):
    title: str
    message: str
    priority: Priority = "medium"
    category: str = "general"


class AlertStatusUpdate(BaseModel):
    status: Status


class AlertView(BaseModel):
    filter: PriorityFilter
    counts: dict[str, int]
    alerts: list[Alert]


class Notice(BaseModel):
    level: Literal["info", "error"] = "info"
    title: str
    message: str
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class DetectionReport(BaseModel):
    """Raw record returned by the rover API's /api/reports endpoint."""

    model_config = ConfigDict(extra="ignore")

    id: Union[int, str]
    object_detected: Optional[str] = None
    confidence: Optional[float] = None
    distance: Optional[float] = None
    action_taken: Optional[str] = None
    timestamp: Optional[str] = None
