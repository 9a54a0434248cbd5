from datetime import datetime, timezone
from typing import Optional

from sqlmodel import Field, SQLModel


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AlertRecord(SQLModel, table=True):
    __tablename__ = "alerts"
    __table_args__ = {"sqlite_autoincrement": True}

    id: Optional[int] = Field(default=None, primary_key=True)
    title: str = Field(nullable=False)
    message: str = Field(nullable=False)
    priority: str = Field(default="medium", index=True)  # low/medium/high/critical
    category: str = Field(default="general")
    status: str = Field(default="active", index=True)  # active/resolved

    created_at: datetime = Field(default_factory=_utcnow, index=True)
    updated_at: datetime = Field(default_factory=_utcnow)
