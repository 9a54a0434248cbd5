import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import func
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, SQLModel, select

from rover_console.core.errors import StorageError, ValidationError
from rover_console.metrics.prometheus import alerts_logged_total, store_errors_total
from rover_console.models.alert import AlertRecord
from rover_console.schemas.alerts import PRIORITIES, STATUSES, LocalAlert

logger = logging.getLogger(__name__)

# SQLite INTEGER PRIMARY KEY is a signed 64-bit rowid
MAX_ROW_ID = 2**63 - 1

SAMPLE_ALERTS = [
    {
        "title": "System Online",
        "message": "Rover control system successfully initialized and connected.",
        "priority": "low",
        "category": "system",
    },
    {
        "title": "Battery Level Warning",
        "message": "Battery level has dropped below 20%. Consider charging soon.",
        "priority": "medium",
        "category": "power",
    },
    {
        "title": "Camera Malfunction",
        "message": "Camera feed interrupted. Check camera connections.",
        "priority": "high",
        "category": "hardware",
    },
    {
        "title": "Emergency Stop Activated",
        "message": "Emergency stop was triggered at 14:32. All movement halted.",
        "priority": "critical",
        "category": "safety",
    },
    {
        "title": "Connection Restored",
        "message": "Network connection to rover has been restored successfully.",
        "priority": "low",
        "category": "network",
    },
]


def _now() -> datetime:
    return datetime.now(timezone.utc)


class LocalAlertStore:
    """Operator-logged alerts persisted in the ``alerts`` table.

    Every database failure is logged and re-raised as ``StorageError`` so
    callers can report a generic failure and keep what they already show.
    """

    def __init__(self, engine: Engine, seed_samples: bool = True) -> None:
        self._engine = engine
        self._seed_samples = seed_samples

    def _failed(self, operation: str, error: Exception) -> StorageError:
        logger.error("alert store %s failed: %s", operation, error)
        store_errors_total.labels(store="alerts", operation=operation).inc()
        return StorageError(f"Failed to {operation} alert")

    def init(self) -> bool:
        """Create the table if needed and seed sample alerts into an empty one.

        Safe to call repeatedly. Returns False instead of raising when the
        database is unusable; the console then starts with no local alerts.
        """
        try:
            SQLModel.metadata.create_all(self._engine, tables=[AlertRecord.__table__])
            if not self._seed_samples:
                return True
            with Session(self._engine) as session:
                count = session.exec(select(func.count()).select_from(AlertRecord)).one()
                if count == 0:
                    now = _now()
                    for sample in SAMPLE_ALERTS:
                        session.add(AlertRecord(**sample, created_at=now, updated_at=now))
                    session.commit()
                    logger.info("seeded %d sample alerts", len(SAMPLE_ALERTS))
        except SQLAlchemyError as e:
            logger.error("alert store initialisation failed: %s", e)
            store_errors_total.labels(store="alerts", operation="init").inc()
            return False
        return True

    def list(self, priority: Optional[str] = None) -> list[LocalAlert]:
        q = select(AlertRecord).order_by(AlertRecord.created_at.desc(), AlertRecord.id.desc())
        if priority and priority != "all":
            q = q.where(AlertRecord.priority == priority)
        try:
            with Session(self._engine) as session:
                rows = session.exec(q).all()
        except SQLAlchemyError as e:
            raise self._failed("list", e) from e
        return [LocalAlert.from_record(r) for r in rows]

    def get(self, row_id: int) -> Optional[LocalAlert]:
        if not 0 <= row_id <= MAX_ROW_ID:
            return None
        try:
            with Session(self._engine) as session:
                record = session.get(AlertRecord, row_id)
        except SQLAlchemyError as e:
            raise self._failed("get", e) from e
        return LocalAlert.from_record(record) if record else None

    def add(
        self,
        title: str,
        message: str,
        priority: str = "medium",
        category: str = "general",
    ) -> LocalAlert:
        title = (title or "").strip()
        message = (message or "").strip()
        if not title or not message:
            raise ValidationError("Title and message are required")
        if priority not in PRIORITIES:
            raise ValidationError(f"Unknown priority: {priority}")
        category = (category or "").strip() or "general"

        now = _now()
        record = AlertRecord(
            title=title,
            message=message,
            priority=priority,
            category=category,
            status="active",
            created_at=now,
            updated_at=now,
        )
        try:
            with Session(self._engine) as session:
                session.add(record)
                session.commit()
                session.refresh(record)
                alert = LocalAlert.from_record(record)
        except SQLAlchemyError as e:
            raise self._failed("add", e) from e

        alerts_logged_total.labels(priority=priority).inc()
        logger.info("logged alert %s (%s/%s)", alert.id, priority, category)
        return alert

    def update_status(self, row_id: int, status: str) -> Optional[LocalAlert]:
        if status not in STATUSES:
            raise ValidationError(f"Unknown status: {status}")
        try:
            with Session(self._engine) as session:
                record = session.get(AlertRecord, row_id)
                if record is None:
                    return None
                if record.status == status:
                    return LocalAlert.from_record(record)
                if record.status == "resolved":
                    raise ValidationError("Resolved alerts cannot be reopened")

                record.status = status
                record.updated_at = _now()
                session.add(record)
                session.commit()
                session.refresh(record)
                return LocalAlert.from_record(record)
        except SQLAlchemyError as e:
            raise self._failed("update", e) from e

    def delete(self, row_id: int) -> bool:
        try:
            with Session(self._engine) as session:
                record = session.get(AlertRecord, row_id)
                if record is None:
                    return False
                session.delete(record)
                session.commit()
        except SQLAlchemyError as e:
            raise self._failed("delete", e) from e
        logger.info("deleted alert %s", row_id)
        return True
