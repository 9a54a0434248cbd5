import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, SQLModel, create_engine

from rover_console import models  # noqa: F401
from rover_console.core.config import settings
from rover_console.metrics.prometheus import store_errors_total

logger = logging.getLogger(__name__)


def _connect_args(database_url: str) -> dict:
    if database_url.startswith("sqlite"):
        return {"check_same_thread": False}
    return {}


engine = create_engine(
    settings.database_url,
    connect_args=_connect_args(settings.database_url),
    pool_pre_ping=True,
)


def create_tables(bind=None) -> bool:
    """Create any missing tables. Returns False if the database is unusable."""
    try:
        SQLModel.metadata.create_all(bind if bind is not None else engine)
    except SQLAlchemyError as e:
        logger.error("schema creation failed: %s", e)
        store_errors_total.labels(store="database", operation="create_tables").inc()
        return False
    return True


def get_session():
    with Session(engine) as session:
        yield session
