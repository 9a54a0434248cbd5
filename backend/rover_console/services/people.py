import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from rover_console.core.errors import StorageError, ValidationError
from rover_console.metrics.prometheus import store_errors_total
from rover_console.models.person import Person
from rover_console.schemas.people import PersonCreate, PersonUpdate

logger = logging.getLogger(__name__)


def _clean(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


def _failed(operation: str, error: Exception) -> StorageError:
    logger.error("people store %s failed: %s", operation, error)
    store_errors_total.labels(store="people", operation=operation).inc()
    return StorageError(f"Failed to {operation} person")


def _get(session: Session, person_id: int, operation: str) -> Optional[Person]:
    try:
        return session.get(Person, person_id)
    except SQLAlchemyError as e:
        session.rollback()
        raise _failed(operation, e) from e


def _commit(session: Session, person: Person, operation: str) -> Person:
    try:
        session.add(person)
        session.commit()
        session.refresh(person)
    except SQLAlchemyError as e:
        session.rollback()
        raise _failed(operation, e) from e
    return person


def list_people(session: Session) -> list[Person]:
    try:
        return list(session.exec(select(Person).order_by(Person.name)).all())
    except SQLAlchemyError as e:
        session.rollback()
        raise _failed("list", e) from e


def get_person(session: Session, person_id: int) -> Optional[Person]:
    return _get(session, person_id, "get")


def create_person(session: Session, data: PersonCreate) -> Person:
    name = _clean(data.name)
    if not name:
        raise ValidationError("Name is required")

    now = datetime.now(timezone.utc)
    person = Person(
        name=name,
        position=_clean(data.position),
        department=_clean(data.department),
        phone=_clean(data.phone),
        email=_clean(data.email),
        face_image=_clean(data.face_image),
        created_at=now,
        updated_at=now,
    )
    person = _commit(session, person, "create")
    logger.info("added person %s", person.id)
    return person


def update_person(session: Session, person_id: int, data: PersonUpdate) -> Optional[Person]:
    person = _get(session, person_id, "update")
    if person is None:
        return None

    changes = data.model_dump(exclude_unset=True)
    if "name" in changes:
        name = _clean(changes["name"])
        if not name:
            raise ValidationError("Name is required")
        changes["name"] = name
    for field, value in changes.items():
        setattr(person, field, value if field == "name" else _clean(value))

    person.updated_at = datetime.now(timezone.utc)
    return _commit(session, person, "update")


def delete_person(session: Session, person_id: int) -> bool:
    person = _get(session, person_id, "delete")
    if person is None:
        return False
    try:
        session.delete(person)
        session.commit()
    except SQLAlchemyError as e:
        session.rollback()
        raise _failed("delete", e) from e
    return True
