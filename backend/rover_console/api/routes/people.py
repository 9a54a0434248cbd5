from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session

from rover_console.core.errors import ValidationError
from rover_console.db.session import get_session
from rover_console.schemas.people import PersonCreate, PersonUpdate
from rover_console.services import people as people_service

router = APIRouter(prefix="/people", tags=["people"])


@router.get("")
def list_people(session: Session = Depends(get_session)):
    return {"people": [p.model_dump(mode="json") for p in people_service.list_people(session)]}


@router.post("", status_code=201)
def create_person(body: PersonCreate, session: Session = Depends(get_session)):
    try:
        person = people_service.create_person(session, body)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    return person.model_dump(mode="json")


@router.get("/{person_id}")
def get_person(person_id: int, session: Session = Depends(get_session)):
    person = people_service.get_person(session, person_id)
    if not person:
        raise HTTPException(status_code=404, detail="Person not found")
    return person.model_dump(mode="json")


@router.patch("/{person_id}")
def update_person(person_id: int, body: PersonUpdate, session: Session = Depends(get_session)):
    try:
        person = people_service.update_person(session, person_id, body)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    if not person:
        raise HTTPException(status_code=404, detail="Person not found")
    return person.model_dump(mode="json")


@router.delete("/{person_id}")
def delete_person(person_id: int, session: Session = Depends(get_session)):
    if not people_service.delete_person(session, person_id):
        raise HTTPException(status_code=404, detail="Person not found")
    return {"deleted": True, "id": person_id}
