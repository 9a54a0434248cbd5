import pytest
from sqlmodel import Session

from rover_console.core.errors import StorageError
from rover_console.schemas.people import PersonUpdate
from rover_console.services import people


def _add(client, **body):
    r = client.post("/people", json=body)
    assert r.status_code == 201
    return r.json()


def test_create_and_list_people_by_name(client):
    _add(client, name="Zoe Park", position="Operator", department="Field Ops")
    ana = _add(client, name="  Ana Ruiz ", email="ana@example.com", face_image="file:///faces/ana.jpg")

    assert ana["name"] == "Ana Ruiz"
    assert ana["face_image"] == "file:///faces/ana.jpg"
    assert ana["created_at"] == ana["updated_at"]

    people = client.get("/people").json()["people"]
    assert [p["name"] for p in people] == ["Ana Ruiz", "Zoe Park"]


def test_name_is_required(client):
    r = client.post("/people", json={"name": "   ", "phone": "555-0100"})
    assert r.status_code == 400
    assert r.json()["detail"] == "Name is required"
    assert client.get("/people").json()["people"] == []


def test_update_person(client):
    person = _add(client, name="Sam Lee", phone="555-0101")

    r = client.patch(f"/people/{person['id']}", json={"department": "Robotics", "phone": ""})
    assert r.status_code == 200
    updated = r.json()
    assert updated["department"] == "Robotics"
    assert updated["phone"] is None
    assert updated["name"] == "Sam Lee"

    assert client.patch(f"/people/{person['id']}", json={"name": ""}).status_code == 400
    assert client.patch("/people/999", json={"name": "Ghost"}).status_code == 404


def test_get_and_delete_person(client):
    person = _add(client, name="Kim Cho")

    assert client.get(f"/people/{person['id']}").json()["name"] == "Kim Cho"
    assert client.delete(f"/people/{person['id']}").json() == {"deleted": True, "id": person["id"]}
    assert client.get(f"/people/{person['id']}").status_code == 404
    assert client.delete(f"/people/{person['id']}").status_code == 404


def test_reads_on_a_missing_table_raise_storage_error(engine_without_tables):
    with Session(engine_without_tables) as session:
        with pytest.raises(StorageError):
            people.list_people(session)
        with pytest.raises(StorageError):
            people.get_person(session, 1)
        with pytest.raises(StorageError):
            people.update_person(session, 1, PersonUpdate(name="Ghost"))
        with pytest.raises(StorageError):
            people.delete_person(session, 1)
