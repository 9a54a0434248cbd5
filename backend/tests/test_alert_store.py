import pytest

from rover_console.core.errors import StorageError, ValidationError
from rover_console.services.alert_store import SAMPLE_ALERTS, LocalAlertStore


@pytest.fixture()
def store(engine):
    return LocalAlertStore(engine, seed_samples=False)


def test_add_then_list_contains_new_active_alert(store):
    store.add("Battery Low", "Battery at 15%", "high", "power")
    store.add("Gripper Jam", "Gripper stopped responding", "medium", "hardware")

    alerts = store.list()
    assert len(alerts) == 2
    gripper = [a for a in alerts if a.title == "Gripper Jam"]
    assert len(gripper) == 1
    a = gripper[0]
    assert a.message == "Gripper stopped responding"
    assert a.priority == "medium"
    assert a.category == "hardware"
    assert a.status == "active"
    assert a.source == "local"
    assert a.created_at == a.updated_at


def test_add_trims_input_and_defaults(store):
    a = store.add("  Dust storm  ", "  Visibility poor ")
    assert a.title == "Dust storm"
    assert a.message == "Visibility poor"
    assert a.priority == "medium"
    assert a.category == "general"


@pytest.mark.parametrize(
    "title,message",
    [("", "msg"), ("   ", "msg"), ("title", ""), ("title", " \t "), (None, None)],
)
def test_add_rejects_blank_title_or_message(store, title, message):
    store.add("Existing", "Already logged")
    before = store.list()

    with pytest.raises(ValidationError):
        store.add(title, message)

    assert store.list() == before


def test_add_rejects_unknown_priority(store):
    with pytest.raises(ValidationError):
        store.add("Title", "Message", priority="urgent")
    assert store.list() == []


def test_list_orders_newest_first_and_filters_by_priority(store):
    first = store.add("First", "one", "low")
    second = store.add("Second", "two", "critical")
    third = store.add("Third", "three", "low")

    assert [a.id for a in store.list()] == [third.id, second.id, first.id]
    assert [a.id for a in store.list(priority="low")] == [third.id, first.id]
    assert [a.id for a in store.list(priority="critical")] == [second.id]
    assert store.list(priority="high") == []


def test_update_status_touches_only_that_row(store):
    target = store.add("Target", "resolve me")
    other = store.add("Other", "leave me")
    other_before = store.get(other.row_id)

    updated = store.update_status(target.row_id, "resolved")

    assert updated.status == "resolved"
    assert updated.updated_at >= target.updated_at
    assert updated.created_at == target.created_at
    assert updated.title == target.title
    assert store.get(other.row_id) == other_before


def test_resolved_alert_cannot_be_reopened(store):
    a = store.add("Done", "already handled")
    store.update_status(a.row_id, "resolved")

    with pytest.raises(ValidationError):
        store.update_status(a.row_id, "active")
    assert store.get(a.row_id).status == "resolved"


def test_update_status_unknown_row_returns_none(store):
    assert store.update_status(999, "resolved") is None


def test_update_status_rejects_unknown_status(store):
    a = store.add("Title", "Message")
    with pytest.raises(ValidationError):
        store.update_status(a.row_id, "archived")


def test_delete_removes_exactly_that_row(store):
    keep = store.add("Keep", "stays")
    drop = store.add("Drop", "goes")

    assert store.delete(drop.row_id) is True
    assert [a.id for a in store.list()] == [keep.id]
    assert store.delete(drop.row_id) is False


def test_init_seeds_once(engine):
    store = LocalAlertStore(engine, seed_samples=True)

    assert store.init() is True
    after_first = len(store.list())
    assert store.init() is True
    after_second = len(store.list())

    assert after_first == len(SAMPLE_ALERTS)
    assert after_second == after_first
    assert {a.priority for a in store.list()} == {"low", "medium", "high", "critical"}


def test_init_without_seeding_leaves_table_empty(engine):
    store = LocalAlertStore(engine, seed_samples=False)
    assert store.init() is True
    assert store.list() == []


def test_storage_failure_is_reported_as_storage_error(engine_without_tables):
    store = LocalAlertStore(engine_without_tables, seed_samples=False)

    with pytest.raises(StorageError):
        store.list()
    with pytest.raises(StorageError):
        store.add("Title", "Message")


def test_get_out_of_range_row_id_is_missing(store):
    assert store.get(2**63) is None
    assert store.get(-5) is None
