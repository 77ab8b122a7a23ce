from datetime import date

import pytest
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm.exc import StaleDataError

from app.errors import (
    ClientNotFoundError,
    ConcurrentUpdateError,
    PersistenceError,
    ValidationError,
)
from app.extensions import db
from app.models import Client
from app.services.client_store import ClientStore, OperatorContext

TODAY = date(2024, 6, 15)


def _payload(**overrides):
    data = {
        "name": "Ana",
        "phone": "555-0101",
        "startDate": "2024-06-01",
        "renewalDate": "2024-07-01",
        "price": 40,
    }
    data.update(overrides)
    return data


def test_create_fills_defaults(store):
    row = store.create({"name": "Bia", "phone": "555-0202"}, today=TODAY)

    rec = row.to_record()
    assert rec.start_date == TODAY
    assert rec.renewal_date == date(2024, 7, 15)
    assert rec.price == 35.0
    assert rec.devices == 1
    assert row.version == 1
    assert len(rec.id) == 36


def test_create_ignores_client_supplied_id(store):
    row = store.create(_payload(id="mine"), today=TODAY)
    assert row.id != "mine"


def test_create_rejects_invalid_payload_without_writing(store):
    with pytest.raises(ValidationError):
        store.create(_payload(price=-5), today=TODAY)
    assert store.snapshot() == []


def test_collections_are_scoped_per_operator(store):
    store.create(_payload(), today=TODAY)
    other = ClientStore(OperatorContext(owner_id="someone-else"))

    assert other.snapshot() == []
    with pytest.raises(ClientNotFoundError):
        other.get(store.snapshot()[0].id)


def test_update_is_partial_and_bumps_version(store):
    row = store.create(_payload(), today=TODAY)
    updated = store.update(row.id, {"renewalDate": "2024-08-01", "notes": "vip"}, expected_version=1)

    rec = updated.to_record()
    assert rec.renewal_date == date(2024, 8, 1)
    assert rec.notes == "vip"
    assert rec.name == "Ana"
    assert updated.version == 2


def test_update_with_stale_version_is_refused(store):
    row = store.create(_payload(), today=TODAY)
    store.update(row.id, {"name": "Ana Maria"})

    with pytest.raises(ConcurrentUpdateError):
        store.update(row.id, {"name": "Late edit"}, expected_version=1)
    assert store.get(row.id).name == "Ana Maria"


def test_renew_persists_the_advanced_date(store):
    row = store.create(_payload(renewalDate="2024-06-01"), today=TODAY)

    store.renew(row.id, today=TODAY)
    assert store.get(row.id).renewal_date == date(2024, 7, 15)

    store.renew(row.id, today=TODAY)
    assert store.get(row.id).renewal_date == date(2024, 8, 14)


def test_delete(store):
    row = store.create(_payload(), today=TODAY)
    store.delete(row.id)
    with pytest.raises(ClientNotFoundError):
        store.get(row.id)
    with pytest.raises(ClientNotFoundError):
        store.delete(row.id)


def test_failed_commit_rolls_back_to_stored_state(store, monkeypatch):
    row = store.create(_payload(renewalDate="2024-07-01"), today=TODAY)
    client_id = row.id

    def broken_commit():
        raise OperationalError("UPDATE client", {}, Exception("disk I/O error"))

    monkeypatch.setattr(db.session(), "commit", broken_commit)
    with pytest.raises(PersistenceError):
        store.renew(client_id, today=TODAY)
    monkeypatch.undo()

    assert store.get(client_id).renewal_date == date(2024, 7, 1)


def test_lost_version_race_is_a_concurrent_update(store, monkeypatch):
    row = store.create(_payload(), today=TODAY)

    def racing_commit():
        raise StaleDataError("UPDATE statement on table 'client' expected to update 1 row(s); 0 were matched.")

    monkeypatch.setattr(db.session(), "commit", racing_commit)
    with pytest.raises(ConcurrentUpdateError):
        store.renew(row.id, today=TODAY)


def test_replace_all_is_all_or_nothing(store):
    store.create(_payload(name="Keep me"), today=TODAY)

    with pytest.raises(ValidationError) as exc:
        store.replace_all([_payload(id="x1"), _payload(id="x2", renewalDate="bad")])
    assert any(e.startswith("row 1 (x2)") for e in exc.value.errors)
    assert [c.name for c in store.snapshot()] == ["Keep me"]

    assert store.replace_all([_payload(id="x1", name="One"), _payload(id="x2", name="Two")]) == 2
    assert sorted(c.id for c in store.snapshot()) == ["x1", "x2"]


def test_replace_all_can_reimport_its_own_export(store):
    store.create(_payload(name="Round trip"), today=TODAY)
    exported = [c.to_dict() for c in store.snapshot()]

    assert store.replace_all(exported) == 1
    assert [c.to_dict() for c in store.snapshot()] == exported


def test_replace_all_rejects_duplicate_ids(store):
    with pytest.raises(ValidationError):
        store.replace_all([_payload(id="dup"), _payload(id="dup")])


def test_merge_upserts_by_id(store):
    store.replace_all([_payload(id="a", name="A"), _payload(id="b", name="B")])

    result = store.merge([_payload(id="b", name="B2"), _payload(id="c", name="C")])

    assert result == {"created": 1, "updated": 1}
    assert {c.id: c.name for c in store.snapshot()} == {"a": "A", "b": "B2", "c": "C"}


def test_import_cannot_take_over_another_operators_ids(store):
    other = ClientStore(OperatorContext(owner_id="other"))
    other.replace_all([_payload(id="shared")])

    with pytest.raises(ValidationError):
        store.merge([_payload(id="shared")])
    assert other.get("shared").name == "Ana"


def test_load_reports_stored_rows_that_no_longer_validate(store):
    store.create(_payload(name="Valid"), today=TODAY)
    db.session.add(
        Client(
            id="legacy",
            owner_id="default",
            name="",
            phone="555",
            start_date=date(2024, 1, 1),
            renewal_date=date(2024, 7, 1),
            price=-10,
        )
    )
    db.session.commit()

    result = store.load()

    assert [c.name for c in result.clients] == ["Valid"]
    assert [s.client_id for s in result.skipped] == ["legacy"]
    assert "name is required" in result.skipped[0].errors


def test_update_ignores_the_body_id(store):
    row = store.create(_payload(), today=TODAY)
    updated = store.update(row.id, {"id": "x" * 80, "notes": "kept"})
    assert updated.id == row.id
    assert updated.notes == "kept"
