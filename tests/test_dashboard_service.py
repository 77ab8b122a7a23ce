from datetime import date, timedelta

import pytest

from app.errors import ValidationError
from app.records import ClientStats, StatusCounts
from app.services.client_status import ClientStatus
from app.services.dashboard_service import (
    build_dashboard_context,
    compute_stats,
    compute_status_counts,
    filter_and_sort,
    load_client_records,
    whatsapp_url,
)

TODAY = date(2024, 6, 15)


def _in(days):
    return TODAY + timedelta(days=days)


@pytest.fixture
def fleet(make_client):
    return [
        make_client(id="active", renewal_date=_in(30), price=10.0),
        make_client(id="expiring", renewal_date=_in(2), price=20.0),
        make_client(id="recently-expired", renewal_date=_in(-14), price=40.0),
        make_client(id="long-expired", renewal_date=_in(-45), price=80.0),
        make_client(id="expired-30", renewal_date=_in(-30), price=160.0),
    ]


def test_stats_revenue_excludes_exactly_the_long_expired(fleet):
    stats = compute_stats(fleet, today=TODAY)

    assert stats == ClientStats(total_clients=5, active_revenue=70.0, expiring_soon=1)
    excluded = {c.id for c in fleet} - {"active", "expiring", "recently-expired"}
    assert excluded == {"long-expired", "expired-30"}


def test_status_counts(fleet):
    assert compute_status_counts(fleet, today=TODAY) == StatusCounts(all=5, active=1, expiring=1, expired=3)


def test_aggregates_are_repeatable_and_do_not_mutate(fleet):
    before = list(fleet)
    assert compute_stats(fleet, today=TODAY) == compute_stats(fleet, today=TODAY)
    assert compute_status_counts(fleet, today=TODAY) == compute_status_counts(fleet, today=TODAY)
    assert fleet == before


def test_empty_collection():
    assert compute_stats([], today=TODAY) == ClientStats(0, 0.0, 0)
    assert compute_status_counts([], today=TODAY) == StatusCounts()


def test_phone_query_keeps_matches_sorted_with_stable_ties(make_client):
    clients = [
        make_client(id="a", phone="555-1234", renewal_date=_in(10)),
        make_client(id="b", phone="999-0000", renewal_date=_in(1)),
        make_client(id="c", phone="(11) 5550-000", renewal_date=_in(10)),
        make_client(id="d", phone="555", renewal_date=_in(-2)),
    ]

    result = filter_and_sort(clients, query="555", today=TODAY)

    assert [c.id for c in result] == ["d", "a", "c"]
    assert all("555" in c.phone for c in result)


def test_query_matches_name_server_and_mac_case_insensitively(make_client):
    clients = [
        make_client(id="name", name="Maria ALPHA"),
        make_client(id="server", server="alpha-2"),
        make_client(id="mac", mac_address="AA:BB:CC:DD:EE:01"),
        make_client(id="none", name="Bob", server=None),
    ]

    assert {c.id for c in filter_and_sort(clients, "Alpha", today=TODAY)} == {"name", "server"}
    assert [c.id for c in filter_and_sort(clients, "aa:bb", today=TODAY)] == ["mac"]


def test_blank_query_matches_everything(fleet):
    assert len(filter_and_sort(fleet, "   ", today=TODAY)) == len(fleet)
    assert len(filter_and_sort(fleet, "", today=TODAY)) == len(fleet)


def test_status_filter(fleet):
    expired = filter_and_sort(fleet, status_filter="expired", today=TODAY)
    assert [c.id for c in expired] == ["long-expired", "expired-30", "recently-expired"]

    assert [c.id for c in filter_and_sort(fleet, status_filter=ClientStatus.EXPIRING, today=TODAY)] == ["expiring"]
    assert [c.id for c in filter_and_sort(fleet, status_filter="ACTIVE", today=TODAY)] == ["active"]
    assert len(filter_and_sort(fleet, status_filter="all", today=TODAY)) == 5

    with pytest.raises(ValidationError):
        filter_and_sort(fleet, status_filter="overdue", today=TODAY)


def test_load_client_records_enumerates_skipped_rows(make_client):
    good = {
        "id": "ok",
        "name": "Ana",
        "phone": "555",
        "startDate": "2024-06-01",
        "renewalDate": "2024-07-01",
        "price": 35,
    }
    rows = [
        good,
        {**good, "id": "no-name", "name": ""},
        {**good, "id": "bad-date", "renewalDate": "2024-07-32"},
        {**good, "id": "nan-price", "price": "NaN"},
        make_client(id="record"),
    ]

    result = load_client_records(rows)

    assert [c.id for c in result.clients] == ["ok", "record"]
    assert [s.client_id for s in result.skipped] == ["no-name", "bad-date", "nan-price"]
    assert all(s.errors for s in result.skipped)
    assert compute_stats(result.clients, today=TODAY).total_clients == 2


def test_dashboard_context(fleet):
    ctx = build_dashboard_context(fleet, query="", status_filter="expiring", today=TODAY)

    assert ctx["today"] == "2024-06-15"
    assert ctx["stats"] == {"totalClients": 5, "activeRevenue": 70.0, "expiringSoon": 1}
    assert ctx["counts"] == {"all": 5, "active": 1, "expiring": 1, "expired": 3}
    assert len(ctx["clients"]) == 1
    row = ctx["clients"][0]
    assert row["id"] == "expiring"
    assert row["daysUntilRenewal"] == 2
    assert row["status"] == "expiring"
    assert row["renewalDate"] == "2024-06-17"
    assert ctx["skipped"] == []


def test_whatsapp_link_uses_phone_digits(make_client):
    assert whatsapp_url("(11) 99613-8553") == "https://wa.me/5511996138553"
    assert whatsapp_url("no digits") is None
    assert whatsapp_url(None) is None

    row = build_dashboard_context([make_client(phone="11 5555-0000")], today=TODAY)["clients"][0]
    assert row["whatsappUrl"] == "https://wa.me/551155550000"
