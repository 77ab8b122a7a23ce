"""Dashboard aggregation utilities.

This module keeps the fleet-wide calculations out of routes.

Design goals:
- Pure reads: every function works on a snapshot (a list of ClientRecord) and
  never mutates it or any module state.
- One pass per metric; recomputing on every request is fine at the expected
  volume (hundreds of clients).
- Return simple dataclasses/dicts ready for JSON.

NOTE: This service does not touch the database. Routes load the snapshot
through ClientStore and hand it over.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Any, Dict, Iterable, List, Optional, Sequence, Union

from app.errors import ValidationError
from app.records import ClientRecord, ClientStats, LoadResult, SkippedRecord, StatusCounts
from app.services.client_status import ClientStatus, classify, is_billable
from app.utils.dates import days_until, today_local
from app.utils.validation import normalize_phone

logger = logging.getLogger(__name__)

STATUS_FILTER_ALL = "all"
STATUS_FILTERS = (STATUS_FILTER_ALL,) + tuple(s.value for s in ClientStatus)

# Customers are Brazilian; stored phones carry no country code
WHATSAPP_COUNTRY_CODE = "55"


# -----------------------------------------------------------------------------
#  Snapshot loading
# -----------------------------------------------------------------------------

def load_client_records(rows: Iterable[Any]) -> LoadResult:
    """Split raw rows into valid records and an explicit skipped list.

    Rows may already be ClientRecord instances or wire-shaped dicts. Invalid
    rows never reach the aggregates; they are reported with their errors.
    """
    clients: List[ClientRecord] = []
    skipped: List[SkippedRecord] = []

    for row in rows:
        if isinstance(row, ClientRecord):
            clients.append(row)
            continue
        try:
            clients.append(ClientRecord.from_dict(row))
        except ValidationError as e:
            client_id = row.get("id") if isinstance(row, dict) else None
            logger.debug("Skipping client %r: %s", client_id, e)
            skipped.append(SkippedRecord(client_id=client_id, errors=tuple(e.errors)))

    return LoadResult(clients=clients, skipped=skipped)


# -----------------------------------------------------------------------------
#  Fleet metrics
# -----------------------------------------------------------------------------

def compute_stats(clients: Sequence[ClientRecord], today: Optional[date] = None) -> ClientStats:
    today = today_local(today)

    revenue = 0.0
    expiring = 0
    for c in clients:
        days = days_until(c.renewal_date, today)
        if is_billable(days):
            revenue += c.price
        if classify(days) is ClientStatus.EXPIRING:
            expiring += 1

    return ClientStats(
        total_clients=len(clients),
        active_revenue=revenue,
        expiring_soon=expiring,
    )


def compute_status_counts(clients: Sequence[ClientRecord], today: Optional[date] = None) -> StatusCounts:
    today = today_local(today)

    counts = {s: 0 for s in ClientStatus}
    for c in clients:
        counts[classify(days_until(c.renewal_date, today))] += 1

    return StatusCounts(
        all=len(clients),
        active=counts[ClientStatus.ACTIVE],
        expiring=counts[ClientStatus.EXPIRING],
        expired=counts[ClientStatus.EXPIRED],
    )


# -----------------------------------------------------------------------------
#  Filtering / search
# -----------------------------------------------------------------------------

def normalize_status_filter(status_filter: Union[str, ClientStatus, None]) -> Optional[ClientStatus]:
    """Return the ClientStatus to keep, or None for "all"."""
    if status_filter is None:
        return None
    if isinstance(status_filter, ClientStatus):
        return status_filter

    s = str(status_filter).strip().lower() or STATUS_FILTER_ALL
    if s == STATUS_FILTER_ALL:
        return None
    try:
        return ClientStatus(s)
    except ValueError:
        raise ValidationError(
            [f"status must be one of: {', '.join(STATUS_FILTERS)}"]
        ) from None


def _matches_query(client: ClientRecord, query: str) -> bool:
    for value in (client.name, client.server, client.phone, client.mac_address):
        if value and query in value.lower():
            return True
    return False


def filter_and_sort(
    clients: Sequence[ClientRecord],
    query: str = "",
    status_filter: Union[str, ClientStatus, None] = STATUS_FILTER_ALL,
    today: Optional[date] = None,
) -> List[ClientRecord]:
    """Search + status filter, most urgent renewal first.

    Ties keep the input order (``sorted`` is stable).
    """
    today = today_local(today)
    wanted = normalize_status_filter(status_filter)
    q = (query or "").strip().lower()

    keyed = []
    for c in clients:
        if q and not _matches_query(c, q):
            continue
        days = days_until(c.renewal_date, today)
        if wanted is not None and classify(days) is not wanted:
            continue
        keyed.append((days, c))

    keyed.sort(key=lambda pair: pair[0])
    return [c for _, c in keyed]


# -----------------------------------------------------------------------------
#  Dashboard context
# -----------------------------------------------------------------------------

def whatsapp_url(phone: Optional[str], country_code: str = WHATSAPP_COUNTRY_CODE) -> Optional[str]:
    digits = normalize_phone(phone)
    if not digits:
        return None
    return f"https://wa.me/{country_code}{digits}"


def client_row(client: ClientRecord, today: date) -> Dict[str, Any]:
    days = days_until(client.renewal_date, today)
    row = client.to_dict()
    row["daysUntilRenewal"] = days
    row["status"] = classify(days).value
    row["whatsappUrl"] = whatsapp_url(client.phone)
    return row


def build_dashboard_context(
    clients: Sequence[ClientRecord],
    *,
    query: str = "",
    status_filter: Union[str, ClientStatus, None] = STATUS_FILTER_ALL,
    today: Optional[date] = None,
    skipped: Sequence[SkippedRecord] = (),
) -> Dict[str, Any]:
    """Everything the client list screen needs, computed from one snapshot."""
    today = today_local(today)

    visible = filter_and_sort(clients, query=query, status_filter=status_filter, today=today)

    return {
        "today": today.isoformat(),
        "stats": compute_stats(clients, today).to_dict(),
        "counts": compute_status_counts(clients, today).to_dict(),
        "clients": [client_row(c, today) for c in visible],
        "skipped": [s.to_dict() for s in skipped],
    }
