"""Renewal cycle advancement.

A renewal is an explicit operator action. It pushes the renewal date forward by
one fixed 30-day cycle: on top of the remaining validity when the client is
still current, or from today when the subscription already lapsed.

These functions only compute; writing the new date back is the caller's job
(see ``app.services.client_store``).
"""

from __future__ import annotations

from dataclasses import replace
from datetime import date
from typing import Any, Optional

from app.records import ClientRecord
from app.utils.dates import add_days, parse_iso_date, today_local

RENEWAL_CYCLE_DAYS = 30


def advance_renewal_date(renewal_date: Any, today: Optional[date] = None) -> date:
    current = parse_iso_date(renewal_date)
    today = today_local(today)
    base = today if current < today else current
    return add_days(base, RENEWAL_CYCLE_DAYS)


def renew_client(client: ClientRecord, today: Optional[date] = None) -> ClientRecord:
    """Return a copy of ``client`` with its renewal date advanced one cycle."""
    return replace(client, renewal_date=advance_renewal_date(client.renewal_date, today))


def default_renewal_date(start_date: Any) -> date:
    """Renewal date proposed for a brand-new client: one cycle after the start."""
    return add_days(start_date, RENEWAL_CYCLE_DAYS)
