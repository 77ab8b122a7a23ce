"""Client lifecycle classification.

``classify`` is the only three-state rule (active / expiring / expired) and is
used for both per-client badges and fleet counts. Revenue eligibility is a
separate rule, ``is_billable``, and must not be confused with it.
"""

from __future__ import annotations

from datetime import date
from enum import Enum
from typing import Optional

from app.utils.dates import days_until

EXPIRING_WINDOW_DAYS = 3
BILLABLE_GRACE_DAYS = 30


class ClientStatus(str, Enum):
    ACTIVE = "active"
    EXPIRING = "expiring"
    EXPIRED = "expired"


def _require_int(days) -> int:
    if isinstance(days, bool) or not isinstance(days, int):
        raise TypeError(f"day offset must be an int, got {type(days).__name__}")
    return days


def classify(days_until_renewal: int) -> ClientStatus:
    days = _require_int(days_until_renewal)
    if days < 0:
        return ClientStatus.EXPIRED
    if days <= EXPIRING_WINDOW_DAYS:
        return ClientStatus.EXPIRING
    return ClientStatus.ACTIVE


def is_billable(days_until_renewal: int) -> bool:
    """Counts toward active revenue unless expired for 30 days or more."""
    return _require_int(days_until_renewal) > -BILLABLE_GRACE_DAYS


def client_days_until_renewal(client, today: Optional[date] = None) -> int:
    return days_until(client.renewal_date, today)


def client_status(client, today: Optional[date] = None) -> ClientStatus:
    return classify(client_days_until_renewal(client, today))
