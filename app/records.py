"""Plain value types for the dashboard core.

``ClientRecord`` is the in-memory shape every pure computation works on; the
SQLAlchemy ``Client`` model converts to it with ``to_record()``. The other
types are derived values, rebuilt from a client snapshot on every call and
never stored.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import date
from typing import Any, Dict, List, Optional, Tuple

from app.errors import ValidationError
from app.utils.dates import format_iso_date
from app.utils.validation import validate_client_payload


@dataclass(frozen=True)
class ClientRecord:
    id: str
    name: str
    phone: str
    start_date: date
    renewal_date: date
    price: float
    devices: int = 1
    notes: Optional[str] = None
    server: Optional[str] = None
    mac_address: Optional[str] = None
    device_password: Optional[str] = None

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "ClientRecord":
        """Build a record from a wire payload; raises ValidationError."""
        data = validate_client_payload(payload)
        if not data.get("id"):
            raise ValidationError(["id is required"])
        return cls(**data)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "phone": self.phone,
            "startDate": format_iso_date(self.start_date),
            "renewalDate": format_iso_date(self.renewal_date),
            "price": self.price,
            "devices": self.devices,
            "notes": self.notes,
            "server": self.server,
            "macAddress": self.mac_address,
            "devicePassword": self.device_password,
        }


@dataclass(frozen=True)
class ClientStats:
    total_clients: int
    active_revenue: float
    expiring_soon: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "totalClients": self.total_clients,
            "activeRevenue": self.active_revenue,
            "expiringSoon": self.expiring_soon,
        }


@dataclass(frozen=True)
class StatusCounts:
    all: int = 0
    active: int = 0
    expiring: int = 0
    expired: int = 0

    def to_dict(self) -> Dict[str, int]:
        return asdict(self)


@dataclass(frozen=True)
class MonthlyBucket:
    month: str
    month_label: str
    month_start: date
    month_end: date
    revenue: float
    total_active: int
    new_count: int
    recurring_count: int
    revenue_growth: float = 0.0
    active_growth: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "month": self.month,
            "monthLabel": self.month_label,
            "monthStart": format_iso_date(self.month_start),
            "monthEnd": format_iso_date(self.month_end),
            "revenue": self.revenue,
            "totalActive": self.total_active,
            "newCount": self.new_count,
            "recurringCount": self.recurring_count,
            "revenueGrowth": self.revenue_growth,
            "activeGrowth": self.active_growth,
        }


@dataclass(frozen=True)
class AnalyticsSummary:
    buckets: Tuple[MonthlyBucket, ...]
    current: MonthlyBucket
    previous: Optional[MonthlyBucket]
    revenue_growth: float
    active_growth: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "months": len(self.buckets),
            "buckets": [b.to_dict() for b in self.buckets],
            "current": self.current.to_dict(),
            "previous": self.previous.to_dict() if self.previous else None,
            "revenueGrowth": self.revenue_growth,
            "activeGrowth": self.active_growth,
        }


@dataclass(frozen=True)
class SkippedRecord:
    client_id: Optional[str]
    errors: Tuple[str, ...]

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.client_id, "errors": list(self.errors)}


@dataclass(frozen=True)
class LoadResult:
    clients: List[ClientRecord] = field(default_factory=list)
    skipped: List[SkippedRecord] = field(default_factory=list)
