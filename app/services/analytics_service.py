"""Month-by-month revenue and retention analytics.

There is no transaction log. Each month of the reporting window is rebuilt
from the start/renewal dates currently stored on every client:

    active in month M  <=>  start_date <= month_end  and  renewal_date >= month_start
    new in month M     <=>  month_start <= start_date <= month_end  (else recurring)

Because it is a reconstruction, history follows the current data: editing a
client's start date also moves it between months in past buckets.
"""

from __future__ import annotations

from datetime import date
from typing import List, Optional, Sequence

from app.errors import ValidationError
from app.records import AnalyticsSummary, ClientRecord, MonthlyBucket
from app.utils.dates import format_iso_date, month_end, month_label, month_window

SUPPORTED_WINDOWS = (6, 12)
DEFAULT_WINDOW = 12


def growth_percent(current: float, previous: Optional[float]) -> float:
    """Month-over-month change in percent; 0.0 when there is nothing to compare."""
    if not previous:
        return 0.0
    return (current - previous) / previous * 100.0


def parse_window(months) -> int:
    try:
        n = int(months)
    except (TypeError, ValueError):
        n = None
    if n not in SUPPORTED_WINDOWS:
        raise ValidationError(
            [f"months must be one of: {', '.join(str(w) for w in SUPPORTED_WINDOWS)}"]
        )
    return n


def build_monthly_buckets(
    clients: Sequence[ClientRecord],
    months: int = DEFAULT_WINDOW,
    today: Optional[date] = None,
) -> List[MonthlyBucket]:
    """One bucket per calendar month, oldest first, ending with the current month."""
    months = parse_window(months)

    buckets: List[MonthlyBucket] = []
    previous: Optional[MonthlyBucket] = None

    for start in month_window(months, today):
        end = month_end(start)

        revenue = 0.0
        active = 0
        new = 0
        recurring = 0

        for c in clients:
            if c.start_date > end or c.renewal_date < start:
                continue
            revenue += c.price
            active += 1
            if start <= c.start_date <= end:
                new += 1
            else:
                recurring += 1

        bucket = MonthlyBucket(
            month=format_iso_date(start)[:7],
            month_label=month_label(start),
            month_start=start,
            month_end=end,
            revenue=revenue,
            total_active=active,
            new_count=new,
            recurring_count=recurring,
            revenue_growth=growth_percent(revenue, previous.revenue if previous else None),
            active_growth=growth_percent(active, previous.total_active if previous else None),
        )
        buckets.append(bucket)
        previous = bucket

    return buckets


def summarize(buckets: Sequence[MonthlyBucket]) -> AnalyticsSummary:
    """Current-month KPIs (the last bucket) and growth vs the month before."""
    if not buckets:
        raise ValueError("summarize() needs at least one bucket")

    current = buckets[-1]
    previous = buckets[-2] if len(buckets) > 1 else None

    return AnalyticsSummary(
        buckets=tuple(buckets),
        current=current,
        previous=previous,
        revenue_growth=current.revenue_growth,
        active_growth=current.active_growth,
    )


def get_monthly_analytics(
    clients: Sequence[ClientRecord],
    months: int = DEFAULT_WINDOW,
    today: Optional[date] = None,
) -> AnalyticsSummary:
    return summarize(build_monthly_buckets(clients, months=months, today=today))
