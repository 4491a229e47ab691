"""
Monthly booking statistics for the admin dashboard.

Grouping happens in the database (BookingRepository.monthly_totals) and
only covers months that had bookings; fill_monthly_gaps() turns the raw
groups into exactly twelve month-ascending entries.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Tuple

MONTHS = range(1, 13)

# (month, count, revenue) as produced by a GROUP BY month query
MonthRow = Tuple[Any, Any, Any]


def resolve_year(value: Any, today: Optional[datetime] = None) -> int:
    """Year from a query parameter; anything unusable means the current year."""
    current = (today or datetime.now(timezone.utc)).year
    if value is None:
        return current
    try:
        year = int(str(value).strip())
    except (TypeError, ValueError):
        return current
    if not 1 <= year <= 9999:
        return current
    return year


def year_bounds(year: int) -> Tuple[datetime, datetime]:
    """[start, end) of a calendar year."""
    start = datetime(year, 1, 1)
    end = datetime(year + 1, 1, 1) if year < 9999 else datetime.max
    return start, end


def _as_number(value: Any) -> float:
    if isinstance(value, (int, float)):
        return value
    try:
        return float(value or 0)
    except (TypeError, ValueError):
        return 0


def fill_monthly_gaps(rows: Iterable[MonthRow]) -> List[Dict[str, Any]]:
    """
    Twelve {month, count, revenue} entries, month ascending.
    Months missing from rows (or rows with an unusable month) count as zero.
    """
    found: Dict[int, Tuple[int, float]] = {}
    for month, count, revenue in rows:
        try:
            month = int(month)
        except (TypeError, ValueError):
            continue
        if month in MONTHS:
            found[month] = (int(_as_number(count)), _as_number(revenue))

    stats = []
    for month in MONTHS:
        count, revenue = found.get(month, (0, 0))
        stats.append({"month": month, "count": count, "revenue": revenue})
    return stats

