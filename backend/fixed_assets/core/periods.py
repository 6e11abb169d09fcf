"""
Accounting period resolution.
A period is a calendar month (or quarter / year for schedule projections);
its key is the idempotency anchor for postings.
"""
import calendar
from dataclasses import dataclass
from datetime import date, datetime

PERIODS_PER_YEAR = {"monthly": 12, "quarterly": 4, "yearly": 1}


@dataclass(frozen=True)
class Period:
    start: date
    end: date
    period_type: str = "monthly"

    @property
    def key(self) -> str:
        return f"{self.period_type}:{self.start.isoformat()}"

    @property
    def periods_per_year(self) -> int:
        return PERIODS_PER_YEAR[self.period_type]

    def next_period(self) -> "Period":
        following = date.fromordinal(self.end.toordinal() + 1)
        return resolve_period(following, self.period_type)


def _months_per_period(period_type: str) -> int:
    if period_type not in PERIODS_PER_YEAR:
        raise ValueError(f"Type de période inconnu : {period_type!r}")
    return 12 // PERIODS_PER_YEAR[period_type]


def resolve_period(at: date | datetime, period_type: str = "monthly") -> Period:
    """
    Return the period containing ``at``.
    monthly: first and last day of the month.
    quarterly / yearly: aligned on the calendar year (Jan, Apr, Jul, Oct / Jan).
    """
    if isinstance(at, datetime):
        at = at.date()

    months = _months_per_period(period_type)
    first_month = ((at.month - 1) // months) * months + 1
    last_month = first_month + months - 1
    start = date(at.year, first_month, 1)
    end = date(at.year, last_month, calendar.monthrange(at.year, last_month)[1])
    return Period(start=start, end=end, period_type=period_type)
