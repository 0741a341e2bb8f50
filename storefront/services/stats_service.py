# storefront/services/stats_service.py
from collections import defaultdict
from datetime import date, datetime, time, timedelta, timezone
from decimal import Decimal

from sqlmodel import Session

from storefront.repositories.stats_repo import StatsRepository
from storefront.schemas.stats import OrderCountPoint, RevenuePoint, StatsPeriod


def _months_back(d: date, months: int) -> date:
    index = d.year * 12 + (d.month - 1) - months
    return date(index // 12, index % 12 + 1, 1)


def _window_start(period: StatsPeriod, today: date) -> date:
    """First day covered by the chart for `period`."""
    if period == "daily":
        return today - timedelta(days=7)
    if period == "weekly":
        return today - timedelta(weeks=12)
    if period == "yearly":
        return date(today.year - 5, 1, 1)
    return _months_back(today, 12)


def _bucket(period: StatsPeriod, d: date) -> date:
    """Start of the day/week/month/year that `d` falls in."""
    if period == "daily":
        return d
    if period == "weekly":
        return d - timedelta(days=d.weekday())
    if period == "yearly":
        return date(d.year, 1, 1)
    return d.replace(day=1)


def _as_utc_date(ts: datetime) -> date:
    # SQLite hands timestamps back naive; they are stored in UTC
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(timezone.utc).date()


class StatsService:
    """
    Chart series for the admin dashboard.

      - revenue: DELIVERED orders only
      - counts : orders of every status
    Only buckets that contain orders are returned, oldest first.
    """

    def __init__(self, repo: StatsRepository):
        self.repo = repo

    @staticmethod
    def _since(period: StatsPeriod, now: datetime | None) -> datetime:
        now = now or datetime.now(timezone.utc)
        start = _window_start(period, now.date())
        return datetime.combine(start, time.min, tzinfo=timezone.utc)

    def revenue_stats(
        self,
        session: Session,
        period: StatsPeriod = "monthly",
        now: datetime | None = None,
    ) -> list[RevenuePoint]:
        since = self._since(period, now)
        totals: dict[date, Decimal] = defaultdict(Decimal)
        for created_at, total_price in self.repo.delivered_since(session, since):
            totals[_bucket(period, _as_utc_date(created_at))] += Decimal(total_price or 0)

        return [
            RevenuePoint(date=day.isoformat(), total=totals[day])
            for day in sorted(totals)
        ]

    def order_count_stats(
        self,
        session: Session,
        period: StatsPeriod = "monthly",
        now: datetime | None = None,
    ) -> list[OrderCountPoint]:
        since = self._since(period, now)
        counts: dict[date, int] = defaultdict(int)
        for created_at in self.repo.placed_since(session, since):
            counts[_bucket(period, _as_utc_date(created_at))] += 1

        return [
            OrderCountPoint(date=day.isoformat(), total=counts[day])
            for day in sorted(counts)
        ]
