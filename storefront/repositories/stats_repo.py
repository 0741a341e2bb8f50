# storefront/repositories/stats_repo.py
from datetime import datetime

from sqlmodel import Session, select

from storefront.models.order import Order


class StatsRepository:
    """
    Read-only queries for the admin dashboard charts.

    Bucketing happens in the service so the same queries run on
    Postgres and SQLite.
    """

    def delivered_since(
        self,
        session: Session,
        since: datetime,
    ) -> list[tuple]:
        """
        (created_at, total_price) of DELIVERED orders placed since `since`.
        """
        stmt = select(Order.created_at, Order.total_price).where(
            Order.status == "DELIVERED",
            Order.created_at >= since,
        )
        return list(session.exec(stmt).all())

    def placed_since(
        self,
        session: Session,
        since: datetime,
    ) -> list[datetime]:
        """
        created_at of every order (any status) placed since `since`.
        """
        stmt = select(Order.created_at).where(Order.created_at >= since)
        return list(session.exec(stmt).all())
