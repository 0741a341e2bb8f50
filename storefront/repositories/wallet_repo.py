# storefront/repositories/wallet_repo.py
import uuid
from decimal import Decimal

from sqlalchemy import update
from sqlmodel import Session, select

from storefront.models.user import User
from storefront.models.wallet import WalletTransaction


class WalletRepository:
    """
    Data access layer for wallet balances and the wallet ledger.

    NOTE:
      - No commits here; every balance change must be written together
        with its ledger row, so the service owns the transaction.
    """

    def lock_user(self, session: Session, user_id: uuid.UUID) -> User | None:
        stmt = select(User).where(User.id == user_id).with_for_update()
        return session.exec(stmt).first()

    def credit(self, session: Session, user_id: uuid.UUID, amount: Decimal) -> bool:
        stmt = (
            update(User)
            .where(User.id == user_id)
            .values(wallet_balance=User.wallet_balance + amount)
            .execution_options(synchronize_session=False)
        )
        return session.exec(stmt).rowcount == 1

    def debit(self, session: Session, user_id: uuid.UUID, amount: Decimal) -> bool:
        """
        Subtract `amount` only if the balance covers it.

        Returns False when the balance is insufficient.
        """
        stmt = (
            update(User)
            .where(User.id == user_id, User.wallet_balance >= amount)
            .values(wallet_balance=User.wallet_balance - amount)
            .execution_options(synchronize_session=False)
        )
        return session.exec(stmt).rowcount == 1

    def add_transaction(
        self,
        session: Session,
        entry: WalletTransaction,
    ) -> WalletTransaction:
        session.add(entry)
        session.flush()
        return entry

    def list_transactions(
        self,
        session: Session,
        user_id: uuid.UUID,
        limit: int = 20,
    ) -> list[WalletTransaction]:
        stmt = (
            select(WalletTransaction)
            .where(WalletTransaction.user_id == user_id)
            .order_by(WalletTransaction.created_at.desc())
            .limit(limit)
        )
        return session.exec(stmt).all()

    def list_all_transactions(
        self,
        session: Session,
        user_id: uuid.UUID,
    ) -> list[WalletTransaction]:
        stmt = select(WalletTransaction).where(WalletTransaction.user_id == user_id)
        return session.exec(stmt).all()
