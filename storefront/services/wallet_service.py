# storefront/services/wallet_service.py
import logging
import uuid
from decimal import Decimal

from fastapi import HTTPException, status
from sqlmodel import Session

from storefront.models.user import User
from storefront.models.wallet import WalletTransaction
from storefront.repositories.wallet_repo import WalletRepository
from storefront.schemas.wallet import (
    WalletBalanceRead,
    WalletRead,
    WalletTransactionRead,
)

logger = logging.getLogger(__name__)

# How many ledger rows GET /wallet returns
RECENT_TRANSACTIONS = 20


class WalletService:
    """
    Business logic for the customer wallet.

    Every balance change is written together with its ledger row in the
    same transaction, so the balance always equals the signed ledger sum.
    """

    def __init__(self, repo: WalletRepository):
        self.repo = repo

    def get_wallet(self, session: Session, user: User) -> WalletRead:
        session.refresh(user)
        transactions = self.repo.list_transactions(
            session, user.id, limit=RECENT_TRANSACTIONS
        )
        return WalletRead(
            wallet_balance=user.wallet_balance,
            transactions=[
                WalletTransactionRead.model_validate(t, from_attributes=True)
                for t in transactions
            ],
        )

    def add_money(
        self,
        session: Session,
        user_id: uuid.UUID,
        amount: Decimal,
    ) -> WalletBalanceRead:
        """
        Top up the wallet.

        Raises:
            HTTPException(400): amount is zero or negative.
            HTTPException(404): user row missing.
        """
        if amount <= 0:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Invalid amount",
            )

        try:
            if not self.repo.credit(session, user_id, amount):
                raise HTTPException(
                    status_code=status.HTTP_404_NOT_FOUND,
                    detail="User not found",
                )
            self.repo.add_transaction(
                session,
                WalletTransaction(
                    user_id=user_id,
                    amount=amount,
                    type="CREDIT",
                    description="Added money to wallet",
                ),
            )
            session.commit()
        except Exception:
            session.rollback()
            raise

        user = session.get(User, user_id)
        session.refresh(user)
        logger.info("Wallet top-up of %s for user %s", amount, user_id)
        return WalletBalanceRead(wallet_balance=user.wallet_balance)

    def ledger_balance(self, session: Session, user_id: uuid.UUID) -> Decimal:
        """Signed sum of the user's ledger (CREDIT minus DEBIT)."""
        total = Decimal("0")
        for entry in self.repo.list_all_transactions(session, user_id):
            total += entry.signed_amount
        return total
