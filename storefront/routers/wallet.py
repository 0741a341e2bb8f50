# storefront/routers/wallet.py
from fastapi import APIRouter, Depends
from sqlmodel import Session

from storefront.core.auth import require_customer
from storefront.database import get_session
from storefront.models.user import User
from storefront.repositories.wallet_repo import WalletRepository
from storefront.schemas.wallet import WalletBalanceRead, WalletRead, WalletTopUp
from storefront.services.wallet_service import WalletService

router = APIRouter(prefix="/wallet", tags=["Wallet"])

service = WalletService(WalletRepository())


@router.get("", response_model=WalletRead)
def get_wallet(
    session: Session = Depends(get_session),
    current_user: User = Depends(require_customer),
):
    """
    Current balance and the last 20 wallet transactions.
    """
    return service.get_wallet(session, current_user)


@router.post("/add", response_model=WalletBalanceRead)
def add_money(
    payload: WalletTopUp,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_customer),
):
    """
    Add money to the wallet (mock payment). Amount must be positive.
    """
    return service.add_money(session, current_user.id, payload.amount)
