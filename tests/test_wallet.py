# tests/test_wallet.py
from decimal import Decimal

import pytest
from sqlmodel import select

from conftest import auth_headers
from storefront.models.user import User
from storefront.models.wallet import WalletTransaction


def test_top_up_credits_balance_and_ledger(client, session, wallet_service, make_user):
    customer = make_user(balance="20.00")

    resp = client.post(
        "/api/wallet/add", json={"amount": "100"}, headers=auth_headers(customer)
    )

    assert resp.status_code == 200
    assert Decimal(resp.json()["wallet_balance"]) == Decimal("120.00")

    session.expire_all()
    assert session.get(User, customer.id).wallet_balance == Decimal("120.00")
    top_ups = session.exec(
        select(WalletTransaction).where(
            WalletTransaction.description == "Added money to wallet"
        )
    ).all()
    assert len(top_ups) == 1
    assert top_ups[0].type == "CREDIT"
    assert top_ups[0].amount == Decimal("100")
    assert wallet_service.ledger_balance(session, customer.id) == Decimal("120.00")


@pytest.mark.parametrize("amount", ["0", "-5"])
def test_top_up_rejects_non_positive_amount(client, session, make_user, amount):
    customer = make_user()

    resp = client.post(
        "/api/wallet/add", json={"amount": amount}, headers=auth_headers(customer)
    )

    assert resp.status_code == 400
    assert resp.json()["detail"] == "Invalid amount"
    assert session.exec(select(WalletTransaction)).all() == []


def test_get_wallet_returns_recent_transactions(client, make_user):
    customer = make_user(balance="15.00")
    for _ in range(3):
        client.post("/api/wallet/add", json={"amount": "5"}, headers=auth_headers(customer))

    resp = client.get("/api/wallet", headers=auth_headers(customer))

    assert resp.status_code == 200
    body = resp.json()
    assert Decimal(body["wallet_balance"]) == Decimal("30.00")
    assert len(body["transactions"]) == 4
    assert {t["type"] for t in body["transactions"]} == {"CREDIT"}


def test_wallet_is_customer_only(client, make_user):
    driver = make_user(role="DRIVER")

    resp = client.get("/api/wallet", headers=auth_headers(driver))

    assert resp.status_code == 403


def test_wallet_transaction_signed_amount():
    credit = WalletTransaction(amount=Decimal("5"), type="CREDIT", description="x")
    debit = WalletTransaction(amount=Decimal("5"), type="DEBIT", description="x")

    assert credit.signed_amount == Decimal("5")
    assert debit.signed_amount == Decimal("-5")
