# tests/test_users.py
import uuid
from datetime import datetime, timedelta, timezone

from jose import jwt
from sqlmodel import select

from conftest import auth_headers, settings
from storefront.models.user import User


def token_for(sub: str, email: str, **claims) -> dict[str, str]:
    payload = {
        "sub": sub,
        "email": email,
        "exp": datetime.now(timezone.utc) + timedelta(hours=1),
        **claims,
    }
    token = jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALG)
    return {"Authorization": f"Bearer {token}"}


def test_first_login_provisions_customer(client, session):
    user_id = uuid.uuid4()

    resp = client.get(
        "/api/users/profile",
        headers=token_for(str(user_id), "newbie@example.com", role="ADMIN"),
    )

    assert resp.status_code == 200
    body = resp.json()
    assert body["id"] == str(user_id)
    assert body["name"] == "newbie"
    assert body["role"] == "CUSTOMER"
    assert session.exec(select(User).where(User.id == user_id)).one().role == "CUSTOMER"


def test_invalid_token_is_rejected(client):
    resp = client.get(
        "/api/users/profile", headers={"Authorization": "Bearer not-a-token"}
    )

    assert resp.status_code == 401


def test_expired_token_is_rejected(client):
    headers = token_for(
        str(uuid.uuid4()),
        "late@example.com",
        exp=datetime.now(timezone.utc) - timedelta(minutes=1),
    )

    assert client.get("/api/users/profile", headers=headers).status_code == 401


def test_token_without_email_is_rejected(client):
    token = jwt.encode(
        {"sub": str(uuid.uuid4())}, settings.JWT_SECRET, algorithm=settings.JWT_ALG
    )

    resp = client.get("/api/users/profile", headers={"Authorization": f"Bearer {token}"})

    assert resp.status_code == 401


def test_profile_update(client, make_user):
    customer = make_user()

    resp = client.put(
        "/api/users/profile",
        json={"name": "  Priya  ", "phone": "+91 98765 43210"},
        headers=auth_headers(customer),
    )

    assert resp.status_code == 200
    assert resp.json()["name"] == "Priya"
    assert resp.json()["phone"] == "+91 98765 43210"


def test_profile_email_conflict(client, make_user):
    make_user(email="taken@example.com")
    customer = make_user()

    resp = client.put(
        "/api/users/profile",
        json={"email": "taken@example.com"},
        headers=auth_headers(customer),
    )

    assert resp.status_code == 400
    assert resp.json()["detail"] == "Email already in use"


def test_address_book(client, make_user):
    customer = make_user()
    headers = auth_headers(customer)

    created = client.post(
        "/api/users/addresses",
        json={"street": "12 Market Rd", "city": "Pune", "zip": "411002"},
        headers=headers,
    )
    assert created.status_code == 201
    address_id = created.json()["id"]

    listed = client.get("/api/users/addresses", headers=headers)
    assert [a["id"] for a in listed.json()] == [address_id]

    removed = client.delete(f"/api/users/addresses/{address_id}", headers=headers)
    assert removed.status_code == 200
    assert client.get("/api/users/addresses", headers=headers).json() == []


def test_blank_address_fields_fail_validation(client, make_user):
    resp = client.post(
        "/api/users/addresses",
        json={"street": "  ", "city": "Pune", "zip": "411002"},
        headers=auth_headers(make_user()),
    )

    assert resp.status_code == 422


def test_admin_promotes_customer_to_driver(client, make_user):
    admin, customer = make_user(role="ADMIN"), make_user()

    resp = client.patch(
        f"/api/users/{customer.id}/role",
        json={"role": "DRIVER"},
        headers=auth_headers(admin),
    )

    assert resp.status_code == 200
    assert resp.json()["role"] == "DRIVER"


def test_only_super_admin_grants_admin(client, make_user):
    admin, super_admin, customer = (
        make_user(role="ADMIN"),
        make_user(role="SUPER_ADMIN"),
        make_user(),
    )

    denied = client.patch(
        f"/api/users/{customer.id}/role",
        json={"role": "ADMIN"},
        headers=auth_headers(admin),
    )
    assert denied.status_code == 403

    granted = client.patch(
        f"/api/users/{customer.id}/role",
        json={"role": "ADMIN"},
        headers=auth_headers(super_admin),
    )
    assert granted.status_code == 200


def test_admin_lists_users(client, make_user):
    admin = make_user(role="ADMIN")
    make_user()

    resp = client.get("/api/users", headers=auth_headers(admin))

    assert resp.status_code == 200
    assert len(resp.json()) == 2


def test_health_check(client):
    assert client.get("/").json() == {"status": "ok", "service": "storefront-backend"}


def test_configured_email_becomes_super_admin(client, session, monkeypatch):
    from storefront.core import auth

    monkeypatch.setattr(auth.settings, "SUPER_ADMIN_EMAILS", ["Owner@Example.com"])
    user_id = uuid.uuid4()

    resp = client.get(
        "/api/users/profile", headers=token_for(str(user_id), "owner@example.com")
    )

    assert resp.status_code == 200
    assert resp.json()["role"] == "SUPER_ADMIN"


def test_configured_email_promotes_existing_user(client, make_user, monkeypatch):
    from storefront.core import auth

    existing = make_user(email="founder@example.com")
    monkeypatch.setattr(auth.settings, "SUPER_ADMIN_EMAILS", ["founder@example.com"])

    resp = client.get("/api/users", headers=auth_headers(existing))

    assert resp.status_code == 200


def test_unlisted_email_stays_customer(client, monkeypatch):
    from storefront.core import auth

    monkeypatch.setattr(auth.settings, "SUPER_ADMIN_EMAILS", ["owner@example.com"])

    resp = client.get(
        "/api/users/profile", headers=token_for(str(uuid.uuid4()), "guest@example.com")
    )

    assert resp.json()["role"] == "CUSTOMER"


def test_user_repository_pages_users(session, make_user):
    from storefront.repositories.user_repo import UserRepository

    for _ in range(3):
        make_user()

    assert len(UserRepository().list_users(session, skip=1, limit=10)) == 2
