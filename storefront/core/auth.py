# storefront/core/auth.py
import logging
import uuid
from typing import Any, Callable

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import jwt, JWTError
from sqlmodel import Session

from storefront.core.config import get_settings
from storefront.database import get_session
from storefront.models.user import User

settings = get_settings()
logger = logging.getLogger(__name__)

ADMIN_ROLES = {"ADMIN", "SUPER_ADMIN"}

# Missing header resolves to an anonymous caller instead of an automatic 403;
# the guards below decide whether that is acceptable.
bearer_scheme = HTTPBearer(auto_error=False)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=detail)


def decode_access_token(token: str) -> dict[str, Any]:
    """
    Verify signature and expiry of an HS256 access token and return its claims.
    The audience claim is not checked.
    """
    try:
        return jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=[settings.JWT_ALG],
            options={"verify_aud": False},
        )
    except JWTError:
        raise _unauthorized("Invalid or expired token")


def _identity_from_claims(claims: dict[str, Any]) -> tuple[uuid.UUID, str]:
    sub, email = claims.get("sub"), claims.get("email")
    if not sub or not email:
        raise _unauthorized("Token missing sub/email")
    try:
        return uuid.UUID(str(sub)), email
    except ValueError:
        raise _unauthorized("Invalid sub in token")


def _display_name(email: str) -> str:
    """Local part of the address, used until the user sets a name."""
    local, _, _ = email.partition("@")
    return local or email


def _is_bootstrap_admin(email: str) -> bool:
    return email.strip().lower() in {e.strip().lower() for e in settings.SUPER_ADMIN_EMAILS}


def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    session: Session = Depends(get_session),
) -> User | None:
    """
    Resolve the caller from the bearer token.

    Anonymous requests yield None. The first request from a new identity
    creates its user row as a CUSTOMER; any role claim in the token is
    ignored, staff roles are granted through PATCH /users/{id}/role.
    Emails listed in SUPER_ADMIN_EMAILS are raised to SUPER_ADMIN.
    """
    if credentials is None:
        return None

    user_id, email = _identity_from_claims(decode_access_token(credentials.credentials))
    bootstrap_admin = _is_bootstrap_admin(email)

    user = session.get(User, user_id)
    if user is not None:
        if bootstrap_admin and user.role != "SUPER_ADMIN":
            user.role = "SUPER_ADMIN"
            session.add(user)
            session.commit()
            session.refresh(user)
            logger.info("Promoted %s (%s) to SUPER_ADMIN from config", user_id, email)
        return user

    role = "SUPER_ADMIN" if bootstrap_admin else "CUSTOMER"
    user = User(id=user_id, email=email, name=_display_name(email), role=role)
    session.add(user)
    session.commit()
    session.refresh(user)
    logger.info("Provisioned %s %s for %s", role, user_id, email)
    return user


def require_auth(user: User | None = Depends(get_current_user)) -> User:
    if user is None:
        raise _unauthorized("Authentication required")
    return user


def require_roles(roles: set[str], detail: str) -> Callable[..., User]:
    """
    Build a dependency that lets through authenticated users whose role
    is in `roles` and answers 403 `detail` to everyone else.
    """

    def guard(user: User = Depends(require_auth)) -> User:
        if user.role not in roles:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=detail)
        return user

    return guard


# ADMIN or SUPER_ADMIN: catalog, order management, stats, user roles
require_admin = require_roles(ADMIN_ROLES, "Admin access required")

# checkout, cancellation, wallet, address book
require_customer = require_roles({"CUSTOMER"}, "Customer access required")

# /delivery endpoints
require_driver = require_roles({"DRIVER"}, "Driver access required")
