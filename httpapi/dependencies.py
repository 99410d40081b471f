"""Request-scoped dependencies: database session, config and the calling principal."""

from __future__ import annotations

from fastapi import Depends, Request
from sqlmodel import Session

from catalog.accounts import ANONYMOUS, Principal, UserStore, is_anonymous
from catalog.config import CatalogConfig, get_config_or_default
from catalog.database import get_session
from catalog.errors import (
    AuthenticationRequiredError,
    InactiveAccountError,
    InvalidTokenError,
    NotFoundError,
    ValidationError,
)
from catalog.models import User
from catalog.validator import validate_token_plaintext


def get_settings() -> CatalogConfig:
    return get_config_or_default()


def get_principal(request: Request, session: Session = Depends(get_session)) -> Principal:
    """Resolve `Authorization: Bearer <token>` to a User, or ANONYMOUS without a header."""
    header = request.headers.get("Authorization")
    if not header:
        return ANONYMOUS

    parts = header.split(" ")
    if len(parts) != 2 or parts[0] != "Bearer":
        raise InvalidTokenError()
    token = parts[1]

    # Malformed tokens are rejected without touching the database
    try:
        validate_token_plaintext(token)
    except ValidationError as exc:
        raise InvalidTokenError() from exc

    try:
        return UserStore(session).get_for_token(token)
    except NotFoundError as exc:
        raise InvalidTokenError() from exc


def require_authenticated_user(principal: Principal = Depends(get_principal)) -> User:
    if is_anonymous(principal):
        raise AuthenticationRequiredError()
    return principal


def require_activated_user(user: User = Depends(require_authenticated_user)) -> User:
    if not user.activated:
        raise InactiveAccountError()
    return user
