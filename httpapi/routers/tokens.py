"""Authentication token issue and logout-all."""

from __future__ import annotations

from datetime import timedelta

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlmodel import Session

from catalog.accounts import UserStore
from catalog.config import CatalogConfig
from catalog.credentials import verify_password
from catalog.database import get_session
from catalog.errors import InvalidCredentialsError, NotFoundError
from catalog.models import User
from catalog.tokens import TokenStore
from catalog.validator import Validator, check_email, check_password_plaintext

from ..dependencies import get_settings, require_authenticated_user
from ..schemas import Credentials

router = APIRouter(tags=["tokens"])


@router.post("/authentication", status_code=201)
def create_authentication_token(
    body: Credentials,
    session: Session = Depends(get_session),
    config: CatalogConfig = Depends(get_settings),
) -> JSONResponse:
    v = Validator()
    check_email(v, body.email)
    check_password_plaintext(v, body.password)
    v.raise_if_invalid()

    try:
        user = UserStore(session).get_by_email(body.email)
    except NotFoundError as exc:
        raise InvalidCredentialsError() from exc

    if not verify_password(body.password, user.password_hash):
        raise InvalidCredentialsError()

    issued = TokenStore(session).issue(user.id, timedelta(hours=config.auth.token_ttl_hours))
    return JSONResponse(
        status_code=201,
        content={
            "authentication_token": {
                "token": issued.plaintext,
                "expiry": issued.expiry.isoformat(),
            }
        },
    )


@router.delete("/authentication")
def delete_authentication_tokens(
    user: User = Depends(require_authenticated_user),
    session: Session = Depends(get_session),
) -> dict:
    """Log out everywhere: revoke every token of the caller."""
    TokenStore(session).revoke_all(user.id)
    return {"message": "all authentication tokens have been revoked"}
