"""User registration and password change."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlmodel import Session

from catalog.accounts import UserStore
from catalog.config import CatalogConfig
from catalog.credentials import hash_password, verify_password
from catalog.database import get_session
from catalog.errors import InvalidCredentialsError
from catalog.models import User, UserRead
from catalog.validator import (
    Validator,
    check_password_plaintext,
    validate_password_plaintext,
    validate_user,
)

from ..dependencies import get_settings, require_authenticated_user
from ..schemas import PasswordChange, UserRegistration

router = APIRouter(tags=["users"])


@router.post("", status_code=201)
def register_user(
    body: UserRegistration,
    session: Session = Depends(get_session),
    config: CatalogConfig = Depends(get_settings),
) -> JSONResponse:
    validate_user(body.name, body.email, body.password)

    user = User(
        name=body.name,
        email=body.email,
        password_hash=hash_password(body.password, cost=config.auth.bcrypt_cost),
        activated=False,
    )
    user = UserStore(session).insert(user)
    return JSONResponse(
        status_code=201,
        content={"user": UserRead.model_validate(user).model_dump(mode="json")},
    )


@router.put("/password")
def change_password(
    body: PasswordChange,
    user: User = Depends(require_authenticated_user),
    session: Session = Depends(get_session),
    config: CatalogConfig = Depends(get_settings),
) -> dict:
    """Replace the caller's password and revoke every token they hold."""
    v = Validator()
    check_password_plaintext(v, body.current_password, key="current_password")
    v.raise_if_invalid()
    validate_password_plaintext(body.new_password, key="new_password")

    if not verify_password(body.current_password, user.password_hash):
        raise InvalidCredentialsError()

    new_hash = hash_password(body.new_password, cost=config.auth.bcrypt_cost)
    UserStore(session).set_password(user, new_hash)
    return {"message": "your password was successfully updated"}
