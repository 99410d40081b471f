"""User accounts and bearer-token authentication.

A request is made either by a persisted User or by the ANONYMOUS principal.
ANONYMOUS is its own type, never a users row, so it cannot own a token.
"""

from __future__ import annotations

import dataclasses
from datetime import datetime
from typing import Optional, Union

from sqlalchemy import delete
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, col, func, select

from .database import storage_errors
from .errors import DuplicateEmailError, EditConflictError, NotFoundError
from .logging_config import get_logger
from .models import Token, User, utc_now
from .tokens import hash_token
from .versioning import compare_and_increment

logger = get_logger(__name__)


@dataclasses.dataclass(frozen=True)
class AnonymousAccount:
    """The unauthenticated caller."""

    activated: bool = False


ANONYMOUS = AnonymousAccount()

Principal = Union[User, AnonymousAccount]


def is_anonymous(principal: Principal) -> bool:
    return isinstance(principal, AnonymousAccount)


def _is_duplicate_email(exc: IntegrityError) -> bool:
    message = str(exc.orig).lower()
    return "unique" in message and "email" in message


class UserStore:
    def __init__(self, session: Session):
        self.session = session

    def _detach(self, user: User) -> User:
        self.session.expunge(user)
        return user

    def insert(self, user: User) -> User:
        row = User(
            name=user.name,
            email=user.email,
            password_hash=user.password_hash,
            activated=user.activated,
        )
        with storage_errors(self.session, "insert user"):
            try:
                self.session.add(row)
                self.session.commit()
            except IntegrityError as exc:
                if _is_duplicate_email(exc):
                    raise DuplicateEmailError() from exc
                raise
            self.session.refresh(row)
        logger.info(f"Registered user {row.id}")
        return self._detach(row)

    def get_by_email(self, email: str) -> User:
        statement = select(User).where(col(User.email) == email)
        with storage_errors(self.session, "get user by email"):
            user = self.session.exec(statement).first()
        if user is None:
            raise NotFoundError()
        return self._detach(user)

    def update(self, user: User) -> int:
        """Compare-and-increment write of the user's mutable fields."""
        values = {
            "name": user.name,
            "email": user.email,
            "password_hash": user.password_hash,
            "activated": user.activated,
        }
        with storage_errors(self.session, "update user"):
            try:
                new_version = compare_and_increment(self.session, User, user.id, user.version, values)
            except IntegrityError as exc:
                if _is_duplicate_email(exc):
                    raise DuplicateEmailError() from exc
                raise
            if new_version is None:
                self.session.rollback()
                logger.info(f"Edit conflict on user {user.id} at version {user.version}")
                raise EditConflictError()
            self.session.commit()
        user.version = new_version
        return new_version

    def set_password(self, user: User, password_hash: bytes) -> int:
        """Store a new password hash and delete every token of user in one transaction.

        Returns the number of tokens revoked. On any failure neither change lands.
        """
        values = {
            "name": user.name,
            "email": user.email,
            "password_hash": password_hash,
            "activated": user.activated,
        }
        revoke = (
            delete(Token)
            .where(col(Token.user_id) == user.id)
            .execution_options(synchronize_session=False)
        )
        with storage_errors(self.session, "change password"):
            new_version = compare_and_increment(self.session, User, user.id, user.version, values)
            if new_version is None:
                self.session.rollback()
                logger.info(f"Edit conflict on user {user.id} at version {user.version}")
                raise EditConflictError()
            revoked = self.session.execute(revoke).rowcount
            self.session.commit()
        user.password_hash = password_hash
        user.version = new_version
        logger.info(f"Password changed for user {user.id}, {revoked} token(s) revoked")
        return revoked

    def get_for_token(self, token_plaintext: str, now: Optional[datetime] = None) -> User:
        """Resolve the owner of a live token.

        Unknown and expired tokens both raise NotFoundError; callers cannot
        tell which one applied.
        """
        statement = (
            select(User)
            .join(Token, col(Token.user_id) == col(User.id))
            .where(col(Token.hash) == hash_token(token_plaintext))
            .where(col(Token.expiry) > (now or utc_now()))
        )
        with storage_errors(self.session, "get user for token"):
            user = self.session.exec(statement).first()
        if user is None:
            raise NotFoundError()
        return self._detach(user)

    def count(self) -> int:
        with storage_errors(self.session, "count users"):
            return self.session.exec(select(func.count()).select_from(User)).one()
