"""Authentication tokens: random plaintext handed out once, SHA-256 hash stored."""

from __future__ import annotations

import base64
import dataclasses
import hashlib
import os
from datetime import datetime, timedelta
from typing import Optional, Tuple

from sqlalchemy import delete
from sqlmodel import Session, func, select

from .database import storage_errors
from .errors import RandomSourceError
from .logging_config import get_logger
from .models import Token, utc_now

logger = get_logger(__name__)

TOKEN_ENTROPY_BYTES = 16


@dataclasses.dataclass(frozen=True)
class IssuedToken:
    """What the client gets back, exactly once."""

    plaintext: str
    expiry: datetime


def _b32_encode(data: bytes) -> str:
    return base64.b32encode(data).rstrip(b"=").decode("ascii")


def hash_token(plaintext: str) -> bytes:
    return hashlib.sha256(plaintext.encode("utf-8")).digest()


def generate_token(
    user_id: int, ttl: timedelta, now: Optional[datetime] = None
) -> Tuple[IssuedToken, Token]:
    """Draw a fresh token for user_id. Returns (plaintext view, row to persist)."""
    try:
        random_bytes = os.urandom(TOKEN_ENTROPY_BYTES)
    except (NotImplementedError, OSError) as exc:
        raise RandomSourceError(f"secure random source unavailable: {exc}") from exc

    plaintext = _b32_encode(random_bytes)
    expiry = (now or utc_now()) + ttl
    row = Token(hash=hash_token(plaintext), user_id=user_id, expiry=expiry)
    return IssuedToken(plaintext=plaintext, expiry=expiry), row


class TokenStore:
    def __init__(self, session: Session):
        self.session = session

    def issue(self, user_id: int, ttl: timedelta, now: Optional[datetime] = None) -> IssuedToken:
        issued, row = generate_token(user_id, ttl, now=now)
        with storage_errors(self.session, "insert token"):
            self.session.add(row)
            self.session.commit()
        logger.debug(f"Issued token for user {user_id}, expires {issued.expiry.isoformat()}")
        return issued

    def revoke_all(self, user_id: int) -> int:
        """Delete every token of user_id. Returns the number of rows removed."""
        statement = (
            delete(Token)
            .where(Token.user_id == user_id)
            .execution_options(synchronize_session=False)
        )
        with storage_errors(self.session, "delete tokens"):
            result = self.session.execute(statement)
            self.session.commit()
        logger.info(f"Revoked {result.rowcount} token(s) for user {user_id}")
        return result.rowcount

    def count_live(self, now: Optional[datetime] = None) -> int:
        statement = select(func.count()).select_from(Token).where(Token.expiry > (now or utc_now()))
        with storage_errors(self.session, "count tokens"):
            return self.session.exec(statement).one()
