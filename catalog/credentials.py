"""Password hashing with bcrypt.

Length limits are enforced upstream by validator.validate_password_plaintext.
"""

from __future__ import annotations

import bcrypt

from .errors import HashComputationError
from .logging_config import get_logger

logger = get_logger(__name__)

DEFAULT_COST = 12

# bcrypt only ever hashes the first 72 bytes and rejects longer input
MAX_PASSWORD_BYTES = 72


def hash_password(plaintext: str, cost: int = DEFAULT_COST) -> bytes:
    """Return a salted bcrypt hash of plaintext. Never reversible."""
    try:
        return bcrypt.hashpw(plaintext.encode("utf-8"), bcrypt.gensalt(rounds=cost))
    except (ValueError, TypeError) as exc:
        logger.error(f"bcrypt failed to hash password: {exc}")
        raise HashComputationError(f"unable to hash password: {exc}") from exc


def verify_password(plaintext: str, stored_hash: bytes) -> bool:
    """True when plaintext matches stored_hash, False on mismatch.

    A plaintext longer than bcrypt accepts is a mismatch. A malformed
    stored hash is a server fault, not a mismatch: it raises
    HashComputationError.
    """
    if len(plaintext.encode("utf-8")) > MAX_PASSWORD_BYTES:
        # No stored hash can come from a password this long
        return False
    try:
        return bcrypt.checkpw(plaintext.encode("utf-8"), stored_hash)
    except (ValueError, TypeError) as exc:
        logger.error(f"bcrypt failed to check password: {exc}")
        raise HashComputationError(f"unable to check password: {exc}") from exc
