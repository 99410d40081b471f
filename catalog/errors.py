"""Error hierarchy for the book catalog.

Recoverable errors (validation, not found, edit conflict, authentication) map to a
specific response at the HTTP boundary. Storage and crypto errors are logged with
full context and surface as an opaque server error.
"""

from __future__ import annotations

from typing import Dict, Optional


class CatalogError(Exception):
    """Base exception for all catalog errors."""

    code = "catalog_error"

    def __init__(self, message: str = ""):
        self.message = message or (self.__doc__ or self.code).strip()
        super().__init__(self.message)


# --- Input errors ---


class ValidationError(CatalogError):
    """Input failed validation."""

    code = "failed_validation"

    def __init__(self, errors: Dict[str, str], message: str = ""):
        super().__init__(message or "; ".join(f"{k}: {v}" for k, v in errors.items()))
        self.errors = dict(errors)


class WeakInputError(ValidationError):
    """Password plaintext violates the length constraints."""

    code = "weak_input"


class InvalidSortError(ValidationError):
    """Sort key is not in the safelist."""

    code = "invalid_sort"

    def __init__(self, sort: str, errors: Optional[Dict[str, str]] = None):
        super().__init__(errors or {"sort": "invalid sort value"}, message=f"unsafe sort parameter: {sort}")
        self.sort = sort


class DuplicateEmailError(ValidationError):
    """A user with this email address already exists."""

    code = "duplicate_email"

    def __init__(self):
        super().__init__({"email": "a user with this email address already exists"})


# --- Record errors ---


class NotFoundError(CatalogError):
    """Record not found."""

    code = "not_found"


class EditConflictError(CatalogError):
    """Edit conflict: the record was changed or removed since it was read."""

    code = "edit_conflict"


# --- Infrastructure errors ---


class StorageError(CatalogError):
    """Storage backend failure (connectivity, timeout, unexpected constraint)."""

    code = "storage_error"

    def __init__(self, message: str, operation: str = ""):
        super().__init__(message)
        self.operation = operation


class CryptoError(CatalogError):
    """Cryptographic subsystem failure."""

    code = "crypto_error"


class RandomSourceError(CryptoError):
    """Secure random source unavailable."""

    code = "random_source_error"


class HashComputationError(CryptoError):
    """Password hash could not be computed or checked."""

    code = "hash_computation_error"


# --- Authentication errors ---


class AuthenticationError(CatalogError):
    code = "authentication_error"


class InvalidCredentialsError(AuthenticationError):
    """invalid authentication credentials"""

    code = "invalid_credentials"


class InvalidTokenError(AuthenticationError):
    """invalid or missing authentication token"""

    code = "invalid_token"


class AuthenticationRequiredError(AuthenticationError):
    """you must be authenticated to access this resource"""

    code = "authentication_required"


class InactiveAccountError(AuthenticationError):
    """your user account must be activated to access this resource"""

    code = "inactive_account"
