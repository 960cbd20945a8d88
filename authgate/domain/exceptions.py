from __future__ import annotations

from enum import Enum
from typing import ClassVar


class AuthErrorKind(str, Enum):
    INVALID_TOKEN = "invalid_token"
    EXPIRED = "expired"
    LINK_EXPIRED = "link_expired"
    INVALID_STATE = "invalid_state"
    STATE_MISMATCH = "state_mismatch"
    INVALID_CALLBACK = "invalid_callback"
    UNSUPPORTED_METHOD = "unsupported_method"
    SESSION_INVALID = "session_invalid"
    ACCOUNT_NOT_FOUND = "account_not_found"
    PROVIDER_UNAVAILABLE = "provider_unavailable"
    STORAGE_UNAVAILABLE = "storage_unavailable"
    MAIL_UNAVAILABLE = "mail_unavailable"


class DomainError(Exception):
    """Base for domain errors."""


class AuthError(DomainError):
    """Login or session failure tagged with the kind the HTTP boundary maps on."""

    kind: ClassVar[AuthErrorKind]


class InvalidTokenError(AuthError):
    """Token is malformed, tampered with, or does not match the expected schema."""

    kind = AuthErrorKind.INVALID_TOKEN


class TokenExpiredError(AuthError):
    """Token is older than the codec's configured max age."""

    kind = AuthErrorKind.EXPIRED


class LinkExpiredError(AuthError):
    """Email sign-in link is older than its freshness window."""

    kind = AuthErrorKind.LINK_EXPIRED


class InvalidStateError(AuthError):
    """Returned login state token could not be decoded."""

    kind = AuthErrorKind.INVALID_STATE


class StateMismatchError(AuthError):
    """Returned login state does not match the value stored at redirect time."""

    kind = AuthErrorKind.STATE_MISMATCH


class InvalidCallbackError(AuthError):
    """Provider callback data failed provider-specific verification."""

    kind = AuthErrorKind.INVALID_CALLBACK


class UnsupportedMethodError(AuthError):
    """No identity provider is configured for the requested method."""

    kind = AuthErrorKind.UNSUPPORTED_METHOD


class SessionInvalidError(AuthError):
    """Presented session credentials do not match the user record."""

    kind = AuthErrorKind.SESSION_INVALID


class AccountNotFoundError(AuthError):
    kind = AuthErrorKind.ACCOUNT_NOT_FOUND


class ProviderUnavailableError(AuthError):
    """Identity provider could not be reached."""

    kind = AuthErrorKind.PROVIDER_UNAVAILABLE


class StorageUnavailableError(AuthError):
    """Record store I/O failed."""

    kind = AuthErrorKind.STORAGE_UNAVAILABLE


class MailUnavailableError(AuthError):
    """Outbound mail could not be delivered."""

    kind = AuthErrorKind.MAIL_UNAVAILABLE
