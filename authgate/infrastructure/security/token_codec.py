from __future__ import annotations

import base64
import binascii
import hashlib
import logging
import time
from collections.abc import Callable
from dataclasses import dataclass

from cryptography.fernet import Fernet, InvalidToken
from pydantic import ValidationError

from authgate.application.dto.tokens import DecodedToken, TokenPayload, TPayload
from authgate.application.ports.token_codec_port import TokenCodecPort
from authgate.domain.exceptions import InvalidTokenError, TokenExpiredError
from authgate.domain.results import Result


logger = logging.getLogger(__name__)

MAX_CLOCK_SKEW_SECONDS = 60


@dataclass(frozen=True)
class TokenCodecSettings:
    secret: str
    max_age_seconds: int | None


class FernetTokenCodec(TokenCodecPort):
    """Encrypts typed payloads into URL-safe Fernet tokens.

    Fernet authenticates the ciphertext and the issue timestamp together, so a
    decoded token is known to come from this key and ``issued_at`` can be
    trusted for the max-age check. Every call uses a fresh IV.
    """

    def __init__(self, settings: TokenCodecSettings, *, clock: Callable[[], float] = time.time):
        if not settings.secret:
            raise ValueError("Token secret is required.")
        self._settings = settings
        self._fernet = Fernet(_derive_key(settings.secret))
        self._clock = clock

    def encode(self, payload: TokenPayload) -> str:
        data = payload.model_dump_json().encode("utf-8")
        return self._fernet.encrypt_at_time(data, int(self._clock())).decode("ascii")

    def try_decode(self, token: str | None, schema: type[TPayload]) -> Result[DecodedToken[TPayload]]:
        if not token:
            return Result.failure(InvalidTokenError("Missing token."))
        try:
            raw_token = token.encode("ascii")
        except UnicodeEncodeError:
            return Result.failure(InvalidTokenError("Malformed token."))
        if not _is_canonical_base64(raw_token):
            logger.debug("token_codec: rejected schema=%s reason=encoding", schema.__name__)
            return Result.failure(InvalidTokenError("Malformed token."))

        try:
            data = self._fernet.decrypt(raw_token)
            issued_at = self._fernet.extract_timestamp(raw_token)
        except InvalidToken:
            logger.debug("token_codec: rejected schema=%s reason=signature", schema.__name__)
            return Result.failure(InvalidTokenError("Invalid token."))

        now = int(self._clock())
        if issued_at > now + MAX_CLOCK_SKEW_SECONDS:
            logger.debug("token_codec: rejected schema=%s reason=future_timestamp", schema.__name__)
            return Result.failure(InvalidTokenError("Token issued in the future."))

        max_age = self._settings.max_age_seconds
        if max_age is not None and now - issued_at > max_age:
            logger.debug(
                "token_codec: rejected schema=%s reason=expired age=%s max_age=%s",
                schema.__name__,
                now - issued_at,
                max_age,
            )
            return Result.failure(TokenExpiredError("Token expired."))

        try:
            payload = schema.model_validate_json(data)
        except ValidationError:
            logger.debug("token_codec: rejected schema=%s reason=schema", schema.__name__)
            return Result.failure(InvalidTokenError(f"Token is not a valid {schema.__name__}."))

        return Result.success(DecodedToken(payload=payload, issued_at=issued_at))

    def decode(self, token: str | None, schema: type[TPayload]) -> TPayload:
        return self.try_decode(token, schema).unwrap().payload


def _is_canonical_base64(raw_token: bytes) -> bool:
    # Lenient decoding ignores the spare bits of the last character; only the
    # exact encoding we emit is accepted.
    try:
        return base64.urlsafe_b64encode(base64.urlsafe_b64decode(raw_token)) == raw_token
    except (binascii.Error, ValueError):
        return False


def _derive_key(secret: str) -> bytes:
    return base64.urlsafe_b64encode(hashlib.sha256(secret.encode("utf-8")).digest())
