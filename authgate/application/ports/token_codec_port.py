from __future__ import annotations

from typing import Protocol

from authgate.application.dto.tokens import DecodedToken, TokenPayload, TPayload
from authgate.domain.results import Result


class TokenCodecPort(Protocol):
    def encode(self, payload: TokenPayload) -> str:
        ...

    def try_decode(self, token: str | None, schema: type[TPayload]) -> Result[DecodedToken[TPayload]]:
        ...

    def decode(self, token: str | None, schema: type[TPayload]) -> TPayload:
        ...
