from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar

from authgate.domain.exceptions import AuthError, AuthErrorKind


TValue = TypeVar("TValue")


@dataclass(frozen=True)
class Result(Generic[TValue]):
    """Outcome of a validation step: a value, or the error that stopped it.

    Callers branch on ``error.kind``; ``unwrap`` raises the carried error for
    code paths where failure is terminal anyway.
    """

    value: TValue | None = None
    error: AuthError | None = None

    @classmethod
    def success(cls, value: TValue) -> Result[TValue]:
        return cls(value=value)

    @classmethod
    def failure(cls, error: AuthError) -> Result[TValue]:
        return cls(error=error)

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def kind(self) -> AuthErrorKind | None:
        return self.error.kind if self.error is not None else None

    def unwrap(self) -> TValue:
        if self.error is not None:
            raise self.error
        return self.value
