from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, Literal, TypeVar

from pydantic import BaseModel, ConfigDict, Field


class TokenPayload(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)


class LoginState(TokenPayload):
    kind: Literal["login_state"] = "login_state"
    state: str = Field(..., min_length=16)
    remember_me: bool
    referer: str
    method: Literal["email", "google"]


class EmailLoginCode(TokenPayload):
    kind: Literal["email_login_code"] = "email_login_code"
    timestamp: int
    email: str = Field(..., min_length=3, max_length=255)
    name: str | None = None
    picture: str | None = None


TPayload = TypeVar("TPayload", bound=TokenPayload)


@dataclass(frozen=True)
class DecodedToken(Generic[TPayload]):
    payload: TPayload
    issued_at: int
