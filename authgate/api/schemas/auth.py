from __future__ import annotations

from pydantic import BaseModel, Field


class EmailLinkRequest(BaseModel):
    email: str = Field(..., min_length=3, max_length=255)
    state: str = Field(..., min_length=1)


class AccountActionResponse(BaseModel):
    success: bool
    message: str


class MeResponse(BaseModel):
    user_id: str
    name: str
    email: str | None
    picture: str | None
    methods: list[str]
    active_sessions: int


class ErrorResponse(BaseModel):
    detail: str
    kind: str
