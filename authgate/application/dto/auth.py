from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field


@dataclass(frozen=True)
class BeginLoginInput:
    method: str
    remember_me: bool
    referer: str | None


@dataclass(frozen=True)
class BeginLoginOutput:
    redirect_url: str
    state_cookie_value: str
    state_token: str


@dataclass(frozen=True)
class CompleteLoginInput:
    state_token: str | None
    stored_state: str | None
    callback: Mapping[str, str] = field(default_factory=dict)
    current_user_id: str | None = None
    current_session_secret: str | None = None


@dataclass(frozen=True)
class CompleteLoginOutput:
    user_id: str
    session_secret: str
    remember_me: bool
    referer: str
    created: bool
    linked: bool


@dataclass(frozen=True)
class SendEmailLoginLinkInput:
    email: str
    state_token: str
    callback_url: str


@dataclass(frozen=True)
class SessionCredentials:
    user_id: str
    session_secret: str


@dataclass(frozen=True)
class MeOutput:
    user_id: str
    name: str
    email: str | None
    picture: str | None
    methods: list[str]
    active_sessions: int
