from __future__ import annotations

from fastapi import Response

from authgate.shared.config import Settings


STATE_COOKIE_NAME = "state"
USER_ID_COOKIE_NAME = "userID"
SESSION_COOKIE_NAME = "sessionToken"


def _set_cookie(response: Response, key: str, value: str, *, settings: Settings, max_age: int | None) -> None:
    response.set_cookie(
        key=key,
        value=value,
        max_age=max_age,
        path="/",
        httponly=True,
        samesite="lax",
        secure=settings.cookie_secure,
    )


def set_state_cookie(response: Response, nonce: str, *, settings: Settings) -> None:
    _set_cookie(response, STATE_COOKIE_NAME, nonce, settings=settings, max_age=settings.state_cookie_max_age_seconds)


def clear_state_cookie(response: Response, *, settings: Settings) -> None:
    _set_cookie(response, STATE_COOKIE_NAME, "", settings=settings, max_age=0)


def set_session_cookies(
    response: Response,
    *,
    user_id: str,
    session_secret: str,
    remember_me: bool,
    settings: Settings,
) -> None:
    # Without remember-me the cookies live for the browser session only.
    max_age = settings.session_maxage_hours * 60 * 60 if remember_me else None
    _set_cookie(response, USER_ID_COOKIE_NAME, user_id, settings=settings, max_age=max_age)
    _set_cookie(response, SESSION_COOKIE_NAME, session_secret, settings=settings, max_age=max_age)


def delete_session_cookies(response: Response, *, settings: Settings) -> None:
    for key in (USER_ID_COOKIE_NAME, SESSION_COOKIE_NAME):
        response.delete_cookie(
            key=key,
            path="/",
            httponly=True,
            samesite="lax",
            secure=settings.cookie_secure,
        )
