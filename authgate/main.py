from __future__ import annotations

import logging

from fastapi import FastAPI, Request

from authgate.api.cookies import STATE_COOKIE_NAME, clear_state_cookie
from authgate.api.deps import get_app_settings
from authgate.api.errors import handle_auth_error
from authgate.api.routers import account, auth
from authgate.domain.exceptions import AuthError
from authgate.shared.config import get_settings


logging.basicConfig(
    level=get_settings().log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(title="Authgate API")
app.add_exception_handler(AuthError, handle_auth_error)
app.include_router(auth.router)
app.include_router(account.router)


@app.middleware("http")
async def clear_state_cookie_after_callback(request: Request, call_next):
    """The login nonce is single use: every callback response drops it.

    The callback route clears it itself; this covers responses produced
    before the route runs, such as dependency failures.
    """
    response = await call_next(request)
    if request.url.path != auth.LOGIN_CALLBACK_ROUTE or STATE_COOKIE_NAME not in request.cookies:
        return response
    already_cleared = any(
        header.startswith(f"{STATE_COOKIE_NAME}=") for header in response.headers.getlist("set-cookie")
    )
    if not already_cleared:
        clear_state_cookie(response, settings=get_app_settings())
    return response
