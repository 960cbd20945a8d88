from __future__ import annotations

from fastapi import APIRouter, Cookie, Depends, HTTPException, Query, Request
from fastapi.responses import RedirectResponse

from authgate.api.cookies import (
    SESSION_COOKIE_NAME,
    STATE_COOKIE_NAME,
    USER_ID_COOKIE_NAME,
    clear_state_cookie,
    set_session_cookies,
    set_state_cookie,
)
from authgate.api.deps import (
    get_app_settings,
    get_begin_login_use_case,
    get_complete_login_use_case,
    get_send_email_login_link_use_case,
)
from authgate.api.errors import auth_error_response
from authgate.api.schemas.auth import AccountActionResponse, EmailLinkRequest
from authgate.application.dto.auth import BeginLoginInput, CompleteLoginInput, SendEmailLoginLinkInput
from authgate.application.use_cases.begin_login import BeginLoginUseCase
from authgate.application.use_cases.complete_login import CompleteLoginUseCase
from authgate.application.use_cases.send_email_login_link import SendEmailLoginLinkUseCase
from authgate.domain.exceptions import AuthError
from authgate.shared.config import Settings


router = APIRouter()

LOGIN_CALLBACK_ROUTE = "/account/login"


@router.get("/account/login/start")
def begin_login(
    method: str,
    remember_me: bool = Query(default=False, alias="rememberMe"),
    referer: str | None = None,
    use_case: BeginLoginUseCase = Depends(get_begin_login_use_case),
    settings: Settings = Depends(get_app_settings),
):
    output = use_case.execute(
        BeginLoginInput(method=method, remember_me=remember_me, referer=referer)
    )
    response = RedirectResponse(url=output.redirect_url, status_code=303)
    set_state_cookie(response, output.state_cookie_value, settings=settings)
    return response


@router.post("/account/login/email", response_model=AccountActionResponse)
def send_email_login_link(
    req: EmailLinkRequest,
    use_case: SendEmailLoginLinkUseCase = Depends(get_send_email_login_link_use_case),
    settings: Settings = Depends(get_app_settings),
):
    try:
        use_case.execute(
            SendEmailLoginLinkInput(
                email=req.email,
                state_token=req.state,
                callback_url=settings.login_callback_url,
            )
        )
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return AccountActionResponse(success=True, message="Check your inbox for a sign-in link.")


@router.get(LOGIN_CALLBACK_ROUTE)
def complete_login(
    request: Request,
    state: str | None = None,
    stored_state: str | None = Cookie(default=None, alias=STATE_COOKIE_NAME),
    user_id: str | None = Cookie(default=None, alias=USER_ID_COOKIE_NAME),
    session_token: str | None = Cookie(default=None, alias=SESSION_COOKIE_NAME),
    use_case: CompleteLoginUseCase = Depends(get_complete_login_use_case),
    settings: Settings = Depends(get_app_settings),
):
    callback = {key: value for key, value in request.query_params.items() if key != "state"}
    try:
        output = use_case.execute(
            CompleteLoginInput(
                state_token=state,
                stored_state=stored_state,
                callback=callback,
                current_user_id=user_id,
                current_session_secret=session_token,
            )
        )
    except AuthError as exc:
        # The nonce is single use: drop it on failure too.
        response = auth_error_response(exc)
        clear_state_cookie(response, settings=settings)
        return response

    response = RedirectResponse(url=output.referer, status_code=303)
    set_session_cookies(
        response,
        user_id=output.user_id,
        session_secret=output.session_secret,
        remember_me=output.remember_me,
        settings=settings,
    )
    clear_state_cookie(response, settings=settings)
    return response
