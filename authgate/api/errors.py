from __future__ import annotations

import logging

from fastapi import Request
from fastapi.responses import JSONResponse

from authgate.api.schemas.auth import ErrorResponse
from authgate.domain.exceptions import AuthError, AuthErrorKind


logger = logging.getLogger(__name__)

STATUS_BY_KIND: dict[AuthErrorKind, int] = {
    AuthErrorKind.INVALID_TOKEN: 400,
    AuthErrorKind.EXPIRED: 400,
    AuthErrorKind.LINK_EXPIRED: 400,
    AuthErrorKind.INVALID_STATE: 400,
    AuthErrorKind.STATE_MISMATCH: 400,
    AuthErrorKind.INVALID_CALLBACK: 400,
    AuthErrorKind.UNSUPPORTED_METHOD: 400,
    AuthErrorKind.SESSION_INVALID: 401,
    AuthErrorKind.ACCOUNT_NOT_FOUND: 404,
    AuthErrorKind.PROVIDER_UNAVAILABLE: 502,
    AuthErrorKind.STORAGE_UNAVAILABLE: 500,
    AuthErrorKind.MAIL_UNAVAILABLE: 500,
}


def status_for(kind: AuthErrorKind) -> int:
    return STATUS_BY_KIND.get(kind, 500)


def auth_error_response(exc: AuthError) -> JSONResponse:
    status_code = status_for(exc.kind)
    if status_code >= 500:
        logger.error("api: request_failed kind=%s detail=%s", exc.kind.value, exc)
    body = ErrorResponse(detail=str(exc), kind=exc.kind.value)
    return JSONResponse(status_code=status_code, content=body.model_dump())


async def handle_auth_error(_request: Request, exc: AuthError) -> JSONResponse:
    return auth_error_response(exc)
