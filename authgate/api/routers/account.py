from __future__ import annotations

from fastapi import APIRouter, Depends, Response

from authgate.api.cookies import delete_session_cookies
from authgate.api.deps import (
    get_app_settings,
    get_current_user,
    get_delete_account_use_case,
    get_get_me_use_case,
    get_logout_session_use_case,
    get_revoke_other_sessions_use_case,
    get_session_credentials,
)
from authgate.api.schemas.auth import AccountActionResponse, MeResponse
from authgate.application.dto.auth import SessionCredentials
from authgate.application.use_cases.delete_account import DeleteAccountUseCase
from authgate.application.use_cases.get_me import GetMeUseCase
from authgate.application.use_cases.logout_session import LogoutSessionUseCase
from authgate.application.use_cases.revoke_other_sessions import RevokeOtherSessionsUseCase
from authgate.domain.entities.user import UserRecord
from authgate.shared.config import Settings


router = APIRouter()


@router.get("/account/me", response_model=MeResponse)
def get_me(
    current_user: UserRecord = Depends(get_current_user),
    use_case: GetMeUseCase = Depends(get_get_me_use_case),
):
    output = use_case.execute(user=current_user)
    return MeResponse(
        user_id=output.user_id,
        name=output.name,
        email=output.email,
        picture=output.picture,
        methods=output.methods,
        active_sessions=output.active_sessions,
    )


@router.post("/account/logout", response_model=AccountActionResponse)
def logout(
    response: Response,
    credentials: SessionCredentials = Depends(get_session_credentials),
    use_case: LogoutSessionUseCase = Depends(get_logout_session_use_case),
    settings: Settings = Depends(get_app_settings),
):
    use_case.execute(credentials)
    delete_session_cookies(response, settings=settings)
    return AccountActionResponse(success=True, message="Logged out.")


@router.post("/account/sessions/revoke", response_model=AccountActionResponse)
def revoke_other_sessions(
    credentials: SessionCredentials = Depends(get_session_credentials),
    use_case: RevokeOtherSessionsUseCase = Depends(get_revoke_other_sessions_use_case),
):
    use_case.execute(credentials)
    return AccountActionResponse(success=True, message="Other sessions revoked.")


@router.delete("/account", response_model=AccountActionResponse)
def delete_account(
    response: Response,
    credentials: SessionCredentials = Depends(get_session_credentials),
    use_case: DeleteAccountUseCase = Depends(get_delete_account_use_case),
    settings: Settings = Depends(get_app_settings),
):
    use_case.execute(credentials)
    delete_session_cookies(response, settings=settings)
    return AccountActionResponse(success=True, message="Account deleted.")
