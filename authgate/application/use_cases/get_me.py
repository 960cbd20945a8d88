from __future__ import annotations

from authgate.application.dto.auth import MeOutput
from authgate.domain.entities.user import UserRecord


class GetMeUseCase:
    def execute(self, *, user: UserRecord) -> MeOutput:
        return MeOutput(
            user_id=user.user_id,
            name=user.name,
            email=user.email,
            picture=user.picture,
            methods=sorted({linked.method_name for linked in user.identities}),
            active_sessions=len(user.session_token_hashes),
        )
