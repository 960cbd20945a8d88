from __future__ import annotations

from datetime import datetime, timezone
from urllib.parse import parse_qs, urlsplit

import pytest

from authgate.application.dto.auth import SendEmailLoginLinkInput, SessionCredentials
from authgate.application.dto.tokens import EmailLoginCode, LoginState
from authgate.application.use_cases.delete_account import DeleteAccountUseCase
from authgate.application.use_cases.get_me import GetMeUseCase
from authgate.application.use_cases.logout_session import LogoutSessionUseCase
from authgate.application.use_cases.revoke_other_sessions import RevokeOtherSessionsUseCase
from authgate.application.use_cases.send_email_login_link import SendEmailLoginLinkUseCase
from authgate.application.use_cases.session_store import SessionStore
from authgate.domain.entities.user import Identity
from authgate.domain.exceptions import InvalidStateError, MailUnavailableError, SessionInvalidError
from authgate.infrastructure.db.memory_record_store import InMemoryRecordStore
from authgate.infrastructure.db.repositories.accounts_repository import RecordStoreAccountsRepository
from authgate.infrastructure.security.session_secret_service import Sha256SessionSecretService
from authgate.infrastructure.security.token_codec import FernetTokenCodec, TokenCodecSettings


NOW = 1_700_000_000


class FakeMailPort:
    def __init__(self):
        self.sent: list[dict[str, str]] = []

    def send(self, *, to: str, subject: str, text: str) -> None:
        self.sent.append({"to": to, "subject": subject, "text": text})


class FailingMailPort:
    def send(self, *, to: str, subject: str, text: str) -> None:
        raise MailUnavailableError("Mail delivery failed.")


def _codec() -> FernetTokenCodec:
    return FernetTokenCodec(TokenCodecSettings(secret="test-secret", max_age_seconds=3600), clock=lambda: NOW)


def _state_token(codec: FernetTokenCodec, method: str = "email") -> str:
    return codec.encode(
        LoginState(state="nonce-0123456789abcdef", remember_me=False, referer="/", method=method)
    )


def _send_link(use_case: SendEmailLoginLinkUseCase, *, email: str, state_token: str) -> str:
    return use_case.execute(
        SendEmailLoginLinkInput(
            email=email,
            state_token=state_token,
            callback_url="https://app.example.com/account/login",
        )
    )


def _accounts_with_user():
    record_store = InMemoryRecordStore()
    accounts = RecordStoreAccountsRepository(record_store)
    session_store = SessionStore(accounts_port=accounts, secret_port=Sha256SessionSecretService())
    created_at = datetime(2026, 1, 1, tzinfo=timezone.utc)
    user = accounts.create_user(
        user_id="user-1",
        identity=Identity(
            method_name="email",
            method_value="alice@example.com",
            name="alice",
            email="alice@example.com",
            picture=None,
        ),
        created_at=created_at,
    )
    accounts.link_identity(
        user=user,
        identity=Identity(
            method_name="google",
            method_value="google-sub-1",
            name="Alice",
            email="alice@example.com",
            picture="https://cdn.example.com/alice.png",
        ),
        updated_at=created_at,
    )
    return record_store, accounts, session_store


def test_send_link_mails_callback_with_state_and_code():
    codec = _codec()
    mail = FakeMailPort()
    use_case = SendEmailLoginLinkUseCase(
        token_codec=codec,
        mail_port=mail,
        mail_from_domain="example.com",
        clock=lambda: NOW,
    )
    state_token = _state_token(codec)

    link = _send_link(use_case, email="  Alice@Example.com ", state_token=state_token)

    assert len(mail.sent) == 1
    assert mail.sent[0]["to"] == "alice@example.com"
    assert mail.sent[0]["subject"] == "Sign-in link for example.com"
    assert link in mail.sent[0]["text"]
    parts = urlsplit(link)
    assert f"{parts.scheme}://{parts.netloc}{parts.path}" == "https://app.example.com/account/login"
    query = parse_qs(parts.query)
    assert query["state"] == [state_token]
    code = codec.decode(query["code"][0], EmailLoginCode)
    assert code.email == "alice@example.com"
    assert code.timestamp == NOW


def test_send_link_requires_email_login_state():
    codec = _codec()
    mail = FakeMailPort()
    use_case = SendEmailLoginLinkUseCase(token_codec=codec, mail_port=mail, mail_from_domain="example.com")

    with pytest.raises(InvalidStateError):
        _send_link(use_case, email="alice@example.com", state_token=_state_token(codec, method="google"))
    with pytest.raises(InvalidStateError):
        _send_link(use_case, email="alice@example.com", state_token="garbage")
    assert mail.sent == []


def test_send_link_rejects_malformed_email():
    codec = _codec()
    use_case = SendEmailLoginLinkUseCase(token_codec=codec, mail_port=FakeMailPort(), mail_from_domain="example.com")

    with pytest.raises(ValueError):
        _send_link(use_case, email="not-an-email", state_token=_state_token(codec))


def test_send_link_surfaces_mail_failure():
    codec = _codec()
    use_case = SendEmailLoginLinkUseCase(token_codec=codec, mail_port=FailingMailPort(), mail_from_domain="example.com")

    with pytest.raises(MailUnavailableError):
        _send_link(use_case, email="alice@example.com", state_token=_state_token(codec))


def test_get_me_lists_methods_and_sessions():
    _, accounts, session_store = _accounts_with_user()
    session_store.issue(user_id="user-1")
    session_store.issue(user_id="user-1")

    output = GetMeUseCase().execute(user=accounts.get_user(user_id="user-1"))

    assert output.user_id == "user-1"
    assert output.name == "alice"
    assert output.email == "alice@example.com"
    assert output.methods == ["email", "google"]
    assert output.active_sessions == 2


def test_logout_revokes_current_session():
    _, _, session_store = _accounts_with_user()
    current = session_store.issue(user_id="user-1")
    other = session_store.issue(user_id="user-1")

    LogoutSessionUseCase(session_store=session_store).execute(
        SessionCredentials(user_id="user-1", session_secret=current)
    )

    assert not session_store.verify(user_id="user-1", session_secret=current)
    assert session_store.verify(user_id="user-1", session_secret=other)


def test_logout_without_credentials_is_session_invalid():
    _, _, session_store = _accounts_with_user()

    with pytest.raises(SessionInvalidError):
        LogoutSessionUseCase(session_store=session_store).execute(
            SessionCredentials(user_id="user-1", session_secret="")
        )


def test_revoke_other_sessions_keeps_current():
    _, _, session_store = _accounts_with_user()
    current = session_store.issue(user_id="user-1")
    other = session_store.issue(user_id="user-1")

    RevokeOtherSessionsUseCase(session_store=session_store).execute(
        SessionCredentials(user_id="user-1", session_secret=current)
    )

    assert session_store.verify(user_id="user-1", session_secret=current)
    assert not session_store.verify(user_id="user-1", session_secret=other)


def test_revoke_other_sessions_requires_valid_session():
    _, _, session_store = _accounts_with_user()
    current = session_store.issue(user_id="user-1")

    with pytest.raises(SessionInvalidError):
        RevokeOtherSessionsUseCase(session_store=session_store).execute(
            SessionCredentials(user_id="user-1", session_secret="unknown")
        )
    assert session_store.verify(user_id="user-1", session_secret=current)


def test_delete_account_removes_user_and_identity_index():
    record_store, accounts, session_store = _accounts_with_user()
    current = session_store.issue(user_id="user-1")

    DeleteAccountUseCase(accounts_port=accounts, session_store=session_store).execute(
        SessionCredentials(user_id="user-1", session_secret=current)
    )

    assert record_store.keys("users") == []
    assert record_store.keys("identities") == []
    assert accounts.find_user_by_identity(method_name="google", method_value="google-sub-1") is None
    assert not session_store.verify(user_id="user-1", session_secret=current)


def test_delete_account_requires_valid_session():
    record_store, accounts, session_store = _accounts_with_user()

    with pytest.raises(SessionInvalidError):
        DeleteAccountUseCase(accounts_port=accounts, session_store=session_store).execute(
            SessionCredentials(user_id="user-1", session_secret="unknown")
        )
    assert record_store.keys("users") == ["user-1"]
