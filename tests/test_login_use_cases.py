from __future__ import annotations

from types import SimpleNamespace
from urllib.parse import parse_qs, urlsplit

import pytest

from authgate.application.dto.auth import BeginLoginInput, CompleteLoginInput
from authgate.application.dto.tokens import EmailLoginCode, LoginState
from authgate.application.use_cases.begin_login import BeginLoginUseCase
from authgate.application.use_cases.complete_login import CompleteLoginUseCase
from authgate.application.use_cases.identity_resolver import IdentityResolver
from authgate.application.use_cases.session_store import SessionStore
from authgate.domain.exceptions import (
    InvalidCallbackError,
    InvalidStateError,
    StateMismatchError,
    UnsupportedMethodError,
)
from authgate.infrastructure.clients.email_link_provider import (
    EmailLinkIdentityProvider,
    EmailLinkProviderSettings,
)
from authgate.infrastructure.db.memory_record_store import InMemoryRecordStore
from authgate.infrastructure.db.repositories.accounts_repository import RecordStoreAccountsRepository
from authgate.infrastructure.security.session_secret_service import Sha256SessionSecretService
from authgate.infrastructure.security.token_codec import FernetTokenCodec, TokenCodecSettings


class FakeClock:
    def __init__(self, now: float = 1_700_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


def _build():
    clock = FakeClock()
    codec = FernetTokenCodec(TokenCodecSettings(secret="test-secret", max_age_seconds=3600), clock=clock)
    record_store = InMemoryRecordStore()
    accounts = RecordStoreAccountsRepository(record_store)
    session_store = SessionStore(accounts_port=accounts, secret_port=Sha256SessionSecretService())
    resolver = IdentityResolver(
        [
            EmailLinkIdentityProvider(
                EmailLinkProviderSettings(
                    login_page_url="https://app.example.com/login/email",
                    link_max_age_seconds=600,
                ),
                token_codec=codec,
                clock=clock,
            )
        ]
    )
    user_ids = iter(f"user-{index}" for index in range(1, 100))
    return SimpleNamespace(
        clock=clock,
        codec=codec,
        record_store=record_store,
        accounts=accounts,
        session_store=session_store,
        begin=BeginLoginUseCase(token_codec=codec, identity_resolver=resolver),
        complete=CompleteLoginUseCase(
            token_codec=codec,
            identity_resolver=resolver,
            accounts_port=accounts,
            session_store=session_store,
            user_id_factory=lambda: next(user_ids),
        ),
    )


def _email_code(env, email: str = "alice@example.com") -> str:
    return env.codec.encode(EmailLoginCode(timestamp=int(env.clock()), email=email))


def _complete(env, *, email: str = "alice@example.com", referer: str = "/account", **kwargs):
    started = env.begin.execute(BeginLoginInput(method="email", remember_me=True, referer=referer))
    return env.complete.execute(
        CompleteLoginInput(
            state_token=started.state_token,
            stored_state=started.state_cookie_value,
            callback={"code": _email_code(env, email)},
            **kwargs,
        )
    )


def test_begin_encodes_login_state_into_redirect():
    env = _build()

    output = env.begin.execute(BeginLoginInput(method="email", remember_me=True, referer="/account"))

    query = parse_qs(urlsplit(output.redirect_url).query)
    assert query["state"] == [output.state_token]
    state = env.codec.decode(query["state"][0], LoginState)
    assert state.remember_me is True
    assert state.referer == "/account"
    assert state.method == "email"
    assert state.state == output.state_cookie_value


@pytest.mark.parametrize(
    "referer",
    [None, "", "https://evil.example.com/", "//evil.example.com/path", "/\\evil.example.com", "account"],
)
def test_begin_drops_off_site_referer(referer):
    env = _build()

    output = env.begin.execute(BeginLoginInput(method="email", remember_me=False, referer=referer))

    assert env.codec.decode(output.state_token, LoginState).referer == "/"


def test_begin_rejects_unsupported_method():
    env = _build()

    with pytest.raises(UnsupportedMethodError):
        env.begin.execute(BeginLoginInput(method="google", remember_me=False, referer="/"))


def test_complete_for_new_identity_creates_one_user_and_one_session():
    env = _build()

    output = _complete(env)

    assert output.created is True
    assert output.linked is False
    assert output.referer == "/account"
    assert output.remember_me is True
    assert env.record_store.keys("users") == [output.user_id]
    assert env.record_store.keys("identities") == ["email:alice@example.com"]
    user = env.accounts.get_user(user_id=output.user_id)
    assert user.session_token_hashes == frozenset({env.session_store.hash(output.session_secret)})
    assert user.name == "alice"
    assert user.email == "alice@example.com"


def test_complete_for_known_identity_reuses_user():
    env = _build()
    first = _complete(env)

    second = _complete(env)

    assert second.user_id == first.user_id
    assert second.created is False
    assert env.record_store.keys("users") == [first.user_id]
    assert len(env.accounts.get_user(user_id=first.user_id).session_token_hashes) == 2


def test_complete_links_new_identity_to_signed_in_user():
    env = _build()
    first = _complete(env)

    linked = _complete(
        env,
        email="alice.new@example.com",
        current_user_id=first.user_id,
        current_session_secret=first.session_secret,
    )

    assert linked.user_id == first.user_id
    assert linked.linked is True
    assert env.record_store.keys("users") == [first.user_id]
    user = env.accounts.get_user(user_id=first.user_id)
    assert user.has_identity("email", "alice.new@example.com")
    assert user.email == "alice.new@example.com"


def test_complete_with_invalid_session_creates_new_user_instead_of_linking():
    env = _build()
    first = _complete(env)

    other = _complete(
        env,
        email="bob@example.com",
        current_user_id=first.user_id,
        current_session_secret="stolen",
    )

    assert other.user_id != first.user_id
    assert other.created is True


def test_complete_with_mismatched_stored_state_fails():
    env = _build()
    started = env.begin.execute(BeginLoginInput(method="email", remember_me=False, referer="/"))

    for stored_state in (None, "", "another-nonce-0123456789"):
        with pytest.raises(StateMismatchError):
            env.complete.execute(
                CompleteLoginInput(
                    state_token=started.state_token,
                    stored_state=stored_state,
                    callback={"code": _email_code(env)},
                )
            )
    assert env.record_store.keys("users") == []


@pytest.mark.parametrize("state_token", [None, "", "garbage"])
def test_complete_with_undecodable_state_fails(state_token):
    env = _build()

    with pytest.raises(InvalidStateError):
        env.complete.execute(
            CompleteLoginInput(
                state_token=state_token,
                stored_state="nonce-0123456789abcdef",
                callback={"code": _email_code(env)},
            )
        )


def test_complete_rejects_email_code_used_as_state():
    env = _build()
    code = _email_code(env)

    with pytest.raises(InvalidStateError):
        env.complete.execute(
            CompleteLoginInput(state_token=code, stored_state="nonce-0123456789abcdef", callback={"code": code})
        )


def test_complete_with_bad_provider_callback_issues_no_session():
    env = _build()
    started = env.begin.execute(BeginLoginInput(method="email", remember_me=False, referer="/"))

    with pytest.raises(InvalidCallbackError):
        env.complete.execute(
            CompleteLoginInput(
                state_token=started.state_token,
                stored_state=started.state_cookie_value,
                callback={"code": "garbage"},
            )
        )
    assert env.record_store.keys("users") == []
