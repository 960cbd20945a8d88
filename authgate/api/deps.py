from __future__ import annotations

from functools import lru_cache

from fastapi import Cookie, Depends, HTTPException
from sqlalchemy.exc import SQLAlchemyError

from authgate.api.cookies import SESSION_COOKIE_NAME, USER_ID_COOKIE_NAME
from authgate.application.dto.auth import SessionCredentials
from authgate.application.ports.accounts_port import AccountsPort
from authgate.application.ports.mail_port import MailPort
from authgate.application.ports.record_store_port import RecordStorePort
from authgate.application.ports.token_codec_port import TokenCodecPort
from authgate.application.use_cases.begin_login import BeginLoginUseCase
from authgate.application.use_cases.complete_login import CompleteLoginUseCase
from authgate.application.use_cases.delete_account import DeleteAccountUseCase
from authgate.application.use_cases.get_me import GetMeUseCase
from authgate.application.use_cases.identity_resolver import IdentityResolver
from authgate.application.use_cases.logout_session import LogoutSessionUseCase
from authgate.application.use_cases.revoke_other_sessions import RevokeOtherSessionsUseCase
from authgate.application.use_cases.send_email_login_link import SendEmailLoginLinkUseCase
from authgate.application.use_cases.session_store import SessionStore
from authgate.domain.entities.user import UserRecord
from authgate.domain.exceptions import SessionInvalidError, StorageUnavailableError
from authgate.infrastructure.clients.email_link_provider import (
    EmailLinkIdentityProvider,
    EmailLinkProviderSettings,
)
from authgate.infrastructure.clients.google_oidc_client import GoogleOidcClient, GoogleOidcClientSettings
from authgate.infrastructure.clients.smtp_mail_client import SmtpMailClient, SmtpMailClientSettings
from authgate.infrastructure.db.engine import create_schema, get_engine
from authgate.infrastructure.db.memory_record_store import InMemoryRecordStore
from authgate.infrastructure.db.repositories.accounts_repository import RecordStoreAccountsRepository
from authgate.infrastructure.db.repositories.record_store_repository import SqlRecordStore
from authgate.infrastructure.security.session_secret_service import Sha256SessionSecretService
from authgate.infrastructure.security.token_codec import FernetTokenCodec, TokenCodecSettings
from authgate.shared.config import Settings, get_settings


@lru_cache(maxsize=1)
def get_app_settings() -> Settings:
    return get_settings()


@lru_cache(maxsize=1)
def _get_token_codec() -> FernetTokenCodec:
    settings = get_app_settings()
    if not settings.token_secret:
        raise HTTPException(status_code=500, detail="TOKEN_SECRET is required.")
    return FernetTokenCodec(
        TokenCodecSettings(
            secret=settings.token_secret,
            max_age_seconds=settings.token_max_age_seconds,
        )
    )


@lru_cache(maxsize=1)
def _get_memory_record_store() -> InMemoryRecordStore:
    return InMemoryRecordStore()


@lru_cache(maxsize=4)
def _ensure_schema(dsn: str) -> None:
    try:
        create_schema(get_engine(dsn))
    except SQLAlchemyError as exc:
        raise StorageUnavailableError("Record store is unavailable.") from exc


def _get_record_store() -> RecordStorePort:
    settings = get_app_settings()
    if settings.record_store_backend == "memory":
        return _get_memory_record_store()
    if not settings.postgres_dsn:
        raise HTTPException(status_code=500, detail="POSTGRES_DSN is required.")
    _ensure_schema(settings.postgres_dsn)
    return SqlRecordStore(get_engine(settings.postgres_dsn))


@lru_cache(maxsize=1)
def _get_session_secret_service() -> Sha256SessionSecretService:
    return Sha256SessionSecretService()


def get_token_codec() -> TokenCodecPort:
    return _get_token_codec()


def get_accounts_port() -> AccountsPort:
    return RecordStoreAccountsRepository(_get_record_store())


def get_mail_port(settings: Settings = Depends(get_app_settings)) -> MailPort:
    return SmtpMailClient(
        SmtpMailClientSettings(
            host=settings.smtp_host,
            port=settings.smtp_port,
            user=settings.smtp_user,
            password=settings.smtp_password,
            use_tls=settings.smtp_use_tls,
            from_domain=settings.mail_from_domain,
        )
    )


def get_identity_resolver(
    settings: Settings = Depends(get_app_settings),
    token_codec: TokenCodecPort = Depends(get_token_codec),
) -> IdentityResolver:
    providers = [
        EmailLinkIdentityProvider(
            EmailLinkProviderSettings(
                login_page_url=settings.email_login_page_url,
                link_max_age_seconds=settings.email_link_max_age_seconds,
            ),
            token_codec=token_codec,
        )
    ]
    if settings.google_enabled:
        providers.append(
            GoogleOidcClient(
                GoogleOidcClientSettings(
                    client_id=settings.google_client_id,
                    client_secret=settings.google_client_secret,
                    redirect_uri=settings.login_callback_url,
                    timeout_seconds=settings.http_timeout_seconds,
                )
            )
        )
    return IdentityResolver(providers)


def get_session_store(accounts_port: AccountsPort = Depends(get_accounts_port)) -> SessionStore:
    return SessionStore(accounts_port=accounts_port, secret_port=_get_session_secret_service())


def get_begin_login_use_case(
    token_codec: TokenCodecPort = Depends(get_token_codec),
    identity_resolver: IdentityResolver = Depends(get_identity_resolver),
) -> BeginLoginUseCase:
    return BeginLoginUseCase(token_codec=token_codec, identity_resolver=identity_resolver)


def get_complete_login_use_case(
    token_codec: TokenCodecPort = Depends(get_token_codec),
    identity_resolver: IdentityResolver = Depends(get_identity_resolver),
    accounts_port: AccountsPort = Depends(get_accounts_port),
    session_store: SessionStore = Depends(get_session_store),
) -> CompleteLoginUseCase:
    return CompleteLoginUseCase(
        token_codec=token_codec,
        identity_resolver=identity_resolver,
        accounts_port=accounts_port,
        session_store=session_store,
    )


def get_send_email_login_link_use_case(
    settings: Settings = Depends(get_app_settings),
    token_codec: TokenCodecPort = Depends(get_token_codec),
    mail_port: MailPort = Depends(get_mail_port),
) -> SendEmailLoginLinkUseCase:
    return SendEmailLoginLinkUseCase(
        token_codec=token_codec,
        mail_port=mail_port,
        mail_from_domain=settings.mail_from_domain,
    )


def get_get_me_use_case() -> GetMeUseCase:
    return GetMeUseCase()


def get_logout_session_use_case(
    session_store: SessionStore = Depends(get_session_store),
) -> LogoutSessionUseCase:
    return LogoutSessionUseCase(session_store=session_store)


def get_revoke_other_sessions_use_case(
    session_store: SessionStore = Depends(get_session_store),
) -> RevokeOtherSessionsUseCase:
    return RevokeOtherSessionsUseCase(session_store=session_store)


def get_delete_account_use_case(
    accounts_port: AccountsPort = Depends(get_accounts_port),
    session_store: SessionStore = Depends(get_session_store),
) -> DeleteAccountUseCase:
    return DeleteAccountUseCase(accounts_port=accounts_port, session_store=session_store)


def get_session_credentials(
    user_id: str | None = Cookie(default=None, alias=USER_ID_COOKIE_NAME),
    session_token: str | None = Cookie(default=None, alias=SESSION_COOKIE_NAME),
) -> SessionCredentials:
    if not user_id or not session_token:
        raise SessionInvalidError("Missing session cookies.")
    return SessionCredentials(user_id=user_id, session_secret=session_token)


def get_current_user(
    credentials: SessionCredentials = Depends(get_session_credentials),
    session_store: SessionStore = Depends(get_session_store),
) -> UserRecord:
    user = session_store.authenticate(
        user_id=credentials.user_id,
        session_secret=credentials.session_secret,
    )
    if user is None:
        raise SessionInvalidError("Invalid session.")
    return user
