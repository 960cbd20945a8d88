from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv


load_dotenv()


def _env(name: str, default: str | None = None) -> str | None:
    return os.getenv(name, default)


def _bool(name: str, default: str) -> bool:
    value = _env(name, default) or ""
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _optional_seconds(name: str, default: str) -> int | None:
    value = int(_env(name, default) or "0")
    return value if value > 0 else None


@dataclass(frozen=True)
class Settings:
    token_secret: str
    token_max_age_seconds: int | None
    email_link_max_age_seconds: int
    state_cookie_max_age_seconds: int
    session_maxage_hours: int
    cookie_secure: bool
    public_base_url: str
    email_login_page_path: str
    login_callback_path: str
    record_store_backend: str
    postgres_dsn: str
    google_client_id: str
    google_client_secret: str
    http_timeout_seconds: float
    smtp_host: str
    smtp_port: int
    smtp_user: str
    smtp_password: str
    smtp_use_tls: bool
    mail_from_domain: str
    log_level: str

    @property
    def login_callback_url(self) -> str:
        return self.public_base_url.rstrip("/") + self.login_callback_path

    @property
    def email_login_page_url(self) -> str:
        return self.public_base_url.rstrip("/") + self.email_login_page_path

    @property
    def google_enabled(self) -> bool:
        return bool(self.google_client_id and self.google_client_secret)


def get_settings() -> Settings:
    return Settings(
        token_secret=_env("TOKEN_SECRET", ""),
        token_max_age_seconds=_optional_seconds("TOKEN_MAX_AGE_SECONDS", "3600"),
        email_link_max_age_seconds=int(_env("EMAIL_LINK_MAX_AGE_SECONDS", "600")),
        state_cookie_max_age_seconds=int(_env("STATE_COOKIE_MAX_AGE_SECONDS", "600")),
        session_maxage_hours=int(_env("SESSION_MAXAGE_HOURS", "720")),
        cookie_secure=_bool("COOKIE_SECURE", "true"),
        public_base_url=_env("PUBLIC_BASE_URL", "http://localhost:8000"),
        email_login_page_path=_env("EMAIL_LOGIN_PAGE_PATH", "/login/email"),
        login_callback_path=_env("LOGIN_CALLBACK_PATH", "/account/login"),
        record_store_backend=_env("RECORD_STORE_BACKEND", "postgres").strip().lower(),
        postgres_dsn=_env("POSTGRES_DSN", ""),
        google_client_id=_env("GOOGLE_CLIENT_ID", ""),
        google_client_secret=_env("GOOGLE_CLIENT_SECRET", ""),
        http_timeout_seconds=float(_env("HTTP_TIMEOUT_SECONDS", "10")),
        smtp_host=_env("SMTP_HOST", ""),
        smtp_port=int(_env("SMTP_PORT", "587")),
        smtp_user=_env("SMTP_USER", ""),
        smtp_password=_env("SMTP_PASSWORD", ""),
        smtp_use_tls=_bool("SMTP_USE_TLS", "true"),
        mail_from_domain=_env("MAIL_FROM_DOMAIN", "localhost"),
        log_level=_env("LOG_LEVEL", "INFO").upper(),
    )
