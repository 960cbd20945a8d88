from __future__ import annotations

from datetime import datetime, timezone
from urllib.parse import urlsplit


DEFAULT_REFERER = "/"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def normalize_email(email: str) -> str:
    return email.strip().lower()


def display_name(name: str | None, email: str | None) -> str:
    if name and name.strip():
        return name.strip()
    if email:
        return email.split("@")[0]
    return ""


def safe_referer(referer: str | None) -> str:
    """Keep only same-site absolute paths so the post-login redirect stays on this site."""
    if not referer:
        return DEFAULT_REFERER
    if not referer.startswith("/") or referer.startswith("//") or "\\" in referer:
        return DEFAULT_REFERER
    parsed = urlsplit(referer)
    if parsed.scheme or parsed.netloc:
        return DEFAULT_REFERER
    return referer
