from __future__ import annotations

import logging
import smtplib
import ssl
from dataclasses import dataclass
from email.mime.text import MIMEText

from authgate.application.ports.mail_port import MailPort
from authgate.domain.exceptions import MailUnavailableError


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SmtpMailClientSettings:
    host: str
    port: int
    user: str
    password: str
    use_tls: bool
    from_domain: str
    timeout_seconds: float = 30


class SmtpMailClient(MailPort):
    """SMTP delivery; logs instead of sending when no host is configured."""

    def __init__(self, settings: SmtpMailClientSettings):
        self._settings = settings

    @property
    def is_configured(self) -> bool:
        return bool(self._settings.host)

    @property
    def from_address(self) -> str:
        return f"no-reply@{self._settings.from_domain}"

    def send(self, *, to: str, subject: str, text: str) -> None:
        if not self.is_configured:
            logger.info(
                "smtp_mail_client: dev_mode to=%s subject=%s body=%s",
                redact_email(to),
                subject,
                text,
            )
            return

        message = MIMEText(text, "plain")
        message["Subject"] = subject
        message["From"] = f'"{self._settings.from_domain}" <{self.from_address}>'
        message["To"] = to

        settings = self._settings
        context = ssl.create_default_context()
        try:
            if settings.use_tls:
                with smtplib.SMTP(settings.host, settings.port, timeout=settings.timeout_seconds) as server:
                    server.starttls(context=context)
                    self._login(server)
                    server.sendmail(self.from_address, [to], message.as_string())
            else:
                with smtplib.SMTP_SSL(
                    settings.host,
                    settings.port,
                    context=context,
                    timeout=settings.timeout_seconds,
                ) as server:
                    self._login(server)
                    server.sendmail(self.from_address, [to], message.as_string())
        except (smtplib.SMTPException, OSError) as exc:
            logger.error(
                "smtp_mail_client: send_failed to=%s error=%s",
                redact_email(to),
                exc.__class__.__name__,
            )
            raise MailUnavailableError("Mail delivery failed.") from exc

        logger.info("smtp_mail_client: sent to=%s subject=%s", redact_email(to), subject)

    def _login(self, server: smtplib.SMTP) -> None:
        if self._settings.user and self._settings.password:
            server.login(self._settings.user, self._settings.password)


def redact_email(email: str) -> str:
    if "@" not in email:
        return "redacted"
    local, domain = email.split("@", 1)
    return f"{local[:2]}***@{domain}"
