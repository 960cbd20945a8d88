from __future__ import annotations

from typing import Protocol


class MailPort(Protocol):
    def send(self, *, to: str, subject: str, text: str) -> None:
        ...
