from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping

from authgate.application.ports.identity_provider_port import IdentityProviderPort
from authgate.domain.entities.user import Identity
from authgate.domain.exceptions import UnsupportedMethodError


logger = logging.getLogger(__name__)


class IdentityResolver:
    def __init__(self, providers: Iterable[IdentityProviderPort]):
        self._providers = {provider.method_name: provider for provider in providers}

    @property
    def methods(self) -> tuple[str, ...]:
        return tuple(sorted(self._providers))

    def supports(self, method: str) -> bool:
        return method in self._providers

    def authorization_url(self, *, method: str, state_token: str) -> str:
        return self._provider(method).authorization_url(state_token=state_token)

    def verify(self, *, method: str, callback: Mapping[str, str]) -> Identity:
        identity = self._provider(method).verify(callback=callback)
        logger.info("identity_resolver: verified method=%s", method)
        return identity

    def _provider(self, method: str) -> IdentityProviderPort:
        provider = self._providers.get(method)
        if provider is None:
            available = ", ".join(self.methods) or "none"
            raise UnsupportedMethodError(f"Unsupported login method: {method}. Available: {available}.")
        return provider
