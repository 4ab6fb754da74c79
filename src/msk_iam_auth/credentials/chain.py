"""Ordered credential chains: first source to produce credentials wins."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from msk_iam_auth.credentials.ambient import (
    ContainerMetadataSource,
    EnvironmentSource,
    SystemPropertiesSource,
    WebIdentitySource,
)
from msk_iam_auth.credentials.base import Credentials, CredentialSource
from msk_iam_auth.credentials.exceptions import NoCredentialsAvailable
from msk_iam_auth.credentials.profile import ProfileSource

logger = logging.getLogger(__name__)


class CredentialProviderChain(CredentialSource):
    """Asks each source in a fixed order and returns the first success.

    A failing source is logged and skipped; nothing is merged across
    sources and a failed source is not retried within the same call.
    """

    def __init__(self, sources: Sequence[CredentialSource], name: str | None = None) -> None:
        if not sources:
            raise ValueError("A credential chain needs at least one source")
        self._sources: tuple[CredentialSource, ...] = tuple(sources)
        self._name = name or type(self).__name__

    @property
    def name(self) -> str:
        return self._name

    @property
    def sources(self) -> tuple[CredentialSource, ...]:
        return self._sources

    def resolve(self) -> Credentials:
        failures: list[tuple[str, str]] = []
        for source in self._sources:
            try:
                creds = source.resolve()
            except Exception as exc:
                logger.debug("Unable to load credentials from %s: %s", source.name, exc)
                failures.append((source.name, str(exc)))
                continue

            if creds is None:
                logger.debug("Credential source %s returned nothing", source.name)
                failures.append((source.name, "returned no credentials"))
                continue

            logger.debug("Loaded credentials from %s", source.name)
            return creds

        raise NoCredentialsAvailable(failures)

    def refresh(self) -> None:
        for source in self._sources:
            try:
                source.refresh()
            except Exception as exc:
                logger.debug("Unable to refresh credential source %s: %s", source.name, exc)


def default_fallback_chain() -> CredentialProviderChain:
    """Standard discovery, consulted after every explicitly configured source."""
    return CredentialProviderChain(
        [
            EnvironmentSource(),
            SystemPropertiesSource(),
            WebIdentitySource(),
            ProfileSource(),
            ContainerMetadataSource(),
        ],
        name="DefaultFallbackChain",
    )
