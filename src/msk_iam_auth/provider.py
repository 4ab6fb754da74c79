"""Credential provider for IAM authentication to Amazon MSK.

Built from the options of the login module configuration, for example::

    sasl.jaas.config = IAMLoginModule required awsProfileName=dev;

Supported options:

1. A credential profile: ``awsProfileName``.
2. An IAM role with optional session name and STS region:
   ``awsRoleArn``, ``awsRoleSessionName``, ``awsStsRegion``.
3. ``awsDebugCreds=true`` to log the caller identity of resolved credentials
   when DEBUG logging is enabled.

Explicit sources are tried first (profile, then role); the default discovery
chain is always the last resort.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import Any

from msk_iam_auth.credentials.base import Credentials, CredentialSource
from msk_iam_auth.credentials.chain import CredentialProviderChain, default_fallback_chain
from msk_iam_auth.debug import IdentityDebugVerifier
from msk_iam_auth.lifecycle import LifecycleManager
from msk_iam_auth.options import ConfigurationResolver, DebugSettings

logger = logging.getLogger(__name__)


class IAMCredentialProvider:
    """Resolves one credential triple per call from an ordered chain.

    Call :meth:`close` (or use the provider as a context manager) when the
    authentication context ends.
    """

    def __init__(
        self,
        sources: Sequence[CredentialSource] = (),
        debug_settings: DebugSettings | None = None,
    ) -> None:
        explicit = list(sources)
        self._debug_settings = debug_settings or DebugSettings()
        self._chain = CredentialProviderChain(
            [*explicit, self.default_provider()], name="CompositeCredentialChain"
        )
        self._lifecycle = LifecycleManager(explicit)
        self._verifier = IdentityDebugVerifier(self._debug_settings)

    @classmethod
    def from_options(cls, options: Mapping[str, Any]) -> "IAMCredentialProvider":
        return cls.from_resolver(ConfigurationResolver(options))

    @classmethod
    def from_resolver(cls, resolver: ConfigurationResolver) -> "IAMCredentialProvider":
        return cls(resolver.get_sources(), resolver.debug_settings())

    def default_provider(self) -> CredentialSource:
        return default_fallback_chain()

    @property
    def chain(self) -> CredentialProviderChain:
        return self._chain

    @property
    def should_debug_creds(self) -> bool:
        return self._debug_settings.enabled

    @property
    def sts_region(self) -> str:
        return self._debug_settings.sts_region

    def resolve(self) -> Credentials:
        credentials = self._chain.resolve()
        self._verifier.verify(credentials)
        return credentials

    def refresh(self) -> None:
        self._chain.refresh()

    def close(self) -> None:
        self._lifecycle.close()

    def __enter__(self) -> "IAMCredentialProvider":
        return self

    def __exit__(self, exc_type: Any, exc: Any, tb: Any) -> None:
        self.close()
