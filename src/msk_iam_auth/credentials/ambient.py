"""Credential sources backed by botocore's standard providers.

Each source owns a private botocore session and asks only the providers it
names, in order. Refreshable botocore credentials are frozen per call so a
caller never sees a key from one refresh paired with a token from another.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Mapping
from typing import Any, Callable, ClassVar

import botocore.session
from botocore.exceptions import BotoCoreError, ClientError, PartialCredentialsError

from msk_iam_auth.credentials.base import Credentials, CredentialSource
from msk_iam_auth.credentials.exceptions import CredentialSourceError

logger = logging.getLogger(__name__)

SessionFactory = Callable[[], Any]

# In-process equivalent of JVM system properties; hosts may populate it.
system_properties: dict[str, str] = {}

ACCESS_KEY_PROPERTY = "aws.accessKeyId"
SECRET_KEY_PROPERTY = "aws.secretKey"
SESSION_TOKEN_PROPERTY = "aws.sessionToken"


class BotocoreProviderSource(CredentialSource):
    """Resolves credentials through named botocore credential providers."""

    methods: ClassVar[tuple[str, ...]] = ()
    error_type: ClassVar[type[CredentialSourceError]] = CredentialSourceError
    # Ask botocore again on every resolve instead of keeping the loaded object.
    reload_each_call: ClassVar[bool] = False

    def __init__(self, session_factory: SessionFactory | None = None) -> None:
        self._session_factory = session_factory or botocore.session.Session
        self._session: Any = None
        self._loaded: Any = None
        self._session_lock = threading.Lock()
        self._load_lock = threading.Lock()

    def _get_session(self) -> Any:
        if self._session is not None:
            return self._session

        with self._session_lock:
            if self._session is not None:
                return self._session
            self._session = self._session_factory()
            return self._session

    def _load(self) -> Any:
        resolver = self._get_session().get_component("credential_provider")
        for method in self.methods:
            provider = resolver.get_provider(method)
            creds = provider.load()
            if creds is not None:
                logger.debug("%s loaded credentials via botocore provider %s", self.name, method)
                return creds
        return None

    def _load_cached(self) -> Any:
        if self.reload_each_call:
            return self._load()

        loaded = self._loaded
        if loaded is not None:
            return loaded

        with self._load_lock:
            if self._loaded is None:
                self._loaded = self._load()
            return self._loaded

    def _snapshot(self, frozen: Any) -> Credentials:
        if not frozen.access_key or not frozen.secret_key:
            raise self.error_type(
                f"{self.name} returned incomplete credentials",
                code="partial_credentials",
            )
        return Credentials(
            access_key_id=frozen.access_key,
            secret_access_key=frozen.secret_key,
            session_token=frozen.token or None,
        )

    def resolve(self) -> Credentials:
        try:
            loaded = self._load_cached()
            if loaded is None:
                raise self.error_type(
                    f"{self.name} found no credentials", code="no_credentials"
                )
            frozen = loaded.get_frozen_credentials()
        except PartialCredentialsError as exc:
            raise self.error_type(str(exc), code="partial_credentials") from exc
        except (BotoCoreError, ClientError) as exc:
            raise self.error_type(str(exc), code="backend_error") from exc

        return self._snapshot(frozen)

    def refresh(self) -> None:
        self._loaded = None

    def close(self) -> None:
        with self._session_lock:
            self._session = None
        self._loaded = None


class EnvironmentSource(BotocoreProviderSource):
    """AWS_ACCESS_KEY_ID / AWS_SECRET_ACCESS_KEY / AWS_SESSION_TOKEN."""

    methods = ("env",)
    reload_each_call = True


class WebIdentitySource(BotocoreProviderSource):
    """AWS_WEB_IDENTITY_TOKEN_FILE + AWS_ROLE_ARN exchanged through STS."""

    methods = ("assume-role-with-web-identity",)


class ContainerMetadataSource(BotocoreProviderSource):
    """ECS/EKS container endpoint when configured, otherwise EC2 instance metadata."""

    methods = ("container-role", "iam-role")


class SystemPropertiesSource(CredentialSource):
    """Reads ``aws.accessKeyId``/``aws.secretKey``/``aws.sessionToken``."""

    def __init__(self, properties: Mapping[str, str] | None = None) -> None:
        self._properties = system_properties if properties is None else properties

    def resolve(self) -> Credentials:
        access_key = self._properties.get(ACCESS_KEY_PROPERTY, "").strip()
        secret_key = self._properties.get(SECRET_KEY_PROPERTY, "").strip()
        if not access_key or not secret_key:
            raise CredentialSourceError(
                f"{ACCESS_KEY_PROPERTY} and {SECRET_KEY_PROPERTY} properties are required",
                code="no_credentials",
            )
        session_token = self._properties.get(SESSION_TOKEN_PROPERTY, "").strip()
        return Credentials(
            access_key_id=access_key,
            secret_access_key=secret_key,
            session_token=session_token or None,
        )

