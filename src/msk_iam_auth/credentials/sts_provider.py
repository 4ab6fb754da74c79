"""STS AssumeRole credential source.

The STS client signs with botocore's own default credentials; the assumed
role's temporary credentials are cached until shortly before expiry and
re-exchanged on the next resolve() after that.
"""

from __future__ import annotations

import logging
import threading
from typing import Any

import botocore.session
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from msk_iam_auth.config import load_settings
from msk_iam_auth.credentials.base import Credentials, CredentialSource
from msk_iam_auth.credentials.cache import CredentialCache
from msk_iam_auth.credentials.exceptions import ResourceReleaseFailed, RoleAssumptionFailed

logger = logging.getLogger(__name__)

DEFAULT_ROLE_SESSION_NAME = "aws-msk-iam-auth"
DEFAULT_STS_REGION = "aws-global"


class AssumedRoleSource(CredentialSource):
    """Thread-safe source for temporary credentials from sts:AssumeRole."""

    closeable = True

    def __init__(
        self,
        role_arn: str,
        session_name: str = DEFAULT_ROLE_SESSION_NAME,
        region: str = DEFAULT_STS_REGION,
        duration_seconds: int | None = None,
    ) -> None:
        self._role_arn = role_arn
        self._session_name = session_name
        self._region = region
        self._duration_seconds = duration_seconds
        self._cache: CredentialCache | None = None
        self._client: Any = None
        self._lock = threading.Lock()

    @property
    def role_arn(self) -> str:
        return self._role_arn

    @property
    def session_name(self) -> str:
        return self._session_name

    @property
    def region(self) -> str:
        return self._region

    def __repr__(self) -> str:
        return (
            f"AssumedRoleSource(role_arn={self._role_arn!r}, "
            f"session_name={self._session_name!r}, region={self._region!r})"
        )

    def _get_client(self) -> Any:
        if self._client is not None:
            return self._client

        with self._lock:
            if self._client is not None:
                return self._client

            sts_settings = load_settings().sts
            session = botocore.session.get_session()
            self._client = session.create_client(
                "sts",
                region_name=self._region,
                config=Config(
                    connect_timeout=sts_settings.connect_timeout,
                    read_timeout=sts_settings.read_timeout,
                    retries={"max_attempts": sts_settings.max_attempts},
                ),
            )
            logger.info("STS client initialized (region=%s)", self._region)
            return self._client

    def _get_cache(self) -> CredentialCache:
        if self._cache is not None:
            return self._cache

        with self._lock:
            if self._cache is None:
                self._cache = CredentialCache(
                    refresh_buffer_seconds=load_settings().credentials.refresh_buffer_seconds,
                )
            return self._cache

    def resolve(self) -> Credentials:
        # Settings are first read here, never at construction.
        return self._get_cache().get_or_refresh(self._assume_role_sync)

    def refresh(self) -> None:
        if self._cache is not None:
            self._cache.invalidate()

    def close(self) -> None:
        with self._lock:
            client, self._client = self._client, None
        if client is None:
            return
        try:
            client.close()
        except Exception as exc:
            raise ResourceReleaseFailed(
                f"Failed to close STS client for {self._role_arn}: {exc}",
                code="sts_client_close",
            ) from exc

    def _assume_role_sync(self) -> Credentials:
        params: dict[str, Any] = {
            "RoleArn": self._role_arn,
            "RoleSessionName": self._session_name,
            "DurationSeconds": self._duration_seconds
            or load_settings().credentials.role_duration_seconds,
        }

        try:
            response = self._get_client().assume_role(**params)
        except ClientError as exc:
            error_code = exc.response.get("Error", {}).get("Code", "Unknown")
            error_message = exc.response.get("Error", {}).get("Message", str(exc))

            code_map = {
                "AccessDenied": "access_denied",
                "ValidationError": "invalid_request",
                "MalformedPolicyDocument": "policy_error",
                "PackedPolicyTooLarge": "policy_too_large",
                "ExpiredTokenException": "token_expired",
                "RegionDisabledException": "region_disabled",
            }

            logger.warning(
                "STS failed: role=%s, session=%s, error=%s: %s",
                self._role_arn,
                self._session_name,
                error_code,
                error_message,
            )
            raise RoleAssumptionFailed(
                error_message, code=code_map.get(error_code, "sts_error")
            ) from exc
        except BotoCoreError as exc:
            logger.warning("STS unreachable: role=%s, error=%s", self._role_arn, exc)
            raise RoleAssumptionFailed(str(exc), code="sts_unavailable") from exc

        creds = response["Credentials"]
        logger.info("Assumed role: %s, session=%s", self._role_arn, self._session_name)

        return Credentials(
            access_key_id=creds["AccessKeyId"],
            secret_access_key=creds["SecretAccessKey"],
            session_token=creds["SessionToken"],
            expiration=creds["Expiration"],
        )
