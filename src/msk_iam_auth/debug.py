"""Optional GetCallerIdentity check used to debug which principal was resolved."""

from __future__ import annotations

import logging
from typing import Any, Callable

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from msk_iam_auth.config import load_settings
from msk_iam_auth.credentials.base import Credentials, CredentialSource, StaticCredentialSource
from msk_iam_auth.credentials.exceptions import IdentityVerificationFailed
from msk_iam_auth.options import DebugSettings

logger = logging.getLogger(__name__)

ClientFactory = Callable[[CredentialSource, str], Any]


def create_sts_client(source: CredentialSource, region: str) -> Any:
    """Build a fresh STS client signed with whatever ``source`` resolves to."""
    settings = load_settings()
    creds = source.resolve()
    session = boto3.session.Session(
        aws_access_key_id=creds.access_key_id,
        aws_secret_access_key=creds.secret_access_key,
        aws_session_token=creds.session_token,
        region_name=region,
    )
    return session.client(
        "sts",
        config=Config(
            connect_timeout=settings.sts.connect_timeout,
            read_timeout=settings.sts.read_timeout,
            retries={"max_attempts": settings.sts.max_attempts},
        ),
    )


class IdentityDebugVerifier:
    """Logs the caller identity of freshly resolved credentials.

    Only active when debugging was requested and DEBUG logging is on.
    Failures are logged and never reach the caller.
    """

    def __init__(
        self,
        settings: DebugSettings,
        client_factory: ClientFactory | None = None,
    ) -> None:
        self._settings = settings
        self._client_factory = client_factory or create_sts_client

    @property
    def active(self) -> bool:
        return self._settings.enabled and logger.isEnabledFor(logging.DEBUG)

    def verify(self, credentials: Credentials) -> None:
        if not self.active:
            return
        try:
            identity = self.get_caller_identity(credentials)
        except Exception as exc:
            logger.debug("Unable to verify the identity of the credentials: %s", exc)
            return
        logger.debug("The identity of the credentials is %s", identity)

    def get_caller_identity(self, credentials: Credentials) -> dict[str, Any]:
        client = self._client_factory(
            StaticCredentialSource(credentials), self._settings.sts_region
        )
        try:
            response = client.get_caller_identity()
        except ClientError as exc:
            error = exc.response.get("Error", {})
            raise IdentityVerificationFailed(
                error.get("Message", str(exc)), code=error.get("Code", "sts_error")
            ) from exc
        except BotoCoreError as exc:
            raise IdentityVerificationFailed(str(exc), code="sts_unavailable") from exc
        finally:
            client.close()

        return {key: response.get(key) for key in ("UserId", "Account", "Arn")}
