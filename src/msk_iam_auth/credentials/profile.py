"""Named-profile credential source.

Only profile-driven botocore providers are consulted, so a profile that
cannot be resolved fails loudly instead of silently picking up environment
or instance-metadata credentials.
"""

from __future__ import annotations

import logging
from typing import Any

import botocore.session

from msk_iam_auth.credentials.ambient import BotocoreProviderSource, SessionFactory
from msk_iam_auth.credentials.base import Credentials
from msk_iam_auth.credentials.exceptions import ProfileResolutionFailed

logger = logging.getLogger(__name__)


class ProfileSource(BotocoreProviderSource):
    """Credentials from a profile in the shared credentials/config files.

    With no ``profile_name`` the standard discovery applies (``AWS_PROFILE``,
    then ``default``).
    """

    closeable = True
    methods = (
        "assume-role",
        "assume-role-with-web-identity",
        "sso",
        "shared-credentials-file",
        "custom-process",
        "config-file",
    )
    error_type = ProfileResolutionFailed

    def __init__(
        self,
        profile_name: str | None = None,
        session_factory: SessionFactory | None = None,
    ) -> None:
        self._profile_name = profile_name
        super().__init__(session_factory or self._create_session)

    @property
    def profile_name(self) -> str | None:
        return self._profile_name

    def _create_session(self) -> Any:
        return botocore.session.Session(profile=self._profile_name)

    def _profile_config(self) -> dict[str, Any]:
        session = self._get_session()
        profiles = session.full_config.get("profiles", {})
        return profiles.get(session.profile or "default", {})

    def _load(self) -> Any:
        logger.debug("Resolving credentials from profile %s", self._profile_name or "(default)")
        if self._profile_name is not None:
            available = self._get_session().available_profiles
            if self._profile_name not in available:
                raise ProfileResolutionFailed(
                    f"Profile {self._profile_name!r} was not found", code="profile_not_found"
                )
        return super()._load()

    def _snapshot(self, frozen: Any) -> Credentials:
        creds = super()._snapshot(frozen)
        if creds.session_token is None and self._profile_config().get("aws_session_token"):
            # The profile declares a token but resolution dropped it.
            raise ProfileResolutionFailed(
                f"Profile {self._profile_name or 'default'!r} declares aws_session_token "
                "but none was resolved",
                code="missing_session_token",
            )
        return creds
