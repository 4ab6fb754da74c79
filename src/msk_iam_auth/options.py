"""Interpretation of the IAM login module options.

Options arrive as a flat mapping (for example from a SASL JAAS line such as
``awsProfileName=dev awsRoleArn=arn:aws:iam::123:role/x``). The recognized
keys are listed below; anything else is ignored.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from types import MappingProxyType
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from msk_iam_auth.credentials.base import CredentialSource
from msk_iam_auth.credentials.profile import ProfileSource
from msk_iam_auth.credentials.sts_provider import (
    DEFAULT_ROLE_SESSION_NAME,
    DEFAULT_STS_REGION,
    AssumedRoleSource,
)

logger = logging.getLogger(__name__)

AWS_PROFILE_NAME_KEY = "awsProfileName"
AWS_ROLE_ARN_KEY = "awsRoleArn"
AWS_ROLE_SESSION_KEY = "awsRoleSessionName"
AWS_STS_REGION_KEY = "awsStsRegion"
AWS_DEBUG_CREDS_KEY = "awsDebugCreds"


class CredentialOptions(BaseModel):
    """Recognized options; unknown keys are dropped."""

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    profile_name: str | None = Field(default=None, alias=AWS_PROFILE_NAME_KEY)
    role_arn: str | None = Field(default=None, alias=AWS_ROLE_ARN_KEY)
    role_session_name: str | None = Field(default=None, alias=AWS_ROLE_SESSION_KEY)
    sts_region: str | None = Field(default=None, alias=AWS_STS_REGION_KEY)
    debug_creds: str | None = Field(default=None, alias=AWS_DEBUG_CREDS_KEY)

    @field_validator("*", mode="before")
    @classmethod
    def _coerce_to_str(cls, value: Any) -> str | None:
        if value is None or isinstance(value, str):
            return value
        return str(value)


class DebugSettings(BaseModel):
    model_config = ConfigDict(frozen=True)

    enabled: bool = False
    sts_region: str = DEFAULT_STS_REGION


class ConfigurationResolver:
    """Turns an option mapping into explicit credential sources.

    Sources are returned in precedence order: profile first, then role.
    Missing or malformed values never raise here; they surface when the
    source is asked for credentials.
    """

    def __init__(self, options: Mapping[str, Any]) -> None:
        self._raw = MappingProxyType(dict(options))
        self._options = CredentialOptions.model_validate(dict(self._raw))
        logger.debug("Number of options to configure credential provider %d", len(self._raw))

    @property
    def options(self) -> CredentialOptions:
        return self._options

    def get_sources(self) -> list[CredentialSource]:
        sources: list[CredentialSource] = []
        profile = self._get_profile_source()
        if profile is not None:
            sources.append(profile)
        role = self._get_role_source()
        if role is not None:
            sources.append(role)
        return sources

    def should_debug_creds(self) -> bool:
        # Only the exact lowercase literal enables debugging.
        return self._options.debug_creds == "true"

    def get_sts_region(self) -> str:
        if self._options.sts_region is None:
            return DEFAULT_STS_REGION
        return self._options.sts_region

    def debug_settings(self) -> DebugSettings:
        return DebugSettings(enabled=self.should_debug_creds(), sts_region=self.get_sts_region())

    def _get_profile_source(self) -> ProfileSource | None:
        profile_name = self._options.profile_name
        if profile_name is None:
            return None
        logger.debug("Profile name %s", profile_name)
        return self.create_profile_source(profile_name)

    def _get_role_source(self) -> AssumedRoleSource | None:
        role_arn = self._options.role_arn
        if role_arn is None:
            return None
        logger.debug("Role ARN %s", role_arn)
        session_name = self._options.role_session_name
        if session_name is None:
            session_name = DEFAULT_ROLE_SESSION_NAME
        return self.create_role_source(role_arn, session_name, self.get_sts_region())

    def create_profile_source(self, profile_name: str) -> ProfileSource:
        return ProfileSource(profile_name)

    def create_role_source(
        self, role_arn: str, session_name: str, sts_region: str
    ) -> AssumedRoleSource:
        return AssumedRoleSource(role_arn, session_name=session_name, region=sts_region)
