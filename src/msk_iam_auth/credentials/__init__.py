"""AWS credential sources and chains."""

from msk_iam_auth.credentials.ambient import (
    ContainerMetadataSource,
    EnvironmentSource,
    SystemPropertiesSource,
    WebIdentitySource,
)
from msk_iam_auth.credentials.base import Credentials, CredentialSource, StaticCredentialSource
from msk_iam_auth.credentials.chain import CredentialProviderChain, default_fallback_chain
from msk_iam_auth.credentials.exceptions import (
    CredentialError,
    CredentialSourceError,
    IdentityVerificationFailed,
    NoCredentialsAvailable,
    ProfileResolutionFailed,
    ResourceReleaseFailed,
    RoleAssumptionFailed,
)
from msk_iam_auth.credentials.profile import ProfileSource
from msk_iam_auth.credentials.sts_provider import AssumedRoleSource

__all__ = [
    "AssumedRoleSource",
    "ContainerMetadataSource",
    "CredentialError",
    "CredentialProviderChain",
    "CredentialSource",
    "CredentialSourceError",
    "Credentials",
    "EnvironmentSource",
    "IdentityVerificationFailed",
    "NoCredentialsAvailable",
    "ProfileResolutionFailed",
    "ProfileSource",
    "ResourceReleaseFailed",
    "RoleAssumptionFailed",
    "StaticCredentialSource",
    "SystemPropertiesSource",
    "WebIdentitySource",
    "default_fallback_chain",
]
