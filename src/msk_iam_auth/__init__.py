"""AWS credential resolution for IAM authentication to Amazon MSK."""

from msk_iam_auth.credentials import Credentials, CredentialSource, NoCredentialsAvailable
from msk_iam_auth.options import ConfigurationResolver, DebugSettings
from msk_iam_auth.provider import IAMCredentialProvider

__all__ = [
    "ConfigurationResolver",
    "CredentialSource",
    "Credentials",
    "DebugSettings",
    "IAMCredentialProvider",
    "NoCredentialsAvailable",
]
