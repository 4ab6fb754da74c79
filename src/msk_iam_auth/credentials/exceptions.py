"""Credential resolution errors."""

from __future__ import annotations

from collections.abc import Sequence


class CredentialError(Exception):
    """Base class for credential resolution errors."""

    def __init__(self, message: str, code: str = "credential_error") -> None:
        super().__init__(message)
        self.code = code


class CredentialSourceError(CredentialError):
    """Raised when a single credential source cannot produce credentials."""


class ProfileResolutionFailed(CredentialSourceError):
    """Raised when a named or default profile cannot be resolved."""


class RoleAssumptionFailed(CredentialSourceError):
    """Raised when STS rejects or cannot complete an AssumeRole exchange."""


class IdentityVerificationFailed(CredentialError):
    """Raised when the GetCallerIdentity debug call fails."""


class ResourceReleaseFailed(CredentialError):
    """Raised when a source fails to release the clients it holds."""


class NoCredentialsAvailable(CredentialError):
    """Raised when every source in a chain failed."""

    def __init__(self, failures: Sequence[tuple[str, str]]) -> None:
        self.failures = tuple(failures)
        details = "; ".join(f"{name}: {reason}" for name, reason in self.failures)
        super().__init__(
            f"Unable to load AWS credentials from any source in the chain: [{details}]",
            code="no_credentials",
        )
