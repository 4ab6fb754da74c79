"""Credential value type and the source capability every backend implements."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import ClassVar


@dataclass(frozen=True)
class Credentials:
    """Immutable AWS credential snapshot.

    Both halves of the key pair are required, so a partially populated
    value cannot be constructed.
    """

    access_key_id: str
    secret_access_key: str
    session_token: str | None = None
    expiration: datetime | None = None

    def __post_init__(self) -> None:
        if not self.access_key_id or not self.secret_access_key:
            raise ValueError("access_key_id and secret_access_key are both required")

    def __repr__(self) -> str:
        expiration = self.expiration.isoformat() if self.expiration else None
        return (
            f"Credentials(access_key_id={self.access_key_id[:8]}***, "
            f"expiration={expiration})"
        )


class CredentialSource(ABC):
    """A backend that yields credentials or raises.

    ``closeable`` declares whether the source holds clients or sessions that
    must be released with :meth:`close`.
    """

    closeable: ClassVar[bool] = False

    @property
    def name(self) -> str:
        return type(self).__name__

    @abstractmethod
    def resolve(self) -> Credentials:
        """Return credentials or raise a ``CredentialError``."""

    def refresh(self) -> None:
        """Forget cached state so the next resolve() re-checks validity."""

    def close(self) -> None:
        """Release held resources. Only called when ``closeable`` is set."""


@dataclass(frozen=True)
class StaticCredentialSource(CredentialSource):
    """Holds a single resolved snapshot. No refresh, nothing to close."""

    credentials: Credentials

    def resolve(self) -> Credentials:
        return self.credentials
