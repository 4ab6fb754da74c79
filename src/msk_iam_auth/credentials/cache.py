"""Single-entry credential cache with single-flight refresh."""

from __future__ import annotations

import threading
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable

from msk_iam_auth.credentials.base import Credentials


@dataclass(frozen=True)
class CacheEntry:
    credentials: Credentials
    cached_at: datetime

    @property
    def expiration(self) -> datetime | None:
        return self.credentials.expiration

    def is_expiring_soon(self, buffer_seconds: int) -> bool:
        exp = self.expiration
        if exp is None:
            return False
        if exp.tzinfo is None:
            exp = exp.replace(tzinfo=timezone.utc)
        return exp <= datetime.now(timezone.utc) + timedelta(seconds=buffer_seconds)

    @classmethod
    def from_credentials(cls, creds: Credentials) -> "CacheEntry":
        return cls(credentials=creds, cached_at=datetime.now(timezone.utc))


class CredentialCache:
    """Thread-safe holder for one set of temporary credentials.

    Reads are lock-free; a refresh runs under the lock so concurrent callers
    wait for a single backend call instead of issuing their own.
    """

    def __init__(self, refresh_buffer_seconds: int) -> None:
        self._refresh_buffer_seconds = refresh_buffer_seconds
        self._entry: CacheEntry | None = None
        self._lock = threading.Lock()

    def _fresh(self, entry: CacheEntry) -> bool:
        return not entry.is_expiring_soon(self._refresh_buffer_seconds)

    def get_or_refresh(self, refresh_fn: Callable[[], Credentials]) -> Credentials:
        entry = self._entry
        if entry is not None and self._fresh(entry):
            return entry.credentials

        with self._lock:
            entry = self._entry
            if entry is not None and self._fresh(entry):
                return entry.credentials

            creds = refresh_fn()
            self._entry = CacheEntry.from_credentials(creds)
            return creds

    def invalidate(self) -> None:
        self._entry = None
