"""Release of resource-holding credential sources."""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable

from msk_iam_auth.credentials.base import CredentialSource

logger = logging.getLogger(__name__)


class LifecycleManager:
    """Closes every closeable source exactly once.

    A source that fails to close is logged and does not stop the others
    from being closed.
    """

    def __init__(self, sources: Iterable[CredentialSource]) -> None:
        self._closeables = tuple(source for source in sources if source.closeable)
        self._closed = False
        self._lock = threading.Lock()

    @property
    def closeables(self) -> tuple[CredentialSource, ...]:
        return self._closeables

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        with self._lock:
            if self._closed:
                return
            self._closed = True

        for source in self._closeables:
            try:
                source.close()
            except Exception:
                logger.warning("Error closing credential source %s", source.name, exc_info=True)
