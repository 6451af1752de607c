"""In-process token revocation registry (logout blocklist).

Revoked tokens are kept as raw strings. Nothing else ever removes them, so
:meth:`TokenRevocationRegistry.cleanup` runs on a timer and drops entries
whose own ``exp`` claim has passed: once a token has expired the codec
rejects it anyway and the entry is dead weight.

The registry lives on ``app.state`` and is handed to the auth dependencies
and the account service; it is never a module global. State is lost on
restart and is not shared between processes.
"""
import asyncio
import threading
from datetime import datetime, timezone
from typing import Optional, Set

from storefront.middleware.monitoring import record_revocation_registry_size
from storefront.utils.jwt_utils import TokenCodec
from storefront.utils.logger import logger


class TokenRevocationRegistry:
    """Process-wide set of revoked token strings with lazy expiry cleanup."""

    def __init__(self, codec: TokenCodec):
        self._codec = codec
        self._tokens: Set[str] = set()
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._tokens)

    def __contains__(self, token: str) -> bool:
        return self.is_revoked(token)

    def revoke(self, token: str) -> None:
        """Mark a token as revoked. Revoking twice is a no-op."""
        with self._lock:
            self._tokens.add(token)

    def is_revoked(self, token: str) -> bool:
        with self._lock:
            return token in self._tokens

    def cleanup(self, now: Optional[datetime] = None) -> int:
        """Drop entries that are expired or cannot be decoded.

        Works on a snapshot so concurrent :meth:`revoke` calls are never
        blocked for the duration of the scan. Only entries whose expiry is
        already in the past are discarded, so a token revoked mid-scan
        (which is necessarily still live) always survives.

        Returns:
            Number of entries removed.
        """
        now = now or datetime.now(timezone.utc)

        with self._lock:
            snapshot = list(self._tokens)

        stale = []
        for token in snapshot:
            expires_at = self._codec.read_expiry(token)
            if expires_at is None or expires_at <= now:
                stale.append(token)

        if stale:
            with self._lock:
                self._tokens.difference_update(stale)

        return len(stale)


async def run_periodic_cleanup(registry: TokenRevocationRegistry, interval_seconds: float) -> None:
    """Call ``registry.cleanup()`` every ``interval_seconds`` until cancelled."""
    while True:
        await asyncio.sleep(interval_seconds)
        try:
            removed = registry.cleanup()
        except Exception:
            logger.error("Revocation registry cleanup failed", exc_info=True)
            continue

        remaining = len(registry)
        record_revocation_registry_size(remaining)
        logger.info(
            "Revocation registry cleanup finished",
            extra={"action": "revocation_cleanup", "removed": removed, "remaining": remaining},
        )
