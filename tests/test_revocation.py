"""Tests for the token revocation registry"""
import asyncio
import threading
from datetime import datetime, timedelta, timezone

from prometheus_client import REGISTRY

from storefront.utils.jwt_utils import TokenCodec
from storefront.utils.revocation import TokenRevocationRegistry, run_periodic_cleanup


def _token(codec: TokenCodec, issued_at: datetime = None) -> str:
    return codec.issue("user-1", "a@x.com", "a", "ADMIN", now=issued_at)


def _expired(codec: TokenCodec) -> str:
    return _token(codec, datetime.now(timezone.utc) - timedelta(days=1))


def test_revoke_and_lookup(codec: TokenCodec, registry: TokenRevocationRegistry):
    token = _token(codec)
    assert registry.is_revoked(token) is False

    registry.revoke(token)
    assert registry.is_revoked(token) is True
    assert token in registry


def test_revoke_is_idempotent(codec: TokenCodec, registry: TokenRevocationRegistry):
    token = _token(codec)
    registry.revoke(token)
    registry.revoke(token)
    assert len(registry) == 1


def test_registries_are_independent(codec: TokenCodec):
    first = TokenRevocationRegistry(codec)
    second = TokenRevocationRegistry(codec)
    token = _token(codec)

    first.revoke(token)
    assert second.is_revoked(token) is False


def test_revoked_token_still_decodes(codec: TokenCodec, registry: TokenRevocationRegistry):
    """Revocation is tracked separately; the codec alone still accepts the token"""
    token = _token(codec)
    registry.revoke(token)
    assert codec.decode(token).sub == "user-1"


def test_cleanup_removes_expired_and_undecodable(codec: TokenCodec, registry: TokenRevocationRegistry):
    live = _token(codec)
    expired = _expired(codec)
    registry.revoke(live)
    registry.revoke(expired)
    registry.revoke("garbage")

    removed = registry.cleanup()

    assert removed == 2
    assert registry.is_revoked(live) is True
    assert registry.is_revoked(expired) is False
    assert registry.is_revoked("garbage") is False


def test_cleanup_keeps_future_expiry_regardless_of_signature(codec: TokenCodec, registry: TokenRevocationRegistry):
    foreign = TokenCodec("some-other-secret")
    live_foreign = _token(foreign)
    expired_foreign = _expired(foreign)
    registry.revoke(live_foreign)
    registry.revoke(expired_foreign)

    registry.cleanup()

    assert registry.is_revoked(live_foreign) is True
    assert registry.is_revoked(expired_foreign) is False


def test_cleanup_uses_given_clock(codec: TokenCodec, registry: TokenRevocationRegistry):
    token = _token(codec)
    registry.revoke(token)

    assert registry.cleanup(now=datetime.now(timezone.utc)) == 0
    assert registry.cleanup(now=datetime.now(timezone.utc) + timedelta(hours=2)) == 1
    assert len(registry) == 0


def test_cleanup_on_empty_registry(registry: TokenRevocationRegistry):
    assert registry.cleanup() == 0


def test_concurrent_revocations_survive_cleanup(codec: TokenCodec, registry: TokenRevocationRegistry):
    for _ in range(50):
        registry.revoke(_expired(codec))
    live_tokens = [_token(codec) for _ in range(200)]

    def revoke_all():
        for token in live_tokens:
            registry.revoke(token)

    writer = threading.Thread(target=revoke_all)
    writer.start()
    while writer.is_alive():
        registry.cleanup()
    writer.join()
    registry.cleanup()

    assert len(registry) == len(live_tokens)
    assert all(registry.is_revoked(token) for token in live_tokens)


def test_periodic_cleanup_runs_until_cancelled(codec: TokenCodec, registry: TokenRevocationRegistry):
    registry.revoke(_expired(codec))
    live = _token(codec)
    registry.revoke(live)

    async def scenario():
        task = asyncio.create_task(run_periodic_cleanup(registry, 0.01))
        await asyncio.sleep(0.1)
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        return task.cancelled()

    assert asyncio.run(scenario()) is True
    assert len(registry) == 1
    assert registry.is_revoked(live)


def test_periodic_cleanup_updates_revoked_tokens_gauge(codec: TokenCodec, registry: TokenRevocationRegistry):
    registry.revoke(_expired(codec))
    registry.revoke(_expired(codec))
    registry.revoke(_token(codec))

    async def scenario():
        task = asyncio.create_task(run_periodic_cleanup(registry, 0.01))
        await asyncio.sleep(0.1)
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass

    asyncio.run(scenario())
    assert REGISTRY.get_sample_value("storefront_revoked_tokens") == 1
