"""
Token revocation store.
"""
import redis

from fencemark.core.token_store import TokenRevocationStore, revoked_token_key


class BrokenRedis:
    def setex(self, *args):
        raise redis.ConnectionError("connection refused")

    def exists(self, *args):
        raise redis.ConnectionError("connection refused")


def test_revoke_and_check(fake_redis):
    store = TokenRevocationStore(fake_redis)

    assert store.revoke("jti-1", 900) is True
    assert store.is_revoked("jti-1") is True
    assert store.is_revoked("jti-2") is False
    assert fake_redis.ttls[revoked_token_key("jti-1")] == 900


def test_without_redis_nothing_is_revoked():
    store = TokenRevocationStore(None)
    assert store.revoke("jti-1", 900) is False
    assert store.is_revoked("jti-1") is False


def test_missing_jti(fake_redis):
    store = TokenRevocationStore(fake_redis)
    assert store.revoke("", 900) is False
    assert store.is_revoked(None) is False


def test_redis_errors_fail_open():
    store = TokenRevocationStore(BrokenRedis())
    assert store.revoke("jti-1", 900) is False
    assert store.is_revoked("jti-1") is False
