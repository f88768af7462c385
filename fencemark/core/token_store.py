"""
Access token revocation.

Logout writes the token's jti to Redis with a TTL equal to the token's
remaining lifetime; authenticated requests check for it.

TRADEOFF: When Redis is unavailable we fail open (tokens stay valid until
they expire), matching the rate limiter's choice of availability.
"""
from functools import lru_cache
from typing import Optional
import redis

from fencemark.config import get_settings
from fencemark.utils.logging import get_logger

logger = get_logger(__name__)


def revoked_token_key(jti: str) -> str:
    return f"revoked_token:{jti}"


class TokenRevocationStore:

    def __init__(self, client: Optional["redis.Redis"] = None):
        self.client = client

    def revoke(self, jti: str, ttl_seconds: int) -> bool:
        """Mark a token as revoked. Returns False if it could not be recorded."""
        if not jti or self.client is None:
            return False
        try:
            self.client.setex(revoked_token_key(jti), ttl_seconds, "1")
            return True
        except redis.RedisError as e:
            logger.error(f"Redis error revoking token: {e}")
            return False

    def is_revoked(self, jti: Optional[str]) -> bool:
        if not jti or self.client is None:
            return False
        try:
            return bool(self.client.exists(revoked_token_key(jti)))
        except redis.RedisError as e:
            logger.error(f"Redis error checking token revocation: {e}")
            return False


@lru_cache()
def get_revocation_store() -> TokenRevocationStore:
    settings = get_settings()
    if not settings.REDIS_ENABLED:
        logger.info("Token revocation disabled (REDIS_ENABLED=false)")
        return TokenRevocationStore(None)

    client = redis.from_url(
        settings.REDIS_URL,
        decode_responses=True,
        socket_connect_timeout=5
    )
    return TokenRevocationStore(client)
