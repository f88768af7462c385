"""
Rate Limiting Middleware

Per-organization rate limiting using Redis.

ARCHITECTURE: Token bucket stored in Redis. Authenticated requests share
their organization's bucket (from the token's organization_id claim);
anonymous requests are bucketed by client IP.

PRODUCTION NOTES:
- Redis is single point of failure (use Redis Cluster/Sentinel)
- When Redis is unreachable requests are allowed (availability first)
"""
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse
from typing import Optional
import redis
import time

from fencemark.config import get_settings
from fencemark.core.security import decode_access_token
from fencemark.utils.logging import get_logger

logger = get_logger(__name__)
settings = get_settings()


def request_token(request: Request) -> Optional[str]:
    authorization = request.headers.get("Authorization", "")
    scheme, _, credentials = authorization.partition(" ")
    if scheme.lower() == "bearer" and credentials:
        return credentials
    return request.cookies.get(settings.AUTH_COOKIE_NAME)


def rate_limit_identifier(request: Request) -> str:
    """
    Bucket key for a request: the organization when the token names one,
    otherwise the client address.

    The token is only decoded here, not checked against revocation; that
    happens in the endpoint dependencies.
    """
    token = request_token(request)
    if token:
        payload = decode_access_token(token)
        if payload and payload.get("organization_id"):
            return f"org:{payload['organization_id']}"

    client_host = request.client.host if request.client else "unknown"
    return f"ip:{client_host}"


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Token bucket rate limiter per organization."""

    def __init__(self, app, redis_client: Optional["redis.Redis"] = None):
        super().__init__(app)

        self.rate_limit = settings.RATE_LIMIT_PER_MINUTE
        self.burst = settings.RATE_LIMIT_BURST
        self.redis_client = redis_client
        self.redis_available = redis_client is not None

        if self.redis_client is None and settings.RATE_LIMIT_ENABLED and settings.REDIS_ENABLED:
            try:
                self.redis_client = redis.from_url(
                    settings.REDIS_URL,
                    decode_responses=True,
                    socket_connect_timeout=5
                )
                self.redis_client.ping()
                self.redis_available = True
                logger.info("Redis connection established for rate limiting")
            except (redis.ConnectionError, redis.TimeoutError) as e:
                logger.error(f"Redis connection failed: {e}")
                self.redis_available = False
        elif self.redis_client is None:
            logger.info("Rate limiting disabled by configuration")

        self.excluded_paths = [
            "/docs",
            "/redoc",
            "/openapi.json",
            "/health",
        ]

    async def dispatch(self, request: Request, call_next):
        if any(request.url.path.startswith(path) for path in self.excluded_paths):
            return await call_next(request)

        # TRADEOFF: We choose availability over strict rate limiting
        if not self.redis_available:
            return await call_next(request)

        identifier = rate_limit_identifier(request)
        allowed, retry_after = self._check_rate_limit(identifier)

        if not allowed:
            logger.warning(
                f"Rate limit exceeded for {identifier}",
                extra={"path": request.url.path, "method": request.method}
            )
            return JSONResponse(
                status_code=429,
                content={
                    "error": "Rate limit exceeded. Please try again later.",
                    "retry_after": retry_after
                },
                headers={"Retry-After": str(retry_after)}
            )

        return await call_next(request)

    def _check_rate_limit(self, identifier: str) -> tuple[bool, int]:
        """
        Check if request is allowed under rate limit.

        Returns: (allowed: bool, retry_after: int)

        Uses token bucket algorithm:
        - Bucket holds max tokens (burst capacity)
        - Tokens added at fixed rate
        - Each request consumes one token
        """
        key = f"rate_limit:{identifier}"
        key_timestamp = f"{key}:timestamp"
        per_second = self.rate_limit / 60.0

        try:
            current_tokens = self.redis_client.get(key)
            last_update = self.redis_client.get(key_timestamp)

            now = time.time()

            if current_tokens is None:
                # First request - initialize bucket
                self.redis_client.setex(key, 60, self.burst - 1)
                self.redis_client.setex(key_timestamp, 60, now)
                return True, 0

            current_tokens = float(current_tokens)
            last_update = float(last_update) if last_update else now

            elapsed = now - last_update
            new_tokens = min(self.burst, current_tokens + elapsed * per_second)

            if new_tokens >= 1:
                new_tokens -= 1
                self.redis_client.setex(key, 60, new_tokens)
                self.redis_client.setex(key_timestamp, 60, now)
                return True, 0

            tokens_needed = 1 - new_tokens
            retry_after = int((tokens_needed / per_second) + 1)
            return False, retry_after

        except redis.RedisError as e:
            logger.error(f"Redis error in rate limiting: {e}")
            return True, 0
