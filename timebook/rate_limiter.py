"""
Hybrid in-memory + Redis rate limiting for booking requests.

Counters live in process memory and are pushed to Redis every few seconds,
so several workers converge on a shared count without a Redis round trip per
request.
"""

import logging
import time
from threading import Lock
from typing import Optional

import redis
from fastapi import HTTPException, Request, status

from .config import (
    BOOKING_RATE_LIMIT,
    BOOKING_RATE_WINDOW_SECONDS,
    REDIS_DB,
    REDIS_HOST,
    REDIS_PASSWORD,
    REDIS_PORT,
    REDIS_SSL,
    REDIS_URL,
)

logger = logging.getLogger(__name__)

redis_client: Optional[redis.Redis] = None

SYNC_INTERVAL_SECONDS = 10
CLEANUP_INTERVAL_SECONDS = 60


def get_redis_client() -> redis.Redis:
    """Get or create the shared Redis client"""
    global redis_client

    if redis_client is None:
        options = {
            "decode_responses": True,
            "socket_connect_timeout": 5,
            "socket_timeout": 5,
            "retry_on_timeout": True,
            "health_check_interval": 30,
            "max_connections": 20,
        }
        try:
            if REDIS_URL:
                logger.info("📡 Connecting to Redis via REDIS_URL")
                client = redis.from_url(REDIS_URL, **options)
            else:
                logger.info(f"📡 Connecting to Redis at {REDIS_HOST}:{REDIS_PORT} (db {REDIS_DB})")
                client = redis.Redis(
                    host=REDIS_HOST,
                    port=REDIS_PORT,
                    password=REDIS_PASSWORD,
                    db=REDIS_DB,
                    ssl=REDIS_SSL,
                    **options,
                )
            client.ping()
        except Exception as e:
            logger.error(f"❌ Failed to connect to Redis: {e}")
            raise
        redis_client = client
        logger.info("Redis connected successfully")

    return redis_client


class HybridRateLimiter:
    """Fixed-window counter kept in memory and synced to Redis"""

    def __init__(self, sync_interval: int = SYNC_INTERVAL_SECONDS):
        self.sync_interval = sync_interval
        # key -> {"count", "reset_time", "last_sync"}
        self.windows: dict[str, dict] = {}
        self.lock = Lock()
        self.last_cleanup = 0

    def _cleanup(self, now: int) -> None:
        if now - self.last_cleanup < CLEANUP_INTERVAL_SECONDS:
            return
        expired = [k for k, w in self.windows.items() if now >= w["reset_time"]]
        for k in expired:
            del self.windows[k]
        self.last_cleanup = now

    def _load(self, key: str, now: int, window_seconds: int, client: redis.Redis) -> dict:
        try:
            count = client.get(key)
            ttl = client.ttl(key)
            if count and ttl > 0:
                return {"count": int(count), "reset_time": now + ttl, "last_sync": now}
        except redis.RedisError as e:
            logger.warning(f"⚠️ Failed to load {key} from Redis, using memory only: {e}")
        return {"count": 0, "reset_time": now + window_seconds, "last_sync": now}

    def hit(
        self, key: str, limit: int, window_seconds: int, client: redis.Redis
    ) -> tuple[bool, int, int]:
        """Count one request; returns (allowed, current_count, seconds_until_reset)"""
        now = int(time.time())

        with self.lock:
            self._cleanup(now)

            window = self.windows.get(key)
            if window is None:
                window = self._load(key, now, window_seconds, client)
                self.windows[key] = window

            if now >= window["reset_time"]:
                window.update(count=0, reset_time=now + window_seconds, last_sync=0)

            allowed = window["count"] < limit
            if allowed:
                window["count"] += 1

            if now - window["last_sync"] >= self.sync_interval:
                try:
                    client.set(key, window["count"], ex=window_seconds)
                    window["last_sync"] = now
                except redis.RedisError as e:
                    logger.warning(f"⚠️ Failed to sync {key} to Redis: {e}")

            return allowed, window["count"], max(0, window["reset_time"] - now)


limiter = HybridRateLimiter()


def client_ip(request: Request) -> str:
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


def create_rate_limiter(limit: int, window_seconds: int, key_prefix: str = "rate_limit"):
    """
    Create a per-IP rate limiting dependency

    Example usage:
        @router.post("/bookings", dependencies=[Depends(booking_rate_limit)])
        def book(...):
            ...
    """

    def rate_limiter(request: Request) -> None:
        key = f"{key_prefix}:{client_ip(request)}"
        try:
            client = get_redis_client()
        except Exception as e:
            # Fail closed
            logger.warning(f"🔒 Denying {key_prefix} request, rate limiter unavailable: {e}")
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail="Rate limiting service temporarily unavailable",
            ) from e

        allowed, count, retry_after = limiter.hit(key, limit, window_seconds, client)
        if not allowed:
            logger.warning(f"🚫 Rate limit exceeded for {key} - {count}/{limit}")
            raise HTTPException(
                status_code=429,
                detail={
                    "message": f"Rate limit exceeded. Maximum {limit} requests per {window_seconds} seconds.",
                    "retry_after": retry_after,
                },
                headers={"Retry-After": str(retry_after)},
            )
        request.state.rate_limit_remaining = limit - count

    return rate_limiter


booking_rate_limit = create_rate_limiter(
    BOOKING_RATE_LIMIT, BOOKING_RATE_WINDOW_SECONDS, key_prefix="booking"
)
