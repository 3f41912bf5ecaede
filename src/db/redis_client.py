"""Redis connection and utilities."""

import time
import uuid

import redis

from src.config import RATE_LIMIT_WINDOW, REDIS_CONFIG


class RedisClient:
    def __init__(self):
        self.client = redis.Redis(**REDIS_CONFIG)

    def ping(self) -> bool:
        """Check the connection."""
        return bool(self.client.ping())

    def rate_limit_check(self, client_id: str, window: int = RATE_LIMIT_WINDOW) -> tuple[int, float]:
        """
        Record a hit for the client in its sliding window.

        Each hit is a member of a sorted set scored by its timestamp; hits older
        than the window are pruned before counting.

        Returns:
            Number of hits inside the window (this one included) and the
            timestamp of the oldest of them.
        """
        now = time.time()
        key = f"rate_limit:{client_id}"
        pipe = self.client.pipeline()
        pipe.zremrangebyscore(key, 0, now - window)
        pipe.zadd(key, {f"{now}:{uuid.uuid4().hex}": now})
        pipe.zcard(key)
        pipe.zrange(key, 0, 0, withscores=True)
        pipe.expire(key, window)
        _, _, count, oldest, _ = pipe.execute()
        oldest_ts = oldest[0][1] if oldest else now
        return int(count), float(oldest_ts)


# Singleton instance
redis_client = RedisClient()
