"""Redis fixed-window counter used to throttle create-order calls per client."""

from time import time

import redis
import redis.asyncio as aioredis

from innovatex.common.logging import logger


class FixedWindowLimiter:
    """At most `max_requests` per client in each aligned `window_seconds` window."""

    def __init__(self, rdb: aioredis.Redis, max_requests: int, window_seconds: int, prefix: str = "ratelimit") -> None:
        self.rdb = rdb
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self.prefix = prefix

    def window_key(self, client_key: str, now: float) -> str:
        window_start = int(now // self.window_seconds) * self.window_seconds
        return f"{self.prefix}:{client_key}:{window_start}"

    async def allow(self, client_key: str) -> bool:
        """Count one request for `client_key`; False once the window is full.

        Redis errors let the request through so a cache outage cannot block
        checkout.
        """

        key = self.window_key(client_key, time())
        try:
            async with self.rdb.pipeline(transaction=True) as pipe:
                count, _ = await pipe.incr(key).expire(key, self.window_seconds).execute()
        except redis.RedisError as exc:
            logger.warning("rate_limit_check_failed: %s", exc)
            return True
        return int(count) <= self.max_requests
