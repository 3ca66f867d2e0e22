"""Redis cache of successful create-order responses keyed by idempotency key."""

import json

import redis
import redis.asyncio as aioredis

from innovatex.common.logging import logger


def idempotency_cache_key(customer_id: str, idempotency_key: str) -> str:
    # Scope by customer to avoid cross-customer key collisions.
    return f"idempotency:payment-order:{customer_id}:{idempotency_key}"


class IdempotencyCache:
    """Best-effort response cache; read/write failures are logged and ignored."""

    def __init__(self, rdb: aioredis.Redis, ttl_seconds: int) -> None:
        self.rdb = rdb
        self.ttl_seconds = ttl_seconds

    async def get(self, key: str) -> dict | None:
        try:
            cached = await self.rdb.get(key)
            if cached:
                return json.loads(cached)
        except (redis.RedisError, ValueError) as exc:
            logger.warning("idempotency_cache_read_failed: %s", exc)
        return None

    async def put(self, key: str, payload: dict) -> None:
        try:
            await self.rdb.setex(key, self.ttl_seconds, json.dumps(payload))
        except redis.RedisError as exc:
            logger.warning("idempotency_cache_write_failed: %s", exc)
