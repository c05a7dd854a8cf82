import json

import redis
from printcart.utils.retry import redis_retry
from printcart.utils.settings import REDIS_URL
from printcart.utils.logging import get_logger

logger = get_logger(__name__)


class RedisPriceCache:
    """
    -get(key) -> value | None (miss)
    -put(key, value, ttl)
    redis expires keys on its own (EX), nothing to clean up
    """

    def __init__(self, url: str | None = None, prefix: str = "vendor:price:", client=None):
        self.prefix = prefix
        self.redis = client or redis.Redis.from_url(
            url or REDIS_URL,
            decode_responses=True,
        )

    @redis_retry()
    def get(self, key: str):
        raw = self.redis.get(self.prefix + key)
        if raw is None:
            return None
        return json.loads(raw)

    @redis_retry()
    def put(self, key: str, value, ttl: int) -> None:
        logger.info(f"Cache vendor price {key} for {ttl}s")
        self.redis.set(
            name=self.prefix + key,
            value=json.dumps(value),
            ex=ttl,
        )
