# app/services/lock_service.py
import uuid

import redis
from redis.exceptions import RedisError
from tenacity import retry, stop_after_attempt, wait_exponential, retry_if_exception_type

from app.utils.settings import REDIS_URL, CART_LOCK_TTL_SECONDS
from app.utils.logging import get_logger

logger = get_logger(__name__)

#compare-and-delete in one lua call, redis runs the script atomically
#so nobody can slip in between GET and DEL
_RELEASE_LUA = """
if redis.call('GET', KEYS[1]) == ARGV[1] then
    return redis.call('DEL', KEYS[1])
else
    return 0
end
"""


#short backoff, the lock itself only lives a few seconds
def redis_retry():
    return retry(
        reraise=True,
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.05, min=0.05, max=0.2),
        retry=retry_if_exception_type(RedisError),
    )


class LockService:
    """
    Per-cart mutex so that two requests never run the
    read -> mutate -> recompute -> persist sequence on one cart at once.
    """

    def __init__(self, url: str | None = None, ttl: int = CART_LOCK_TTL_SECONDS):
        self.redis = redis.Redis.from_url(
            url or REDIS_URL,
            decode_responses=True,
        )
        self.ttl = ttl

    @staticmethod
    def _key(cart_id: int) -> str:
        return f"cart:{cart_id}:lock"

    @staticmethod
    def new_token() -> str:
        return uuid.uuid4().hex

    @redis_retry()
    def acquire_cart_lock(self, cart_id: int, token: str) -> bool:
        key = self._key(cart_id)
        logger.info(f"Acquire lock {key}")
        #SET cart:1:lock <token> NX EX 10
        return bool(
            self.redis.set(
                name=key,
                value=token,
                nx=True,
                ex=self.ttl,  # expires on its own if the holder dies
            )
        )

    @redis_retry()
    def release_cart_lock(self, cart_id: int, token: str) -> bool:
        key = self._key(cart_id)
        logger.info(f"Release lock {key}")
        res = self.redis.eval(_RELEASE_LUA, 1, key, token)
        return bool(res)
