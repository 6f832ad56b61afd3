import uuid
from contextlib import contextmanager
from typing import Iterator

import redis
from redis.exceptions import RedisError
from tenacity import Retrying, retry_if_result, stop_after_delay, wait_fixed

from app.domain.errors import ConflictError
from app.utils.retry import redis_retry
from app.utils.settings import REDIS_URL, CART_LOCK_TTL_SECONDS, CART_LOCK_WAIT_SECONDS
from app.utils.logging import get_logger

logger = get_logger(__name__)

#LUA porownaj i usun, atomicity
_RELEASE_LUA = """
if redis.call('GET', KEYS[1]) == ARGV[1] then
    return redis.call('DEL', KEYS[1])
else
    return 0
end
"""

#redis wykonuje skrypt lua atomowo, nikt nie wcisnie sie miedzy GET a DEL
#wiec zwalniamy tylko wlasny lock (token), nigdy cudzy po wygasnieciu TTL


class LockService:
    """
    -lock na agregat koszyka (cart + cart items) jednego usera
    -klucz per koszyk, nigdy globalny, inne koszyki nie czekaja
    -zwalnianie locka tokenem przez lua
    """

    def __init__(
        self,
        url: str | None = None,
        client: redis.Redis | None = None,
        ttl: int = CART_LOCK_TTL_SECONDS,
        wait_seconds: float = CART_LOCK_WAIT_SECONDS,
        poll_interval: float = 0.05,
    ):
        self.redis = client or redis.Redis.from_url(
            url or REDIS_URL,
            decode_responses=True,
        )
        self.ttl = ttl
        self.wait_seconds = wait_seconds
        self.poll_interval = poll_interval

    @staticmethod
    def cart_key(user_id: int) -> str:
        return f"cart:{user_id}:lock"

    @redis_retry()
    def acquire_cart_lock(self, user_id: int, token: str) -> bool:
        key = self.cart_key(user_id)
        #SET cart:1:lock "<token>" NX EX 30
        return bool(self.redis.set(name=key, value=token, nx=True, ex=self.ttl))

    @redis_retry()
    def release_cart_lock(self, user_id: int, token: str) -> bool:
        key = self.cart_key(user_id)
        res = self.redis.eval(_RELEASE_LUA, 1, key, token)
        return bool(res)

    def _wait_for_lock(self, user_id: int, token: str) -> bool:
        retryer = Retrying(
            stop=stop_after_delay(self.wait_seconds),
            wait=wait_fixed(self.poll_interval),
            retry=retry_if_result(lambda acquired: not acquired),
            retry_error_callback=lambda state: False,
        )
        return retryer(self.acquire_cart_lock, user_id, token)

    @contextmanager
    def cart_lock(self, user_id: int) -> Iterator[str]:
        token = uuid.uuid4().hex
        key = self.cart_key(user_id)

        if not self._wait_for_lock(user_id, token):
            logger.warning(f"Could not acquire {key} within {self.wait_seconds}s")
            raise ConflictError("Cart is being modified by another request, try again")

        logger.debug(f"Acquired {key}")
        try:
            yield token
        finally:
            try:
                if not self.release_cart_lock(user_id, token):
                    logger.warning(f"Lock {key} expired before release")
            except RedisError:
                # TTL i tak zwolni klucz
                logger.exception(f"Failed to release {key}")
