import uuid
from contextlib import contextmanager

import redis

from storefront.domain.errors import CartLocked
from storefront.utils.retry import redis_retry, wait_until_true
from storefront.utils.settings import REDIS_URL, CART_LOCK_TTL_SECONDS, CART_LOCK_WAIT_SECONDS
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

#LUA porownaj i usun, atomicity
_RELEASE_LUA = """
if redis.call('GET', KEYS[1]) == ARGV[1] then
    return redis.call('DEL', KEYS[1])
else
    return 0
end
"""

#redis wykonuje lua atomowo, nie mozna wcisnac sie miedzy GET a DEL
#wiec zwalniamy tylko wlasny lock, nawet jesli nasz TTL juz minal i lock ma ktos inny


class LockService:
    """
    -blokada koszyka na czas jednej mutacji (dwie karty przegladarki)
    -zwalnianie locka tylko przez wlasciciela
    -atomowosc przy pomocy lua
    """

    def __init__(self, url: str | None = None):
        self.redis = redis.Redis.from_url(
            url or REDIS_URL,
            decode_responses=True,
        )

    @redis_retry()
    def acquire(self, key: str, owner: str, ttl: int) -> bool:
        #SET cart:abc:lock "owner" NX EX 10
        return bool(self.redis.set(name=key, value=owner, nx=True, ex=ttl))

    @redis_retry()
    def release(self, key: str, owner: str) -> bool:
        res = self.redis.eval(_RELEASE_LUA, 1, key, owner)
        return bool(res)

    @contextmanager
    def cart_lock(
        self,
        token: str,
        ttl: int = CART_LOCK_TTL_SECONDS,
        max_wait: float = CART_LOCK_WAIT_SECONDS,
    ):
        key = f"cart:{token}:lock"
        owner = uuid.uuid4().hex

        @wait_until_true(max_wait)
        def _acquire() -> bool:
            return self.acquire(key, owner, ttl)

        if not _acquire():
            logger.warning(f"Nie udalo sie zablokowac koszyka {token} w {max_wait}s")
            raise CartLocked("Koszyk jest wlasnie modyfikowany, sprobuj ponownie")

        logger.debug(f"Acquire lock {key}")
        try:
            yield
        finally:
            self.release(key, owner)
            logger.debug(f"Release lock {key}")
