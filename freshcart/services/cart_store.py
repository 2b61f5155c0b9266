# freshcart/services/cart_store.py
import json

import redis

from freshcart.domain.cart import Cart
from freshcart.domain.context import SessionContext
from freshcart.utils.retry import redis_retry
from freshcart.utils.settings import REDIS_URL, CART_TTL_SECONDS
from freshcart.utils.logging import get_logger

logger = get_logger(__name__)


class CartStore:
    """
    -session cart kept in redis as json
    -TTL refreshed on every save
    -dropped on logout and after a placed order
    """

    def __init__(self, url: str | None = None, client: redis.Redis | None = None, ttl: int = CART_TTL_SECONDS):
        self.redis = client or redis.Redis.from_url(
            url or REDIS_URL,
            decode_responses=True,
        )
        self.ttl = ttl

    @staticmethod
    def _key(user_id: int) -> str:
        return f"cart:{user_id}"

    @redis_retry()
    def load(self, user_id: int) -> Cart | None:
        raw = self.redis.get(self._key(user_id))
        if raw is None:
            return None
        return Cart.from_dict(json.loads(raw))

    def load_or_create(self, ctx: SessionContext) -> Cart:
        cart = self.load(ctx.user_id)
        if cart is None:
            logger.info(f"New cart for user {ctx.user_id}")
            return Cart.for_session(ctx)
        return cart

    @redis_retry()
    def save(self, cart: Cart) -> None:
        self.redis.set(
            name=self._key(cart.user_id),
            value=json.dumps(cart.to_dict()),
            ex=self.ttl,
        )

    @redis_retry()
    def drop(self, user_id: int) -> bool:
        logger.info(f"Dropping cart for user {user_id}")
        return bool(self.redis.delete(self._key(user_id)))
