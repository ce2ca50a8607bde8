from __future__ import annotations

import logging
import typing as t
import uuid

from cart_db.storage.base import CartStorage
from cart_db.tokens.codec import RecoveryTokenCodec
from cart_db.utils.clock import Clock, SystemClock

from . import cart as transforms
from .errors import CartNotFoundError
from .models import Cart, CartResponse
from .pricing import PriceBook

_logger = logging.getLogger(__name__)


class CartService:
    """Cart use cases: store lookups, record transforms and token issuance.

    Every mutation that changes the item list returns a fresh recovery token
    alongside the updated cart.
    """

    def __init__(
        self,
        store: CartStorage,
        codec: RecoveryTokenCodec,
        prices: PriceBook,
        ttl_ms: int,
        clock: t.Optional[Clock] = None,
        id_factory: t.Callable[[], str] = lambda: str(uuid.uuid4()),
    ) -> None:
        self._store = store
        self._codec = codec
        self._prices = prices
        self._ttl_ms = ttl_ms
        self._clock = clock or SystemClock()
        self._new_id = id_factory

    @property
    def store(self) -> CartStorage:
        return self._store

    async def create_cart(self) -> CartResponse:
        cart = transforms.new_cart(self._new_id(), self._clock.now_ms(), self._ttl_ms)
        cart = await self._store.create(cart)
        _logger.info("Created cart id=%s", cart.id)
        return CartResponse(cart=cart, recovery_token=self._codec.sign(cart.items))

    async def get_cart(self, cart_id: str) -> Cart:
        cart = await self._store.get(cart_id)
        if cart is None:
            raise CartNotFoundError("Cart not found or expired")
        return cart

    async def add_item(self, cart_id: str, sku: str, quantity: int) -> CartResponse:
        cart = await self.get_cart(cart_id)
        updated = transforms.merge_item(cart, sku, quantity, self._prices, self._clock.now_ms())
        updated = await self._store.update(updated)
        return CartResponse(cart=updated, recovery_token=self._codec.sign(updated.items))

    async def remove_item(self, cart_id: str, line_id: str) -> CartResponse:
        cart = await self.get_cart(cart_id)
        updated = transforms.remove_item(cart, line_id, self._prices, self._clock.now_ms())
        updated = await self._store.update(updated)
        return CartResponse(cart=updated, recovery_token=self._codec.sign(updated.items))

    async def update_customer(self, cart_id: str, customer: t.Mapping[str, t.Optional[str]]) -> Cart:
        cart = await self.get_cart(cart_id)
        updated = transforms.update_customer(cart, customer, self._clock.now_ms())
        return await self._store.update(updated)

    async def delete_cart(self, cart_id: str) -> None:
        await self._store.delete(cart_id)

    async def rehydrate_cart(self, token: str) -> CartResponse:
        """Rebuild a cart under a new id from a recovery token.

        Items are replayed through `merge_item` in token order, so the result
        matches a cart built by the same sequence of add-item calls. The cart
        is inserted only once fully built.
        """
        items = self._codec.verify(token)

        now = self._clock.now_ms()
        cart = transforms.new_cart(self._new_id(), now, self._ttl_ms)
        for item in items:
            cart = transforms.merge_item(cart, item.sku, item.quantity, self._prices, now)

        cart = await self._store.create(cart)
        _logger.info("Recovered cart id=%s with %d line(s)", cart.id, len(cart.items))
        return CartResponse(cart=cart, recovery_token=self._codec.sign(cart.items))
