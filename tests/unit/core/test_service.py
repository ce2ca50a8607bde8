"""Unit tests for CartService."""

from unittest.mock import AsyncMock

import pytest

from cart_db.core.errors import CartNotFoundError, TokenError, TokenErrorKind
from cart_db.core.models import CartTotals, CustomerInfo, TokenItem
from cart_db.core.service import CartService

TTL_MS = 15 * 60 * 1000


@pytest.mark.asyncio
class TestCartService:
    """Test cart use cases against the in-memory store."""

    async def test_create_cart(self, service, codec, clock):
        result = await service.create_cart()

        assert result.cart.id == "cart-1"
        assert result.cart.items == ()
        assert result.cart.totals == CartTotals()
        assert result.cart.expires_at == clock.now_ms() + TTL_MS
        assert codec.verify(result.recovery_token) == []

    async def test_get_cart_missing_raises(self, service):
        with pytest.raises(CartNotFoundError, match="Cart not found or expired"):
            await service.get_cart("nope")

    async def test_get_cart_expired_raises(self, service, clock):
        created = await service.create_cart()
        clock.advance(TTL_MS + 1)
        with pytest.raises(CartNotFoundError):
            await service.get_cart(created.cart.id)

    async def test_add_item_merges_and_issues_token(self, service, codec):
        cart_id = (await service.create_cart()).cart.id

        await service.add_item(cart_id, "X", 2)
        result = await service.add_item(cart_id, "X", 3)

        assert len(result.cart.items) == 1
        assert result.cart.items[0].quantity == 5
        assert result.cart.totals == CartTotals(subtotal=5000, tax=650, total=5650)
        assert codec.verify(result.recovery_token) == [TokenItem("X", 5)]

    async def test_add_item_persists(self, service):
        cart_id = (await service.create_cart()).cart.id
        await service.add_item(cart_id, "PLAN-BASIC", 1)

        stored = await service.get_cart(cart_id)
        assert [(i.sku, i.quantity) for i in stored.items] == [("PLAN-BASIC", 1)]

    async def test_add_item_to_missing_cart(self, service):
        with pytest.raises(CartNotFoundError):
            await service.add_item("ghost", "X", 1)

    async def test_add_item_refreshes_ttl(self, service, clock):
        cart_id = (await service.create_cart()).cart.id
        clock.advance(TTL_MS - 1)
        result = await service.add_item(cart_id, "X", 1)
        assert result.cart.expires_at == clock.now_ms() + TTL_MS
        assert result.cart.updated_at == clock.now_ms()

    async def test_remove_item(self, service, codec):
        cart_id = (await service.create_cart()).cart.id
        added = await service.add_item(cart_id, "X", 2)
        line_id = added.cart.items[0].line_id

        result = await service.remove_item(cart_id, line_id)

        assert result.cart.items == ()
        assert result.cart.totals == CartTotals(0, 0, 0)
        assert codec.verify(result.recovery_token) == []

    async def test_remove_item_from_missing_cart(self, service):
        with pytest.raises(CartNotFoundError):
            await service.remove_item("ghost", "line")

    async def test_update_customer(self, service):
        cart_id = (await service.create_cart()).cart.id

        cart = await service.update_customer(cart_id, {"email": "a@b.co", "first_name": "Ada"})

        assert cart.customer == CustomerInfo(email="a@b.co", first_name="Ada")
        assert (await service.get_cart(cart_id)).customer == cart.customer

    async def test_customer_not_in_token(self, service, codec):
        cart_id = (await service.create_cart()).cart.id
        await service.update_customer(cart_id, {"email": "a@b.co"})
        result = await service.add_item(cart_id, "X", 1)
        assert codec.verify(result.recovery_token) == [TokenItem("X", 1)]

    async def test_delete_cart(self, service):
        cart_id = (await service.create_cart()).cart.id
        await service.delete_cart(cart_id)
        await service.delete_cart(cart_id)
        with pytest.raises(CartNotFoundError):
            await service.get_cart(cart_id)

    async def test_rehydrate_mints_new_cart(self, service, clock, store):
        cart_id = (await service.create_cart()).cart.id
        await service.add_item(cart_id, "A", 2)
        token = (await service.add_item(cart_id, "B", 1)).recovery_token

        clock.advance(TTL_MS + 1)
        assert await store.get(cart_id) is None

        result = await service.rehydrate_cart(token)

        assert result.cart.id != cart_id
        assert [(i.sku, i.quantity) for i in result.cart.items] == [("A", 2), ("B", 1)]
        assert result.cart.created_at == clock.now_ms()
        assert result.cart.expires_at == clock.now_ms() + TTL_MS
        assert await store.get(result.cart.id) is not None

    async def test_rehydrate_matches_live_build(self, service, prices):
        source = (await service.create_cart()).cart.id
        await service.add_item(source, "PLAN-5G-PLUS", 1)
        token = (await service.add_item(source, "ADDON-ROAM", 3)).recovery_token

        recovered = (await service.rehydrate_cart(token)).cart
        live = (await service.get_cart(source))

        assert [(i.sku, i.quantity) for i in recovered.items] == [(i.sku, i.quantity) for i in live.items]
        assert recovered.totals == live.totals

    async def test_rehydrate_invalid_token(self, service, store):
        with pytest.raises(TokenError) as exc_info:
            await service.rehydrate_cart("not-a-token")
        assert exc_info.value.kind == TokenErrorKind.MALFORMED
        assert await store.size() == 0

    async def test_rehydrate_issues_fresh_token(self, service, codec, clock):
        cart_id = (await service.create_cart()).cart.id
        token = (await service.add_item(cart_id, "A", 1)).recovery_token

        clock.advance(codec.max_age_ms - 1)
        result = await service.rehydrate_cart(token)
        clock.advance(codec.max_age_ms // 2)

        assert codec.verify(result.recovery_token) == [TokenItem("A", 1)]


@pytest.mark.asyncio
class TestCartServiceWithMockStore:
    """Test that the service only talks to the storage interface."""

    async def test_update_not_found_propagates(self, codec, prices, clock, sample_cart):
        store = AsyncMock()
        store.get = AsyncMock(return_value=sample_cart)
        store.update = AsyncMock(side_effect=CartNotFoundError("Cart expired"))
        service = CartService(store, codec, prices, TTL_MS, clock=clock)

        with pytest.raises(CartNotFoundError, match="Cart expired"):
            await service.add_item(sample_cart.id, "X", 1)
        store.update.assert_called_once()

    async def test_create_uses_store_result(self, codec, prices, clock, sample_cart):
        store = AsyncMock()
        store.create = AsyncMock(return_value=sample_cart)
        service = CartService(store, codec, prices, TTL_MS, clock=clock)

        result = await service.create_cart()

        assert result.cart is sample_cart
        store.create.assert_called_once()
