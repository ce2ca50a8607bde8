"""Shared fixtures for unit tests."""

from __future__ import annotations

import itertools
from decimal import Decimal

import pytest

from cart_db.core.models import Cart, CartItem, CartTotals
from cart_db.core.pricing import PriceBook
from cart_db.core.service import CartService
from cart_db.storage.memory import InMemoryCartStore
from cart_db.tokens.codec import RecoveryTokenCodec
from cart_db.utils.clock import ManualClock

TTL_MS = 15 * 60 * 1000
MAX_AGE_MS = 60 * 60 * 1000
SECRET = "unit-test-secret-that-is-long-enough"


@pytest.fixture
def clock():
    """Virtual clock starting at a fixed instant."""
    return ManualClock(start_ms=1_700_000_000_000)


@pytest.fixture
def prices():
    """Price book with the built-in mock prices and a 13% tax rate."""
    return PriceBook(tax_rate=Decimal("0.13"))


@pytest.fixture
def store(clock):
    """In-memory store on the virtual clock."""
    return InMemoryCartStore(TTL_MS, clock=clock, sweep_scan_limit=100, sweep_budget_ms=50, sweep_batch_size=10)


@pytest.fixture
def codec(clock):
    """Recovery token codec on the virtual clock."""
    return RecoveryTokenCodec(SECRET, MAX_AGE_MS, clock=clock)


@pytest.fixture
def id_factory():
    """Deterministic cart ids: cart-1, cart-2, ..."""
    counter = itertools.count(1)
    return lambda: f"cart-{next(counter)}"


@pytest.fixture
def service(store, codec, prices, clock, id_factory):
    """CartService wired to the in-memory store and virtual clock."""
    return CartService(store, codec, prices, TTL_MS, clock=clock, id_factory=id_factory)


@pytest.fixture
def sample_cart(clock):
    """A cart with two lines, stamped at the current virtual time."""
    now = clock.now_ms()
    return Cart(
        id="cart-sample",
        items=(
            CartItem(line_id="line-1", sku="PLAN-BASIC", quantity=1),
            CartItem(line_id="line-2", sku="ADDON-DATA", quantity=2),
        ),
        totals=CartTotals(subtotal=2100, tax=273, total=2373),
        created_at=now,
        updated_at=now,
        expires_at=now + TTL_MS,
    )
