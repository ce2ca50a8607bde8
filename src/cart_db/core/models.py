from __future__ import annotations

import typing as t
from dataclasses import dataclass


# All timestamps are integer epoch milliseconds taken from the store's clock.


@dataclass(frozen=True)
class CartItem:
    line_id: str
    sku: str
    quantity: int


@dataclass(frozen=True)
class CartTotals:
    subtotal: int = 0
    tax: int = 0
    total: int = 0


@dataclass(frozen=True)
class CustomerInfo:
    email: t.Optional[str] = None
    first_name: t.Optional[str] = None
    last_name: t.Optional[str] = None


@dataclass(frozen=True)
class Cart:
    id: str
    items: t.Tuple[CartItem, ...]
    totals: CartTotals
    created_at: int
    updated_at: int
    expires_at: int
    customer: t.Optional[CustomerInfo] = None

    def find_item(self, sku: str) -> t.Optional[CartItem]:
        for item in self.items:
            if item.sku == sku:
                return item
        return None


class TokenItem(t.NamedTuple):
    """The only per-line data a recovery token carries."""

    sku: str
    quantity: int


@dataclass(frozen=True)
class CartResponse:
    cart: Cart
    recovery_token: str
