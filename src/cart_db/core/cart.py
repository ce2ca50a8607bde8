"""Pure record transforms.

Every function here returns a new `Cart`; none touches the store. Callers
persist the result with `CartStorage.update` or `CartStorage.create`.
"""

from __future__ import annotations

import dataclasses
import typing as t
import uuid

from .models import Cart, CartItem, CartTotals, CustomerInfo
from .pricing import PriceBook


def new_line_id() -> str:
    return str(uuid.uuid4())


def calculate_totals(items: t.Iterable[CartItem], prices: PriceBook) -> CartTotals:
    subtotal = sum(prices.price(item.sku) * item.quantity for item in items)
    tax = prices.tax_for(subtotal)
    return CartTotals(subtotal=subtotal, tax=tax, total=subtotal + tax)


def new_cart(cart_id: str, now_ms: int, ttl_ms: int) -> Cart:
    return Cart(
        id=cart_id,
        items=(),
        totals=CartTotals(),
        created_at=now_ms,
        updated_at=now_ms,
        expires_at=now_ms + ttl_ms,
    )


def merge_item(
    cart: Cart,
    sku: str,
    quantity: int,
    prices: PriceBook,
    now_ms: int,
    *,
    line_id_factory: t.Callable[[], str] = new_line_id,
) -> Cart:
    """Add `quantity` of `sku`, summing into the existing line for that SKU if any."""
    existing = cart.find_item(sku)
    if existing is None:
        items = list(cart.items) + [CartItem(line_id=line_id_factory(), sku=sku, quantity=quantity)]
    else:
        merged = dataclasses.replace(existing, quantity=existing.quantity + quantity)
        items = [merged if item is existing else item for item in cart.items]

    return dataclasses.replace(
        cart,
        items=tuple(items),
        totals=calculate_totals(items, prices),
        updated_at=now_ms,
    )


def remove_item(cart: Cart, line_id: str, prices: PriceBook, now_ms: int) -> Cart:
    items = tuple(item for item in cart.items if item.line_id != line_id)
    return dataclasses.replace(
        cart,
        items=items,
        totals=calculate_totals(items, prices),
        updated_at=now_ms,
    )


def update_customer(cart: Cart, customer: t.Mapping[str, t.Optional[str]], now_ms: int) -> Cart:
    current = cart.customer or CustomerInfo()
    changes = {key: value for key, value in customer.items() if value is not None}
    return dataclasses.replace(
        cart,
        customer=dataclasses.replace(current, **changes),
        updated_at=now_ms,
    )

