from __future__ import annotations

import typing as t
from datetime import datetime, timezone

from cart_db.core.models import Cart, CartResponse

JSON = t.Dict[str, t.Any]


def _iso(epoch_ms: int) -> str:
    moment = datetime.fromtimestamp(epoch_ms / 1000, tz=timezone.utc)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def cart_to_dict(cart: Cart) -> JSON:
    data: JSON = {
        "id": cart.id,
        "items": [{"itemId": item.line_id, "sku": item.sku, "quantity": item.quantity} for item in cart.items],
        "totals": {
            "subtotal": cart.totals.subtotal,
            "tax": cart.totals.tax,
            "total": cart.totals.total,
        },
        "createdAt": _iso(cart.created_at),
        "updatedAt": _iso(cart.updated_at),
        "expiresAt": _iso(cart.expires_at),
    }
    if cart.customer is not None:
        customer = {
            "email": cart.customer.email,
            "firstName": cart.customer.first_name,
            "lastName": cart.customer.last_name,
        }
        data["customer"] = {key: value for key, value in customer.items() if value is not None}
    return data


def response_to_dict(response: CartResponse) -> JSON:
    return {"cart": cart_to_dict(response.cart), "rehydrationToken": response.recovery_token}
