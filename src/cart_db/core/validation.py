from __future__ import annotations

import re
import typing as t

from .errors import ValidationError

_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

_CUSTOMER_FIELDS = (("email", "email"), ("firstName", "first_name"), ("lastName", "last_name"))


def validate_email(email: str) -> None:
    if not _EMAIL_RE.match(email):
        raise ValidationError("Invalid email format")


def validate_sku(sku: str) -> None:
    if not sku or not sku.strip():
        raise ValidationError("SKU must be non-empty")


def validate_quantity(quantity: t.Any) -> None:
    if not isinstance(quantity, int) or isinstance(quantity, bool) or quantity < 1:
        raise ValidationError("Quantity must be an integer >= 1")


def _require_object(body: t.Any) -> t.Dict[str, t.Any]:
    if not isinstance(body, dict):
        raise ValidationError("Request body must be an object")
    return body


def validate_add_item_request(body: t.Any) -> t.Tuple[str, int]:
    data = _require_object(body)
    sku = data.get("sku")
    quantity = data.get("quantity")

    if not isinstance(sku, str):
        raise ValidationError("sku must be a string")
    # JSON has a single number type; 2.0 still fails the integer check below
    if not isinstance(quantity, (int, float)) or isinstance(quantity, bool):
        raise ValidationError("quantity must be a number")

    validate_sku(sku)
    validate_quantity(quantity)
    return sku, quantity


def validate_customer_request(body: t.Any) -> t.Dict[str, str]:
    """Return the provided customer fields keyed by their snake_case names."""
    data = _require_object(body)
    result: t.Dict[str, str] = {}
    for wire_name, field_name in _CUSTOMER_FIELDS:
        value = data.get(wire_name)
        if value is None:
            continue
        if not isinstance(value, str):
            raise ValidationError(f"{wire_name} must be a string")
        if wire_name == "email":
            validate_email(value)
        result[field_name] = value
    return result


def validate_rehydration_request(body: t.Any) -> str:
    data = _require_object(body)
    token = data.get("token")
    if not isinstance(token, str) or not token.strip():
        raise ValidationError("token must be a non-empty string")
    return token
