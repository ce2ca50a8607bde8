"""Core module for cart records, pricing and the cart use cases."""

from .errors import CartError, CartNotFoundError, TokenError, TokenErrorKind, ValidationError, to_error_response
from .models import Cart, CartItem, CartResponse, CartTotals, CustomerInfo, TokenItem
from .pricing import PriceBook
from .cart import calculate_totals, merge_item, new_cart, remove_item, update_customer
from .service import CartService

__all__ = [
    # Models
    "Cart",
    "CartItem",
    "CartTotals",
    "CustomerInfo",
    "CartResponse",
    "TokenItem",
    # Pricing and transforms
    "PriceBook",
    "calculate_totals",
    "new_cart",
    "merge_item",
    "remove_item",
    "update_customer",
    # Use cases
    "CartService",
    # Errors
    "CartError",
    "CartNotFoundError",
    "ValidationError",
    "TokenError",
    "TokenErrorKind",
    "to_error_response",
]
