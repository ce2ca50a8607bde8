"""cart_db

An ephemeral, process-local cart store: TTL-governed records with lazy and
bounded-sweep expiration, plus signed recovery tokens that rebuild a cart's
contents after the original record is gone.
"""

from .core import (
    Cart,
    CartError,
    CartItem,
    CartNotFoundError,
    CartResponse,
    CartService,
    CartTotals,
    CustomerInfo,
    PriceBook,
    TokenError,
    TokenErrorKind,
    TokenItem,
    ValidationError,
    merge_item,
    new_cart,
    remove_item,
    update_customer,
)
from .storage import CartStorage, InMemoryCartStore, SweepResult, Sweeper
from .tokens import RecoveryTokenCodec
from .utils import AppConfig, Clock, ManualClock, SystemClock

__all__ = [
    "CartService",
    "CartStorage",
    "InMemoryCartStore",
    "Sweeper",
    "SweepResult",
    "RecoveryTokenCodec",
    "PriceBook",
    "Cart",
    "CartItem",
    "CartTotals",
    "CustomerInfo",
    "CartResponse",
    "TokenItem",
    "new_cart",
    "merge_item",
    "remove_item",
    "update_customer",
    "CartError",
    "CartNotFoundError",
    "ValidationError",
    "TokenError",
    "TokenErrorKind",
    "AppConfig",
    "Clock",
    "SystemClock",
    "ManualClock",
]

__version__ = "0.1.0"
