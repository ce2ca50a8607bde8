from .metrics import (
    Counter,
    Histogram,
    cart_expired_total,
    cart_store_operations_total,
    cart_sweep_duration_ms,
    recovery_token_failures_total,
    recovery_tokens_issued_total,
)

__all__ = [
    "Counter",
    "Histogram",
    "cart_store_operations_total",
    "cart_expired_total",
    "cart_sweep_duration_ms",
    "recovery_tokens_issued_total",
    "recovery_token_failures_total",
]
