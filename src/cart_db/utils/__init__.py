"""Utility module for configuration and time sources."""

from .clock import Clock, ManualClock, SystemClock
from .config import AppConfig, PricingConfig, ServerConfig, StoreConfig, TokenConfig

__all__ = [
    "Clock",
    "ManualClock",
    "SystemClock",
    "AppConfig",
    "StoreConfig",
    "TokenConfig",
    "PricingConfig",
    "ServerConfig",
]
