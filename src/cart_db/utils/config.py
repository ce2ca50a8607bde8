from __future__ import annotations

import dataclasses
import os
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Mapping, Optional

DEFAULT_SECRET = "dev-secret-min-32-chars-long-key"


class ConfigError(ValueError):
    """Raised when the service configuration cannot be used."""


@dataclass
class StoreConfig:
    ttl_ms: int = 900_000
    sweep_interval_ms: int = 60_000
    sweep_scan_limit: int = 100
    sweep_budget_ms: int = 50
    sweep_batch_size: int = 25


@dataclass
class TokenConfig:
    secret: str = DEFAULT_SECRET
    max_age_ms: int = 3_600_000
    min_secret_length: int = 32


@dataclass
class PricingConfig:
    tax_rate: Decimal = Decimal("0.13")
    default_price: int = 1000
    prices: Optional[Dict[str, int]] = None  # None -> built-in mock price list


@dataclass
class ServerConfig:
    host: str = "127.0.0.1"
    port: int = 3000
    log_level: str = "INFO"


@dataclass
class AppConfig:
    store: StoreConfig = dataclasses.field(default_factory=StoreConfig)
    tokens: TokenConfig = dataclasses.field(default_factory=TokenConfig)
    pricing: PricingConfig = dataclasses.field(default_factory=PricingConfig)
    server: ServerConfig = dataclasses.field(default_factory=ServerConfig)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AppConfig":
        def build(dc_cls, key):
            values = data.get(key, {})
            return dc_cls(**values)

        config = cls(
            store=build(StoreConfig, "store"),
            tokens=build(TokenConfig, "tokens"),
            pricing=build(PricingConfig, "pricing"),
            server=build(ServerConfig, "server"),
        )
        config.pricing.tax_rate = Decimal(str(config.pricing.tax_rate))
        return config

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "AppConfig":
        env = os.environ if environ is None else environ
        config = cls()

        def read_int(name: str, default: int) -> int:
            raw = env.get(name)
            if raw is None or raw == "":
                return default
            try:
                return int(raw)
            except ValueError:
                raise ConfigError(f"{name} must be an integer, got {raw!r}") from None

        store = config.store
        store.ttl_ms = read_int("CART_TTL_MS", store.ttl_ms)
        store.sweep_interval_ms = read_int("SWEEP_INTERVAL_MS", store.sweep_interval_ms)
        store.sweep_scan_limit = read_int("SWEEP_SCAN_LIMIT", store.sweep_scan_limit)
        store.sweep_budget_ms = read_int("SWEEP_BUDGET_MS", store.sweep_budget_ms)
        store.sweep_batch_size = read_int("SWEEP_BATCH_SIZE", store.sweep_batch_size)

        config.tokens.secret = env.get("REHYDRATION_SECRET") or config.tokens.secret
        config.tokens.max_age_ms = read_int("REHYDRATION_MAX_AGE_MS", config.tokens.max_age_ms)

        raw_rate = env.get("TAX_RATE")
        if raw_rate:
            try:
                config.pricing.tax_rate = Decimal(raw_rate)
            except InvalidOperation:
                raise ConfigError(f"TAX_RATE must be a decimal number, got {raw_rate!r}") from None
        config.pricing.default_price = read_int("DEFAULT_PRICE", config.pricing.default_price)

        config.server.host = env.get("HOST") or config.server.host
        config.server.port = read_int("PORT", config.server.port)
        config.server.log_level = env.get("LOG_LEVEL") or config.server.log_level
        return config

    def validate(self) -> "AppConfig":
        store = self.store
        for name in ("ttl_ms", "sweep_interval_ms", "sweep_scan_limit", "sweep_budget_ms", "sweep_batch_size"):
            if getattr(store, name) <= 0:
                raise ConfigError(f"store.{name} must be positive")
        if self.tokens.max_age_ms <= 0:
            raise ConfigError("tokens.max_age_ms must be positive")
        if len(self.tokens.secret) < self.tokens.min_secret_length:
            raise ConfigError(
                f"tokens.secret must be at least {self.tokens.min_secret_length} characters"
            )
        if self.pricing.tax_rate < 0:
            raise ConfigError("pricing.tax_rate must not be negative")
        if self.pricing.default_price < 0:
            raise ConfigError("pricing.default_price must not be negative")
        return self
