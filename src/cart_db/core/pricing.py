from __future__ import annotations

import typing as t
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal

# Demo price list (minor currency units). A real deployment would load this
# from a pricing service.
MOCK_PRICES: t.Dict[str, int] = {
    "PLAN-5G-PLUS": 2500,
    "PLAN-BASIC": 1500,
    "ADDON-ROAM": 500,
    "ADDON-DATA": 300,
}

DEFAULT_PRICE = 1000
DEFAULT_TAX_RATE = Decimal("0.13")


@dataclass(frozen=True)
class PriceBook:
    prices: t.Mapping[str, int] = field(default_factory=lambda: dict(MOCK_PRICES))
    default_price: int = DEFAULT_PRICE
    tax_rate: Decimal = DEFAULT_TAX_RATE

    def price(self, sku: str) -> int:
        return self.prices.get(sku, self.default_price)

    def tax_for(self, subtotal: int) -> int:
        return int((Decimal(subtotal) * self.tax_rate).quantize(Decimal(1), rounding=ROUND_HALF_UP))

    @classmethod
    def from_config(cls, config: t.Any) -> "PriceBook":
        prices = MOCK_PRICES if config.prices is None else config.prices
        return cls(prices=dict(prices), default_price=config.default_price, tax_rate=Decimal(str(config.tax_rate)))
