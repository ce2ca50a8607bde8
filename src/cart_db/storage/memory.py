from __future__ import annotations

import dataclasses
import itertools
import logging
import threading
import typing as t
from collections import OrderedDict
from dataclasses import dataclass

from cart_db.core.errors import CartNotFoundError
from cart_db.core.models import Cart
from cart_db.monitoring.metrics import cart_expired_total, cart_store_operations_total, cart_sweep_duration_ms
from cart_db.utils.clock import Clock, SystemClock

from .base import CartStorage

_logger = logging.getLogger(__name__)


@dataclass
class SweepResult:
    scanned: int = 0
    removed: int = 0
    exhausted_budget: bool = False
    elapsed_ms: int = 0


class InMemoryCartStore(CartStorage):
    """Process-local cart store with lazy expiry and a bounded sweep.

    Correctness rests on `get`/`update` checking expiry on every access;
    `sweep` only reclaims memory. All access to the id -> cart mapping goes
    through one lock, so operations on the same id never interleave. Carts are
    immutable values and are only ever replaced whole.

    Not durable: everything is lost when the process exits.
    """

    def __init__(
        self,
        ttl_ms: int,
        *,
        clock: t.Optional[Clock] = None,
        sweep_scan_limit: int = 100,
        sweep_budget_ms: int = 50,
        sweep_batch_size: int = 25,
    ) -> None:
        self._ttl_ms = ttl_ms
        self._clock = clock or SystemClock()
        self._sweep_scan_limit = sweep_scan_limit
        self._sweep_budget_ms = sweep_budget_ms
        self._sweep_batch_size = max(1, sweep_batch_size)
        # Refreshed entries move to the end, so iteration order is expiry order
        self._carts: "OrderedDict[str, Cart]" = OrderedDict()
        self._lock = threading.Lock()

    @classmethod
    def from_config(cls, config: t.Any, clock: t.Optional[Clock] = None) -> "InMemoryCartStore":
        return cls(
            config.ttl_ms,
            clock=clock,
            sweep_scan_limit=config.sweep_scan_limit,
            sweep_budget_ms=config.sweep_budget_ms,
            sweep_batch_size=config.sweep_batch_size,
        )

    @property
    def ttl_ms(self) -> int:
        return self._ttl_ms

    def _is_expired(self, cart: Cart, now: int) -> bool:
        return now > cart.expires_at

    async def create(self, cart: Cart) -> Cart:
        with self._lock:
            now = self._clock.now_ms()
            stored = dataclasses.replace(cart, expires_at=now + self._ttl_ms)
            self._carts[stored.id] = stored
            self._carts.move_to_end(stored.id)
        cart_store_operations_total.inc(op="create", outcome="ok")
        _logger.debug("Stored cart id=%s expires_at=%d", stored.id, stored.expires_at)
        return stored

    async def get(self, cart_id: str) -> t.Optional[Cart]:
        with self._lock:
            now = self._clock.now_ms()
            cart = self._carts.get(cart_id)
            if cart is None:
                outcome = "miss"
                refreshed = None
            elif self._is_expired(cart, now):
                del self._carts[cart_id]
                outcome = "expired"
                refreshed = None
            else:
                refreshed = dataclasses.replace(cart, expires_at=now + self._ttl_ms)
                self._carts[cart_id] = refreshed
                self._carts.move_to_end(cart_id)
                outcome = "hit"
        cart_store_operations_total.inc(op="get", outcome=outcome)
        if outcome == "expired":
            cart_expired_total.inc(source="lazy")
            _logger.debug("Cart id=%s expired on read", cart_id)
        return refreshed

    async def update(self, cart: Cart) -> Cart:
        with self._lock:
            now = self._clock.now_ms()
            existing = self._carts.get(cart.id)
            expired = existing is not None and self._is_expired(existing, now)
            if existing is None or expired:
                if expired:
                    del self._carts[cart.id]
                stored = None
            else:
                stored = dataclasses.replace(cart, updated_at=now, expires_at=now + self._ttl_ms)
                self._carts[cart.id] = stored
                self._carts.move_to_end(cart.id)

        if stored is None:
            cart_store_operations_total.inc(op="update", outcome="not_found")
            if expired:
                cart_expired_total.inc(source="lazy")
                raise CartNotFoundError("Cart expired")
            raise CartNotFoundError("Cart not found")
        cart_store_operations_total.inc(op="update", outcome="ok")
        return stored

    async def delete(self, cart_id: str) -> None:
        with self._lock:
            self._carts.pop(cart_id, None)
        cart_store_operations_total.inc(op="delete", outcome="ok")

    async def size(self) -> int:
        with self._lock:
            return len(self._carts)

    async def clear(self) -> None:
        with self._lock:
            self._carts.clear()

    async def is_healthy(self) -> bool:
        return True

    def sweep(self) -> SweepResult:
        """Run one bounded reclamation pass over the soonest-expiring entries.

        Scans at most `sweep_scan_limit` entries from the front of the store
        and stops once `sweep_budget_ms` has elapsed. The lock is held for one
        batch of `sweep_batch_size` entries at a time.
        """
        started = self._clock.now_ms()
        result = SweepResult()
        with self._lock:
            candidates = list(itertools.islice(self._carts, self._sweep_scan_limit))

        done = False
        for offset in range(0, len(candidates), self._sweep_batch_size):
            with self._lock:
                for cart_id in candidates[offset : offset + self._sweep_batch_size]:
                    now = self._clock.now_ms()
                    cart = self._carts.get(cart_id)
                    if cart is not None and self._is_expired(cart, now):
                        del self._carts[cart_id]
                        result.removed += 1
                    result.scanned += 1
                    if now - started >= self._sweep_budget_ms:
                        result.exhausted_budget = result.scanned < len(candidates)
                        done = True
                        break
            if done:
                break

        result.elapsed_ms = self._clock.now_ms() - started
        if result.removed:
            cart_expired_total.inc(result.removed, source="sweep")
        cart_sweep_duration_ms.observe(result.elapsed_ms)
        _logger.debug(
            "Sweep scanned=%d removed=%d exhausted_budget=%s elapsed_ms=%d",
            result.scanned,
            result.removed,
            result.exhausted_budget,
            result.elapsed_ms,
        )
        return result
