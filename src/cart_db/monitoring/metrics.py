from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Any, Dict, List, Tuple


@dataclass
class Counter:
    name: str
    help: str
    values: Dict[Tuple, float] = field(default_factory=dict)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    def inc(self, value: float = 1.0, **labels: Any) -> None:
        key = tuple(sorted(labels.items()))
        with self._lock:
            self.values[key] = self.values.get(key, 0.0) + value

    def get(self, **labels: Any) -> float:
        return self.values.get(tuple(sorted(labels.items())), 0.0)


@dataclass
class Histogram:
    name: str
    help: str
    buckets: List[float]
    counts: Dict[Tuple, List[int]] = field(default_factory=dict)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    def observe(self, val: float, **labels: Any) -> None:
        key = tuple(sorted(labels.items()))
        with self._lock:
            if key not in self.counts:
                # one extra slot for observations above the largest bucket
                self.counts[key] = [0 for _ in range(len(self.buckets) + 1)]
            for i, b in enumerate(self.buckets):
                if val <= b:
                    self.counts[key][i] += 1
                    break
            else:
                self.counts[key][-1] += 1

    def total(self, **labels: Any) -> int:
        return sum(self.counts.get(tuple(sorted(labels.items())), []))


# Predefined metrics
cart_store_operations_total = Counter("cart_store_operations_total", "Store operations by op and outcome")
cart_expired_total = Counter("cart_expired_total", "Expired carts removed, by source (lazy|sweep)")
cart_sweep_duration_ms = Histogram(
    "cart_sweep_duration_ms",
    "Wall time of a single sweep pass",
    buckets=[1, 5, 10, 25, 50, 100, 250],
)
recovery_tokens_issued_total = Counter("recovery_tokens_issued_total", "Recovery tokens minted")
recovery_token_failures_total = Counter("recovery_token_failures_total", "Rejected recovery tokens by kind")
