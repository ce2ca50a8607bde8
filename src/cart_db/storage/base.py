from __future__ import annotations

import typing as t
from abc import ABC, abstractmethod

from ..core.models import Cart


class CartStorage(ABC):
    """Expiry-aware cart storage.

    Implementations own cart identity and lifetime: every successful access
    pushes `expires_at` out to `now + ttl`, and nothing past its expiry is
    ever returned.
    """

    @abstractmethod
    async def create(self, cart: Cart) -> Cart:  # pragma: no cover - interface
        raise NotImplementedError

    @abstractmethod
    async def get(self, cart_id: str) -> t.Optional[Cart]:  # pragma: no cover - interface
        raise NotImplementedError

    @abstractmethod
    async def update(self, cart: Cart) -> Cart:  # pragma: no cover - interface
        raise NotImplementedError

    @abstractmethod
    async def delete(self, cart_id: str) -> None:  # pragma: no cover - interface
        raise NotImplementedError

    @abstractmethod
    async def size(self) -> int:  # pragma: no cover - interface
        raise NotImplementedError

    @abstractmethod
    async def clear(self) -> None:  # pragma: no cover - interface
        raise NotImplementedError

    @abstractmethod
    async def is_healthy(self) -> bool:  # pragma: no cover - interface
        raise NotImplementedError
