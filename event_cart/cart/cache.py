from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable

from event_cart.cart.models import Cart
from event_cart.config import settings


@dataclass(slots=True)
class CacheEntry:
    cart: Cart
    stored_at: float


class CartCache:
    """Last fetched cart per session, trusted for ``ttl`` seconds."""

    def __init__(
        self,
        ttl: float = settings.cache_ttl,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.ttl = ttl
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}

    def get(self, key: str) -> Cart | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self._clock() - entry.stored_at >= self.ttl:
            del self._entries[key]
            return None
        return entry.cart

    def stored_at(self, key: str) -> float | None:
        entry = self._entries.get(key)
        return entry.stored_at if entry is not None else None

    def put(self, key: str, cart: Cart) -> None:
        self._entries[key] = CacheEntry(cart=cart, stored_at=self._clock())

    def invalidate(self, key: str) -> None:
        self._entries.pop(key, None)

    def reset(self) -> None:
        self._entries.clear()
