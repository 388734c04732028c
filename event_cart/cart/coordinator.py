"""Shared cart fetching.

Many consumers ask for the same session's cart at once. Within the debounce
window they all await one in-flight task instead of each hitting the Cart
Service. The coordinator is meant to run on a single event loop. A threaded
port needs a lock around ``SessionState.in_flight``.
"""
from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Mapping

from event_cart.cart.cache import CartCache
from event_cart.cart.errors import CartServiceError
from event_cart.cart.models import Cart
from event_cart.cart.normalizer import normalize_cart
from event_cart.config import settings

logger = logging.getLogger(__name__)

Loader = Callable[[], Awaitable[Mapping[str, Any]]]


@dataclass(slots=True)
class SessionState:
    in_flight: asyncio.Task | None = None
    started_at: float = 0.0
    generation: int = 0
    last_good: Cart | None = None
    last_error: CartServiceError | None = None


class RequestCoordinator:
    def __init__(
        self,
        cache: CartCache | None = None,
        debounce_window: float = settings.debounce_window,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.cache = cache if cache is not None else CartCache(clock=clock)
        self.debounce_window = debounce_window
        self._clock = clock
        self._sessions: dict[str, SessionState] = {}

    def _state(self, key: str) -> SessionState:
        return self._sessions.setdefault(key, SessionState())

    async def fetch_cart(self, key: str, loader: Loader) -> Cart:
        """Return the session's cart, from cache, a shared fetch or a new one.

        Classified Cart Service failures do not raise. The session gets its
        last good cart, or an empty one when it never loaded or was
        invalidated since. The failure is kept in ``last_error(key)``.
        """
        cached = self.cache.get(key)
        if cached is not None:
            logger.debug("cart cache hit for %s", key)
            return cached

        state = self._state(key)
        now = self._clock()
        task = state.in_flight
        if task is not None and not task.done() and now - state.started_at < self.debounce_window:
            logger.debug("sharing in-flight cart fetch for %s", key)
        else:
            task = asyncio.ensure_future(self._fetch(key, state, loader, state.generation))
            state.in_flight = task
            state.started_at = now

        return await asyncio.shield(task)

    async def _fetch(
        self,
        key: str,
        state: SessionState,
        loader: Loader,
        generation: int,
    ) -> Cart:
        current = asyncio.current_task()
        try:
            payload = await loader()
        except CartServiceError as exc:
            if generation == state.generation:
                state.last_error = exc
            if state.last_good is None:
                logger.warning("cart load failed for %s with no cart to keep: %s", key, exc.message)
                return Cart.empty()
            logger.warning("cart refresh failed for %s, keeping last cart: %s", key, exc.message)
            return state.last_good
        finally:
            if state.in_flight is current:
                state.in_flight = None

        cart = normalize_cart(payload)
        if generation == state.generation:
            self.cache.put(key, cart)
            state.last_good = cart
            state.last_error = None
        else:
            logger.debug("discarding cart fetched before invalidation for %s", key)
        return cart

    def last_error(self, key: str) -> CartServiceError | None:
        state = self._sessions.get(key)
        return state.last_error if state is not None else None

    def has_loaded(self, key: str) -> bool:
        """Whether a failed fetch for ``key`` would fall back to a known-good cart."""
        state = self._sessions.get(key)
        return state is not None and state.last_good is not None

    def invalidate(self, key: str) -> None:
        # a cart fetched before a mutation is no longer a safe fallback
        self.cache.invalidate(key)
        state = self._state(key)
        state.generation += 1
        state.in_flight = None
        state.last_good = None

    def store(self, key: str, cart: Cart) -> None:
        self.invalidate(key)
        self.cache.put(key, cart)
        state = self._state(key)
        state.last_good = cart
        state.last_error = None

    def reset(self) -> None:
        self.cache.reset()
        self._sessions.clear()


_coordinator: RequestCoordinator | None = None


def get_coordinator() -> RequestCoordinator:
    global _coordinator
    if _coordinator is None:
        _coordinator = RequestCoordinator()
    return _coordinator


def reset_coordinator() -> None:
    global _coordinator
    if _coordinator is not None:
        _coordinator.reset()
    _coordinator = None
