"""Per-session cart state and its mutation entry points.

Each mutation leaves the Cart Service, the shared cache and ``CartStore.cart``
in agreement before returning. A caller never observes a cart older than its
own last completed mutation.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Any, Mapping

from event_cart.cart import pricing
from event_cart.cart.coordinator import RequestCoordinator, get_coordinator
from event_cart.cart.errors import CartServiceError, ValidationFailed
from event_cart.cart.models import Cart, Customization, ItemKind
from event_cart.cart.normalizer import normalize_cart
from event_cart.cart.service import CartServiceClient

logger = logging.getLogger(__name__)


class CartState(str, Enum):
    UNLOADED = "unloaded"
    LOADING = "loading"
    LOADED = "loaded"
    ERROR_EMPTY = "error_empty"
    ERROR_RETAINED = "error_retained"


@dataclass(frozen=True, slots=True)
class CartStats:
    item_count: int
    total: Decimal


class CartStore:
    def __init__(
        self,
        service: CartServiceClient,
        session_key: str,
        coordinator: RequestCoordinator | None = None,
        policy: pricing.PricingPolicy = pricing.DEFAULT_POLICY,
    ) -> None:
        self.service = service
        self.session_key = session_key
        self.coordinator = coordinator if coordinator is not None else get_coordinator()
        self.policy = policy
        self.cart: Cart | None = None
        self.state = CartState.UNLOADED
        self.error: CartServiceError | None = None

    @property
    def is_loaded(self) -> bool:
        return self.cart is not None

    async def refresh(self) -> Cart:
        previous = self.state
        self.state = CartState.LOADING
        try:
            cart = await self.coordinator.fetch_cart(self.session_key, self.service.get_cart)
        except BaseException:
            self.state = previous
            raise
        self.cart = cart
        self.error = self.coordinator.last_error(self.session_key)
        if self.error is None:
            self.state = CartState.LOADED
        elif self.coordinator.has_loaded(self.session_key):
            self.state = CartState.ERROR_RETAINED
        else:
            self.state = CartState.ERROR_EMPTY
        return cart

    async def _reload_after_mutation(self) -> Cart:
        self.coordinator.invalidate(self.session_key)
        return await self.refresh()

    async def _call(self, operation: str, call: Any) -> Any:
        try:
            return await call
        except CartServiceError as exc:
            logger.info("cart %s failed for %s: %s", operation, self.session_key, exc.message)
            self.error = exc
            raise

    async def add_item(
        self,
        product_id: str,
        item_kind: ItemKind = ItemKind.PACKAGE,
        customization: Customization | None = None,
        *,
        guest_count: int | None = None,
        event_date: str | None = None,
        event_location: str = "",
    ) -> Cart:
        if guest_count is None:
            guest_count = 1
        if guest_count < 1:
            self.error = ValidationFailed("Guest count must be at least 1")
            raise self.error

        customization = customization or Customization()
        payload: dict[str, Any] = {
            "itemKind": item_kind.value,
            "guests": guest_count,
            "eventDate": event_date or date.today().isoformat(),
            "location": event_location,
            "customization": customization.notes,
        }
        if item_kind is ItemKind.PACKAGE:
            payload["packageId"] = product_id
            payload["selectedAddOns"] = [
                {"addOnId": add_on_id, "quantity": quantity}
                for add_on_id, quantity in customization.add_ons.items()
            ]
            payload["removedFeatures"] = list(customization.removed_features)
        else:
            payload["serviceId"] = product_id

        await self._call("add", self.service.add_item(payload))
        logger.info("added %s %s to cart of %s", item_kind.value, product_id, self.session_key)
        return await self._reload_after_mutation()

    async def update_item(self, item_id: str, updates: Mapping[str, Any]) -> Cart:
        data = await self._call("update", self.service.update_item(item_id, updates))
        cart = normalize_cart(data)
        self.coordinator.store(self.session_key, cart)
        self.cart = cart
        self.state = CartState.LOADED
        self.error = None
        logger.info("updated cart item %s for %s", item_id, self.session_key)
        return cart

    async def remove_item(self, item_id: str) -> Cart:
        await self._call("remove", self.service.remove_item(item_id))
        logger.info("removed cart item %s for %s", item_id, self.session_key)
        return await self._reload_after_mutation()

    async def clear_cart(self) -> Cart:
        await self._call("clear", self.service.clear())
        self.cart = Cart.empty()
        self.coordinator.store(self.session_key, self.cart)
        self.state = CartState.LOADED
        self.error = None
        logger.info("cleared cart for %s", self.session_key)
        return self.cart

    def totals(self) -> pricing.CartTotals:
        items = self.cart.items if self.cart is not None else ()
        return pricing.cart_totals(items, self.policy)

    def get_cart_stats(self) -> CartStats:
        if self.cart is None:
            return CartStats(item_count=0, total=pricing.ZERO)
        totals = self.totals()
        return CartStats(item_count=totals.item_count, total=totals.total)

    def reconcile(self) -> pricing.TotalsCheck:
        return pricing.reconcile_totals(self.cart or Cart.empty(), self.policy)
