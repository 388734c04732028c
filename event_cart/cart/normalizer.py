"""Turns raw Cart Service rows into typed cart items.

Rows whose product is gone or lacks a required price are dropped from the
view. They stay in the server-side cart untouched.
"""
from __future__ import annotations

import logging
from decimal import Decimal, InvalidOperation
from typing import Any, Iterable, Mapping

from event_cart.cart import pricing
from event_cart.cart.models import (
    Cart,
    CartItem,
    ItemKind,
    PackageItem,
    PackageRef,
    RemovedFeature,
    SelectedAddOn,
    ServiceItem,
    ServiceRef,
)

logger = logging.getLogger(__name__)

LEGACY_KIND_NAMES = {
    "package": ItemKind.PACKAGE,
    "service": ItemKind.STANDALONE_SERVICE,
    "beatbloom": ItemKind.STANDALONE_SERVICE,
}


class InvalidRow(ValueError):
    pass


def to_money(value: Any) -> Decimal | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, ValueError):
        return None
    if not amount.is_finite() or amount < 0:
        return None
    return amount


def _require_money(mapping: Mapping[str, Any], *keys: str) -> Decimal:
    for key in keys:
        if key in mapping:
            amount = to_money(mapping[key])
            if amount is None:
                raise InvalidRow(f"{key} is not a valid amount")
            return amount
    raise InvalidRow(f"{keys[0]} is missing")


def _ref_id(ref: Mapping[str, Any]) -> str:
    return str(ref.get("id", ref.get("_id", "")))


def resolve_kind(raw: Mapping[str, Any]) -> ItemKind:
    name = raw.get("itemKind") or raw.get("itemType")
    if not name:
        return ItemKind.PACKAGE
    kind = LEGACY_KIND_NAMES.get(str(name).lower())
    if kind is None:
        raise InvalidRow(f"unknown item kind {name!r}")
    return kind


def _whole_number(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    try:
        number = Decimal(str(value))
    except (InvalidOperation, ValueError):
        return None
    if not number.is_finite() or number != number.to_integral_value():
        return None
    return int(number)


def _guest_count(raw: Mapping[str, Any], kind: ItemKind) -> int:
    """Guests scale package prices only; a missing or zero count means one guest."""
    guests = raw.get("guests")
    if not guests or kind is ItemKind.STANDALONE_SERVICE:
        count = _whole_number(guests) if guests else None
        return count if count is not None and count >= 1 else 1
    count = _whole_number(guests)
    if count is None or count < 1:
        raise InvalidRow("guests must be a positive whole number")
    return count


def _add_ons(raw: Mapping[str, Any]) -> tuple[SelectedAddOn, ...]:
    add_ons = []
    for entry in raw.get("selectedAddOns") or ():
        if not isinstance(entry, Mapping):
            raise InvalidRow("add-on entry is not an object")
        quantity = entry.get("quantity", 1)
        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 1:
            raise InvalidRow("add-on quantity must be at least 1")
        add_ons.append(
            SelectedAddOn(
                add_on_id=str(entry.get("addOnId", "")),
                unit_price=_require_money(entry, "price", "unitPrice"),
                quantity=quantity,
                name=entry.get("name") or "",
            )
        )
    return tuple(add_ons)


def _removed_features(raw: Mapping[str, Any]) -> tuple[RemovedFeature, ...]:
    features = []
    for entry in raw.get("removedFeatures") or ():
        if not isinstance(entry, Mapping):
            raise InvalidRow("removed feature is not an object")
        name = entry.get("name")
        if not name:
            raise InvalidRow("removed feature has no name")
        features.append(RemovedFeature(name=name, price=_require_money(entry, "price")))
    return tuple(features)


def _build(raw: Mapping[str, Any]) -> CartItem:
    kind = resolve_kind(raw)
    common = dict(
        id=str(raw.get("id", raw.get("_id", ""))),
        guest_count=_guest_count(raw, kind),
        event_date=raw.get("eventDate") or "",
        event_location=raw.get("location") or "",
        customization_notes=raw.get("customization") or "",
    )

    if kind is ItemKind.PACKAGE:
        ref = raw.get("packageId")
        if not isinstance(ref, Mapping):
            raise InvalidRow("package reference is missing")
        package = PackageRef(
            id=_ref_id(ref),
            title=ref.get("title") or "",
            base_price=_require_money(ref, "basePrice"),
            per_guest_price=_require_money(ref, "perGuestPrice"),
        )
        return PackageItem(
            package=package,
            selected_add_ons=_add_ons(raw),
            removed_features=_removed_features(raw),
            **common,
        )

    ref = raw.get("serviceId") or raw.get("beatBloomId")
    if not isinstance(ref, Mapping):
        raise InvalidRow("service reference is missing")
    service = ServiceRef(
        id=_ref_id(ref),
        title=ref.get("title") or "",
        fixed_price=_require_money(ref, "fixedPrice", "price"),
    )
    return ServiceItem(service=service, **common)


def normalize_item(raw: Any) -> CartItem | None:
    if not isinstance(raw, Mapping):
        logger.warning("dropping cart row that is not an object: %r", raw)
        return None
    try:
        return _build(raw)
    except InvalidRow as exc:
        logger.warning("dropping cart row %s: %s", raw.get("id", raw.get("_id")), exc)
        return None


def normalize_items(rows: Iterable[Any]) -> list[CartItem]:
    items = []
    for raw in rows:
        item = normalize_item(raw)
        if item is not None:
            items.append(item)
    return items


def normalize_cart(payload: Mapping[str, Any] | None) -> Cart:
    """Build a cart from the ``data`` node of a ``GET /cart`` response."""
    payload = payload or {}
    rows = payload.get("cartItems")
    if rows is None:
        rows = payload.get("items") or []
    if not isinstance(rows, list):
        logger.warning("cart payload has no item list: %r", rows)
        rows = []
    items = normalize_items(rows)

    server_total = to_money(payload.get("totalAmount"))
    if server_total is None or len(items) != len(rows):
        total_amount = pricing.items_total(items)
    else:
        total_amount = server_total

    return Cart(items=tuple(items), total_amount=total_amount, item_count=len(items))
