"""Cart and checkout price calculations.

Everything here is pure: the same items and policy always produce the same
figures. Items are expected to come out of the normalizer, so required prices
are present and non-negative.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import ROUND_CEILING, Decimal
from typing import Iterable

from event_cart.cart.models import Cart, CartItem, PackageItem
from event_cart.config import settings

logger = logging.getLogger(__name__)

ZERO = Decimal("0")
UNIT = Decimal("1")


@dataclass(frozen=True, slots=True)
class PricingPolicy:
    tax_rate: Decimal = settings.tax_rate
    service_fee_rate: Decimal = settings.service_fee_rate
    partial_payment_rate: Decimal = settings.partial_payment_rate
    outstation_marker: str = settings.outstation_marker
    outstation_surcharge: Decimal = settings.outstation_surcharge


DEFAULT_POLICY = PricingPolicy()


@dataclass(frozen=True, slots=True)
class CartTotals:
    item_count: int
    subtotal: Decimal
    add_ons_total: Decimal
    travel_fee: Decimal
    tax: Decimal
    total: Decimal


@dataclass(frozen=True, slots=True)
class CheckoutTotals:
    subtotal: Decimal
    service_fee: Decimal
    tax: Decimal
    total: Decimal


@dataclass(frozen=True, slots=True)
class TotalsCheck:
    server_total: Decimal
    client_total: Decimal
    difference: Decimal
    matches: bool


def ceil_unit(amount: Decimal) -> Decimal:
    return amount.quantize(UNIT, rounding=ROUND_CEILING)


def base_amount(item: CartItem) -> Decimal:
    """Net base price: guests scaled in, removed features taken out, never below zero."""
    if isinstance(item, PackageItem):
        package = item.package
        gross = package.base_price + package.per_guest_price * item.guest_count
        removed = sum((feature.price for feature in item.removed_features), ZERO)
        return max(ZERO, gross - removed)
    return item.service.fixed_price


def add_ons_amount(item: CartItem) -> Decimal:
    if not isinstance(item, PackageItem):
        return ZERO
    return sum(
        (add_on.unit_price * add_on.quantity for add_on in item.selected_add_ons),
        ZERO,
    )


def travel_fee(item: CartItem, policy: PricingPolicy = DEFAULT_POLICY) -> Decimal:
    location = (item.event_location or "").lower()
    if policy.outstation_marker and policy.outstation_marker.lower() in location:
        return policy.outstation_surcharge
    return ZERO


def line_total(item: CartItem, policy: PricingPolicy = DEFAULT_POLICY) -> Decimal:
    return base_amount(item) + add_ons_amount(item) + travel_fee(item, policy)


def cart_totals(
    items: Iterable[CartItem],
    policy: PricingPolicy = DEFAULT_POLICY,
) -> CartTotals:
    item_count = 0
    subtotal = ZERO
    add_ons_total = ZERO
    fees = ZERO
    for item in items:
        item_count += 1
        subtotal += base_amount(item)
        add_ons_total += add_ons_amount(item)
        fees += travel_fee(item, policy)

    taxable = subtotal + add_ons_total + fees
    tax = ceil_unit(taxable * policy.tax_rate)
    return CartTotals(
        item_count=item_count,
        subtotal=subtotal,
        add_ons_total=add_ons_total,
        travel_fee=fees,
        tax=tax,
        total=taxable + tax,
    )


def checkout_totals(
    subtotal: Decimal,
    policy: PricingPolicy = DEFAULT_POLICY,
) -> CheckoutTotals:
    """Order-level figures shown on the checkout page.

    The service fee and tax are both taken on the cart subtotal, not on each
    other.
    """
    service_fee = ceil_unit(subtotal * policy.service_fee_rate)
    tax = ceil_unit(subtotal * policy.tax_rate)
    return CheckoutTotals(
        subtotal=subtotal,
        service_fee=service_fee,
        tax=tax,
        total=subtotal + service_fee + tax,
    )


def partial_payment(total: Decimal, policy: PricingPolicy = DEFAULT_POLICY) -> Decimal:
    return ceil_unit(total * policy.partial_payment_rate)


def remaining_payment(total: Decimal, paid: Decimal = ZERO) -> Decimal:
    return max(ZERO, total - paid)


def items_total(items: Iterable[CartItem], policy: PricingPolicy = DEFAULT_POLICY) -> Decimal:
    return sum((line_total(item, policy) for item in items), ZERO)


def reconcile_totals(cart: Cart, policy: PricingPolicy = DEFAULT_POLICY) -> TotalsCheck:
    client_total = items_total(cart.items, policy)
    difference = cart.total_amount - client_total
    check = TotalsCheck(
        server_total=cart.total_amount,
        client_total=client_total,
        difference=difference,
        matches=difference == ZERO,
    )
    if not check.matches:
        logger.warning(
            "cart total mismatch: server=%s client=%s", cart.total_amount, client_total
        )
    return check
