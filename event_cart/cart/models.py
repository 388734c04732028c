from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Union


class ItemKind(str, Enum):
    PACKAGE = "package"
    STANDALONE_SERVICE = "service"


@dataclass(frozen=True, slots=True)
class PackageRef:
    id: str
    title: str
    base_price: Decimal
    per_guest_price: Decimal


@dataclass(frozen=True, slots=True)
class ServiceRef:
    id: str
    title: str
    fixed_price: Decimal


@dataclass(frozen=True, slots=True)
class SelectedAddOn:
    add_on_id: str
    unit_price: Decimal
    quantity: int = 1
    name: str = ""


@dataclass(frozen=True, slots=True)
class RemovedFeature:
    name: str
    price: Decimal


@dataclass(frozen=True, slots=True)
class PackageItem:
    id: str
    package: PackageRef
    guest_count: int = 1
    event_date: str = ""
    event_location: str = ""
    selected_add_ons: tuple[SelectedAddOn, ...] = ()
    removed_features: tuple[RemovedFeature, ...] = ()
    customization_notes: str = ""

    @property
    def kind(self) -> ItemKind:
        return ItemKind.PACKAGE

    @property
    def title(self) -> str:
        return self.package.title


@dataclass(frozen=True, slots=True)
class ServiceItem:
    id: str
    service: ServiceRef
    guest_count: int = 1
    event_date: str = ""
    event_location: str = ""
    customization_notes: str = ""

    @property
    def kind(self) -> ItemKind:
        return ItemKind.STANDALONE_SERVICE

    @property
    def title(self) -> str:
        return self.service.title


CartItem = Union[PackageItem, ServiceItem]


@dataclass(frozen=True, slots=True)
class Cart:
    items: tuple[CartItem, ...] = ()
    total_amount: Decimal = Decimal("0")
    item_count: int = 0

    @staticmethod
    def empty() -> Cart:
        return Cart(items=(), total_amount=Decimal("0"), item_count=0)

    @property
    def is_empty(self) -> bool:
        return self.item_count == 0


@dataclass(frozen=True, slots=True)
class Customization:
    """What the customer picked on the package page.

    ``add_ons`` maps an add-on id to the requested quantity, ``removed_features``
    lists the names of included features the customer opted out of.
    """

    add_ons: dict[str, int] = field(default_factory=dict)
    removed_features: tuple[str, ...] = ()
    notes: str = ""
