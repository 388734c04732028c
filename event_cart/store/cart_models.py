from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, List

from event_cart.store.catalog_models import PackageEntity, ServiceEntity


@dataclass(slots=True)
class AddOnLine:
    add_on_id: int
    name: str
    price: Decimal
    quantity: int


@dataclass(slots=True)
class RemovedFeatureLine:
    name: str
    price: Decimal


@dataclass(slots=True)
class CartItemInfo:
    item_kind: str
    package: PackageEntity | None
    service: ServiceEntity | None
    guests: int
    event_date: str
    location: str
    customization: str
    add_ons: List[AddOnLine] = field(default_factory=list)
    removed_features: List[RemovedFeatureLine] = field(default_factory=list)
    line_total: Decimal | None = None


@dataclass(slots=True)
class CartItemEntity:
    id: int
    info: CartItemInfo


@dataclass(slots=True)
class CartSnapshot:
    items: List[CartItemEntity]
    total_amount: Decimal
    item_count: int


@dataclass(slots=True)
class NewCartItemInfo:
    item_kind: str
    product_id: int
    guests: int
    event_date: str
    location: str = ""
    customization: str = ""
    add_ons: Dict[int, int] = field(default_factory=dict)
    removed_features: List[str] = field(default_factory=list)


@dataclass(slots=True)
class PatchCartItemInfo:
    guests: int | None = None
    event_date: str | None = None
    location: str | None = None
    customization: str | None = None
    add_ons: Dict[int, int] | None = None
    removed_features: List[str] | None = None
