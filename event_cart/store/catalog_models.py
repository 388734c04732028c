from dataclasses import dataclass, field
from decimal import Decimal
from typing import List


@dataclass(slots=True)
class AddOnOption:
    name: str
    price: Decimal
    max_quantity: int = 1
    id: int | None = None


@dataclass(slots=True)
class IncludedFeature:
    name: str
    price: Decimal = Decimal("0")
    is_removable: bool = False


@dataclass(slots=True)
class PackageInfo:
    title: str
    base_price: Decimal
    per_guest_price: Decimal = Decimal("0")
    add_ons: List[AddOnOption] = field(default_factory=list)
    features: List[IncludedFeature] = field(default_factory=list)
    deleted: bool = False


@dataclass(slots=True)
class PackageEntity:
    id: int
    info: PackageInfo


@dataclass(slots=True)
class ServiceInfo:
    title: str
    fixed_price: Decimal
    deleted: bool = False


@dataclass(slots=True)
class ServiceEntity:
    id: int
    info: ServiceInfo
