from __future__ import annotations

from decimal import Decimal
from typing import List

from pydantic import BaseModel, ConfigDict, NonNegativeFloat, PositiveInt

from event_cart.store.catalog_models import (
    AddOnOption,
    IncludedFeature,
    PackageEntity,
    PackageInfo,
    ServiceEntity,
    ServiceInfo,
)


def _money(value: float) -> Decimal:
    return Decimal(str(value))


class AddOnOptionRequest(BaseModel):
    name: str
    price: NonNegativeFloat
    maxQuantity: PositiveInt = 1

    model_config = ConfigDict(extra="forbid")


class IncludedFeatureRequest(BaseModel):
    name: str
    price: NonNegativeFloat = 0
    isRemovable: bool = False

    model_config = ConfigDict(extra="forbid")


class PackageRequest(BaseModel):
    title: str
    basePrice: NonNegativeFloat
    perGuestPrice: NonNegativeFloat = 0
    addOns: List[AddOnOptionRequest] = []
    includedFeatures: List[IncludedFeatureRequest] = []

    model_config = ConfigDict(extra="forbid")

    def as_package_info(self) -> PackageInfo:
        return PackageInfo(
            title=self.title,
            base_price=_money(self.basePrice),
            per_guest_price=_money(self.perGuestPrice),
            add_ons=[
                AddOnOption(name=a.name, price=_money(a.price), max_quantity=a.maxQuantity)
                for a in self.addOns
            ],
            features=[
                IncludedFeature(name=f.name, price=_money(f.price), is_removable=f.isRemovable)
                for f in self.includedFeatures
            ],
        )


class AddOnOptionResponse(BaseModel):
    id: int
    name: str
    price: float
    maxQuantity: int


class IncludedFeatureResponse(BaseModel):
    name: str
    price: float
    isRemovable: bool


class PackageResponse(BaseModel):
    id: int
    title: str
    basePrice: float
    perGuestPrice: float
    addOns: List[AddOnOptionResponse]
    includedFeatures: List[IncludedFeatureResponse]
    deleted: bool

    @staticmethod
    def from_entity(entity: PackageEntity) -> PackageResponse:
        info = entity.info
        return PackageResponse(
            id=entity.id,
            title=info.title,
            basePrice=float(info.base_price),
            perGuestPrice=float(info.per_guest_price),
            addOns=[
                AddOnOptionResponse(
                    id=a.id, name=a.name, price=float(a.price), maxQuantity=a.max_quantity
                )
                for a in info.add_ons
            ],
            includedFeatures=[
                IncludedFeatureResponse(
                    name=f.name, price=float(f.price), isRemovable=f.is_removable
                )
                for f in info.features
            ],
            deleted=info.deleted,
        )


class ServiceRequest(BaseModel):
    title: str
    fixedPrice: NonNegativeFloat

    model_config = ConfigDict(extra="forbid")

    def as_service_info(self) -> ServiceInfo:
        return ServiceInfo(title=self.title, fixed_price=_money(self.fixedPrice))


class ServiceResponse(BaseModel):
    id: int
    title: str
    fixedPrice: float
    deleted: bool

    @staticmethod
    def from_entity(entity: ServiceEntity) -> ServiceResponse:
        return ServiceResponse(
            id=entity.id,
            title=entity.info.title,
            fixedPrice=float(entity.info.fixed_price),
            deleted=entity.info.deleted,
        )
