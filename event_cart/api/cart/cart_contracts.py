from __future__ import annotations

from typing import List, Literal

from pydantic import BaseModel, ConfigDict, PositiveInt, model_validator

from event_cart.store.cart_models import (
    AddOnLine,
    CartItemEntity,
    CartSnapshot,
    NewCartItemInfo,
    PatchCartItemInfo,
    RemovedFeatureLine,
)
from event_cart.store.catalog_models import PackageEntity, ServiceEntity


class PackageRefResponse(BaseModel):
    id: int
    title: str
    basePrice: float
    perGuestPrice: float

    @staticmethod
    def from_entity(entity: PackageEntity) -> PackageRefResponse:
        return PackageRefResponse(
            id=entity.id,
            title=entity.info.title,
            basePrice=float(entity.info.base_price),
            perGuestPrice=float(entity.info.per_guest_price),
        )


class ServiceRefResponse(BaseModel):
    id: int
    title: str
    fixedPrice: float

    @staticmethod
    def from_entity(entity: ServiceEntity) -> ServiceRefResponse:
        return ServiceRefResponse(
            id=entity.id,
            title=entity.info.title,
            fixedPrice=float(entity.info.fixed_price),
        )


class AddOnLineResponse(BaseModel):
    addOnId: int
    name: str
    price: float
    quantity: int

    @staticmethod
    def from_line(line: AddOnLine) -> AddOnLineResponse:
        return AddOnLineResponse(
            addOnId=line.add_on_id,
            name=line.name,
            price=float(line.price),
            quantity=line.quantity,
        )


class RemovedFeatureResponse(BaseModel):
    name: str
    price: float

    @staticmethod
    def from_line(line: RemovedFeatureLine) -> RemovedFeatureResponse:
        return RemovedFeatureResponse(name=line.name, price=float(line.price))


class CartItemResponse(BaseModel):
    id: int
    itemKind: str
    packageId: PackageRefResponse | None = None
    serviceId: ServiceRefResponse | None = None
    guests: int
    eventDate: str
    location: str
    selectedAddOns: List[AddOnLineResponse]
    removedFeatures: List[RemovedFeatureResponse]
    customization: str
    lineTotal: float | None = None

    @staticmethod
    def from_entity(entity: CartItemEntity) -> CartItemResponse:
        info = entity.info
        return CartItemResponse(
            id=entity.id,
            itemKind=info.item_kind,
            packageId=PackageRefResponse.from_entity(info.package) if info.package else None,
            serviceId=ServiceRefResponse.from_entity(info.service) if info.service else None,
            guests=info.guests,
            eventDate=info.event_date,
            location=info.location,
            selectedAddOns=[AddOnLineResponse.from_line(a) for a in info.add_ons],
            removedFeatures=[RemovedFeatureResponse.from_line(f) for f in info.removed_features],
            customization=info.customization,
            lineTotal=float(info.line_total) if info.line_total is not None else None,
        )


class CartDataResponse(BaseModel):
    cartItems: List[CartItemResponse]
    totalAmount: float
    itemCount: int

    @staticmethod
    def from_snapshot(snapshot: CartSnapshot) -> CartDataResponse:
        return CartDataResponse(
            cartItems=[CartItemResponse.from_entity(item) for item in snapshot.items],
            totalAmount=float(snapshot.total_amount),
            itemCount=snapshot.item_count,
        )


class CartResponse(BaseModel):
    success: bool = True
    message: str | None = None
    data: CartDataResponse


class MessageResponse(BaseModel):
    success: bool = True
    message: str


class AddOnSelectionRequest(BaseModel):
    addOnId: int
    quantity: PositiveInt = 1

    model_config = ConfigDict(extra="forbid")


class AddCartItemRequest(BaseModel):
    itemKind: Literal["package", "service"] = "package"
    packageId: int | None = None
    serviceId: int | None = None
    guests: PositiveInt = 1
    eventDate: str
    location: str = ""
    customization: str = ""
    selectedAddOns: List[AddOnSelectionRequest] = []
    removedFeatures: List[str] = []

    model_config = ConfigDict(extra="forbid")

    @model_validator(mode="after")
    def _check_product_reference(self) -> AddCartItemRequest:
        if self.itemKind == "package":
            if self.packageId is None:
                raise ValueError("packageId is required for package items")
            if self.serviceId is not None:
                raise ValueError("package items cannot carry a serviceId")
        else:
            if self.serviceId is None:
                raise ValueError("serviceId is required for service items")
            if self.packageId is not None:
                raise ValueError("service items cannot carry a packageId")
        return self

    def as_new_cart_item_info(self) -> NewCartItemInfo:
        product_id = self.packageId if self.itemKind == "package" else self.serviceId
        return NewCartItemInfo(
            item_kind=self.itemKind,
            product_id=product_id,
            guests=self.guests,
            event_date=self.eventDate,
            location=self.location,
            customization=self.customization,
            add_ons={a.addOnId: a.quantity for a in self.selectedAddOns},
            removed_features=list(self.removedFeatures),
        )


class PatchCartItemRequest(BaseModel):
    guests: PositiveInt | None = None
    eventDate: str | None = None
    location: str | None = None
    customization: str | None = None
    selectedAddOns: List[AddOnSelectionRequest] | None = None
    removedFeatures: List[str] | None = None

    model_config = ConfigDict(extra="forbid")

    def as_patch_cart_item_info(self) -> PatchCartItemInfo:
        return PatchCartItemInfo(
            guests=self.guests,
            event_date=self.eventDate,
            location=self.location,
            customization=self.customization,
            add_ons=(
                {a.addOnId: a.quantity for a in self.selectedAddOns}
                if self.selectedAddOns is not None
                else None
            ),
            removed_features=list(self.removedFeatures) if self.removedFeatures is not None else None,
        )
