from decimal import Decimal
from typing import Dict, List, Tuple

from sqlalchemy import delete as sa_delete, select

from event_cart.cart import pricing
from event_cart.cart.models import (
    CartItem,
    ItemKind,
    PackageItem,
    PackageRef,
    RemovedFeature,
    SelectedAddOn,
    ServiceItem,
    ServiceRef,
)
from event_cart.store.cart_models import (
    AddOnLine,
    CartItemEntity,
    CartItemInfo,
    CartSnapshot,
    NewCartItemInfo,
    PatchCartItemInfo,
    RemovedFeatureLine,
)
from event_cart.store.catalog_models import PackageEntity
from event_cart.store.catalog_queries import to_package_entity, to_service_entity
from event_cart.store.db import CartItemOrm, PackageOrm, ServiceOrm, SessionLocal


class CartValidationError(ValueError):
    pass


class ProductNotFound(LookupError):
    pass


def _as_priced_item(id: int, info: CartItemInfo) -> CartItem | None:
    if info.item_kind == ItemKind.STANDALONE_SERVICE.value:
        if info.service is None:
            return None
        return ServiceItem(
            id=str(id),
            service=ServiceRef(
                id=str(info.service.id),
                title=info.service.info.title,
                fixed_price=info.service.info.fixed_price,
            ),
            guest_count=info.guests,
            event_date=info.event_date,
            event_location=info.location,
            customization_notes=info.customization,
        )

    if info.package is None:
        return None
    return PackageItem(
        id=str(id),
        package=PackageRef(
            id=str(info.package.id),
            title=info.package.info.title,
            base_price=info.package.info.base_price,
            per_guest_price=info.package.info.per_guest_price,
        ),
        guest_count=info.guests,
        event_date=info.event_date,
        event_location=info.location,
        selected_add_ons=tuple(
            SelectedAddOn(
                add_on_id=str(a.add_on_id), unit_price=a.price, quantity=a.quantity, name=a.name
            )
            for a in info.add_ons
        ),
        removed_features=tuple(RemovedFeature(name=f.name, price=f.price) for f in info.removed_features),
        customization_notes=info.customization,
    )


def _to_entity(orm: CartItemOrm) -> CartItemEntity:
    package = orm.package if orm.package is not None and not orm.package.deleted else None
    service = orm.service if orm.service is not None and not orm.service.deleted else None
    info = CartItemInfo(
        item_kind=orm.item_kind,
        package=to_package_entity(package) if package is not None else None,
        service=to_service_entity(service) if service is not None else None,
        guests=orm.guests,
        event_date=orm.event_date,
        location=orm.location,
        customization=orm.customization,
        add_ons=[
            AddOnLine(
                add_on_id=int(a["addOnId"]),
                name=a["name"],
                price=Decimal(a["price"]),
                quantity=int(a["quantity"]),
            )
            for a in orm.selected_add_ons or []
        ],
        removed_features=[
            RemovedFeatureLine(name=f["name"], price=Decimal(f["price"]))
            for f in orm.removed_features or []
        ],
    )
    item = _as_priced_item(orm.id, info)
    info.line_total = pricing.line_total(item) if item is not None else None
    return CartItemEntity(id=orm.id, info=info)


def _resolve_customization(
    package: PackageEntity,
    guests: int,
    add_ons: Dict[int, int],
    removed_features: List[str],
) -> Tuple[list, list]:
    options = {option.id: option for option in package.info.add_ons}
    add_on_rows = []
    for add_on_id, quantity in add_ons.items():
        option = options.get(add_on_id)
        if option is None:
            raise CartValidationError(f"Add-on {add_on_id} is not offered by this package")
        if not 1 <= quantity <= option.max_quantity:
            raise CartValidationError(
                f"Add-on '{option.name}' quantity must be between 1 and {option.max_quantity}"
            )
        add_on_rows.append(
            {"addOnId": option.id, "name": option.name, "price": str(option.price), "quantity": quantity}
        )

    features = {feature.name: feature for feature in package.info.features}
    removed_rows = []
    for name in dict.fromkeys(removed_features):
        feature = features.get(name)
        if feature is None:
            raise CartValidationError(f"Feature '{name}' is not included in this package")
        if not feature.is_removable:
            raise CartValidationError(f"Feature '{name}' cannot be removed")
        removed_rows.append({"name": feature.name, "price": str(feature.price)})

    gross = package.info.base_price + package.info.per_guest_price * guests
    removed_total = sum((Decimal(row["price"]) for row in removed_rows), Decimal("0"))
    if removed_total > gross:
        raise CartValidationError("Removed features cannot exceed the package price")

    return add_on_rows, removed_rows


def get_snapshot(user_id: str) -> CartSnapshot:
    with SessionLocal() as session:
        rows = session.execute(
            select(CartItemOrm).where(CartItemOrm.user_id == user_id).order_by(CartItemOrm.id)
        ).scalars().all()
        items = [_to_entity(orm) for orm in rows]

    priced = [item.info.line_total for item in items if item.info.line_total is not None]
    return CartSnapshot(
        items=items,
        total_amount=sum(priced, Decimal("0")),
        item_count=len(priced),
    )


def add_item(user_id: str, new: NewCartItemInfo) -> Tuple[CartItemEntity, bool]:
    """Add a product to the user's cart, merging into an existing row for the same product."""
    with SessionLocal.begin() as session:
        if new.item_kind == ItemKind.STANDALONE_SERVICE.value:
            service = session.get(ServiceOrm, new.product_id)
            if service is None or service.deleted:
                raise ProductNotFound("Service not found")
            add_on_rows, removed_rows = [], []
            same_product = CartItemOrm.service_id == new.product_id
        else:
            package = session.get(PackageOrm, new.product_id)
            if package is None or package.deleted:
                raise ProductNotFound("Package not found")
            add_on_rows, removed_rows = _resolve_customization(
                to_package_entity(package), new.guests, new.add_ons, new.removed_features
            )
            same_product = CartItemOrm.package_id == new.product_id

        orm = session.execute(
            select(CartItemOrm).where(
                CartItemOrm.user_id == user_id,
                CartItemOrm.item_kind == new.item_kind,
                same_product,
            )
        ).scalars().first()
        created = orm is None
        if created:
            orm = CartItemOrm(user_id=user_id, item_kind=new.item_kind)
            if new.item_kind == ItemKind.STANDALONE_SERVICE.value:
                orm.service_id = new.product_id
            else:
                orm.package_id = new.product_id
            session.add(orm)

        orm.guests = new.guests
        orm.event_date = new.event_date
        orm.location = new.location
        orm.customization = new.customization
        orm.selected_add_ons = add_on_rows
        orm.removed_features = removed_rows
        session.flush()
        session.refresh(orm)
        return _to_entity(orm), created


def update_item(user_id: str, item_id: int, patch: PatchCartItemInfo) -> CartItemEntity | None:
    with SessionLocal.begin() as session:
        orm = session.execute(
            select(CartItemOrm).where(CartItemOrm.id == item_id, CartItemOrm.user_id == user_id)
        ).scalars().first()
        if orm is None:
            return None

        if patch.guests is not None:
            orm.guests = patch.guests
        if patch.event_date is not None:
            orm.event_date = patch.event_date
        if patch.location is not None:
            orm.location = patch.location
        if patch.customization is not None:
            orm.customization = patch.customization

        package = orm.package
        if orm.item_kind == ItemKind.PACKAGE.value and package is not None and not package.deleted:
            add_ons = patch.add_ons
            if add_ons is None:
                add_ons = {int(a["addOnId"]): int(a["quantity"]) for a in orm.selected_add_ons or []}
            removed = patch.removed_features
            if removed is None:
                removed = [f["name"] for f in orm.removed_features or []]
            orm.selected_add_ons, orm.removed_features = _resolve_customization(
                to_package_entity(package), orm.guests, add_ons, removed
            )

        session.flush()
        session.refresh(orm)
        return _to_entity(orm)


def remove_item(user_id: str, item_id: int) -> bool:
    with SessionLocal.begin() as session:
        result = session.execute(
            sa_delete(CartItemOrm).where(CartItemOrm.id == item_id, CartItemOrm.user_id == user_id)
        )
        return result.rowcount > 0


def clear(user_id: str) -> int:
    with SessionLocal.begin() as session:
        result = session.execute(sa_delete(CartItemOrm).where(CartItemOrm.user_id == user_id))
        return result.rowcount
