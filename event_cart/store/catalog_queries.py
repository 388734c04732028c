from sqlalchemy import update as sa_update

from event_cart.store.catalog_models import (
    AddOnOption,
    IncludedFeature,
    PackageEntity,
    PackageInfo,
    ServiceEntity,
    ServiceInfo,
)
from event_cart.store.db import (
    AddOnOptionOrm,
    IncludedFeatureOrm,
    PackageOrm,
    ServiceOrm,
    SessionLocal,
)


def to_package_entity(orm: PackageOrm) -> PackageEntity:
    return PackageEntity(
        id=orm.id,
        info=PackageInfo(
            title=orm.title,
            base_price=orm.base_price,
            per_guest_price=orm.per_guest_price,
            add_ons=[
                AddOnOption(id=a.id, name=a.name, price=a.price, max_quantity=a.max_quantity)
                for a in orm.add_ons
            ],
            features=[
                IncludedFeature(name=f.name, price=f.price, is_removable=bool(f.is_removable))
                for f in orm.features
            ],
            deleted=bool(orm.deleted),
        ),
    )


def to_service_entity(orm: ServiceOrm) -> ServiceEntity:
    return ServiceEntity(
        id=orm.id,
        info=ServiceInfo(title=orm.title, fixed_price=orm.fixed_price, deleted=bool(orm.deleted)),
    )


def add_package(info: PackageInfo) -> PackageEntity:
    with SessionLocal.begin() as session:
        orm = PackageOrm(
            title=info.title,
            base_price=info.base_price,
            per_guest_price=info.per_guest_price,
            deleted=info.deleted,
            add_ons=[
                AddOnOptionOrm(name=a.name, price=a.price, max_quantity=a.max_quantity)
                for a in info.add_ons
            ],
            features=[
                IncludedFeatureOrm(name=f.name, price=f.price, is_removable=f.is_removable)
                for f in info.features
            ],
        )
        session.add(orm)
        session.flush()
        session.refresh(orm)
        return to_package_entity(orm)


def get_package(id: int) -> PackageEntity | None:
    with SessionLocal() as session:
        orm = session.get(PackageOrm, id)
        if orm is None or orm.deleted:
            return None
        return to_package_entity(orm)


def delete_package(id: int) -> None:
    with SessionLocal.begin() as session:
        session.execute(sa_update(PackageOrm).where(PackageOrm.id == id).values(deleted=True))


def add_service(info: ServiceInfo) -> ServiceEntity:
    with SessionLocal.begin() as session:
        orm = ServiceOrm(title=info.title, fixed_price=info.fixed_price, deleted=info.deleted)
        session.add(orm)
        session.flush()
        session.refresh(orm)
        return to_service_entity(orm)


def get_service(id: int) -> ServiceEntity | None:
    with SessionLocal() as session:
        orm = session.get(ServiceOrm, id)
        if orm is None or orm.deleted:
            return None
        return to_service_entity(orm)


def delete_service(id: int) -> None:
    with SessionLocal.begin() as session:
        session.execute(sa_update(ServiceOrm).where(ServiceOrm.id == id).values(deleted=True))
