from __future__ import annotations

import os
from decimal import Decimal
from typing import Any, Iterator

if "DATABASE_URL" not in os.environ:
    os.environ["DATABASE_URL"] = "sqlite+pysqlite:///./test_event_cart.db"

import httpx
import pytest
from fastapi.testclient import TestClient

from event_cart import main as app_module
from event_cart.cart.coordinator import RequestCoordinator
from event_cart.cart.cart_store import CartStore
from event_cart.cart.service import CartServiceClient
from event_cart.store import catalog_queries
from event_cart.store.catalog_models import (
    AddOnOption,
    IncludedFeature,
    PackageEntity,
    PackageInfo,
    ServiceEntity,
    ServiceInfo,
)
from event_cart.store.db import Base, engine


@pytest.fixture(autouse=True)
def _clean_db() -> Iterator[None]:
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture()
def client() -> Iterator[TestClient]:
    with TestClient(app_module.app) as c:
        yield c


class FakeClock:
    def __init__(self, now: float = 0.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(1000.0)


@pytest.fixture
def coordinator() -> RequestCoordinator:
    return RequestCoordinator()


def seed_package(
    title: str = "Royal Wedding",
    base_price: str = "5000",
    per_guest_price: str = "500",
) -> PackageEntity:
    return catalog_queries.add_package(
        PackageInfo(
            title=title,
            base_price=Decimal(base_price),
            per_guest_price=Decimal(per_guest_price),
            add_ons=[
                AddOnOption(name="Drone coverage", price=Decimal("300"), max_quantity=3),
                AddOnOption(name="Live band", price=Decimal("1500"), max_quantity=1),
            ],
            features=[
                IncludedFeature(name="Welcome drinks", price=Decimal("1000"), is_removable=True),
                IncludedFeature(name="Stage decor", price=Decimal("2500"), is_removable=False),
            ],
        )
    )


def seed_service(title: str = "Dhol Beats", fixed_price: str = "3500") -> ServiceEntity:
    return catalog_queries.add_service(ServiceInfo(title=title, fixed_price=Decimal(fixed_price)))


@pytest.fixture
def make_store(coordinator: RequestCoordinator):
    transport = httpx.ASGITransport(app=app_module.app)

    def _make(user: str | None = "customer-1") -> CartStore:
        service = CartServiceClient(base_url="http://testserver", token=user, transport=transport)
        return CartStore(service, session_key=user or "anonymous", coordinator=coordinator)

    return _make


def package_row(
    id: str = "row-1",
    base_price: Any = 5000,
    per_guest_price: Any = 500,
    guests: Any = 4,
    location: str = "Mumbai",
    add_ons: list[dict[str, Any]] | None = None,
    removed: list[dict[str, Any]] | None = None,
) -> dict[str, Any]:
    package: dict[str, Any] = {"id": "pkg-1", "title": "Royal Wedding"}
    if base_price is not None:
        package["basePrice"] = base_price
    if per_guest_price is not None:
        package["perGuestPrice"] = per_guest_price
    return {
        "id": id,
        "itemKind": "package",
        "packageId": package,
        "serviceId": None,
        "guests": guests,
        "eventDate": "2026-12-12",
        "location": location,
        "selectedAddOns": add_ons if add_ons is not None else [
            {"addOnId": "addon-1", "name": "Drone coverage", "price": 300, "quantity": 2}
        ],
        "removedFeatures": removed or [],
        "customization": "",
    }


def service_row(id: str = "row-2", fixed_price: Any = 3500, location: str = "Pune") -> dict[str, Any]:
    service: dict[str, Any] = {"id": "svc-1", "title": "Dhol Beats"}
    if fixed_price is not None:
        service["fixedPrice"] = fixed_price
    return {
        "id": id,
        "itemKind": "service",
        "packageId": None,
        "serviceId": service,
        "guests": 1,
        "eventDate": "2026-12-12",
        "location": location,
        "selectedAddOns": [],
        "removedFeatures": [],
        "customization": "",
    }


def cart_payload(rows: list[dict[str, Any]], total: Any = None) -> dict[str, Any]:
    payload: dict[str, Any] = {"cartItems": rows, "itemCount": len(rows)}
    if total is not None:
        payload["totalAmount"] = total
    return payload
