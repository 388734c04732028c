from __future__ import annotations

from http import HTTPStatus
from typing import Any

from fastapi.testclient import TestClient

AUTH = {"Authorization": "Bearer customer-1"}
OTHER = {"Authorization": "Bearer customer-2"}


def create_package(client: TestClient) -> dict[str, Any]:
    resp = client.post(
        "/packages",
        json={
            "title": "Royal Wedding",
            "basePrice": 5000,
            "perGuestPrice": 500,
            "addOns": [
                {"name": "Drone coverage", "price": 300, "maxQuantity": 3},
                {"name": "Live band", "price": 1500},
            ],
            "includedFeatures": [
                {"name": "Welcome drinks", "price": 1000, "isRemovable": True},
                {"name": "Stage decor", "price": 2500},
            ],
        },
    )
    assert resp.status_code == HTTPStatus.CREATED
    return resp.json()


def create_service(client: TestClient, title: str = "Dhol Beats", price: float = 3500) -> dict[str, Any]:
    resp = client.post("/services", json={"title": title, "fixedPrice": price})
    assert resp.status_code == HTTPStatus.CREATED
    return resp.json()


def add_package(client: TestClient, package: dict[str, Any], **overrides: Any):
    body = {
        "itemKind": "package",
        "packageId": package["id"],
        "guests": 4,
        "eventDate": "2026-12-12",
        "location": "Mumbai",
        "selectedAddOns": [{"addOnId": package["addOns"][0]["id"], "quantity": 2}],
    }
    body.update(overrides)
    return client.post("/cart", json=body, headers=AUTH)


def test_cart_requires_bearer_token(client: TestClient) -> None:
    r = client.get("/cart")
    assert r.status_code == HTTPStatus.UNAUTHORIZED
    assert r.json() == {"success": False, "message": "Authentication required"}

    r = client.get("/cart", headers={"Authorization": "Basic abc"})
    assert r.status_code == HTTPStatus.UNAUTHORIZED

    r = client.post("/cart", json={"packageId": 1, "eventDate": "2026-12-12"})
    assert r.status_code == HTTPStatus.UNAUTHORIZED


def test_empty_cart(client: TestClient) -> None:
    r = client.get("/cart", headers=AUTH)
    assert r.status_code == HTTPStatus.OK
    assert r.json()["success"] is True
    assert r.json()["data"] == {"cartItems": [], "totalAmount": 0.0, "itemCount": 0}


def test_add_package_then_merge(client: TestClient) -> None:
    package = create_package(client)

    r = add_package(client, package, customization='{"theme": "gold"}')
    assert r.status_code == HTTPStatus.CREATED
    assert r.headers["location"].startswith("/cart/")
    data = r.json()["data"]
    assert data["itemCount"] == 1
    assert data["totalAmount"] == 7600.0
    item = data["cartItems"][0]
    assert item["itemKind"] == "package"
    assert item["packageId"]["basePrice"] == 5000.0
    assert item["serviceId"] is None
    assert item["selectedAddOns"][0]["name"] == "Drone coverage"
    assert item["selectedAddOns"][0]["price"] == 300.0
    assert item["lineTotal"] == 7600.0
    assert item["customization"] == '{"theme": "gold"}'

    r = add_package(client, package, location="Outstation Resort")
    assert r.status_code == HTTPStatus.OK
    data = r.json()["data"]
    assert data["itemCount"] == 1
    assert data["totalAmount"] == 9600.0
    assert data["cartItems"][0]["id"] == item["id"]


def test_add_service(client: TestClient) -> None:
    service = create_service(client)
    r = client.post(
        "/cart",
        json={"itemKind": "service", "serviceId": service["id"], "eventDate": "2026-12-12"},
        headers=AUTH,
    )
    assert r.status_code == HTTPStatus.CREATED
    item = r.json()["data"]["cartItems"][0]
    assert item["serviceId"]["fixedPrice"] == 3500.0
    assert item["packageId"] is None
    assert item["guests"] == 1
    assert r.json()["data"]["totalAmount"] == 3500.0


def test_add_validation_errors(client: TestClient) -> None:
    package = create_package(client)
    service = create_service(client)

    r = client.post("/cart", json={"itemKind": "package", "eventDate": "2026-12-12"}, headers=AUTH)
    assert r.status_code == HTTPStatus.BAD_REQUEST
    assert r.json()["success"] is False
    assert "packageId is required" in r.json()["message"]

    r = client.post(
        "/cart",
        json={"itemKind": "service", "packageId": package["id"], "serviceId": service["id"], "eventDate": "x"},
        headers=AUTH,
    )
    assert r.status_code == HTTPStatus.BAD_REQUEST

    r = add_package(client, package, guests=0)
    assert r.status_code == HTTPStatus.BAD_REQUEST

    r = add_package(client, package, selectedAddOns=[{"addOnId": package["addOns"][0]["id"], "quantity": 4}])
    assert r.status_code == HTTPStatus.BAD_REQUEST
    assert r.json()["message"] == "Add-on 'Drone coverage' quantity must be between 1 and 3"

    r = add_package(client, package, selectedAddOns=[{"addOnId": 999999, "quantity": 1}])
    assert r.status_code == HTTPStatus.BAD_REQUEST

    r = add_package(client, package, removedFeatures=["Stage decor"])
    assert r.status_code == HTTPStatus.BAD_REQUEST
    assert r.json()["message"] == "Feature 'Stage decor' cannot be removed"

    r = add_package(client, package, removedFeatures=["Fireworks"])
    assert r.status_code == HTTPStatus.BAD_REQUEST

    assert client.get("/cart", headers=AUTH).json()["data"]["itemCount"] == 0


def test_removed_features_cannot_exceed_package_price(client: TestClient) -> None:
    r = client.post(
        "/packages",
        json={
            "title": "Small",
            "basePrice": 500,
            "includedFeatures": [{"name": "Catering", "price": 800, "isRemovable": True}],
        },
    )
    package = r.json()
    r = client.post(
        "/cart",
        json={"packageId": package["id"], "eventDate": "2026-12-12", "removedFeatures": ["Catering"]},
        headers=AUTH,
    )
    assert r.status_code == HTTPStatus.BAD_REQUEST
    assert r.json()["message"] == "Removed features cannot exceed the package price"


def test_add_unknown_product(client: TestClient) -> None:
    r = client.post("/cart", json={"packageId": 424242, "eventDate": "2026-12-12"}, headers=AUTH)
    assert r.status_code == HTTPStatus.NOT_FOUND
    assert r.json() == {"success": False, "message": "Package not found"}

    r = client.post(
        "/cart",
        json={"itemKind": "service", "serviceId": 424242, "eventDate": "2026-12-12"},
        headers=AUTH,
    )
    assert r.status_code == HTTPStatus.NOT_FOUND


def test_update_and_remove(client: TestClient) -> None:
    package = create_package(client)
    item_id = add_package(client, package).json()["data"]["cartItems"][0]["id"]

    r = client.put(f"/cart/{item_id}", json={"guests": 6, "removedFeatures": ["Welcome drinks"]}, headers=AUTH)
    assert r.status_code == HTTPStatus.OK
    item = r.json()["data"]["cartItems"][0]
    assert item["guests"] == 6
    assert item["removedFeatures"] == [{"name": "Welcome drinks", "price": 1000.0}]
    # 5000 + 6 * 500 - 1000 + 2 * 300
    assert r.json()["data"]["totalAmount"] == 7600.0

    r = client.put(f"/cart/{item_id}", json={"selectedAddOns": [{"addOnId": package["addOns"][1]["id"], "quantity": 2}]}, headers=AUTH)
    assert r.status_code == HTTPStatus.BAD_REQUEST

    r = client.put("/cart/999999", json={"guests": 2}, headers=AUTH)
    assert r.status_code == HTTPStatus.NOT_FOUND
    assert r.json()["message"] == "Cart item not found"

    r = client.put(f"/cart/{item_id}", json={"guests": 2}, headers=OTHER)
    assert r.status_code == HTTPStatus.NOT_FOUND

    r = client.delete(f"/cart/{item_id}", headers=OTHER)
    assert r.status_code == HTTPStatus.NOT_FOUND

    r = client.delete(f"/cart/{item_id}", headers=AUTH)
    assert r.status_code == HTTPStatus.OK
    assert r.json()["success"] is True

    r = client.delete(f"/cart/{item_id}", headers=AUTH)
    assert r.status_code == HTTPStatus.NOT_FOUND

    data = client.get("/cart", headers=AUTH).json()["data"]
    assert data == {"cartItems": [], "totalAmount": 0.0, "itemCount": 0}


def test_clear_cart_only_touches_owner(client: TestClient) -> None:
    package = create_package(client)
    service = create_service(client)
    add_package(client, package)
    client.post("/cart", json={"itemKind": "service", "serviceId": service["id"], "eventDate": "2026-12-12"}, headers=AUTH)
    client.post("/cart", json={"packageId": package["id"], "eventDate": "2026-12-12"}, headers=OTHER)

    r = client.delete("/cart", headers=AUTH)
    assert r.status_code == HTTPStatus.OK

    assert client.get("/cart", headers=AUTH).json()["data"]["itemCount"] == 0
    assert client.get("/cart", headers=OTHER).json()["data"]["itemCount"] == 1


def test_deleted_product_is_kept_but_not_priced(client: TestClient) -> None:
    package = create_package(client)
    service = create_service(client)
    add_package(client, package)
    client.post("/cart", json={"itemKind": "service", "serviceId": service["id"], "eventDate": "2026-12-12"}, headers=AUTH)

    assert client.delete(f"/services/{service['id']}").status_code == HTTPStatus.OK

    data = client.get("/cart", headers=AUTH).json()["data"]
    assert len(data["cartItems"]) == 2
    orphan = data["cartItems"][1]
    assert orphan["serviceId"] is None
    assert orphan["lineTotal"] is None
    assert data["itemCount"] == 1
    assert data["totalAmount"] == 7600.0


def test_catalog_crud(client: TestClient) -> None:
    package = create_package(client)
    assert package["addOns"][1]["maxQuantity"] == 1
    assert package["includedFeatures"][1]["isRemovable"] is False

    r = client.get(f"/packages/{package['id']}")
    assert r.status_code == HTTPStatus.OK
    assert r.json()["title"] == "Royal Wedding"

    assert client.delete(f"/packages/{package['id']}").status_code == HTTPStatus.OK
    assert client.get(f"/packages/{package['id']}").status_code == HTTPStatus.NOT_FOUND
    assert client.get("/packages/999999").status_code == HTTPStatus.NOT_FOUND

    service = create_service(client, "Floral arch", 12000)
    r = client.get(f"/services/{service['id']}")
    assert r.json()["fixedPrice"] == 12000.0
    assert client.delete(f"/services/{service['id']}").status_code == HTTPStatus.OK
    assert client.get(f"/services/{service['id']}").status_code == HTTPStatus.NOT_FOUND

    r = client.post("/services", json={"title": "Bad", "fixedPrice": -1})
    assert r.status_code == HTTPStatus.BAD_REQUEST
