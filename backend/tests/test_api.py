# Overview: Pytest coverage for the HTTP contract consumed by the front-end.

import json
from urllib.parse import quote

import pytest
from sqlalchemy.exc import OperationalError

from heladeria.extensions import db
from heladeria.models import Order, OrderItem


class TestFlavorRoutes:
    def test_list_flavors(self, client, flavors):
        response = client.get("/flavors")
        assert response.status_code == 200
        body = response.get_json()
        assert [f["name"] for f in body] == ["Fresa", "Limón", "Mango"]
        assert set(body[0]) == {"id", "name", "price", "active", "createdAt"}
        assert body[0]["price"] == 12.0
        assert body[0]["active"] is True

    def test_add_flavor(self, client, db_session):
        response = client.post("/flavors", json={"name": "Coco", "price": 15})
        assert response.status_code == 200
        assert "message" in response.get_json()
        assert [f["name"] for f in client.get("/flavors").get_json()] == ["Coco"]

    def test_add_duplicate_is_not_an_error(self, client, db_session):
        client.post("/flavors", json={"name": "Limón", "price": 12})
        response = client.post("/flavors", json={"name": "Limón", "price": 12})
        assert response.status_code == 200
        assert len(client.get("/flavors").get_json()) == 1

    def test_add_missing_fields(self, client, db_session):
        response = client.post("/flavors", json={"name": "Coco"})
        assert response.status_code == 400
        assert "error" in response.get_json()

    def test_add_without_body(self, client, db_session):
        response = client.post("/flavors")
        assert response.status_code == 400

    def test_update_flavor(self, client, flavors):
        response = client.put(f"/flavors/{quote('Limón')}", json={"price": 13.5})
        assert response.status_code == 200
        limon = [f for f in client.get("/flavors").get_json() if f["name"] == "Limón"][0]
        assert limon["price"] == 13.5

    def test_update_without_fields(self, client, flavors):
        response = client.put("/flavors/Fresa", json={})
        assert response.status_code == 400
        assert response.get_json()["error"] == "No fields to update"

    def test_update_unknown_flavor_succeeds(self, client, flavors):
        response = client.put("/flavors/Chicle", json={"price": 1})
        assert response.status_code == 200

    def test_delete_flavor(self, client, flavors):
        response = client.delete("/flavors/Mango")
        assert response.status_code == 200
        assert response.get_json() == {"message": "Flavor deleted"}
        assert [f["name"] for f in client.get("/flavors").get_json()] == ["Fresa", "Limón"]

    def test_delete_unknown_flavor_succeeds(self, client, flavors):
        assert client.delete("/flavors/Chicle").status_code == 200


class TestOrderRoutes:
    def _submit(self, client, **extra):
        payload = {"total": 24, "items": [{"flavor": "Fresa", "quantity": 2, "price": 12}]}
        payload.update(extra)
        return client.post("/orders", json=payload)

    def test_create_order(self, client, db_session):
        response = self._submit(client)
        assert response.status_code == 200
        body = response.get_json()
        assert isinstance(body["id"], int)
        assert body["message"] == "Order saved successfully"

    def test_create_order_validation_error(self, client, db_session):
        response = client.post("/orders", json={"items": []})
        assert response.status_code == 400
        assert "error" in response.get_json()

    def test_list_orders_shape(self, client, db_session):
        self._submit(client, customer="Ana", store="puesto")
        [order] = client.get("/orders").get_json()
        assert order["items"] == [{"flavor": "Fresa", "quantity": 2, "price": 12.0}]
        assert order["total"] == 24.0
        assert order["customer"] == "Ana"
        assert order["store"] == "puesto"
        assert order["timestamp"].endswith("Z")

    def test_default_order_is_descending(self, client, db_session):
        ids = [self._submit(client).get_json()["id"] for _ in range(3)]
        listed = [o["id"] for o in client.get("/orders").get_json()]
        assert listed == sorted(ids, reverse=True)

    def test_ascending_order(self, client, db_session):
        ids = [self._submit(client).get_json()["id"] for _ in range(3)]
        listed = [o["id"] for o in client.get("/orders?order=ASC").get_json()]
        assert listed == sorted(ids)

    def test_limit(self, client, db_session):
        for _ in range(5):
            self._submit(client)
        assert len(client.get("/orders?limit=2").get_json()) == 2
        assert len(client.get("/orders?limit=1000").get_json()) == 5

    def test_default_limit(self, client, db_session):
        for _ in range(22):
            self._submit(client)
        assert len(client.get("/orders").get_json()) == 20
        assert len(client.get("/orders?limit=abc").get_json()) == 20
        assert len(client.get("/all-orders").get_json()) == 22

    def test_all_orders_parses_tickets(self, client, legacy_order):
        legacy_order(ticket="Fresa 2 - - - $12.00\nMango 1 - - - $12.00")

        assert client.get("/orders").get_json()[0]["items"] == []
        assert client.get("/all-orders").get_json()[0]["items"] == [
            {"flavor": "Fresa", "quantity": 2, "price": 12.0},
            {"flavor": "Mango", "quantity": 1, "price": 12.0},
        ]

    def test_create_order_with_cups_text(self, client, db_session):
        cups = json.dumps([
            {"items": {"0": {"flavor": "Fresa", "quantity": 1, "price": 12},
                       "1": {"flavor": "Mango", "quantity": 1, "price": 12}}},
            {"items": {"0": {"flavor": "Coco", "quantity": 1, "price": 12}}},
        ])
        response = client.post("/orders", json={"total": 36, "cups": cups})
        assert response.status_code == 200

        [order] = client.get("/orders").get_json()
        assert sorted(i["flavor"] for i in order["items"]) == ["Coco", "Fresa", "Mango"]

    def test_created_order_round_trips_through_all_orders(self, client, db_session):
        order_id = client.post("/orders", json={
            "total": 36,
            "customer": "Ana",
            "store": "puesto2",
            "ticket": "Fresa 2 - - - $12.00\nMango 1 - - - $12.00",
            "items": [{"flavor": "Fresa", "quantity": 2, "price": 12}, {"flavor": "Mango", "quantity": 1, "price": 12}],
        }).get_json()["id"]

        [order] = client.get("/all-orders").get_json()
        assert order["id"] == order_id
        assert order["customer"] == "Ana"
        assert order["store"] == "puesto2"
        assert order["total"] == 36.0
        assert order["items"] == [
            {"flavor": "Fresa", "quantity": 2, "price": 12.0},
            {"flavor": "Mango", "quantity": 1, "price": 12.0},
        ]

    def test_storage_failure_on_create_is_500(self, client, db_session, monkeypatch):
        def _fail_flush(*args, **kwargs):
            raise OperationalError("INSERT INTO orders", {}, Exception("disk I/O error"))

        monkeypatch.setattr(db.session, "flush", _fail_flush)
        response = self._submit(client)
        monkeypatch.undo()

        assert response.status_code == 500
        assert "disk I/O error" in response.get_json()["error"]
        assert db_session.query(Order).count() == 0
        assert db_session.query(OrderItem).count() == 0


class TestStoreFlavorRoutes:
    def test_get_store_flavors(self, client, base_store_assignments):
        response = client.get("/store-flavors/puesto")
        assert response.status_code == 200
        rows = response.get_json()
        assert {r["name"]: r["store_active"] for r in rows} == {"Fresa": 1, "Limón": 0, "Mango": 1}

    def test_derived_store_bootstrap(self, client, base_store_assignments):
        rows = client.get("/store-flavors/puesto2").get_json()
        assert [r["name"] for r in rows if r["store_active"]] == ["Fresa", "Mango"]

    def test_set_store_flavors(self, client, flavors):
        response = client.post("/store-flavors/puesto", json={"flavorAssignments": [
            {"flavorName": "Limón", "active": True},
            {"flavorName": "Mango", "active": False},
        ]})
        assert response.status_code == 200
        assert response.get_json() == {"message": "Store flavors updated successfully"}

        rows = client.get("/store-flavors/puesto").get_json()
        assert [r["name"] for r in rows if r["store_active"]] == ["Limón"]

    def test_set_requires_array(self, client, flavors):
        response = client.post("/store-flavors/puesto", json={"flavorAssignments": "Fresa"})
        assert response.status_code == 400
        assert response.get_json()["error"] == "flavorAssignments must be an array"

    def test_set_without_body(self, client, flavors):
        assert client.post("/store-flavors/puesto").status_code == 400


class TestAppWiring:
    def test_unknown_route_is_json(self, client):
        response = client.get("/nope")
        assert response.status_code == 404
        assert response.get_json() == {"error": "Not found"}

    def test_wrong_method_is_json(self, client):
        response = client.patch("/flavors")
        assert response.status_code == 405
        assert "error" in response.get_json()

    def test_cors_for_dev_origin(self, client, db_session):
        response = client.get("/flavors", headers={"Origin": "http://localhost:5173"})
        assert response.headers["Access-Control-Allow-Origin"] == "http://localhost:5173"

    def test_no_cors_for_unknown_origin(self, client, db_session):
        response = client.get("/flavors", headers={"Origin": "http://evil.example"})
        assert "Access-Control-Allow-Origin" not in response.headers

    def test_storage_failure_is_500(self, app, client, db_session, monkeypatch):
        from heladeria.services import get_services

        def _boom():
            raise RuntimeError("disk full")

        with app.app_context():
            monkeypatch.setattr(get_services().catalog, "list_flavors", _boom)
        response = client.get("/flavors")
        assert response.status_code == 500
        assert response.get_json() == {"error": "disk full"}


class TestRequestBodies:
    @pytest.mark.parametrize("method, path", [
        ("post", "/flavors"),
        ("put", "/flavors/Fresa"),
        ("post", "/store-flavors/puesto"),
        ("post", "/orders"),
    ])
    def test_non_object_body_is_400(self, client, flavors, method, path):
        response = getattr(client, method)(path, json=["Fresa"])
        assert response.status_code == 400
        assert "error" in response.get_json()

    def test_rejected_store_body_leaves_assignments(self, client, base_store_assignments):
        client.post("/store-flavors/puesto", json=[{"flavorName": "Limón"}])
        rows = client.get("/store-flavors/puesto").get_json()
        assert [r["name"] for r in rows if r["store_active"]] == ["Fresa", "Mango"]
