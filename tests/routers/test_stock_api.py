import anyio
import pytest
from fastapi.testclient import TestClient

from inventory_tracker.main import app
from inventory_tracker.routers.deps import get_inventory
from inventory_tracker.services import InventoryService
from tests.fakes import flaky_store, seed


def _add(client, quantity=5, location_id="LOC_A", sku="SKU1"):
    return client.post("/stock/add", json={"sku": sku, "location_id": location_id, "quantity": quantity})


class TestMovements:

    def test_add_returns_entry_and_level(self, client, user):
        res = _add(client)

        assert res.status_code == 201
        body = res.json()
        assert body["levels"] == {"LOC_A": 5}
        assert body["entry"]["kind"] == "add"
        assert body["entry"]["actor_id"] == str(user.id)
        assert client.get("/stock/SKU1/LOC_A").json()["quantity"] == 5

    def test_deduct_insufficient_is_409_with_details(self, client):
        _add(client, 2)

        res = client.post("/stock/deduct", json={"sku": "SKU1", "location_id": "LOC_A", "quantity": 10})

        assert res.status_code == 409
        assert "Available: 2, Requested: 10" in res.json()["detail"]
        assert client.get("/stock/SKU1/LOC_A").json()["quantity"] == 2

    def test_transfer(self, client):
        _add(client, 4)

        res = client.post(
            "/stock/transfer",
            json={"sku": "SKU1", "from_location_id": "LOC_A", "to_location_id": "LOC_B", "quantity": 3},
        )

        assert res.status_code == 201
        assert client.get("/stock/").json() == {"SKU1::LOC_A": 1, "SKU1::LOC_B": 3}

    def test_same_location_is_400(self, client):
        _add(client, 4)
        res = client.post(
            "/stock/transfer",
            json={"sku": "SKU1", "from_location_id": "LOC_A", "to_location_id": "LOC_A", "quantity": 1},
        )
        assert res.status_code == 400

    def test_zero_quantity_is_400(self, client):
        assert _add(client, 0).status_code == 400

    @pytest.mark.parametrize("quantity", [1.5, True, "many"])
    def test_malformed_quantity_is_422(self, client, quantity):
        assert _add(client, quantity).status_code == 422

    def test_unknown_location_is_404(self, client):
        assert _add(client, 1, location_id="NOWHERE").status_code == 404

    def test_set_and_noop_set(self, client):
        _add(client, 4)

        res = client.post("/stock/set", json={"sku": "SKU1", "location_id": "LOC_A", "quantity": 1})
        assert res.status_code == 200
        assert res.json()["entry"]["kind"] == "deduct"

        res = client.post("/stock/set", json={"sku": "SKU1", "location_id": "LOC_A", "quantity": 1})
        assert res.json() is None

    def test_quick_adjust(self, client):
        res = client.post("/stock/quick", json={"sku": "SKU1", "location_id": "LOC_A", "direction": "down"})
        assert res.status_code == 409

        res = client.post("/stock/quick", json={"sku": "SKU1", "location_id": "LOC_A", "direction": "up"})
        assert res.json()["entry"]["reason"] == "Quick add"

    def test_levels_listing(self, client):
        _add(client, 2)
        _add(client, 3, location_id="LOC_B")

        levels = client.get("/stock/levels", params={"location_id": "LOC_B"}).json()

        assert levels == [{"sku": "SKU1", "location_id": "LOC_B", "quantity": 3}]


class TestAuditApi:

    def test_filters(self, client):
        _add(client, 4)
        client.post("/stock/deduct", json={"sku": "SKU1", "location_id": "LOC_A", "quantity": 1})

        everything = client.get("/audit/").json()
        deducts = client.get("/audit/", params={"kind": "deduct"}).json()

        assert [e["kind"] for e in everything] == ["deduct", "add"]
        assert len(deducts) == 1
        assert client.get("/audit/", params={"limit": 1}).json() == everything[:1]
        assert client.get("/audit/", params={"kind": "bogus"}).status_code == 422


class TestRoles:

    def test_viewer_can_read_but_not_write(self, client, user):
        user.role = "viewer"

        assert client.get("/stock/").status_code == 200
        assert _add(client).status_code == 403

    def test_superuser_counts_as_admin(self, client, user):
        user.role = "viewer"
        user.is_superuser = True

        assert _add(client).status_code == 201


class TestInfrastructureErrors:

    def _client_for(self, store):
        inventory = InventoryService(store)
        anyio.run(seed, inventory)
        app.dependency_overrides[get_inventory] = lambda: inventory
        return TestClient(app)

    def test_storage_failure_is_503_with_generic_message(self, client):
        store = flaky_store(audit_fails=True)
        res = _add(self._client_for(store))

        assert res.status_code == 503
        assert "audit" not in res.json()["detail"]

    def test_failed_compensation_is_500(self, client):
        store = flaky_store()
        api = self._client_for(store)
        _add(api, 5)
        store.stock.fail_on = {3, 4}

        res = api.post(
            "/stock/transfer",
            json={"sku": "SKU1", "from_location_id": "LOC_A", "to_location_id": "LOC_B", "quantity": 2},
        )

        assert res.status_code == 500
        assert "operator" in res.json()["detail"]
