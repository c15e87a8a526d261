class TestItemsApi:

    def test_create_get_update_delete(self, client):
        res = client.post("/items/", json={"sku": "W1", "name": "Widget", "selling_price_minor_units": 250})
        assert res.status_code == 201
        assert res.json()["price"] == 2.5

        assert client.get("/items/W1").json()["name"] == "Widget"
        assert client.get("/items/exists/W1").json() == {"sku": "W1", "exists": True}

        res = client.patch("/items/W1", json={"name": "Widget XL", "quantity_unit": "kg"})
        assert (res.json()["name"], res.json()["quantity_unit"]) == ("Widget XL", "kg")

        assert client.delete("/items/W1").status_code == 204
        assert client.get("/items/W1").status_code == 404
        assert client.get("/items/exists/W1").json()["exists"] is False

    def test_duplicate_is_409(self, client):
        res = client.post("/items/", json={"sku": "SKU1", "name": "Again"})
        assert res.status_code == 409
        assert "already exists" in res.json()["detail"]

    def test_blank_name_is_422(self, client):
        assert client.post("/items/", json={"sku": "X", "name": "  "}).status_code == 422

    def test_viewer_cannot_create(self, client, user):
        user.role = "viewer"
        assert client.post("/items/", json={"sku": "X", "name": "x"}).status_code == 403
        assert client.get("/items/").status_code == 200


class TestLocationsApi:

    def test_crud(self, client):
        created = client.post("/locations/", json={"name": "Shop"}).json()

        assert client.patch(f"/locations/{created['id']}", json={"name": "Front"}).json()["name"] == "Front"
        names = [loc["name"] for loc in client.get("/locations/").json()]
        assert "Front" in names

        assert client.delete(f"/locations/{created['id']}").status_code == 204
        assert client.get(f"/locations/{created['id']}").status_code == 404


class TestBookingsAndReasonsApi:

    def test_booking(self, client):
        assert client.get("/bookings/SKU1").json() == {"sku": "SKU1", "quantity": 0, "note": ""}

        res = client.patch("/bookings/SKU1", json={"delta": 2, "note": "hold"})

        assert res.json() == {"sku": "SKU1", "quantity": 2, "note": "hold"}
        assert client.patch("/bookings/SKU1", json={}).status_code == 422
        assert client.get("/bookings/NOPE").status_code == 404

    def test_reasons(self, client):
        assert client.post("/reasons/", json={"name": "damaged"}).json() == ["damaged"]
        assert client.post("/reasons/", json={"name": "damaged"}).status_code == 409
        assert client.delete("/reasons/damaged").status_code == 204
        assert client.delete("/reasons/damaged").status_code == 404
        assert client.get("/reasons/").json() == []
