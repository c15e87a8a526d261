def _stock(client):
    client.post("/stock/add", json={"sku": "SKU1", "location_id": "LOC_A", "quantity": 3})
    client.post(
        "/stock/transfer",
        json={"sku": "SKU1", "from_location_id": "LOC_A", "to_location_id": "LOC_B", "quantity": 1},
    )


class TestReportsApi:

    def test_location_report_json_and_csv(self, client):
        _stock(client)

        report = client.get("/reports/locations/LOC_A").json()
        assert report["total_quantity"] == 2
        assert report["rows"][0]["value_minor_units"] == 200

        res = client.get("/reports/locations/LOC_A", params={"format": "csv"})
        assert res.headers["content-type"].startswith("text/csv")
        assert res.text == "SKU,Name,Quantity\nSKU1,Item SKU1,2\n"

    def test_product_report(self, client):
        _stock(client)

        report = client.get("/reports/products/SKU1").json()

        assert [r["quantity"] for r in report["rows"]] == [2, 1]
        assert report["total_quantity"] == 3
        assert client.get("/reports/products/SKU1", params={"format": "csv"}).text.startswith("Location,Quantity\n")

    def test_summary_and_net_movements(self, client):
        _stock(client)

        summary = client.get("/reports/summary").json()
        assert (summary["total_units"], summary["stock_value_minor_units"]) == (3, 300)
        assert summary["stock_value"] == "3.00 EUR"

        assert client.get("/reports/movements/SKU1").json() == {"LOC_A": 2, "LOC_B": 1}

    def test_unknown_location_is_404(self, client):
        assert client.get("/reports/locations/NOPE").status_code == 404


class TestBackupApi:

    def test_template(self, client):
        assert client.get("/backup/template.csv").text == "sku,name,price,quantityKind\n"

    def test_csv_upload(self, client):
        res = client.post(
            "/backup/import/csv",
            files={"file": ("items.csv", b"sku,name,price,quantityKind\nN1,Nails,0.05,kg\n,skip,1,\n", "text/csv")},
        )

        assert res.json() == {"imported": 1, "skipped": 1, "locations": 0}
        assert client.get("/items/N1").json()["quantity_unit"] == "kg"

    def test_export_and_admin_only_restore(self, client, user):
        _stock(client)
        snapshot = client.get("/backup/export").json()
        assert snapshot["stockByLocation"] == {"SKU1::LOC_A": 2, "SKU1::LOC_B": 1}
        assert len(snapshot["auditTrail"]) == 2

        assert client.post("/backup/restore", json=snapshot).status_code == 403

        user.role = "admin"
        res = client.post("/backup/restore", json=snapshot)
        assert res.json() == {"imported": 1, "skipped": 0, "locations": 2}
        assert client.post("/backup/restore", json={"nothing": []}).status_code == 400

    def test_items_export(self, client):
        export = client.get("/backup/export/items").json()
        assert export["type"] == "items-only"
        assert [i["sku"] for i in export["items"]] == ["SKU1"]
