from datetime import date, timedelta

import pytest
from fastapi import FastAPI

import crud
from database import open_database


async def add_product(client, payload):
    resp = await client.post("/products", json=payload)
    assert resp.status_code == 201
    return resp.json()["data"]["ProductID"]


def inventory_payload(product_id, **overrides):
    payload = {
        "ProductID": product_id,
        "BatchNumber": "BATCH123",
        "ExpiryDate": (date.today() + timedelta(days=365)).isoformat(),
        "QuantityInStock": 50,
        "Location": "Shelf A",
        "CostPrice": 3.5,
        "SellingPrice": 5.99,
    }
    payload.update(overrides)
    return payload


@pytest.mark.asyncio
async def test_health(client):
    resp = await client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "OK"


@pytest.mark.asyncio
async def test_product_crud(client, product_payload):
    product_id = await add_product(client, product_payload)

    resp = await client.get("/products")
    assert resp.status_code == 200
    products = resp.json()["data"]
    assert products[0]["ManufacturerName"] == "Acme Pharma"

    resp = await client.put(f"/products/{product_id}", json={"ProductName": "Panadol Extra"})
    assert resp.status_code == 200
    assert resp.json()["data"]["ProductName"] == "Panadol Extra"

    resp = await client.get(f"/products/{product_id}")
    assert resp.json()["data"]["ProductName"] == "Panadol Extra"

    resp = await client.delete(f"/products/{product_id}")
    assert resp.status_code == 200

    resp = await client.get(f"/products/{product_id}")
    assert resp.status_code == 404
    assert resp.json() == {"success": False, "message": "Product not found."}

    resp = await client.delete(f"/products/{product_id}")
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_invalid_body_is_400_envelope(client, product_payload):
    product_payload.pop("GenericName")
    resp = await client.post("/products", json=product_payload)
    assert resp.status_code == 400
    body = resp.json()
    assert body["success"] is False
    assert body["message"] == "Invalid request data."
    assert body["fields"] == ["GenericName"]


@pytest.mark.asyncio
async def test_unknown_path_is_envelope(client):
    resp = await client.get("/nowhere")
    assert resp.status_code == 404
    assert resp.json()["success"] is False


@pytest.mark.asyncio
async def test_inventory_crud(client, product_payload):
    product_id = await add_product(client, product_payload)

    resp = await client.post("/inventory", json=inventory_payload(product_id))
    assert resp.status_code == 201
    inventory_id = resp.json()["data"]["InventoryID"]

    resp = await client.get("/inventory")
    assert resp.status_code == 200
    items = resp.json()["data"]
    assert len(items) == 1
    assert items[0]["ProductName"] == "Panadol"
    assert items[0]["BatchNumber"] == "BATCH123"
    assert items[0]["SellingPrice"] == pytest.approx(5.99)

    resp = await client.put(f"/inventory/{inventory_id}", json={"QuantityInStock": 40})
    assert resp.status_code == 200
    assert resp.json()["data"]["QuantityInStock"] == 40

    resp = await client.get(f"/inventory/{inventory_id}")
    assert resp.json()["data"]["QuantityInStock"] == 40

    resp = await client.delete(f"/inventory/{inventory_id}")
    assert resp.status_code == 200
    resp = await client.get(f"/inventory/{inventory_id}")
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_inventory_requires_existing_product(client):
    resp = await client.post("/inventory", json=inventory_payload(999))
    assert resp.status_code == 400
    assert resp.json()["message"] == "Product not found."


@pytest.mark.asyncio
async def test_inventory_rejects_negative_quantity(client, product_payload):
    product_id = await add_product(client, product_payload)
    resp = await client.post("/inventory", json=inventory_payload(product_id, QuantityInStock=-1))
    assert resp.status_code == 400
    assert resp.json()["fields"] == ["QuantityInStock"]


@pytest.mark.asyncio
async def test_sales_and_today_total(client):
    resp = await client.post("/customers", json={"CustomerName": "Jane Doe"})
    assert resp.status_code == 201
    customer_id = resp.json()["data"]["CustomerID"]

    today = date.today().isoformat()
    yesterday = (date.today() - timedelta(days=1)).isoformat()

    resp = await client.post(
        "/sales", json={"SaleDate": today, "CustomerID": customer_id, "TotalAmount": 12.5}
    )
    assert resp.status_code == 201
    sale_id = resp.json()["data"]["SaleID"]

    # Walk-in customer
    resp = await client.post("/sales", json={"SaleDate": today, "CustomerID": None, "TotalAmount": 7.5})
    assert resp.status_code == 201

    resp = await client.post("/sales", json={"SaleDate": yesterday, "TotalAmount": 100})
    assert resp.status_code == 201

    resp = await client.get("/sales")
    sales = resp.json()["data"]
    assert len(sales) == 3
    names = {s["SaleID"]: s["CustomerName"] for s in sales}
    assert names[sale_id] == "Jane Doe"

    resp = await client.get("/sales_today_total")
    assert resp.status_code == 200
    assert resp.json()["total"] == pytest.approx(20.0)

    resp = await client.delete(f"/sales/{sale_id}")
    assert resp.status_code == 200
    resp = await client.get("/sales_today_total")
    assert resp.json()["total"] == pytest.approx(7.5)


@pytest.mark.asyncio
async def test_sale_does_not_touch_stock(client, product_payload):
    product_id = await add_product(client, product_payload)
    resp = await client.post("/inventory", json=inventory_payload(product_id, QuantityInStock=10))
    inventory_id = resp.json()["data"]["InventoryID"]

    await client.post("/sales", json={"TotalAmount": 59.9})

    resp = await client.get(f"/inventory/{inventory_id}")
    assert resp.json()["data"]["QuantityInStock"] == 10


@pytest.mark.asyncio
async def test_dashboard_counts(client, product_payload):
    resp = await client.get("/products_count")
    assert resp.json()["count"] == 0

    product_id = await add_product(client, product_payload)
    await client.post("/inventory", json=inventory_payload(product_id))
    await client.post("/inventory", json=inventory_payload(product_id, BatchNumber="BATCH456"))

    resp = await client.get("/products_count")
    assert resp.status_code == 200
    assert resp.json()["count"] == 1

    resp = await client.get("/inventory_count")
    assert resp.json()["count"] == 2

    resp = await client.get("/sales_today_total")
    assert resp.json()["total"] == 0


@pytest.mark.asyncio
async def test_lookup_lists_for_dropdowns(client, manufacturer_id):
    await client.post("/manufacturers", json={"ManufacturerName": "Beta Labs"})
    await client.post("/customers", json={"CustomerName": "Zed"})
    await client.post("/customers", json={"CustomerName": "Amy"})

    resp = await client.get("/manufacturers")
    assert [m["ManufacturerName"] for m in resp.json()["data"]] == ["Acme Pharma", "Beta Labs"]

    resp = await client.get("/customers")
    assert [c["CustomerName"] for c in resp.json()["data"]] == ["Amy", "Zed"]

    resp = await client.delete(f"/manufacturers/{manufacturer_id}")
    assert resp.status_code == 200
    resp = await client.delete(f"/manufacturers/{manufacturer_id}")
    assert resp.status_code == 400

    resp = await client.post("/customers", json={"CustomerName": ""})
    assert resp.status_code == 400


# -------------------------------------------------------------------
# Query-string addressing used by the dashboard (?id=N)
# -------------------------------------------------------------------

@pytest.mark.asyncio
async def test_products_addressed_by_query_id(client, product_payload):
    first = await add_product(client, product_payload)
    second = await add_product(client, {**product_payload, "ProductName": "Brufen"})

    resp = await client.get(f"/products?id={first}")
    assert resp.status_code == 200
    assert resp.json()["data"]["ProductID"] == first
    assert resp.json()["data"]["ProductName"] == "Panadol"

    resp = await client.put(f"/products?id={first}", json={"Strength": "1 g"})
    assert resp.status_code == 200
    assert resp.json()["data"]["Strength"] == "1 g"

    resp = await client.delete(f"/products?id={first}")
    assert resp.status_code == 200
    resp = await client.delete(f"/products?id={first}")
    assert resp.status_code == 400
    resp = await client.get(f"/products?id={first}")
    assert resp.status_code == 404

    # Path form still works alongside the query form
    resp = await client.get(f"/products/{second}")
    assert resp.json()["data"]["ProductName"] == "Brufen"
    resp = await client.get("/products")
    assert [p["ProductID"] for p in resp.json()["data"]] == [second]


@pytest.mark.asyncio
async def test_collection_update_and_delete_need_an_id(client):
    resp = await client.put("/products", json={"Strength": "1 g"})
    assert resp.status_code == 400
    assert resp.json() == {"success": False, "message": "Product ID missing."}

    resp = await client.delete("/inventory")
    assert resp.status_code == 400
    assert resp.json()["message"] == "Inventory ID missing."

    resp = await client.delete("/sales")
    assert resp.status_code == 400
    assert resp.json()["message"] == "Sale ID missing."

    resp = await client.get("/products?id=abc")
    assert resp.status_code == 400
    assert resp.json()["fields"] == ["id"]


@pytest.mark.asyncio
async def test_inventory_addressed_by_query_id(client, product_payload):
    product_id = await add_product(client, product_payload)
    resp = await client.post("/inventory", json=inventory_payload(product_id))
    inventory_id = resp.json()["data"]["InventoryID"]

    resp = await client.get(f"/inventory?id={inventory_id}")
    assert resp.status_code == 200
    assert resp.json()["data"]["BatchNumber"] == "BATCH123"

    # The dashboard echoes InventoryID in the body; unknown keys are ignored
    resp = await client.put(
        f"/inventory?id={inventory_id}",
        json={"InventoryID": inventory_id, "QuantityInStock": 7},
    )
    assert resp.status_code == 200
    assert resp.json()["data"]["QuantityInStock"] == 7

    resp = await client.delete(f"/inventory?id={inventory_id}")
    assert resp.status_code == 200
    resp = await client.get(f"/inventory?id={inventory_id}")
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_sales_addressed_by_query_id(client):
    resp = await client.post("/sales", json={"TotalAmount": 15})
    sale_id = resp.json()["data"]["SaleID"]

    resp = await client.get(f"/sales?id={sale_id}")
    assert resp.status_code == 200
    assert resp.json()["data"]["TotalAmount"] == pytest.approx(15)

    resp = await client.delete(f"/sales?id={sale_id}")
    assert resp.status_code == 200
    resp = await client.delete(f"/sales?id={sale_id}")
    assert resp.status_code == 400
    assert resp.json()["message"] == "Sale not found."


# -------------------------------------------------------------------
# Validation and failure paths
# -------------------------------------------------------------------

@pytest.mark.asyncio
@pytest.mark.parametrize(
    "field",
    [
        "ProductName",
        "GenericName",
        "Strength",
        "PharmaceuticalForm",
        "RouteOfAdministration",
        "ATC_Code",
        "DrugIdentificationNumber",
    ],
)
async def test_products_route_rejects_blank_values(client, product_payload, field):
    resp = await client.post("/products", json={**product_payload, field: " "})
    assert resp.status_code == 400
    assert resp.json()["fields"] == [field]

    product_id = await add_product(client, product_payload)
    resp = await client.put(f"/products/{product_id}", json={field: ""})
    assert resp.status_code == 400
    assert resp.json()["fields"] == [field]


@pytest.mark.asyncio
async def test_inventory_lookup_error_is_generic_failure(client, product_payload, monkeypatch):
    product_id = await add_product(client, product_payload)

    async def broken_lookup(self, product_id):
        raise RuntimeError("database went away")

    monkeypatch.setattr(crud.Inventory, "_product_exists", broken_lookup)

    resp = await client.post("/inventory", json=inventory_payload(product_id))
    assert resp.status_code == 400
    assert resp.json() == {"success": False, "message": "Unable to create inventory item."}

    resp = await client.put("/inventory/1", json={"ProductID": product_id})
    assert resp.status_code == 400
    assert resp.json()["message"] == "Unable to update inventory item."


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "url, sync_url",
    [
        ("", "sqlite://"),
        ("sqlite+aiosqlite://", ""),
    ],
)
async def test_startup_fails_fast_without_database_url(url, sync_url):
    app = FastAPI()
    with pytest.raises(RuntimeError):
        await open_database(app, url, sync_url)
    assert not hasattr(app.state, "database")
