import pytest
from httpx import ASGITransport, AsyncClient

from database import close_database, open_database
from main import app


@pytest.fixture
async def client(tmp_path):
    db_file = tmp_path / "pharmadesk_test.db"
    await open_database(app, f"sqlite+aiosqlite:///{db_file}", f"sqlite:///{db_file}")
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as client:
        yield client
    await close_database(app)


@pytest.fixture
async def manufacturer_id(client):
    resp = await client.post("/manufacturers", json={"ManufacturerName": "Acme Pharma"})
    assert resp.status_code == 201
    return resp.json()["data"]["ManufacturerID"]


@pytest.fixture
def product_payload(manufacturer_id):
    return {
        "ProductName": "Panadol",
        "GenericName": "Paracetamol",
        "Strength": "500 mg",
        "PharmaceuticalForm": "Tablet",
        "RouteOfAdministration": "Oral",
        "ManufacturerID": manufacturer_id,
        "ATC_Code": "N02BE01",
        "Description": "",
        "PrescriptionRequired": False,
        "DrugIdentificationNumber": "02231234",
    }
