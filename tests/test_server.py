import pytest
from fastapi.testclient import TestClient

from counter_pos.constant import SAMPLE_MENU
from counter_pos.errors import StorageError
from counter_pos.server import create_app


@pytest.fixture
def client(backend):
    return TestClient(create_app(backend))


def bill_payload(number="00001", date="2026-10-18"):
    return {
        "billNumber": number,
        "date": date,
        "time": "12:30",
        "orderType": "Parcel",
        "cashier": "Sunil",
        "customerName": "Ravi",
        "items": [{"name": "Masala Dosa", "quantity": 2, "price": 70}],
        "subtotal": 140,
        "grandTotal": 140,
    }


def test_items_crud(client):
    assert len(client.get("/api/items").json()) == len(SAMPLE_MENU)

    created = client.post("/api/items", json={"name": "Rava Kesari", "price": 45, "category": "Tiffins"}).json()
    assert created["name"] == "Rava Kesari"
    assert created["price"] == 45.0

    updated = client.put(f"/api/items/{created['id']}", json={"name": "Rava Kesari", "price": 50, "category": "Tiffins"})
    assert updated.json()["price"] == 50.0

    assert client.delete(f"/api/items/{created['id']}").json() == {"success": True}
    assert len(client.get("/api/items").json()) == len(SAMPLE_MENU)


def test_update_missing_item_is_404(client):
    response = client.put("/api/items/99999", json={"name": "Ghost", "price": 1, "category": ""})
    assert response.status_code == 404
    assert "does not exist" in response.json()["error"]


def test_negative_price_rejected(client):
    response = client.post("/api/items", json={"name": "Idli", "price": -1, "category": "Tiffins"})
    assert response.status_code == 422


def test_bills_round_trip(client):
    saved = client.post("/api/bills", json=bill_payload())
    assert saved.status_code == 200
    assert saved.json()["success"] is True

    bills = client.get("/api/bills").json()
    assert len(bills) == 1
    assert bills[0]["billNumber"] == "00001"
    assert bills[0]["items"][0]["amount"] == 140.0
    assert bills[0]["customerName"] == "Ravi"


def test_empty_bill_rejected(client):
    payload = bill_payload()
    payload["items"] = []
    assert client.post("/api/bills", json=payload).status_code == 422


def test_duplicate_bill_is_conflict(client):
    client.post("/api/bills", json=bill_payload())
    response = client.post("/api/bills", json=bill_payload())
    assert response.status_code == 409
    assert response.json()["billNumber"] == "00001"
    assert response.json()["date"] == "2026-10-18"


def test_clear_bills(client):
    client.post("/api/bills", json=bill_payload("00001"))
    client.post("/api/bills", json=bill_payload("00002"))
    assert client.delete("/api/bills").json() == {"success": True, "removed": 2}
    assert client.get("/api/bills").json() == []


def test_bill_number_endpoints(client):
    assert client.get("/api/settings/bill-number").json() == {"billNumber": "00001"}
    assert client.post("/api/settings/bill-number").json() == {"billNumber": "00001"}
    assert client.post("/api/settings/bill-number").json() == {"billNumber": "00002"}
    assert client.get("/api/settings/bill-number").json() == {"billNumber": "00003"}

    client.post("/api/settings/reset-bill-number")
    assert client.post("/api/settings/bill-number").json() == {"billNumber": "00001"}


def test_generic_settings(client):
    assert client.get("/api/settings/printerName").json() == {"key": "printerName", "value": None}
    client.post("/api/settings/printerName", json={"value": "TVS RP3160"})
    assert client.get("/api/settings/printerName").json()["value"] == "TVS RP3160"


def test_health(client):
    body = client.get("/api/health").json()
    assert body["status"] == "ok"
    assert body["database"] == "connected"


def test_storage_failure_is_500(client, backend, monkeypatch):
    def broken():
        raise StorageError("disk I/O error")

    monkeypatch.setattr(backend.ledger, "list_all", broken)
    response = client.get("/api/bills")
    assert response.status_code == 500
    assert response.json() == {"error": "disk I/O error"}


def test_huge_price_rejected(client):
    response = client.post("/api/items", json={"name": "Dosa", "price": 1e30, "category": "Tiffins"})
    assert response.status_code == 422
    assert len(client.get("/api/items").json()) == len(SAMPLE_MENU)


def test_clear_bills_with_mismatched_count_keeps_bills(client):
    client.post("/api/bills", json=bill_payload("00001"))
    response = client.delete("/api/bills", params={"expected": 5})
    assert response.status_code == 500
    assert len(client.get("/api/bills").json()) == 1
