import logging
import sys
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from stalltrack import create_app
from stalltrack.core.config import Settings
from stalltrack.db.session import Database


@pytest.fixture()
def client(tmp_path):
    settings = Settings(DATA_DIR=tmp_path, DB_URL="sqlite://", TZ="UTC")
    app = create_app(settings, database=Database("sqlite://"))
    with TestClient(app) as test_client:
        yield test_client


def _item(client, **overrides):
    payload = {"name": "Dragon", "price": 14.5, "quantity": 10}
    payload.update(overrides)
    response = client.post("/api/items", json=payload)
    assert response.status_code == 201, response.text
    return response.json()


def _session(client, title="Saturday market"):
    response = client.post("/api/sessions", json={"title": title})
    assert response.status_code == 201, response.text
    return response.json()


def test_health(client):
    response = client.get("/api/health")
    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}
    assert response.headers["X-Request-ID"]


def test_item_round_trip_uses_camel_case(client):
    item = _item(client, imagePath="/img/dragon.png")

    assert item["price"] == 14.5
    assert item["imagePath"] == "/img/dragon.png"
    assert item["totalSold"] == 0

    fetched = client.get(f"/api/items/{item['id']}").json()
    assert fetched == item


def test_adjust_endpoint_and_audit_trail(client):
    item = _item(client, quantity=3)

    response = client.post(f"/api/items/{item['id']}/adjust", json={"delta": 4, "reason": "restock"})
    assert response.status_code == 200
    assert response.json()["quantity"] == 7

    trail = client.get(f"/api/items/{item['id']}/adjustments").json()
    assert [row["delta"] for row in trail] == [4, 3]
    assert trail[0]["reason"] == "restock"


def test_adjust_below_zero_returns_error_envelope(client):
    item = _item(client, quantity=1)

    response = client.post(f"/api/items/{item['id']}/adjust", json={"delta": -5})

    assert response.status_code == 400
    body = response.json()
    assert body["code"] == "insufficient_stock"
    assert body["message"] == "Insufficient stock for adjustment"


def test_unknown_item_is_404(client):
    response = client.get("/api/items/9999")
    assert response.status_code == 404
    assert response.json()["code"] == "not_found"


def test_blank_item_name_is_422(client):
    response = client.post("/api/items", json={"name": "   "})
    assert response.status_code == 422
    assert response.json()["code"] == "http_error"

    response = client.post("/api/items", json={})
    assert response.status_code == 422
    assert response.json()["code"] == "validation_error"


def test_sale_flow_through_http(client):
    item = _item(client, price=8, quantity=5)
    session = _session(client)

    response = client.post(
        f"/api/sessions/{session['id']}/sales",
        json={"itemId": item["id"], "quantity": 1, "paymentMethod": "cash", "cashReceived": "10.00"},
    )

    assert response.status_code == 201, response.text
    sale = response.json()
    assert sale["totalPrice"] == 8.0
    assert sale["changeGiven"] == 2.0
    assert sale["itemName"] == "Dragon"
    assert sale["sessionTitle"] == "Saturday market"
    assert client.get(f"/api/sales/{sale['id']}").json() == sale
    assert client.get(f"/api/items/{item['id']}").json()["quantity"] == 4

    detail = client.get(f"/api/sessions/{session['id']}").json()
    assert detail["saleCount"] == 1
    assert detail["sales"][0]["id"] == sale["id"]


def test_cash_sale_without_amount(client):
    item = _item(client, price=8, quantity=5)
    session = _session(client)

    response = client.post(
        f"/api/sessions/{session['id']}/sales",
        json={"itemId": item["id"], "quantity": 1, "paymentMethod": "cash"},
    )

    assert response.status_code == 400
    assert response.json()["code"] == "missing_cash_amount"


def test_close_is_idempotent_and_blocks_sales(client):
    item = _item(client)
    session = _session(client)

    first = client.post(f"/api/sessions/{session['id']}/close")
    second = client.post(f"/api/sessions/{session['id']}/close")
    assert first.status_code == second.status_code == 200
    assert first.json()["endedAt"] == second.json()["endedAt"]

    response = client.post(f"/api/sessions/{session['id']}/sales", json={"itemId": item["id"], "quantity": 1})
    assert response.status_code == 400
    assert response.json()["code"] == "session_closed"

    weather = client.patch(f"/api/sessions/{session['id']}/weather", json={"weather": "windy"})
    assert weather.json()["weather"] == "windy"


def test_filament_usage_endpoint(client):
    spool = client.post(
        "/api/filament/spools",
        json={"material": "PLA", "weightGrams": 1000, "remainingGrams": 100},
    ).json()

    ok = client.post(f"/api/filament/spools/{spool['id']}/usage", json={"usedGrams": 30, "reason": "print"})
    assert ok.status_code == 201
    assert ok.json()["spool"]["remainingGrams"] == 70
    assert ok.json()["usage"]["usedGrams"] == 30

    too_much = client.post(f"/api/filament/spools/{spool['id']}/usage", json={"usedGrams": 130})
    assert too_much.status_code == 400
    assert too_much.json()["code"] == "insufficient_filament"
    assert client.get(f"/api/filament/spools/{spool['id']}").json()["remainingGrams"] == 70


def test_dashboard_summary(client):
    item = _item(client, quantity=3)
    _item(client, name="Plenty", quantity=50)
    session = _session(client)
    client.post(f"/api/sessions/{session['id']}/sales", json={"itemId": item["id"], "quantity": 2})

    body = client.get("/api/dashboard").json()

    assert body["todaySummary"]["sessionId"] == session["id"]
    assert body["todaySummary"]["totalRevenue"] == 29.0
    assert len(body["todaySummary"]["latestSales"]) == 1
    assert body["recentTrend"][0]["totalItems"] == 2
    assert len(body["recentSales"]) == 1
    assert [low["name"] for low in body["lowStockItems"]] == ["Dragon"]


@pytest.mark.parametrize("delta", ["abc", 1e20])
def test_bad_delta_is_an_invalid_quantity(client, delta):
    item = _item(client, quantity=1)

    response = client.post(f"/api/items/{item['id']}/adjust", json={"delta": delta})

    assert response.status_code == 400
    assert response.json()["code"] == "invalid_quantity"
    assert client.get(f"/api/items/{item['id']}").json()["quantity"] == 1


def test_non_numeric_sale_quantity_is_an_invalid_quantity(client):
    item = _item(client)
    session = _session(client)

    response = client.post(f"/api/sessions/{session['id']}/sales", json={"itemId": item["id"], "quantity": "two"})

    assert response.status_code == 400
    assert response.json()["code"] == "invalid_quantity"


def test_huge_cash_amount_is_an_invalid_amount(client):
    item = _item(client, price=8)
    session = _session(client)

    response = client.post(
        f"/api/sessions/{session['id']}/sales",
        json={"itemId": item["id"], "quantity": 1, "paymentMethod": "cash", "cashReceived": 1e20},
    )

    assert response.status_code == 400
    assert response.json()["code"] == "invalid_amount"


def test_rejected_call_is_logged_at_warning(client, caplog):
    item = _item(client, quantity=1)

    with caplog.at_level(logging.INFO, logger="stalltrack.request"):
        client.post(f"/api/items/{item['id']}/adjust", json={"delta": -5})

    completed = [record for record in caplog.records if record.getMessage() == "request.completed"]
    assert completed[-1].levelno == logging.WARNING
    assert completed[-1].extra_data["status"] == 400
