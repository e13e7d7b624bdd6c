from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from tradebook.web.app import app

CSV_TEXT = "\n".join(
    [
        "Symbol,Setup,Result,Profit,R:R,Date",
        "ES,BB,Win,$250.00,2.5,2024-03-04T09:30:00Z",
        "ES,BB,Loss,-100,-1,2024-03-05T10:30:00Z",
        "NQ,,Win,150,1.5,2024-03-06T11:30:00Z",
        "GC,OZEM,Loss,-50,-1,not-a-date",
    ]
)


@pytest.fixture
def client(tmp_path, monkeypatch):
    monkeypatch.setenv("TRADEBOOK_CONFIG", str(tmp_path / "app.toml"))
    monkeypatch.setenv("TRADEBOOK_DB_PATH", str(tmp_path / "journal.sqlite"))
    return TestClient(app)


def test_import_and_list_trades(client):
    response = client.post("/api/import", json={"csv": CSV_TEXT})
    assert response.status_code == 200
    body = response.json()
    assert body["imported"] == 3
    assert body["total"] == 4
    assert body["skipped"] == 1
    assert body["remaining"] == 0
    assert body["next_offset"] is None
    assert body["message"] == "3 of 4 rows imported"

    trades = client.get("/api/trades").json()
    assert [trade["symbol"] for trade in trades] == ["ES", "ES", "NQ"]
    assert trades[0]["profitLoss"] == 250.0
    assert trades[0]["isWin"] is True

    filtered = client.get("/api/trades", params={"setup": "BB"}).json()
    assert len(filtered) == 2


def test_import_batches_with_offset(client, tmp_path):
    (tmp_path / "app.toml").write_text("[importer]\nbatch_size = 2\n", encoding="utf-8")
    rows = [{"Symbol": f"S{index}", "P/L": "5", "Date": f"2024-03-0{index + 1}"} for index in range(3)]

    first = client.post("/api/import", json={"rows": rows}).json()
    assert first["imported"] == 2
    assert first["remaining"] == 1
    assert first["next_offset"] == 2

    second = client.post("/api/import", json={"rows": rows, "offset": first["next_offset"]}).json()
    assert second["imported"] == 1
    assert second["remaining"] == 0
    assert len(client.get("/api/trades").json()) == 3


def test_import_with_nothing_importable(client):
    response = client.post("/api/import", json={"rows": ["bad", None]})
    assert response.status_code == 422
    assert client.post("/api/import", json={"other": 1}).status_code == 400


def test_trade_detail_and_delete(client):
    client.post("/api/import", json={"csv": CSV_TEXT})
    trade = client.get("/api/trades").json()[0]
    assert client.get(f"/api/trades/{trade['id']}").json()["symbol"] == "ES"
    assert client.delete(f"/api/trades/{trade['id']}").status_code == 204
    assert client.get(f"/api/trades/{trade['id']}").status_code == 404
    assert client.delete(f"/api/trades/{trade['id']}").status_code == 404


def test_dashboard_endpoints(client):
    client.post("/api/import", json={"csv": CSV_TEXT})

    summary = client.get("/api/summary").json()
    assert summary["total_trades"] == 3
    assert summary["win_rate"] == pytest.approx(200 / 3)
    assert summary["profit_factor"] == pytest.approx(2.0)
    assert summary["max_consecutive_wins"] == 1

    breakdowns = client.get("/api/breakdowns").json()
    assert [row["setup"] for row in breakdowns["setups"]] == ["BB", "Unbekannt"]
    assert [row["day"] for row in breakdowns["weekdays"]] == ["Mo", "Di", "Mi"]

    equity = client.get("/api/equity").json()
    assert [point["cumulative_profit_loss"] for point in equity["equity_curve"]] == [250.0, 150.0, 300.0]
    assert equity["drawdown"][1]["drawdown"] == pytest.approx(40.0)

    weekly = client.get("/api/weekly-summary", params={"weekStart": "2024-03-04", "weekEnd": "2024-03-10"}).json()
    assert weekly["trade_count"] == 3
    assert weekly["total_rr"] == pytest.approx(3.0)
    assert client.get("/api/weekly-summary").status_code == 400

    rates = client.get("/api/setup-win-rates").json()
    assert rates[0] == {"setup": "Unbekannt", "win_rate": 100.0, "trades": 1}

    streak = client.get("/api/trading-streak").json()
    assert streak["current_streak"] == 1
    assert streak["badges"] == ["first_trade"]


def test_identical_undated_rows_each_become_a_trade(client):
    response = client.post("/api/import", json={"csv": "Symbol,Setup,P/L\nES,BB,50\nES,BB,50\nES,BB,50\n"})
    assert response.json()["message"] == "3 of 3 rows imported"

    trades = client.get("/api/trades").json()
    assert len(trades) == 3
    assert len({trade["id"] for trade in trades}) == 3
    summary = client.get("/api/summary").json()
    assert summary["total_profit_loss"] == pytest.approx(150.0)


def test_create_and_update_trade(client):
    response = client.post(
        "/api/trades",
        json={"symbol": "ES", "setup": "BB", "profitLoss": 80, "rrAchieved": 1.6, "isWin": True},
    )
    assert response.status_code == 201
    created = response.json()
    assert created["symbol"] == "ES"
    assert created["date"]

    updated = client.put(f"/api/trades/{created['id']}", json={"profit_loss": -20, "isWin": False})
    assert updated.status_code == 200
    stored = client.get(f"/api/trades/{created['id']}").json()
    assert stored["profitLoss"] == -20.0
    assert stored["isWin"] is False
    assert stored["setup"] == "BB"
    assert stored["date"] == created["date"]

    assert client.put("/api/trades/9999", json={"symbol": "NQ"}).status_code == 404
    assert client.post("/api/trades", json={"symbol": "NQ", "date": "soon"}).status_code == 400


def test_date_range_query(client):
    client.post("/api/import", json={"csv": CSV_TEXT})

    trades = client.get("/api/trades", params={"startDate": "2024-03-05", "endDate": "2024-03-05"}).json()
    assert [trade["profitLoss"] for trade in trades] == [-100.0]

    summary = client.get("/api/summary", params={"startDate": "2024-03-05T00:00:00Z"}).json()
    assert summary["total_trades"] == 2
    assert client.get("/api/trades", params={"endDate": "later"}).status_code == 400
