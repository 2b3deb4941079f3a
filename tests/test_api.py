import httpx
import pytest
from httpx import ASGITransport

from uic406.api import app
from uic406.sim import audit as audit_mod

SCENARIO = {
    "segments": [{"id": "S1", "from_station": "A", "to_station": "B"}],
    "trains": [
        {"id": "A", "route": ["S1"], "timetable": {"A": {"arrival": 0, "departure": 0}, "B": {"arrival": 10, "departure": 10}}},
        {"id": "B", "route": ["S1"], "timetable": {"A": {"arrival": 2, "departure": 2}, "B": {"arrival": 12, "departure": 12}}},
    ],
    "min_headway": 6,
}


@pytest.fixture(autouse=True)
def audit_to_tmp(tmp_path, monkeypatch):
    monkeypatch.setattr(audit_mod, "AUDIT_DIR", tmp_path)
    monkeypatch.setattr(audit_mod, "AUDIT_FILE", tmp_path / "events.jsonl")


@pytest.mark.asyncio
async def test_compress_endpoint_applies_headway():
    transport = ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as client:
        r = await client.post("/compress", json=SCENARIO)
        assert r.status_code == 200
        data = r.json()
        rows = {(row["TrainID"], row["StationID"]): row for row in data["timetable"]}
        assert rows[("A", "A")]["Departure"] == 0
        assert rows[("B", "A")]["Departure"] == 6
        assert rows[("B", "B")]["Arrival"] == 16
        assert data["summary"]["compressed_span"] == 16
        assert data["method"] == "ean"
        assert data["critical_path"][0]["type"] == "Origin"

    content = audit_mod.AUDIT_FILE.read_text(encoding="utf-8").strip().splitlines()
    assert any('"type": "compress"' in line for line in content)


@pytest.mark.asyncio
async def test_compress_rejects_negative_running_time():
    bad = {
        "segments": SCENARIO["segments"],
        "trains": [{"id": "X", "route": ["S1"], "timetable": {"A": {"arrival": 9, "departure": 9}, "B": {"arrival": 3, "departure": 3}}}],
    }
    transport = ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as client:
        r = await client.post("/compress", json=bad)
        assert r.status_code == 422
        assert "negative running time" in r.json()["detail"]


@pytest.mark.asyncio
async def test_compress_rejects_departure_before_arrival_with_stack_strategy():
    bad = {
        "segments": SCENARIO["segments"],
        "trains": [{"id": "X", "route": ["S1"], "timetable": {"A": {"arrival": 0, "departure": 0}, "B": {"arrival": 10, "departure": 5}}}],
    }
    transport = ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as client:
        r = await client.post("/compress?strategy=stack", json=bad)
        assert r.status_code == 422
        assert "departs B at 5 before arriving at 10" in r.json()["detail"]


@pytest.mark.asyncio
async def test_compress_csv_and_stack_strategy():
    transport = ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as client:
        r = await client.post("/compress/csv?strategy=stack", json=SCENARIO)
        assert r.status_code == 200
        assert r.headers["content-type"].startswith("text/csv")
        lines = r.text.splitlines()
        assert lines[0] == "TrainID,StationID,Arrival,Departure"
        assert "B,B,16,16" in lines


@pytest.mark.asyncio
async def test_network_endpoint_lists_events_and_activities():
    transport = ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as client:
        r = await client.post("/network", json=SCENARIO)
        assert r.status_code == 200
        data = r.json()
        assert len(data["events"]) == 5
        types = sorted(a["type"] for a in data["activities"])
        assert types == ["Headway", "Headway", "Origin", "Origin", "Running", "Running"]


@pytest.mark.asyncio
async def test_demo_endpoint():
    transport = ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as client:
        r = await client.get("/demo")
        assert r.status_code == 200
        data = r.json()
        assert data["summary"]["compressed_span"] == 52
        assert len(data["timetable"]) == 11
