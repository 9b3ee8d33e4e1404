import pytest
from fastapi.testclient import TestClient

from main import app

CONFIG = {
    "pools": {"local": ["A", "B", "C", "D"], "foreign": ["F1"]},
    "constraints": {"A": {"unavailable": ["Thu|EXAM"]}},
    "group_a": {"round_class_counts": {"1": 2, "2": 2, "3": 2, "4": 2}},
    "group_b": {"round_class_counts": {"1": 4, "2": 3}},
}


@pytest.fixture
def client():
    return TestClient(app)


def test_root(client):
    assert client.get("/").json()["docs"] == "/docs"


def test_generate(client):
    resp = client.post("/api/schedule/generate", json=CONFIG)
    assert resp.status_code == 200
    body = resp.json()

    assert body["version"] == 1
    assert body["validation"]["isValid"] is True
    assert "[Tue 3] R1C4 R1 F assignment failed" in body["warnings"]
    assert body["feasibility"]["r1ForeignOk"] is False
    first = body["assignments"][0]
    assert set(first) >= {"day", "classId", "round", "period", "time", "role", "teacher", "seat", "examSlot"}
    assert body["roundStats"]


def test_generate_rejects_bad_config(client):
    bad = dict(CONFIG, group_b={"round_class_counts": {"1": 1}, "fixed_homerooms": {"R1C1": "F1"}})
    resp = client.post("/api/schedule/generate", json=bad)
    assert resp.status_code == 422
    assert resp.json()["detail"]["problems"] == [
        "group B pin R1C1->F1: teacher is not in the local pool",
    ]


def test_generate_rejects_malformed_payload(client):
    resp = client.post("/api/schedule/generate", json={"pools": {"local": "A"}})
    assert resp.status_code == 422


def test_feasibility(client):
    resp = client.post("/api/schedule/feasibility", json=CONFIG)
    assert resp.status_code == 200
    body = resp.json()
    assert body["r1ForeignDemand"] == 4
    assert body["r1ForeignCapacity"] == 3
    assert body["ok"] is False


def test_validate_round_trip(client):
    generated = client.post("/api/schedule/generate", json=CONFIG).json()
    payload = {"config": CONFIG, "assignments": generated["assignments"],
               "homerooms": generated["homerooms"]}
    resp = client.post("/api/schedule/validate", json=payload)
    assert resp.status_code == 200
    assert resp.json()["isValid"] is True


def test_validate_catches_edits(client):
    row = {"day": "Tue", "classId": "R2C1", "round": 2, "period": 4, "time": "",
           "role": "F", "teacher": "F1", "seat": "real"}
    resp = client.post("/api/schedule/validate", json={"config": CONFIG, "assignments": [row]})
    body = resp.json()
    assert body["isValid"] is False
    assert "[Tue 4] R2C1 F is forbidden in group B R2" in body["errors"]


def test_validate_rejects_unknown_day(client):
    row = {"day": "Sun", "classId": "R1C1", "round": 1, "period": 1,
           "role": "H", "teacher": "A"}
    resp = client.post("/api/schedule/validate", json={"config": CONFIG, "assignments": [row]})
    assert resp.status_code == 422
