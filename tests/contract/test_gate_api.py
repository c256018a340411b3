from __future__ import annotations


def test_gate_starts_locked(client):
    payload = client.get("/api/v1/gate").get_json()
    assert payload["accessGranted"] is False
    assert payload["grantedVia"] is None


def test_skip_grants_access(client):
    response = client.post("/api/v1/gate/skip")
    assert response.status_code == 200
    assert response.get_json()["accessGranted"] is True

    payload = client.get("/api/v1/gate").get_json()
    assert payload == {"accessGranted": True, "grantedVia": "skip", "traceId": payload["traceId"]}


def test_lock_revokes_access(client):
    client.post("/api/v1/gate/skip")
    assert client.post("/api/v1/gate/lock").get_json()["accessGranted"] is False
    assert client.get("/api/v1/gate").get_json()["accessGranted"] is False


def test_gate_state_is_per_client(app):
    first = app.test_client()
    second = app.test_client()

    first.post("/api/v1/gate/skip")

    assert first.get("/api/v1/gate").get_json()["accessGranted"] is True
    assert second.get("/api/v1/gate").get_json()["accessGranted"] is False
