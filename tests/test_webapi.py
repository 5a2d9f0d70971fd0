from __future__ import annotations

import json

import pytest

pytest.importorskip("fastapi")
pytest.importorskip("httpx")
from fastapi.testclient import TestClient

from streaming.config import schema
from streaming.config.schema import BuildVariant
from streaming.webapi import app


def full_payload(**overrides):
    payload = {
        "host": "192.168.1.10",
        "port": "8900",
        "protocol": 0,
        "samples": -1,
        "format": 0,
        "type": 1,
        "channels": 3,
        "resolution": 1,
        "decimation": 1,
        "attenuator": 1,
        "calibration": False,
    }
    payload.update(overrides)
    return payload


@pytest.fixture(autouse=True)
def clear_auth_env(monkeypatch):
    monkeypatch.delenv("STREAMING_WEBAPI_TOKEN", raising=False)
    monkeypatch.delenv("STREAMING_WEBAPI_TOKEN_FILE", raising=False)


@pytest.fixture
def settings_file(tmp_path, monkeypatch):
    path = tmp_path / "stream_settings.json"
    monkeypatch.setenv("STREAMING_SETTINGS_PATH", str(path))
    monkeypatch.setattr(schema, "ACTIVE_VARIANT", BuildVariant.ATTENUATED)
    return path


@pytest.fixture
def api_client(settings_file):
    return TestClient(app)


def test_get_settings_without_document(api_client):
    response = api_client.get("/settings")

    assert response.status_code == 404


def test_put_incomplete_settings_is_rejected(api_client, settings_file):
    response = api_client.put("/settings", json={"host": "10.0.0.1"})

    assert response.status_code == 409
    detail = response.json()["detail"]
    assert "port" in detail["missing"]
    assert "host" not in detail["missing"]
    assert not settings_file.exists()


def test_put_complete_settings_roundtrip(api_client, settings_file):
    response = api_client.put("/settings", json=full_payload())

    assert response.status_code == 200
    body = response.json()
    assert body["saved"] is True
    assert body["complete"] is True
    assert body["missing"] == []

    stored = json.loads(settings_file.read_text(encoding="utf-8"))
    assert stored == full_payload()

    fetched = api_client.get("/settings")
    assert fetched.status_code == 200
    assert fetched.json()["settings"] == full_payload()
    assert fetched.json()["variant"] == "attenuated"


def test_put_partial_update_on_complete_document(api_client, settings_file):
    assert api_client.put("/settings", json=full_payload()).status_code == 200

    response = api_client.put("/settings", json={"port": "9100", "calibration": True})

    assert response.status_code == 200
    stored = json.loads(settings_file.read_text(encoding="utf-8"))
    assert stored["port"] == "9100"
    assert stored["calibration"] is True
    assert stored["host"] == "192.168.1.10"


def test_get_reports_partial_document(api_client, settings_file):
    settings_file.write_text(json.dumps({"host": "h"}), encoding="utf-8")

    response = api_client.get("/settings")

    assert response.status_code == 200
    body = response.json()
    assert body["complete"] is False
    assert body["settings"] == {"host": "h"}
    assert body["missing"][0] == "port"


def test_put_rejects_unknown_fields(api_client):
    response = api_client.put("/settings", json={"host": "h", "coupling": 1})

    assert response.status_code == 400
    assert "Campos no soportados" in response.json()["detail"]


def test_put_rejects_invalid_values(api_client, settings_file):
    response = api_client.put("/settings", json=full_payload(protocol=9))

    assert response.status_code == 422
    assert "protocol" in response.json()["detail"]
    assert not settings_file.exists()


def test_variant_endpoint(api_client):
    response = api_client.get("/settings/variant")

    assert response.status_code == 200
    body = response.json()
    assert body["variant"] == "attenuated"
    assert body["keys"][-2:] == ["attenuator", "calibration"]


def test_token_required_when_configured(api_client, monkeypatch):
    monkeypatch.setenv("STREAMING_WEBAPI_TOKEN", "secret")

    assert api_client.get("/settings/variant").status_code == 401
    response = api_client.get("/settings/variant", headers={"Authorization": "Bearer secret"})
    assert response.status_code == 200


def test_token_read_from_file(api_client, monkeypatch, tmp_path):
    token_file = tmp_path / "token"
    token_file.write_text("from-file\n", encoding="utf-8")
    monkeypatch.setenv("STREAMING_WEBAPI_TOKEN_FILE", str(token_file))

    bad = api_client.get("/settings/variant", headers={"Authorization": "Bearer nope"})
    assert bad.status_code == 401
    good = api_client.get("/settings/variant", headers={"Authorization": "Bearer from-file"})
    assert good.status_code == 200


def test_put_unencodable_value_reports_write_failure(api_client, settings_file):
    body = json.dumps(full_payload(host="\ud800"))

    response = api_client.put(
        "/settings",
        content=body,
        headers={"Content-Type": "application/json"},
    )

    assert response.status_code == 500
    assert "No se pudo escribir" in response.json()["detail"]
    assert not settings_file.exists()
