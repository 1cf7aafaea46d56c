import logging
from unittest.mock import MagicMock

import pytest

import app as backend
import llm_wrapper
from symptoms import SYMPTOM_LIST


@pytest.fixture
def client():
    backend.app.config["TESTING"] = True
    return backend.app.test_client()


@pytest.fixture
def fake_provider(monkeypatch):
    call = MagicMock()
    monkeypatch.setitem(llm_wrapper.PROVIDERS, "gemini", call)
    return call


def test_index(client):
    resp = client.get("/")
    assert resp.status_code == 200
    assert b"/api/predict" in resp.data


def test_symptom_catalogue(client):
    assert client.get("/api/symptoms").get_json() == {"symptoms": SYMPTOM_LIST}


def test_predict_success_sorted(client, fake_provider, raw_response):
    fake_provider.return_value = raw_response(40, 95, 70)
    resp = client.post(
        "/api/predict",
        json={"symptoms": ["Fever"], "otherSymptoms": "chills at night"},
        headers={"X-API-Key": "user-key"},
    )
    assert resp.status_code == 200
    body = resp.get_json()
    assert [p["confidence"] for p in body["predictions"]] == [95, 70, 40]
    assert "nextSteps" in body["predictions"][0]
    assert fake_provider.call_args.args[1] == "user-key"


def test_predict_no_symptoms(client, fake_provider):
    resp = client.post("/api/predict", json={"symptoms": [], "otherSymptoms": "  "})
    assert resp.status_code == 400
    assert resp.get_json()["error"] == "NO_SYMPTOMS"
    fake_provider.assert_not_called()


@pytest.mark.parametrize("body", ["not json", '["a list"]', '{"symptoms": "Fever"}'])
def test_predict_invalid_body(client, fake_provider, body):
    resp = client.post("/api/predict", data=body, content_type="application/json")
    assert resp.status_code == 400
    assert resp.get_json()["error"] == "INVALID_REQUEST"
    fake_provider.assert_not_called()


def test_predict_missing_key(client, fake_provider):
    resp = client.post("/api/predict", json={"symptoms": ["Cough"]})
    assert resp.status_code == 401
    assert resp.get_json()["error"] == "INVALID_API_KEY"


def test_predict_malformed_model_output(client, fake_provider):
    fake_provider.return_value = "definitely { not json"
    resp = client.post("/api/predict", json={"symptoms": ["Cough"]}, headers={"X-API-Key": "k"})
    assert resp.status_code == 502
    assert resp.get_json()["error"] == "MALFORMED_RESPONSE"


def test_predict_overloaded(client, fake_provider):
    fake_provider.side_effect = RuntimeError("503 The model is overloaded")
    resp = client.post("/api/predict", json={"symptoms": ["Cough"]}, headers={"X-API-Key": "k"})
    assert resp.status_code == 503
    body = resp.get_json()
    assert body["error"] == "SERVICE_UNAVAILABLE"
    assert "try again later" in body["message"]


def test_logging_configured_on_import_and_errors_logged(client, fake_provider, caplog):
    assert logging.getLogger().handlers
    with caplog.at_level(logging.WARNING, logger="app"):
        client.post("/api/predict", json={"symptoms": [], "otherSymptoms": ""})
    assert "NO_SYMPTOMS" in caplog.text
