import json

import pytest

import config


def prediction_payload(*confidences):
    return {
        "predictions": [
            {
                "condition": f"Condition {i}",
                "confidence": c,
                "description": f"Description {i}",
                "nextSteps": "Consult a healthcare professional.",
            }
            for i, c in enumerate(confidences)
        ]
    }


@pytest.fixture
def make_payload():
    return prediction_payload


@pytest.fixture
def raw_response():
    def _raw(*confidences):
        return json.dumps(prediction_payload(*confidences))
    return _raw


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("GEMINI_API_KEY", "API_KEY", "GOOGLE_API_KEY", "OPENAI_API_KEY"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr(config, "LLM_PROVIDER", "gemini")
