import json
from unittest.mock import MagicMock

import pytest

import config
import llm_wrapper
from errors import CredentialError, EmptyResponseError, MalformedResponseError, ServiceError, SymptomInputError


@pytest.fixture
def fake_provider(monkeypatch):
    call = MagicMock()
    monkeypatch.setitem(llm_wrapper.PROVIDERS, "gemini", call)
    return call


def test_prompt_embeds_both_inputs():
    prompt = llm_wrapper.build_prompt(["Fever", "Cough"], "tired for {two} days")
    assert "Selected Symptoms: Fever, Cough" in prompt
    assert 'Other Symptoms described by user: "tired for {two} days"' in prompt
    assert "3 to 5" in prompt
    assert "consult a healthcare professional" in prompt


def test_schema_requires_all_fields():
    item = llm_wrapper.PREDICTION_SCHEMA["properties"]["predictions"]["items"]
    assert item["required"] == ["condition", "confidence", "description", "nextSteps"]
    assert llm_wrapper.PREDICTION_SCHEMA["required"] == ["predictions"]


def test_gemini_schema_dialect():
    schema = llm_wrapper.GEMINI_PREDICTION_SCHEMA
    assert schema["type"] == "OBJECT"
    assert "additionalProperties" not in schema
    item = schema["properties"]["predictions"]["items"]
    assert item["properties"]["confidence"]["type"] == "INTEGER"
    assert item["properties"]["nextSteps"]["type"] == "STRING"
    # source schema untouched
    assert llm_wrapper.PREDICTION_SCHEMA["type"] == "object"


def test_parse_sorts_descending(raw_response):
    result = llm_wrapper.parse_prediction_result(raw_response(40, 95, 70))
    assert [p.confidence for p in result.predictions] == [95, 70, 40]


@pytest.mark.parametrize("raw", [None, "", "   \n"])
def test_parse_empty_response(raw, monkeypatch):
    loads = MagicMock()
    monkeypatch.setattr(llm_wrapper.json, "loads", loads)
    with pytest.raises(EmptyResponseError):
        llm_wrapper.parse_prediction_result(raw)
    loads.assert_not_called()


@pytest.mark.parametrize("raw", [
    "not json",
    '{"predictions": [',
    "```json\n{}\n```",
    '{"predictions": [{"condition": "a", "confidence": 40, "description": "d", "nextSteps": "s"},'
    ' {"condition": "b", "confidence": NaN, "description": "d", "nextSteps": "s"}]}',
    '{"predictions": [{"condition": "a", "confidence": Infinity, "description": "d", "nextSteps": "s"}]}',
    '{"predictions": [{"condition": "a", "confidence": -Infinity, "description": "d", "nextSteps": "s"}]}',
])
def test_parse_invalid_json_is_malformed(raw):
    with pytest.raises(MalformedResponseError):
        llm_wrapper.parse_prediction_result(raw)


@pytest.mark.parametrize("raw", [
    "{}",
    '{"predictions": [{"condition": "x"}]}',
    "[1, 2]",
    '{"predictions": [{"condition": "a", "confidence": true, "description": "d", "nextSteps": "s"}]}',
    '{"predictions": [{"condition": "a", "confidence": "high", "description": "d", "nextSteps": "s"}]}',
])
def test_parse_wrong_shape_is_malformed(raw):
    with pytest.raises(MalformedResponseError):
        llm_wrapper.parse_prediction_result(raw)


def test_parse_empty_prediction_list_is_valid():
    assert llm_wrapper.parse_prediction_result('{"predictions": []}').is_empty


@pytest.mark.parametrize("other", ["", "   "])
def test_no_input_rejected_without_network(fake_provider, other):
    with pytest.raises(SymptomInputError):
        llm_wrapper.get_disease_prediction([], other, api_key="k")
    fake_provider.assert_not_called()


def test_missing_key_is_credential_error(fake_provider):
    with pytest.raises(CredentialError):
        llm_wrapper.get_disease_prediction(["Fever"], "")
    fake_provider.assert_not_called()


def test_explicit_key_wins_over_env(fake_provider, raw_response, monkeypatch):
    monkeypatch.setenv("GEMINI_API_KEY", "env-key")
    fake_provider.return_value = raw_response(10, 90)
    result = llm_wrapper.get_disease_prediction(["Fever"], "", api_key=" user-key ")
    prompt, key = fake_provider.call_args.args
    assert key == "user-key"
    assert "Fever" in prompt
    assert [p.confidence for p in result.predictions] == [90, 10]


def test_env_key_used_when_no_explicit_key(fake_provider, raw_response, monkeypatch):
    monkeypatch.setenv("API_KEY", "env-key")
    fake_provider.return_value = raw_response(50)
    llm_wrapper.get_disease_prediction([], "sore throat")
    assert fake_provider.call_args.args[1] == "env-key"


def test_sdk_credential_failure_is_classified(fake_provider):
    fake_provider.side_effect = RuntimeError("400 INVALID_ARGUMENT. API key not valid. Please pass a valid API key.")
    with pytest.raises(CredentialError):
        llm_wrapper.get_disease_prediction(["Fever"], "", api_key="bad")


def test_sdk_overload_is_service_error(fake_provider):
    fake_provider.side_effect = RuntimeError("503 UNAVAILABLE. The model is overloaded.")
    with pytest.raises(ServiceError):
        llm_wrapper.get_disease_prediction(["Fever"], "", api_key="k")


def test_empty_model_text_is_empty_response(fake_provider):
    fake_provider.return_value = ""
    with pytest.raises(EmptyResponseError):
        llm_wrapper.get_disease_prediction(["Fever"], "", api_key="k")


def test_unknown_provider():
    with pytest.raises(ServiceError):
        llm_wrapper.get_disease_prediction(["Fever"], "", api_key="k", provider="nope")


def test_mock_provider_needs_no_key():
    result = llm_wrapper.get_disease_prediction(["Fever"], "", provider="mock")
    assert [p.confidence for p in result.predictions] == [95, 70, 40]
    assert all("healthcare professional" in p.next_steps for p in result.predictions)


def test_call_gemini_llm_request_shape(monkeypatch):
    client = MagicMock()
    client.models.generate_content.return_value = MagicMock(text='{"predictions": []}')
    client_cls = MagicMock(return_value=client)
    monkeypatch.setattr(llm_wrapper.genai, "Client", client_cls)

    text = llm_wrapper.call_gemini_llm("the prompt", "secret")

    assert text == '{"predictions": []}'
    assert client_cls.call_args.kwargs["api_key"] == "secret"
    kwargs = client.models.generate_content.call_args.kwargs
    assert kwargs["model"] == config.GEMINI_MODEL
    assert kwargs["contents"] == "the prompt"
    assert kwargs["config"].response_mime_type == "application/json"
    assert kwargs["config"].temperature == 0.5


def test_call_openai_llm_request_shape(monkeypatch):
    message = MagicMock(content='{"predictions": []}')
    client = MagicMock()
    client.chat.completions.create.return_value = MagicMock(choices=[MagicMock(message=message)])
    monkeypatch.setattr(llm_wrapper.openai, "OpenAI", MagicMock(return_value=client))

    assert llm_wrapper.call_openai_llm("the prompt", "secret") == '{"predictions": []}'

    kwargs = client.chat.completions.create.call_args.kwargs
    assert kwargs["temperature"] == 0.5
    assert kwargs["messages"][-1] == {"role": "user", "content": "the prompt"}
    fmt = kwargs["response_format"]
    assert fmt["type"] == "json_schema"
    assert fmt["json_schema"]["strict"] is True
    assert "minItems" not in fmt["json_schema"]["schema"]["properties"]["predictions"]
    assert "minItems" in llm_wrapper.PREDICTION_SCHEMA["properties"]["predictions"]
    assert json.loads(json.dumps(fmt["json_schema"]["schema"]))["required"] == ["predictions"]
