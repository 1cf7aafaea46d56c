"""
LLM wrapper for the Disease Predictor.

Provides:
- build_prompt / PREDICTION_SCHEMA: the structured prompt and response shape
- call_gemini_llm / call_openai_llm / mock_llm: one outbound call, raw text back
- parse_prediction_result: strict JSON parse + validation + confidence sort
- get_disease_prediction: validate input -> resolve key -> call -> parse
"""

import copy
import json
from typing import Any, Dict, List, Optional

import openai
from google import genai
from google.genai import types
from pydantic import ValidationError

import config
from errors import (
    CredentialError,
    EmptyResponseError,
    MalformedResponseError,
    ServiceError,
    SymptomInputError,
    classify_error,
)
from logging_utils import get_logger
from pydantic_models import PredictionRequest, PredictionResult

logger = get_logger(__name__)

PROMPT_TEMPLATE = """
Analyze the following symptoms and provide a list of 3 to 5 potential medical conditions.

Selected Symptoms: {symptoms}
Other Symptoms described by user: "{other_symptoms}"

For each condition, provide a confidence score (0-100), a brief description, and recommended next steps.
Crucially, always emphasize that this is not a diagnosis and the user must consult a healthcare professional.
"""

PREDICTION_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "predictions": {
            "type": "array",
            "description": "A list of potential medical conditions based on the symptoms.",
            "minItems": 3,
            "maxItems": 5,
            "items": {
                "type": "object",
                "properties": {
                    "condition": {
                        "type": "string",
                        "description": "The name of the potential medical condition.",
                    },
                    "confidence": {
                        "type": "integer",
                        "minimum": 0,
                        "maximum": 100,
                        "description": "A confidence score from 0 to 100 on how likely the condition is, based on the provided symptoms.",
                    },
                    "description": {
                        "type": "string",
                        "description": "A brief, easy-to-understand description of the condition.",
                    },
                    "nextSteps": {
                        "type": "string",
                        "description": (
                            "Recommended next steps, such as 'Consult a primary care physician' or "
                            "'Monitor symptoms at home'. This should always include advice to see a doctor."
                        ),
                    },
                },
                "required": ["condition", "confidence", "description", "nextSteps"],
                "additionalProperties": False,
            },
        },
    },
    "required": ["predictions"],
    "additionalProperties": False,
}

# Gemini's Schema dialect: upper-case type names, no additionalProperties
_GEMINI_DROP = {"additionalProperties"}


def _to_gemini_schema(node: Any) -> Any:
    if isinstance(node, dict):
        out = {}
        for k, v in node.items():
            if k in _GEMINI_DROP:
                continue
            if k == "type" and isinstance(v, str):
                out[k] = v.upper()
            elif k == "properties":
                out[k] = {name: _to_gemini_schema(sub) for name, sub in v.items()}
            else:
                out[k] = _to_gemini_schema(v)
        return out
    if isinstance(node, list):
        return [_to_gemini_schema(v) for v in node]
    return node


GEMINI_PREDICTION_SCHEMA = _to_gemini_schema(PREDICTION_SCHEMA)


def build_prompt(symptoms: List[str], other_symptoms: str) -> str:
    # user text is substituted, never parsed as a format string
    return PROMPT_TEMPLATE.format(symptoms=", ".join(symptoms), other_symptoms=other_symptoms)


def mock_llm(symptoms: List[str], other_symptoms: str = "") -> str:
    """Offline stand-in returning well-formed, deliberately unsorted JSON."""
    label = ", ".join(symptoms) or other_symptoms.strip() or "the reported symptoms"
    advice = "This is not a diagnosis. Consult a healthcare professional to confirm."
    out = {
        "predictions": [
            {"condition": "Tension Headache", "confidence": 40,
             "description": f"Muscle tension may explain {label}.", "nextSteps": f"Rest and hydrate. {advice}"},
            {"condition": "Common Cold", "confidence": 95,
             "description": f"A viral infection commonly presenting with {label}.", "nextSteps": f"Monitor symptoms at home. {advice}"},
            {"condition": "Seasonal Influenza", "confidence": 70,
             "description": f"Influenza can present with {label}.", "nextSteps": f"Consult a primary care physician. {advice}"},
        ]
    }
    return json.dumps(out, ensure_ascii=False)


def call_gemini_llm(prompt: str, api_key: str, model: Optional[str] = None) -> str:
    """Call Gemini with the JSON response schema and return the raw text."""
    client = genai.Client(
        api_key=api_key,
        http_options=types.HttpOptions(timeout=config.LLM_TIMEOUT_SECS * 1000),
    )
    response = client.models.generate_content(
        model=model or config.GEMINI_MODEL,
        contents=prompt,
        config=types.GenerateContentConfig(
            response_mime_type="application/json",
            response_schema=copy.deepcopy(GEMINI_PREDICTION_SCHEMA),
            temperature=config.LLM_TEMPERATURE,
        ),
    )
    return response.text


def call_openai_llm(prompt: str, api_key: str, model: Optional[str] = None) -> str:
    """Call OpenAI chat completions constrained to PREDICTION_SCHEMA."""
    client = openai.OpenAI(api_key=api_key, timeout=config.LLM_TIMEOUT_SECS)
    schema = copy.deepcopy(PREDICTION_SCHEMA)
    # strict structured output rejects numeric/array bounds
    schema["properties"]["predictions"].pop("minItems")
    schema["properties"]["predictions"].pop("maxItems")
    for key in ("minimum", "maximum"):
        schema["properties"]["predictions"]["items"]["properties"]["confidence"].pop(key)
    resp = client.chat.completions.create(
        model=model or config.OPENAI_MODEL,
        messages=[
            {"role": "system", "content": "You are a cautious medical information assistant. Output ONLY JSON."},
            {"role": "user", "content": prompt},
        ],
        temperature=config.LLM_TEMPERATURE,
        response_format={
            "type": "json_schema",
            "json_schema": {"name": "prediction_result", "schema": schema, "strict": True},
        },
    )
    return resp.choices[0].message.content


PROVIDERS = {
    "gemini": call_gemini_llm,
    "openai": call_openai_llm,
}


def _reject_constant(name: str):
    # NaN, Infinity and -Infinity are not JSON
    raise ValueError(f"non-standard JSON constant {name}")


def parse_prediction_result(raw_text: Optional[str]) -> PredictionResult:
    """
    Parse raw model output into a PredictionResult sorted by confidence.

    Empty text is rejected before any parse attempt; anything that is not
    JSON in the expected shape is a malformed response.
    """
    if raw_text is None or not raw_text.strip():
        raise EmptyResponseError()
    try:
        parsed = json.loads(raw_text.strip(), parse_constant=_reject_constant)
    except ValueError as e:
        raise MalformedResponseError(details={"reason": str(e)}) from e
    try:
        result = PredictionResult.model_validate(parsed)
    except ValidationError as e:
        raise MalformedResponseError(details={"reason": str(e)}) from e
    return result.sorted_by_confidence()


def get_disease_prediction(
    symptoms: List[str],
    other_symptoms: str,
    api_key: Optional[str] = None,
    provider: Optional[str] = None,
) -> PredictionResult:
    """
    Primary orchestration:
    - reject empty input locally (no network call)
    - resolve the credential: explicit key, then environment
    - one outbound call, SDK errors mapped onto the error taxonomy
    - parse, validate and sort
    """
    request = PredictionRequest(symptoms=symptoms, other_symptoms=other_symptoms)
    if not request.has_input():
        raise SymptomInputError()

    provider = (provider or config.LLM_PROVIDER).lower()
    if provider == "mock":
        raw = mock_llm(request.symptoms, request.other_symptoms)
    else:
        call = PROVIDERS.get(provider)
        if call is None:
            raise ServiceError(details={"reason": f"unknown LLM provider {provider!r}"})
        key = (api_key or "").strip() or config.env_api_key(provider)
        if not key:
            logger.warning("No API key available for provider %s", provider)
            raise CredentialError(details={"reason": "API key is not set"})
        prompt = build_prompt(request.symptoms, request.other_symptoms)
        try:
            raw = call(prompt, key)
        except Exception as e:
            err = classify_error(e)
            logger.error("LLM call via %s failed (%s): %s", provider, err.code, e)
            raise err from e

    logger.debug("Raw LLM output: %s", raw)
    try:
        result = parse_prediction_result(raw)
    except (EmptyResponseError, MalformedResponseError) as e:
        logger.warning("Unusable LLM response (%s)", e.code)
        raise
    logger.info(
        "Prediction complete: %d conditions, top=%s",
        len(result.predictions),
        result.top.condition if result.top else None,
    )
    return result
