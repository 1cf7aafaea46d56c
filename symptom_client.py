"""
HTTP client the Streamlit front end uses to talk to the Flask backend.
"""

from typing import List, Optional

import requests

import config
from errors import MalformedResponseError, PredictionError, ServiceError, SymptomInputError, error_from_payload
from logging_utils import get_logger
from pydantic_models import PredictionRequest, PredictionResult
from symptoms import SYMPTOM_LIST

logger = get_logger(__name__)


def fetch_symptoms(timeout: float = 5) -> List[str]:
    """Symptom chips from the backend, or the bundled list if it is unreachable."""
    try:
        resp = requests.get(f"{config.BACKEND_URL}/api/symptoms", timeout=timeout)
        resp.raise_for_status()
        return list(resp.json()["symptoms"])
    except (requests.RequestException, ValueError, KeyError) as e:
        logger.warning("Could not load symptom list from backend: %s", e)
        return list(SYMPTOM_LIST)


def request_prediction(
    symptoms: List[str],
    other_symptoms: str,
    api_key: Optional[str] = None,
    timeout: Optional[float] = None,
) -> PredictionResult:
    """
    POST one prediction request. Raises a PredictionError subclass on any failure;
    empty input is rejected before any HTTP call.
    """
    req = PredictionRequest(symptoms=symptoms, other_symptoms=other_symptoms)
    if not req.has_input():
        raise SymptomInputError()

    headers = {config.API_KEY_HEADER: api_key} if api_key else {}
    try:
        resp = requests.post(
            f"{config.BACKEND_URL}/api/predict",
            json=req.model_dump(by_alias=True),
            headers=headers,
            timeout=timeout or config.LLM_TIMEOUT_SECS + 5,
        )
    except requests.RequestException as e:
        logger.error("Backend request failed: %s", e)
        raise ServiceError(details={"reason": str(e)}) from e

    try:
        payload = resp.json()
    except ValueError as e:
        raise MalformedResponseError(details={"status": resp.status_code}) from e

    if not resp.ok:
        err: PredictionError = error_from_payload(payload)
        logger.warning("Backend returned %s (%s)", resp.status_code, err.code)
        raise err

    try:
        result = PredictionResult.model_validate(payload)
    except ValueError as e:
        raise MalformedResponseError(details={"reason": str(e)}) from e
    return result.sorted_by_confidence()
