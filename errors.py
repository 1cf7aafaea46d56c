"""
Error types for the Disease Predictor.

Every failure a submission can hit maps to one PredictionError subclass with a
stable `code`, an HTTP status for the backend, and a user-facing message.
"""

from typing import Any, Dict, Optional

CREDENTIAL_MARKERS = ("api key not valid", "api_key_invalid")


class PredictionError(Exception):
    """Base class for all prediction failures."""

    code = "PREDICTION_ERROR"
    status_code = 500
    default_message = "Something went wrong while getting a prediction."

    def __init__(self, message: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        self.message = message or self.default_message
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.code, "message": self.message, "details": self.details}


class SymptomInputError(PredictionError):
    code = "NO_SYMPTOMS"
    status_code = 400
    default_message = "Please select at least one symptom or describe your symptoms."


class InvalidRequestError(PredictionError):
    code = "INVALID_REQUEST"
    status_code = 400
    default_message = "Please POST JSON with 'symptoms' and 'otherSymptoms' fields."


class CredentialError(PredictionError):
    code = "INVALID_API_KEY"
    status_code = 401
    default_message = "Your API key is missing or not valid. Please select a valid API key."


class EmptyResponseError(PredictionError):
    code = "EMPTY_RESPONSE"
    status_code = 502
    default_message = "The model returned an empty response. Please try again."


class MalformedResponseError(PredictionError):
    code = "MALFORMED_RESPONSE"
    status_code = 502
    default_message = "The model returned a malformed response. Please try again."


class ServiceError(PredictionError):
    code = "SERVICE_UNAVAILABLE"
    status_code = 503
    default_message = "Failed to get prediction. The model may be overloaded. Please try again later."


_BY_CODE = {
    cls.code: cls
    for cls in (
        SymptomInputError,
        InvalidRequestError,
        CredentialError,
        EmptyResponseError,
        MalformedResponseError,
        ServiceError,
    )
}


def is_credential_error(message: Optional[str]) -> bool:
    if not message:
        return False
    lowered = message.lower()
    return any(marker in lowered for marker in CREDENTIAL_MARKERS)


def _http_status(exc: Exception) -> Optional[int]:
    # google-genai puts the status on `code`; openai uses `status_code` and a string `code`
    for attr in ("status_code", "code"):
        value = getattr(exc, attr, None)
        if isinstance(value, int):
            return value
    return None


def classify_error(exc: Exception) -> PredictionError:
    """
    Map an arbitrary SDK / transport exception onto the prediction error taxonomy.
    """
    if isinstance(exc, PredictionError):
        return exc
    detail = {"reason": str(exc), "type": type(exc).__name__}
    if is_credential_error(str(exc)) or _http_status(exc) in (401, 403):
        return CredentialError(details=detail)
    return ServiceError(details=detail)


def error_from_payload(payload: Any) -> PredictionError:
    """Rebuild a PredictionError from a backend error body."""
    if not isinstance(payload, dict):
        return ServiceError()
    cls = _BY_CODE.get(payload.get("error"), ServiceError)
    details = payload.get("details")
    return cls(message=payload.get("message"), details=details if isinstance(details, dict) else None)
