# app.py - Flask backend
from flask import Flask, jsonify, request
from pydantic import ValidationError

import config
from errors import InvalidRequestError, PredictionError
from llm_wrapper import get_disease_prediction
from logging_utils import get_logger, setup_logging
from pydantic_models import ErrorResponse, PredictionRequest
from symptoms import SYMPTOM_LIST

setup_logging(config.LOG_LEVEL)
logger = get_logger(__name__)

app = Flask(__name__)

@app.errorhandler(PredictionError)
def handle_prediction_error(err: PredictionError):
    logger.warning("Prediction failed: %s (%s)", err.code, err.status_code)
    body = ErrorResponse(**err.to_dict())
    return jsonify(body.model_dump()), err.status_code

@app.route("/", methods=["GET"])
def index():
    return ("Disease Predictor - POST /api/predict with "
            "{'symptoms': [...], 'otherSymptoms': '...'}")

@app.route("/api/symptoms", methods=["GET"])
def symptom_catalogue():
    return jsonify({"symptoms": SYMPTOM_LIST})

@app.route("/api/predict", methods=["POST"])
def predict():
    data = request.get_json(force=True, silent=True)
    if not isinstance(data, dict):
        raise InvalidRequestError()
    try:
        req = PredictionRequest.model_validate(data)
    except ValidationError as e:
        raise InvalidRequestError(details={"reason": str(e)}) from e

    api_key = request.headers.get(config.API_KEY_HEADER)
    logger.info("Prediction request: %d symptoms, free text %s",
                len(req.symptoms), "yes" if req.other_symptoms.strip() else "no")
    result = get_disease_prediction(req.symptoms, req.other_symptoms, api_key=api_key)
    return jsonify(result.model_dump(by_alias=True))

if __name__ == "__main__":
    app.run(host="0.0.0.0", port=5000)
