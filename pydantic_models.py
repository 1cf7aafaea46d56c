from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from symptoms import normalize_selection


class Prediction(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    condition: str
    confidence: float = Field(allow_inf_nan=False)
    description: str
    next_steps: str = Field(alias="nextSteps")

    @field_validator("confidence", mode="before")
    @classmethod
    def _reject_bool(cls, v: Any) -> Any:
        if isinstance(v, bool):
            raise ValueError("confidence must be a number, not a boolean")
        return v

    @field_validator("confidence")
    @classmethod
    def _clamp_confidence(cls, v: float) -> float:
        return min(max(v, 0.0), 100.0)


class PredictionResult(BaseModel):
    predictions: List[Prediction]

    @property
    def is_empty(self) -> bool:
        return not self.predictions

    @property
    def top(self) -> Optional[Prediction]:
        return self.predictions[0] if self.predictions else None

    def sorted_by_confidence(self) -> "PredictionResult":
        # sorted() is stable with reverse=True, so ties keep their received order
        ordered = sorted(self.predictions, key=lambda p: p.confidence, reverse=True)
        return PredictionResult(predictions=ordered)

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True)


class PredictionRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    symptoms: List[str] = Field(default_factory=list)
    other_symptoms: str = Field(default="", alias="otherSymptoms")

    @field_validator("symptoms")
    @classmethod
    def _normalize_symptoms(cls, v: List[str]) -> List[str]:
        return normalize_selection(v)

    @field_validator("other_symptoms", mode="before")
    @classmethod
    def _none_is_blank(cls, v: Any) -> Any:
        return "" if v is None else v

    def has_input(self) -> bool:
        return bool(self.symptoms) or bool(self.other_symptoms.strip())


class ErrorResponse(BaseModel):
    error: str
    message: str
    details: Dict[str, Any] = Field(default_factory=dict)
