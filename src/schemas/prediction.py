from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel


class PredictionRequest(BaseModel):
    type: Literal["text", "survey"]
    text: Optional[str] = None
    responses: Optional[List[int]] = None  # 50 Likert answers, 1-5
    share: bool = False


class PredictionResponse(BaseModel):
    scores: Dict[str, float]
    percentiles: Dict[str, int]
    label: str
    method: str
    id: Optional[str] = None
    public_id: Optional[str] = None
    warning: Optional[str] = None


class StoredPrediction(BaseModel):
    id: str
    public_id: str
    input_type: str
    method: str
    scores: Dict[str, float]
    percentiles: Dict[str, int]
    label: str
    share: bool
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class PredictionSummary(BaseModel):
    total_predictions: int
    average_scores: Dict[str, float]
    trait_distribution: Dict[str, int]


class SurveyItem(BaseModel):
    id: str
    index: int
    text: str
    trait: str
    trait_name: str
    reverse: bool


class ValidationErrorDetail(BaseModel):
    message: str
    required: Optional[Any] = None
    actual: Optional[Any] = None
