from services.trait_engine.engine import TraitEngine
from services.trait_engine.models import (
    EmptyTextError,
    IncompleteSurveyError,
    InsufficientTextError,
    InvalidSurveyResponseError,
    InvalidTraitVectorError,
    PredictionResult,
    TraitValidationError,
)

__all__ = [
    "TraitEngine",
    "PredictionResult",
    "TraitValidationError",
    "IncompleteSurveyError",
    "InvalidSurveyResponseError",
    "EmptyTextError",
    "InsufficientTextError",
    "InvalidTraitVectorError",
]
