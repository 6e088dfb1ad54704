from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

TraitVector = Dict[str, float]


class MarkerCategory(BaseModel):
    model_config = ConfigDict(frozen=True)

    weight: float = Field(..., gt=0)
    words: Tuple[str, ...]


class TraitLexicon(BaseModel):
    model_config = ConfigDict(frozen=True)

    categories: Dict[str, MarkerCategory]


class PronounLexicon(BaseModel):
    model_config = ConfigDict(frozen=True)

    first_person: Tuple[str, ...]
    second_person: Tuple[str, ...]
    third_person: Tuple[str, ...]


class ThresholdVocabulary(BaseModel):
    """Coarse word lists counted for the threshold adjustments."""
    model_config = ConfigDict(frozen=True)

    first_person: Tuple[str, ...]
    social: Tuple[str, ...]
    negative: Tuple[str, ...]
    positive: Tuple[str, ...]
    abstract: Tuple[str, ...]
    organization: Tuple[str, ...]


class Lexicon(BaseModel):
    """Marker vocabularies used by the text feature extractor."""
    model_config = ConfigDict(frozen=True)

    version: str
    traits: Dict[str, TraitLexicon]
    positive_affect: Tuple[str, ...]
    negative_affect: Tuple[str, ...]
    pronouns: PronounLexicon
    threshold_markers: ThresholdVocabulary


@dataclass(frozen=True)
class FeatureCounts:
    word_count: int
    avg_word_length: float
    sentence_count: int
    avg_sentence_length: float
    exclamation_count: int
    question_count: int
    marker_counts: Dict[str, Dict[str, int]]  # trait -> category -> count
    positive_count: int
    negative_count: int
    first_person_count: int
    second_person_count: int
    third_person_count: int
    threshold_counts: Dict[str, int] = field(default_factory=dict)  # threshold list name -> count

    def threshold_count(self, name: str) -> int:
        return self.threshold_counts.get(name, 0)


@dataclass(frozen=True)
class PredictionResult:
    scores: TraitVector
    percentiles: Dict[str, int]
    label: str
    method: str = "unknown"

    def to_dict(self) -> Dict[str, object]:
        return {
            "scores": dict(self.scores),
            "percentiles": dict(self.percentiles),
            "label": self.label,
            "method": self.method,
        }


# Custom Error Classes
class TraitValidationError(ValueError):
    """Raised for caller-correctable input problems (bad survey, empty text, ...)."""

    def __init__(self, message: str, required: Optional[object] = None, actual: Optional[object] = None):
        self.message = message
        self.required = required
        self.actual = actual
        super().__init__(message)

    def to_dict(self) -> Dict[str, object]:
        detail: Dict[str, object] = {"message": self.message}
        if self.required is not None:
            detail["required"] = self.required
        if self.actual is not None:
            detail["actual"] = self.actual
        return detail


class IncompleteSurveyError(TraitValidationError):
    """Survey does not contain exactly the required number of responses."""
    pass


class InvalidSurveyResponseError(TraitValidationError):
    """A survey response is not an integer on the Likert scale."""
    pass


class EmptyTextError(TraitValidationError):
    pass


class InsufficientTextError(TraitValidationError):
    """Text is shorter than the configured minimum word count."""
    pass


class InvalidTraitVectorError(TraitValidationError):
    pass
