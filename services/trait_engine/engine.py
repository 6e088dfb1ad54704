import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence

from services.trait_engine.definitions import IPIP_50_ITEMS, TRAIT_NAMES
from services.trait_engine.features import DEFAULT_MAX_CHARS, extract_features, prepare_text
from services.trait_engine.finalizer import finalize, validate_trait_vector
from services.trait_engine.loader import get_default_lexicon
from services.trait_engine.models import Lexicon, PredictionResult, TraitVector
from services.trait_engine.strategies import (
    ScoringStrategy,
    ThresholdAdjustmentStrategy,
    WeightedMarkerStrategy,
)
from services.trait_engine.survey import ROUND_ROBIN, SURVEY_MODES, score_survey

logger = logging.getLogger(__name__)

METHOD_SURVEY = "survey"
METHOD_TEXT = "text_analysis"
METHOD_MODEL = "model_enhanced"


class TraitEngine:
    """
    Entry point for Big Five scoring. Holds only immutable configuration, so one
    instance can serve any number of concurrent requests.
    """
    def __init__(
        self,
        lexicon: Optional[Lexicon] = None,
        strategy: Optional[ScoringStrategy] = None,
        survey_mode: str = ROUND_ROBIN,
        max_text_chars: int = DEFAULT_MAX_CHARS,
    ):
        """
        Args:
            lexicon: Marker vocabularies. Defaults to the bundled lexicon.
            strategy: Text scoring rules. Defaults to WeightedMarkerStrategy built from the lexicon.
            survey_mode: 'round_robin' or 'keyed'.
            max_text_chars: Text is truncated to this many characters before analysis.
        """
        if survey_mode not in SURVEY_MODES:
            raise ValueError(f"Unknown survey scoring mode '{survey_mode}'. Expected one of {SURVEY_MODES}.")
        self.lexicon = lexicon or get_default_lexicon()
        self.strategy = strategy or WeightedMarkerStrategy.from_lexicon(self.lexicon)
        self.survey_mode = survey_mode
        self.max_text_chars = max_text_chars

    # --- Scoring ---

    def score_survey(self, responses: Sequence[Any]) -> TraitVector:
        return score_survey(responses, mode=self.survey_mode)

    def score_text(self, text: str, min_words: Optional[int] = None) -> TraitVector:
        prepared = prepare_text(text, max_chars=self.max_text_chars, min_words=min_words)
        features = extract_features(prepared, self.lexicon)
        return self.strategy.score(features)

    def enhance_scores(
        self,
        text: str,
        base_scores: Mapping[str, Any],
        min_words: Optional[int] = None,
    ) -> TraitVector:
        """Applies threshold adjustments from the text onto an externally supplied vector."""
        base = validate_trait_vector(base_scores)
        prepared = prepare_text(text, max_chars=self.max_text_chars, min_words=min_words)
        features = extract_features(prepared, self.lexicon)
        return ThresholdAdjustmentStrategy(base).score(features)

    def finalize(self, scores: Mapping[str, Any]) -> Dict[str, Any]:
        return finalize(validate_trait_vector(scores))

    # --- Full results ---

    def _build_result(self, scores: TraitVector, method: str) -> PredictionResult:
        final = self.finalize(scores)
        result = PredictionResult(
            scores=dict(scores),
            percentiles=final["percentiles"],
            label=final["label"],
            method=method,
        )
        logger.info(f"Prediction computed via {method}: label={result.label}")
        return result

    def analyze_survey(self, responses: Sequence[Any]) -> PredictionResult:
        return self._build_result(self.score_survey(responses), METHOD_SURVEY)

    def analyze_text(self, text: str, min_words: Optional[int] = None) -> PredictionResult:
        return self._build_result(self.score_text(text, min_words=min_words), METHOD_TEXT)

    def analyze_model_output(
        self,
        text: str,
        base_scores: Mapping[str, Any],
        min_words: Optional[int] = None,
    ) -> PredictionResult:
        return self._build_result(self.enhance_scores(text, base_scores, min_words=min_words), METHOD_MODEL)

    # --- Presentation helpers ---

    def get_survey_items(self) -> List[Dict[str, Any]]:
        """
        Returns the survey items in presentation order. The reverse flag is
        exposed so clients can annotate reverse-keyed items.
        """
        return [
            {
                "id": item["id"],
                "index": item["index"],
                "text": item["text"],
                "trait": item["trait"],
                "trait_name": TRAIT_NAMES[item["trait"]],
                "reverse": item["reverse"],
            }
            for item in IPIP_50_ITEMS
        ]
