"""
Text scoring strategies.

Each strategy turns FeatureCounts into a TraitVector. Two rule sets exist and they
are not numerically interchangeable:

* WeightedMarkerStrategy  - weighted marker density plus per-trait bonuses,
  followed by affect and pronoun corrections. Bounded to [0.2, 0.8].
* ThresholdAdjustmentStrategy - small additive nudges from coarse word-category
  thresholds layered on a base vector (usually an external model's output).
  Bounded to [0.1, 0.9].
"""
import logging
from abc import ABC, abstractmethod
from typing import Dict, Mapping, Optional

from services.trait_engine.definitions import OCEAN_KEYS
from services.trait_engine.models import FeatureCounts, Lexicon, TraitVector

logger = logging.getLogger(__name__)


def clamp(value: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, value))


class ScoringStrategy(ABC):
    """Maps extracted text features onto the five traits."""

    lower_bound: float = 0.0
    upper_bound: float = 1.0

    @abstractmethod
    def score(self, features: FeatureCounts) -> TraitVector:
        raise NotImplementedError


class WeightedMarkerStrategy(ScoringStrategy):
    lower_bound = 0.2
    upper_bound = 0.8

    BASELINE = 0.5
    DENSITY_SCALE = 50.0
    DENSITY_CAP = 1.0
    POSITIVE_RATIO_FACTOR = 0.5
    FIRST_PERSON_DENSITY_LIMIT = 0.10
    OTHER_PERSON_DENSITY_LIMIT = 0.05
    PRONOUN_NUDGE = 0.05

    def __init__(self, category_weights: Optional[Mapping[str, Mapping[str, float]]] = None):
        # trait -> category -> weight; falls back to 1.0 for unknown categories
        self.category_weights = category_weights or {}

    @classmethod
    def from_lexicon(cls, lexicon: Lexicon) -> "WeightedMarkerStrategy":
        return cls({
            trait: {name: category.weight for name, category in trait_lexicon.categories.items()}
            for trait, trait_lexicon in lexicon.traits.items()
        })

    def _weighted_total(self, features: FeatureCounts, trait: str) -> float:
        weights = self.category_weights.get(trait, {})
        return sum(
            weights.get(category, 1.0) * count
            for category, count in features.marker_counts.get(trait, {}).items()
        )

    def _density(self, total: float, word_count: int) -> float:
        if word_count <= 0:
            return 0.0
        return min(total / word_count * self.DENSITY_SCALE, self.DENSITY_CAP)

    def _bonus(self, trait: str, f: FeatureCounts) -> float:
        if trait == 'O':
            return 0.05 if f.avg_word_length > 6 else 0.0
        if trait == 'C':
            return 0.05 if f.avg_sentence_length > 20 else 0.0
        if trait == 'E':
            return 0.1 if f.exclamation_count > 2 else -0.05
        if trait == 'A':
            return 0.05 if f.positive_count > f.negative_count else 0.0
        if trait == 'N':
            return 0.1 if f.negative_count > f.positive_count else 0.0
        return 0.0

    def score(self, features: FeatureCounts) -> TraitVector:
        scores: Dict[str, float] = {}
        for trait in OCEAN_KEYS:
            raw = self.BASELINE + self._density(self._weighted_total(features, trait), features.word_count)
            scores[trait] = clamp(raw + self._bonus(trait, features), self.lower_bound, self.upper_bound)

        wc = features.word_count
        if wc > 0:
            # (a) positive affect dampens Neuroticism
            positive_ratio = features.positive_count / wc
            scores['N'] = clamp(scores['N'] - positive_ratio * self.POSITIVE_RATIO_FACTOR,
                                self.lower_bound, self.upper_bound)

            # (b) pronoun balance nudges Extraversion
            extraversion = scores['E']
            if features.first_person_count / wc > self.FIRST_PERSON_DENSITY_LIMIT:
                extraversion -= self.PRONOUN_NUDGE
            if (features.second_person_count / wc > self.OTHER_PERSON_DENSITY_LIMIT
                    or features.third_person_count / wc > self.OTHER_PERSON_DENSITY_LIMIT):
                extraversion += self.PRONOUN_NUDGE
            scores['E'] = clamp(extraversion, self.lower_bound, self.upper_bound)

        logger.debug(f"Weighted marker scores: {scores}")
        return scores


class ThresholdAdjustmentStrategy(ScoringStrategy):
    """
    Nudges a base vector using counts from the lexicon's threshold_markers
    lists. These lists are separate from the weighted marker categories.
    """
    lower_bound = 0.1
    upper_bound = 0.9

    PLACEHOLDER_SCORE = 0.5

    def __init__(self, base_scores: Optional[Mapping[str, float]] = None):
        if base_scores is None:
            base_scores = {trait: self.PLACEHOLDER_SCORE for trait in OCEAN_KEYS}
        self.base_scores = {trait: float(base_scores[trait]) for trait in OCEAN_KEYS}

    def adjustments(self, f: FeatureCounts) -> Dict[str, float]:
        social = f.threshold_count("social")
        abstract = f.threshold_count("abstract")
        organization = f.threshold_count("organization")
        first_person = f.threshold_count("first_person")
        positive, negative = f.threshold_count("positive"), f.threshold_count("negative")

        return {
            'E': (0.05 if social > 2 else 0.0) + (-0.03 if first_person > 8 else 0.0),
            'N': (0.06 if negative > positive else -0.04) + (0.02 if f.exclamation_count > 3 else 0.0),
            'O': (0.05 if abstract > 2 else 0.0) + (0.03 if f.avg_word_length > 6 else 0.0),
            'C': (0.05 if organization > 2 else 0.0) + (0.03 if f.word_count > 250 else 0.0),
            'A': (0.05 if positive > negative + 2 else 0.0) + (0.02 if f.question_count > 1 else 0.0),
        }

    def score(self, features: FeatureCounts) -> TraitVector:
        adjustments = self.adjustments(features)
        scores = {
            trait: clamp(self.base_scores[trait] + adjustments[trait], self.lower_bound, self.upper_bound)
            for trait in OCEAN_KEYS
        }
        logger.debug(f"Threshold-adjusted scores: base={self.base_scores}, adjustments={adjustments}")
        return scores
