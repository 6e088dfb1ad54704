# services/trait_engine/survey.py
# Aggregates IPIP-50 Likert responses into normalized trait scores.

import logging
from typing import Any, Dict, List, Sequence

from services.trait_engine.definitions import (
    IPIP_50_ITEMS,
    LIKERT_MAX,
    LIKERT_MIN,
    NEUTRAL_RESPONSE,
    OCEAN_KEYS,
    SURVEY_LENGTH,
)
from services.trait_engine.models import (
    IncompleteSurveyError,
    InvalidSurveyResponseError,
    TraitVector,
)

logger = logging.getLogger(__name__)

ROUND_ROBIN = "round_robin"
KEYED = "keyed"
SURVEY_MODES = (ROUND_ROBIN, KEYED)


def validate_responses(responses: Sequence[Any]) -> List[int]:
    """Checks length and Likert range; returns the responses as a list of ints."""
    if responses is None or isinstance(responses, (str, bytes)):
        raise IncompleteSurveyError(
            f"Survey must have {SURVEY_LENGTH} responses", required=SURVEY_LENGTH, actual=0
        )
    values = list(responses)
    if len(values) != SURVEY_LENGTH:
        raise IncompleteSurveyError(
            f"Survey must have {SURVEY_LENGTH} responses (got {len(values)})",
            required=SURVEY_LENGTH,
            actual=len(values),
        )

    validated = []
    for position, value in enumerate(values):
        # bool is an int subclass but never a valid answer
        if isinstance(value, bool) or not isinstance(value, int) or not LIKERT_MIN <= value <= LIKERT_MAX:
            raise InvalidSurveyResponseError(
                f"Response {position + 1} must be an integer between {LIKERT_MIN} and {LIKERT_MAX} (got {value!r})",
                required=f"{LIKERT_MIN}-{LIKERT_MAX}",
                actual=value,
            )
        validated.append(value)
    return validated


def bucket_round_robin(responses: Sequence[int]) -> Dict[str, List[int]]:
    buckets: Dict[str, List[int]] = {trait: [] for trait in OCEAN_KEYS}
    for i, value in enumerate(responses[:SURVEY_LENGTH]):
        buckets[OCEAN_KEYS[i % len(OCEAN_KEYS)]].append(value)
    return buckets


def bucket_keyed(responses: Sequence[int], items: Sequence[Dict[str, Any]] = IPIP_50_ITEMS) -> Dict[str, List[int]]:
    """Buckets by each item's declared trait, inverting reverse-keyed items (6 - v)."""
    buckets: Dict[str, List[int]] = {trait: [] for trait in OCEAN_KEYS}
    for item, value in zip(items, responses):
        trait = item["trait"]
        if trait not in buckets:
            continue
        buckets[trait].append((LIKERT_MIN + LIKERT_MAX) - value if item["reverse"] else value)
    return buckets


def normalize(mean: float) -> float:
    """Maps a 1-5 Likert mean onto 0-1."""
    return (mean - LIKERT_MIN) / (LIKERT_MAX - LIKERT_MIN)


def score_buckets(buckets: Dict[str, List[int]]) -> TraitVector:
    scores: TraitVector = {}
    for trait in OCEAN_KEYS:
        values = buckets.get(trait) or []
        if values:
            mean = sum(values) / len(values)
        else:
            logger.warning(f"No survey responses mapped to trait '{trait}'; using neutral midpoint.")
            mean = NEUTRAL_RESPONSE
        scores[trait] = normalize(mean)
    return scores


def score_survey(responses: Sequence[Any], mode: str = ROUND_ROBIN) -> TraitVector:
    """
    Scores a 50-item survey.

    Args:
        responses: Exactly 50 integers in [1, 5], in item order.
        mode: 'round_robin' assigns position i to OCEAN_KEYS[i % 5];
              'keyed' uses the IPIP-50 item table with reverse keying.

    Returns:
        A TraitVector with values in [0, 1].

    Raises:
        IncompleteSurveyError, InvalidSurveyResponseError: for malformed input.
        ValueError: for an unknown mode.
    """
    if mode not in SURVEY_MODES:
        raise ValueError(f"Unknown survey scoring mode '{mode}'. Expected one of {SURVEY_MODES}.")

    values = validate_responses(responses)
    buckets = bucket_keyed(values) if mode == KEYED else bucket_round_robin(values)
    scores = score_buckets(buckets)
    logger.debug(f"Survey scores ({mode}): {scores}")
    return scores
