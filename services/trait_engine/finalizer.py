import math
from functools import reduce
from typing import Any, Dict, Mapping, Tuple

from services.trait_engine.definitions import OCEAN_KEYS, TRAIT_NAMES
from services.trait_engine.models import InvalidTraitVectorError, TraitVector

# Openness wins ties: it is seeded first and only a strictly greater score replaces it.
_INITIAL_BEST: Tuple[str, float] = ('O', float('-inf'))


def validate_trait_vector(scores: Mapping[str, Any]) -> TraitVector:
    """Returns a float copy of scores, rejecting missing/extra keys or non-numeric values."""
    if scores is None:
        raise InvalidTraitVectorError("Trait vector is missing", required=list(OCEAN_KEYS), actual=None)
    keys = set(scores)
    if keys != set(OCEAN_KEYS):
        raise InvalidTraitVectorError(
            f"Trait vector must contain exactly {list(OCEAN_KEYS)}",
            required=list(OCEAN_KEYS),
            actual=sorted(keys),
        )
    vector: TraitVector = {}
    for trait in OCEAN_KEYS:
        value = scores[trait]
        try:
            number = float(value)
        except (TypeError, ValueError):
            raise InvalidTraitVectorError(f"Score for '{trait}' is not numeric", required="number", actual=value)
        if math.isnan(number) or math.isinf(number):
            raise InvalidTraitVectorError(f"Score for '{trait}' is not finite", required="finite number", actual=value)
        vector[trait] = number
    return vector


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def compute_percentiles(scores: Mapping[str, float]) -> Dict[str, int]:
    return {trait: max(0, min(100, _round_half_up(scores[trait] * 100))) for trait in OCEAN_KEYS}


def dominant_trait(scores: Mapping[str, float]) -> str:
    def pick(best: Tuple[str, float], trait: str) -> Tuple[str, float]:
        return (trait, scores[trait]) if scores[trait] > best[1] else best

    best_trait, _ = reduce(pick, OCEAN_KEYS, _INITIAL_BEST)
    return best_trait


def finalize(scores: Mapping[str, float]) -> Dict[str, Any]:
    """Derives integer percentiles and the dominant-trait display name."""
    return {
        "percentiles": compute_percentiles(scores),
        "label": TRAIT_NAMES[dominant_trait(scores)],
    }
