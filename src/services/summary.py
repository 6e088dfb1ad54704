from typing import Any, Dict, Iterable, Mapping

from services.trait_engine.definitions import OCEAN_KEYS, TRAIT_NAMES

_KEY_BY_NAME = {name: key for key, name in TRAIT_NAMES.items()}


def summarize_predictions(records: Iterable[Mapping[str, Any]]) -> Dict[str, Any]:
    """
    Aggregates stored predictions: mean score per trait and how often each
    trait was the dominant label. Records missing a trait count as 0 for it.
    """
    totals = {trait: 0.0 for trait in OCEAN_KEYS}
    distribution = {trait: 0 for trait in OCEAN_KEYS}
    count = 0

    for record in records:
        count += 1
        scores = record.get("scores") or {}
        for trait in OCEAN_KEYS:
            totals[trait] += float(scores.get(trait, 0) or 0)
        key = _KEY_BY_NAME.get(record.get("label"))
        if key:
            distribution[key] += 1

    averages = {trait: (totals[trait] / count if count else 0.0) for trait in OCEAN_KEYS}
    return {
        "total_predictions": count,
        "average_scores": averages,
        "trait_distribution": distribution,
    }
