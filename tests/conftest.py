import copy

import pytest

from services.trait_engine.definitions import OCEAN_KEYS
from services.trait_engine.engine import TraitEngine
from services.trait_engine.loader import load_lexicon_data
from services.trait_engine.models import FeatureCounts

# Small vocabulary so tests can reason about exact counts
MINIMAL_LEXICON = {
    "version": "test",
    "traits": {
        "O": {"categories": {
            "abstract": {"weight": 1.0, "words": ["idea", "theory"]},
            "creative": {"weight": 1.0, "words": ["art"]},
            "curiosity": {"weight": 1.0, "words": ["explore"]},
        }},
        "C": {"categories": {
            "organization": {"weight": 1.0, "words": ["plan", "schedule"]},
            "achievement": {"weight": 1.0, "words": ["goal"]},
            "discipline": {"weight": 1.0, "words": ["focus"]},
        }},
        "E": {"categories": {
            "social": {"weight": 1.0, "words": ["party", "friends"]},
            "energy": {"weight": 1.0, "words": ["fun"]},
            "assertive": {"weight": 1.0, "words": ["lead"]},
        }},
        "A": {"categories": {
            "warmth": {"weight": 1.0, "words": ["kind"]},
            "cooperation": {"weight": 1.0, "words": ["help"]},
            "trust": {"weight": 1.0, "words": ["trust"]},
        }},
        "N": {"categories": {
            "anxiety": {"weight": 1.0, "words": ["worry"]},
            "anger": {"weight": 1.0, "words": ["angry"]},
            "sadness": {"weight": 1.0, "words": ["sad"]},
        }},
    },
    "positive_affect": ["happy", "good"],
    "negative_affect": ["bad", "sad"],
    "pronouns": {
        "first_person": ["i", "me", "my"],
        "second_person": ["you", "your"],
        "third_person": ["they", "them", "she", "he"],
    },
    "threshold_markers": {
        "first_person": ["i", "me", "my"],
        "social": ["we", "us", "party"],
        "negative": ["bad", "not"],
        "positive": ["good", "happy"],
        "abstract": ["idea", "think"],
        "organization": ["plan", "prepare"],
    },
}


@pytest.fixture
def minimal_lexicon_data():
    return copy.deepcopy(MINIMAL_LEXICON)


@pytest.fixture
def minimal_lexicon(minimal_lexicon_data):
    return load_lexicon_data(minimal_lexicon_data)


@pytest.fixture(scope="session")
def engine():
    """TraitEngine with the bundled lexicon and default strategy."""
    return TraitEngine()


def make_features(**overrides) -> FeatureCounts:
    """Neutral FeatureCounts (no markers, 100 words) with selected fields replaced."""
    values = dict(
        word_count=100,
        avg_word_length=4.0,
        sentence_count=5,
        avg_sentence_length=20.0,
        exclamation_count=0,
        question_count=0,
        marker_counts={trait: {} for trait in OCEAN_KEYS},
        positive_count=0,
        negative_count=0,
        first_person_count=0,
        second_person_count=0,
        third_person_count=0,
    )
    values.update(overrides)
    return FeatureCounts(**values)


@pytest.fixture
def features_factory():
    return make_features
