# services/trait_engine/features.py
# Surface statistics and lexical marker counts for free-form text.

import logging
import re
import string
from typing import Dict, List, Optional

from services.trait_engine.models import (
    EmptyTextError,
    FeatureCounts,
    InsufficientTextError,
    Lexicon,
)

logger = logging.getLogger(__name__)

DEFAULT_MAX_CHARS = 4000
SENTENCE_SPLIT_RE = re.compile(r"[.!?]")


def prepare_text(text: Optional[str], max_chars: int = DEFAULT_MAX_CHARS, min_words: Optional[int] = None) -> str:
    """
    Validates raw text input and truncates it for analysis.

    Raises:
        EmptyTextError: If the text is missing or whitespace-only.
        InsufficientTextError: If min_words is set and the truncated text has fewer words.
    """
    if text is None or not str(text).strip():
        raise EmptyTextError("Text input is empty", required="non-empty text", actual=0)

    prepared = str(text)[:max_chars]
    if min_words:
        word_count = len(prepared.split())
        if word_count < min_words:
            raise InsufficientTextError(
                f"Text must contain at least {min_words} words (got {word_count})",
                required=min_words,
                actual=word_count,
            )
    return prepared


def tokenize(text: str) -> List[str]:
    """Lower-cases and splits on whitespace."""
    return text.lower().split()


def split_sentences(text: str) -> List[str]:
    return [s for s in SENTENCE_SPLIT_RE.split(text) if s.strip()]


def _normalize_token(word: str) -> str:
    return word.strip(string.punctuation + "‘’“”")


def extract_features(text: str, lexicon: Lexicon) -> FeatureCounts:
    """Computes FeatureCounts for a piece of text. Never raises for degenerate input."""
    words = tokenize(text)
    tokens = [_normalize_token(w) for w in words]
    sentences = split_sentences(text)

    word_count = len(words)
    sentence_count = len(sentences)
    avg_word_length = sum(len(w) for w in words) / word_count if word_count else 0.0
    avg_sentence_length = word_count / sentence_count if sentence_count else float(word_count)

    token_counts: Dict[str, int] = {}
    for token in tokens:
        if token:
            token_counts[token] = token_counts.get(token, 0) + 1

    def count(vocabulary) -> int:
        return sum(token_counts.get(word, 0) for word in set(vocabulary))

    marker_counts = {
        trait: {name: count(category.words) for name, category in trait_lexicon.categories.items()}
        for trait, trait_lexicon in lexicon.traits.items()
    }

    features = FeatureCounts(
        word_count=word_count,
        avg_word_length=avg_word_length,
        sentence_count=sentence_count,
        avg_sentence_length=avg_sentence_length,
        exclamation_count=text.count("!"),
        question_count=text.count("?"),
        marker_counts=marker_counts,
        positive_count=count(lexicon.positive_affect),
        negative_count=count(lexicon.negative_affect),
        first_person_count=count(lexicon.pronouns.first_person),
        second_person_count=count(lexicon.pronouns.second_person),
        third_person_count=count(lexicon.pronouns.third_person),
        threshold_counts={name: count(words) for name, words in lexicon.threshold_markers},
    )
    logger.debug(f"Extracted features: words={word_count}, sentences={sentence_count}, markers={marker_counts}")
    return features
