import logging
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict

import yaml
from pydantic import ValidationError

from services.trait_engine.definitions import OCEAN_KEYS
from services.trait_engine.models import Lexicon

logger = logging.getLogger(__name__)

DEFAULT_LEXICON_PATH = Path(__file__).resolve().parent / "assets" / "lexicon.yml"

MIN_CATEGORIES_PER_TRAIT = 3
MAX_CATEGORIES_PER_TRAIT = 4


class LexiconValidationError(ValueError):
    """Custom exception for lexicon validation errors not covered by Pydantic."""
    pass


def _check_words(words, where: str) -> None:
    if not words:
        raise LexiconValidationError(f"Word list for {where} is empty")
    for word in words:
        if word != word.lower() or len(word.split()) != 1:
            raise LexiconValidationError(f"Word '{word}' in {where} must be a single lowercase token")


def load_lexicon_data(data: Dict[str, Any]) -> Lexicon:
    """
    Validates the raw dictionary data against the Lexicon model
    and performs additional custom validations.
    """
    try:
        lexicon = Lexicon.model_validate(data)
    except ValidationError as e:
        # Re-raise Pydantic's validation error for schema issues
        raise e

    trait_keys = set(lexicon.traits)
    if trait_keys != set(OCEAN_KEYS):
        missing = sorted(set(OCEAN_KEYS) - trait_keys)
        extra = sorted(trait_keys - set(OCEAN_KEYS))
        raise LexiconValidationError(f"Lexicon traits must be exactly {list(OCEAN_KEYS)} (missing: {missing}, unexpected: {extra})")

    for trait in OCEAN_KEYS:
        categories = lexicon.traits[trait].categories
        if not MIN_CATEGORIES_PER_TRAIT <= len(categories) <= MAX_CATEGORIES_PER_TRAIT:
            raise LexiconValidationError(
                f"Trait '{trait}' must define {MIN_CATEGORIES_PER_TRAIT}-{MAX_CATEGORIES_PER_TRAIT} "
                f"marker categories, found {len(categories)}"
            )
        for name, category in categories.items():
            _check_words(category.words, f"{trait}/{name}")

    _check_words(lexicon.positive_affect, "positive_affect")
    _check_words(lexicon.negative_affect, "negative_affect")
    _check_words(lexicon.pronouns.first_person, "pronouns/first_person")
    _check_words(lexicon.pronouns.second_person, "pronouns/second_person")
    _check_words(lexicon.pronouns.third_person, "pronouns/third_person")
    for name, words in lexicon.threshold_markers:
        _check_words(words, f"threshold_markers/{name}")

    return lexicon


def load_lexicon_from_file(file_path) -> Lexicon:
    """
    Loads a lexicon from a YAML file, validates it,
    and returns a Lexicon object.
    """
    try:
        with open(file_path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f)
    except FileNotFoundError:
        raise LexiconValidationError(f"File not found: {file_path}")
    except yaml.YAMLError as e:
        raise LexiconValidationError(f"Error parsing YAML file {file_path}: {e}")

    if data is None:
        raise LexiconValidationError(f"YAML file is empty or invalid: {file_path}")

    lexicon = load_lexicon_data(data)
    logger.info(f"Loaded lexicon version {lexicon.version} from {file_path}")
    return lexicon


@lru_cache(maxsize=None)
def get_default_lexicon() -> Lexicon:
    """Returns the bundled lexicon, parsed once per process."""
    return load_lexicon_from_file(DEFAULT_LEXICON_PATH)
