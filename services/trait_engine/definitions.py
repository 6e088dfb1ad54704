# services/trait_engine/definitions.py
# Static definitions for the Big Five traits and the IPIP-50 survey items.

from typing import Dict, List, Tuple

# --- Traits ---
OCEAN_KEYS: Tuple[str, ...] = ('O', 'C', 'E', 'A', 'N')

TRAIT_NAMES: Dict[str, str] = {
    'O': 'Openness',
    'C': 'Conscientiousness',
    'E': 'Extraversion',
    'A': 'Agreeableness',
    'N': 'Neuroticism',
}

SURVEY_LENGTH = 50
LIKERT_MIN = 1
LIKERT_MAX = 5
NEUTRAL_RESPONSE = 3  # Used when a trait bucket ends up empty

# --- IPIP-50 items ---
# (text, trait, reverse). Order follows the published instrument (E, A, C, N, O repeating).
# Emotional Stability items are expressed here as Neuroticism, so their keying is flipped.
_ITEM_DATA: List[Tuple[str, str, bool]] = [
    ("Am the life of the party.", 'E', False),
    ("Feel little concern for others.", 'A', True),
    ("Am always prepared.", 'C', False),
    ("Get stressed out easily.", 'N', False),
    ("Have a rich vocabulary.", 'O', False),
    ("Don't talk a lot.", 'E', True),
    ("Am interested in people.", 'A', False),
    ("Leave my belongings around.", 'C', True),
    ("Am relaxed most of the time.", 'N', True),
    ("Have difficulty understanding abstract ideas.", 'O', True),
    ("Feel comfortable around people.", 'E', False),
    ("Insult people.", 'A', True),
    ("Pay attention to details.", 'C', False),
    ("Worry about things.", 'N', False),
    ("Have a vivid imagination.", 'O', False),
    ("Keep in the background.", 'E', True),
    ("Sympathize with others' feelings.", 'A', False),
    ("Make a mess of things.", 'C', True),
    ("Seldom feel blue.", 'N', True),
    ("Am not interested in abstract ideas.", 'O', True),
    ("Start conversations.", 'E', False),
    ("Am not interested in other people's problems.", 'A', True),
    ("Get chores done right away.", 'C', False),
    ("Am easily disturbed.", 'N', False),
    ("Have excellent ideas.", 'O', False),
    ("Have little to say.", 'E', True),
    ("Have a soft heart.", 'A', False),
    ("Often forget to put things back in their proper place.", 'C', True),
    ("Get upset easily.", 'N', False),
    ("Do not have a good imagination.", 'O', True),
    ("Talk to a lot of different people at parties.", 'E', False),
    ("Am not really interested in others.", 'A', True),
    ("Like order.", 'C', False),
    ("Change my mood a lot.", 'N', False),
    ("Am quick to understand things.", 'O', False),
    ("Don't like to draw attention to myself.", 'E', True),
    ("Take time out for others.", 'A', False),
    ("Shirk my duties.", 'C', True),
    ("Have frequent mood swings.", 'N', False),
    ("Use difficult words.", 'O', False),
    ("Don't mind being the center of attention.", 'E', False),
    ("Feel others' emotions.", 'A', False),
    ("Follow a schedule.", 'C', False),
    ("Get irritated easily.", 'N', False),
    ("Spend time reflecting on things.", 'O', False),
    ("Am quiet around strangers.", 'E', True),
    ("Make people feel at ease.", 'A', False),
    ("Am exacting in my work.", 'C', False),
    ("Often feel blue.", 'N', False),
    ("Am full of ideas.", 'O', False),
]

IPIP_50_ITEMS: Tuple[Dict[str, object], ...] = tuple(
    {"id": f"ipip-{index + 1}", "index": index, "text": text, "trait": trait, "reverse": reverse}
    for index, (text, trait, reverse) in enumerate(_ITEM_DATA)
)
