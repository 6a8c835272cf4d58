from __future__ import annotations

from .role_pick import assign_roles, undercover_count_for
from .voting import evaluate_winner, record_vote, resolve_round
from .word_pairs import DEFAULT_WORD_PAIRS, WordPair, load_word_pairs

__all__ = [
    "assign_roles",
    "undercover_count_for",
    "evaluate_winner",
    "record_vote",
    "resolve_round",
    "DEFAULT_WORD_PAIRS",
    "WordPair",
    "load_word_pairs",
]
