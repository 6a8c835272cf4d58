from __future__ import annotations

import random
from typing import List, Sequence

from undercover.domain.common.errors import InsufficientPlayers
from undercover.domain.common.types import Role
from undercover.domain.helpers.word_pairs import WordPair
from undercover.store.models import Player

MIN_PLAYERS = 3
MR_WHITE_MIN_PLAYERS = 5


def undercover_count_for(n: int) -> int:
    return max(1, n // 4)


def assign_roles(
    players: List[Player],
    catalog: Sequence[WordPair],
    rng: random.Random,
    *,
    min_players: int = MIN_PLAYERS,
) -> WordPair:
    """
    Assign roles and secret words in place.

      - one word pair picked uniformly from the catalog
      - players permuted uniformly (Fisher-Yates via rng.shuffle)
      - first max(1, N // 4) permuted players: undercover
      - last permuted player: mr_white, only when N > 4
      - everyone else: civilian

    Player order in `players` is left untouched. Returns the chosen pair.
    """
    n = len(players)
    if n < max(min_players, MIN_PLAYERS):
        raise InsufficientPlayers(max(min_players, MIN_PLAYERS), n)
    if not catalog:
        raise ValueError("Word pair catalog is empty")

    pair = rng.choice(list(catalog))
    undercover_count = undercover_count_for(n)

    order = list(range(n))
    rng.shuffle(order)

    for pos, idx in enumerate(order):
        p = players[idx]
        if pos < undercover_count:
            p.role = Role.UNDERCOVER
            p.secret_word = pair.undercover
        elif pos == n - 1 and n >= MR_WHITE_MIN_PLAYERS:
            p.role = Role.MR_WHITE
            p.secret_word = None
        else:
            p.role = Role.CIVILIAN
            p.secret_word = pair.civilian

        p.alive = True
        p.vote_count = 0
        p.has_voted_this_round = False

    return pair
