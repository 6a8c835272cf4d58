import random
from collections import Counter

import pytest

from undercover.domain.common.errors import InsufficientPlayers
from undercover.domain.common.types import Role
from undercover.domain.helpers.role_pick import assign_roles, undercover_count_for
from undercover.domain.helpers.word_pairs import WordPair
from undercover.store.models import Player

CATALOG = [WordPair("Pomme", "Orange"), WordPair("Chat", "Chien")]


def _players(n):
    return [Player(connection_id=f"c{i}", display_name=f"P{i}") for i in range(n)]


def _roles(players):
    return Counter(p.role for p in players)


@pytest.mark.parametrize(
    "n, undercover, mr_white, civilians",
    [(3, 1, 0, 2), (4, 1, 0, 3), (5, 1, 1, 3), (8, 2, 1, 5), (12, 3, 1, 8)],
)
def test_role_counts(n, undercover, mr_white, civilians):
    players = _players(n)
    assign_roles(players, CATALOG, random.Random(1))
    counts = _roles(players)
    assert counts[Role.UNDERCOVER] == undercover
    assert counts[Role.MR_WHITE] == mr_white
    assert counts[Role.CIVILIAN] == civilians
    assert counts[Role.UNASSIGNED] == 0


def test_undercover_count_formula():
    assert undercover_count_for(3) == 1
    assert undercover_count_for(7) == 1
    assert undercover_count_for(8) == 2
    assert undercover_count_for(16) == 4


def test_words_follow_roles():
    players = _players(6)
    pair = assign_roles(players, CATALOG, random.Random(3))
    assert pair in CATALOG
    for p in players:
        if p.role == Role.UNDERCOVER:
            assert p.secret_word == pair.undercover
        elif p.role == Role.CIVILIAN:
            assert p.secret_word == pair.civilian
        else:
            assert p.secret_word is None


def test_same_seed_same_assignment():
    a, b = _players(7), _players(7)
    assign_roles(a, CATALOG, random.Random(42))
    assign_roles(b, CATALOG, random.Random(42))
    assert [(p.role, p.secret_word) for p in a] == [(p.role, p.secret_word) for p in b]


def test_player_order_is_preserved():
    players = _players(5)
    assign_roles(players, CATALOG, random.Random(9))
    assert [p.connection_id for p in players] == [f"c{i}" for i in range(5)]


def test_every_player_can_be_undercover():
    seen = set()
    rng = random.Random(0)
    for _ in range(200):
        players = _players(3)
        assign_roles(players, CATALOG, rng)
        seen.update(p.connection_id for p in players if p.role == Role.UNDERCOVER)
    assert seen == {"c0", "c1", "c2"}


def test_too_few_players():
    with pytest.raises(InsufficientPlayers):
        assign_roles(_players(2), CATALOG, random.Random(1))
