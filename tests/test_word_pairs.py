import json

import pytest

from undercover.domain.helpers.word_pairs import (
    DEFAULT_WORD_PAIRS,
    WordPair,
    load_word_pairs,
    parse_word_pairs,
)


def test_default_catalog():
    pairs = load_word_pairs("")
    assert pairs == DEFAULT_WORD_PAIRS
    assert WordPair("Pomme", "Orange") in pairs


def test_parse_both_shapes():
    pairs = parse_word_pairs([{"civilian": "Sun", "undercover": "Moon"}, ["Tea", "Coffee"]])
    assert pairs == [WordPair("Sun", "Moon"), WordPair("Tea", "Coffee")]


@pytest.mark.parametrize(
    "raw",
    [
        {},
        [],
        [{"civilian": "Sun"}],
        [["Sun", "sun"]],
        [["Sun", ""]],
        ["Sun"],
    ],
)
def test_parse_rejects_bad_catalogs(raw):
    with pytest.raises(ValueError):
        parse_word_pairs(raw)


def test_load_from_file(tmp_path):
    path = tmp_path / "pairs.json"
    path.write_text(json.dumps([["Lion", "Tigre"]]), encoding="utf-8")
    assert load_word_pairs(str(path)) == [WordPair("Lion", "Tigre")]
