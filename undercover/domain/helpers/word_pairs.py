from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import List, Sequence


@dataclass(frozen=True)
class WordPair:
    civilian: str
    undercover: str


DEFAULT_WORD_PAIRS: List[WordPair] = [
    WordPair("Pomme", "Orange"),
    WordPair("Chat", "Chien"),
    WordPair("Voiture", "Moto"),
    WordPair("Café", "Thé"),
    WordPair("Plage", "Piscine"),
    WordPair("Guitare", "Violon"),
    WordPair("Train", "Métro"),
    WordPair("Crayon", "Stylo"),
]


def parse_word_pairs(raw: object) -> List[WordPair]:
    """
    Accepts a list of {"civilian": ..., "undercover": ...} objects
    or [civilian, undercover] lists.
    """
    if not isinstance(raw, list):
        raise ValueError("Word pairs must be a list")

    pairs: List[WordPair] = []
    for item in raw:
        if isinstance(item, dict):
            civ, und = item.get("civilian"), item.get("undercover")
        elif isinstance(item, (list, tuple)) and len(item) == 2:
            civ, und = item
        else:
            raise ValueError(f"Invalid word pair: {item!r}")

        if not isinstance(civ, str) or not isinstance(und, str) or not civ.strip() or not und.strip():
            raise ValueError(f"Invalid word pair: {item!r}")
        if civ.strip().casefold() == und.strip().casefold():
            raise ValueError(f"Word pair needs two different words: {item!r}")
        pairs.append(WordPair(civ.strip(), und.strip()))

    if not pairs:
        raise ValueError("Word pair catalog is empty")
    return pairs


def load_word_pairs(path: str = "") -> Sequence[WordPair]:
    """Load the catalog from a JSON file, or the built-in one when no path is set."""
    if not path:
        return list(DEFAULT_WORD_PAIRS)
    return parse_word_pairs(json.loads(Path(path).read_text(encoding="utf-8")))
