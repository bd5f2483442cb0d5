"""
Text normalization helpers shared by every matching component.

Free-text registry fields are compared by substring containment,
so both sides go through normalize_text() first.
"""

import re
from dataclasses import dataclass
from typing import Optional

from .lookups import ABBREV_TO_NAME, NAME_TO_ABBREV


_SEPARATORS = re.compile(r"[_-]")
_WHITESPACE = re.compile(r"\s+")
_STATE_TOKEN = re.compile(r"^[A-Z]{2}$")
_LIST_SPLIT = re.compile(r"[,;]+")


@dataclass(frozen=True)
class StateInfo:
    """Canonical state record."""

    abbrev: str  # e.g. "NY"
    name: str  # lower-case full name, e.g. "new york"


def normalize_text(value: Optional[str]) -> str:
    """Lower-case, fold underscores/hyphens to spaces and collapse whitespace."""
    if not value or not isinstance(value, str):
        return ""
    folded = _SEPARATORS.sub(" ", value.lower())
    return _WHITESPACE.sub(" ", folded).strip()


def get_state_info(state: Optional[str]) -> Optional[StateInfo]:
    """
    Resolve a two-letter code or full state name.

    Returns None for anything unrecognized.
    """
    if not state or not isinstance(state, str):
        return None

    upper = state.strip().upper()
    if upper in ABBREV_TO_NAME:
        return StateInfo(abbrev=upper, name=ABBREV_TO_NAME[upper])

    lower = _WHITESPACE.sub(" ", state.strip().lower())
    if lower in NAME_TO_ABBREV:
        return StateInfo(abbrev=NAME_TO_ABBREV[lower], name=lower)

    return None


def parse_state_codes(text: Optional[str]) -> list[str]:
    """
    Extract standalone two-letter codes from a comma/semicolon list.

    "AL,GA; TX" -> ["AL", "GA", "TX"]. Tokens inside prose are ignored so
    "AL" never matches within words like "national".
    """
    if not text or not isinstance(text, str):
        return []
    tokens = (token.strip().upper() for token in _LIST_SPLIT.split(text))
    return [token for token in tokens if _STATE_TOKEN.match(token)]


def contains_word(text: str, word: str) -> bool:
    """Whole-word, case-insensitive containment."""
    if not text or not word:
        return False
    return re.search(rf"\b{re.escape(word.lower())}\b", text.lower()) is not None
