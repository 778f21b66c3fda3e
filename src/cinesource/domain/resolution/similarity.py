"""Deterministic text similarity used to grade text-field disagreements."""

from __future__ import annotations

import re
import unicodedata
from difflib import SequenceMatcher

_NON_WORD_RE = re.compile(r"[^\w\s]")
_MULTISPACE_RE = re.compile(r"\s+")


def normalize_text(value: str) -> str:
    """Casefold, strip accents and punctuation, collapse whitespace."""

    decomposed = unicodedata.normalize("NFKD", value)
    stripped = "".join(char for char in decomposed if not unicodedata.combining(char))
    cleaned = _NON_WORD_RE.sub(" ", stripped.casefold())
    return _MULTISPACE_RE.sub(" ", cleaned).strip()


def token_set_similarity(left: str, right: str) -> float:
    left_tokens = set(normalize_text(left).split())
    right_tokens = set(normalize_text(right).split())
    if not left_tokens or not right_tokens:
        return 0.0
    return len(left_tokens & right_tokens) / len(left_tokens | right_tokens)


def text_similarity(left: str, right: str) -> float:
    """Return the better of sequence and token-set similarity, in [0, 1]."""

    norm_left = normalize_text(left)
    norm_right = normalize_text(right)
    if not norm_left or not norm_right:
        return 1.0 if norm_left == norm_right else 0.0
    if norm_left == norm_right:
        return 1.0
    sequence = SequenceMatcher(a=norm_left, b=norm_right).ratio()
    return max(sequence, token_set_similarity(norm_left, norm_right))
