# utils/text_cleaner.py
"""
Text normalization and lexical similarity for comment deduplication.

All functions here are pure: no I/O, no randomness, no module state
beyond the constant tables below.
"""

import hashlib
import re
from typing import Dict, List

from rapidfuzz.distance import Levenshtein

from utils.comment_constants import RECRUITMENT_LAW_KEYWORDS


# ASCII sentence punctuation plus Hebrew geresh/gershayim,
# typographic quotes, sof pasuq and paseq.
_PUNCTUATION_RE = re.compile(r"[.,!?;:\"'()\[\]{}׳״׃׀“”„‘’«»]")
_WHITESPACE_RE = re.compile(r"\s+")

# Removed only when they stand alone as a token
HEBREW_STOP_WORDS = frozenset({
    "את", "של", "על", "אל", "עם", "כל", "אשר",
    # single-letter prefix particles
    "ב", "כ", "ל", "מ", "ה", "ש", "ו",
})


def normalize(text: str) -> str:
    """
    Normalize text for comparison.

    - Lowercase (no-op for Hebrew)
    - Remove punctuation
    - Collapse whitespace and trim
    - Drop standalone Hebrew stop words and particles
    """
    text = text.lower()
    text = _PUNCTUATION_RE.sub("", text)
    text = _WHITESPACE_RE.sub(" ", text).strip()
    tokens = [t for t in text.split(" ") if t and t not in HEBREW_STOP_WORDS]
    return " ".join(tokens)


def content_hash(text: str) -> str:
    """SHA-256 hex digest of the normalized text."""
    return hashlib.sha256(normalize(text).encode("utf-8")).hexdigest()


def similarity(a: str, b: str) -> float:
    """
    Levenshtein similarity ratio in [0, 1] over the raw strings.

    Two empty strings are identical and score 1.0.
    """
    longest = max(len(a), len(b))
    if longest == 0:
        return 1.0
    return 1.0 - Levenshtein.distance(a, b) / longest


def matches_topic(text: str, min_primary_matches: int = 1) -> Dict:
    lowered = text.lower()
    found: List[str] = []
    primary_hits = 0

    for keyword in RECRUITMENT_LAW_KEYWORDS["primary"]:
        if keyword.lower() in lowered:
            primary_hits += 1
            if keyword not in found:
                found.append(keyword)

    for keyword in RECRUITMENT_LAW_KEYWORDS["secondary"]:
        if keyword.lower() in lowered and keyword not in found:
            found.append(keyword)

    return {"matches": primary_hits >= min_primary_matches, "keywords": found}
