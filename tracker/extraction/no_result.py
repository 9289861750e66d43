"""
No-result detector.
Recognizes carrier pages that say the tracking number does not exist.
"""

import unicodedata
from typing import Iterable, Optional


def fold(text: str) -> str:
    """Lower-case and strip accents so "encontró" matches "encontro"."""
    decomposed = unicodedata.normalize("NFKD", text.lower())
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


def find_no_result_phrase(plain_text: str, phrases: Iterable[str]) -> Optional[str]:
    """
    Return the first negative-result phrase present in the text, if any.

    Matching is case- and accent-insensitive substring search.
    """
    haystack = fold(plain_text)
    for phrase in phrases:
        if fold(phrase) in haystack:
            return phrase
    return None
