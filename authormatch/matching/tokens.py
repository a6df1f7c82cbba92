"""
Ordered token and abbreviation name matching.

Compares two free-text person names by tokenizing them and pairing tokens
that are equal, or where one side is an initial of the other. Catches
reorderings and abbreviations such as "A. B. Smith" vs "Alice Barbara Smith"
or "Otto, P." vs "Philipp Otto".
"""

import re
import string
import unicodedata
from typing import List, Optional, Tuple

# Whitespace, ASCII punctuation and Unicode dash punctuation (category Pd,
# complete as of Unicode 15.1)
_DASHES = (
    "\u058a\u05be\u1400\u1806\u2010-\u2015\u2e17\u2e1a\u2e3a\u2e3b\u2e40\u2e5d"
    "\u301c\u3030\u30a0\ufe31\ufe32\ufe58\ufe63\uff0d\U00010ead"
)
SPLIT_RE = re.compile(r"[\s" + re.escape(string.punctuation) + _DASHES + r"]+")

# Max difference in token counts for two names to be comparable
NUM_TOKEN_MAX_DIFF = 2

LONG_MATCH_WEIGHT = 1.0
SHORT_MATCH_WEIGHT = 0.75
CROSS_MATCH_WEIGHT = 0.5

# Token matches never reach 1.0, that's reserved for exact string matches
SCORE_DAMPING = 0.95

# Combining Diacritical Marks block
_COMBINING_MARKS_RE = re.compile("[\u0300-\u036f]+")

# Letters with a stroke have no NFD decomposition
_STROKE_LETTERS = str.maketrans({
    "Ł": "L", "ł": "l",
    "Ø": "O", "ø": "o",
    "Đ": "D", "đ": "d",
})


def strip_accents(text: str) -> str:
    """Remove diacritics: Michał -> Michal, Lövei -> Lovei.

    Only the Combining Diacritical Marks block is dropped; other combining
    marks (Indic vowel signs, Hebrew points) are kept.
    """
    text = unicodedata.normalize("NFD", text)
    text = _COMBINING_MARKS_RE.sub("", text)
    return text.translate(_STROKE_LETTERS)


def tokenize(name: str) -> List[str]:
    """Split a name into sorted, lower-cased, accent-free tokens."""
    return sorted(t for t in SPLIT_RE.split(strip_accents(name).lower()) if t)


def _remove_full_token_matches(tokens1: List[str], tokens2: List[str]) -> int:
    """Remove whole-word matches from both lists (mutates them).

    Tokens shorter than 2 characters are initials and are left for
    the abbreviation pass.

    Returns:
        Number of matched (removed) token pairs
    """
    long_matches = 0
    i = j = 0

    while i < len(tokens1) and j < len(tokens2):
        token1 = tokens1[i]
        if len(token1) < 2:
            i += 1
            continue
        token2 = tokens2[j]
        if len(token2) < 2:
            j += 1
            continue

        if token1 > token2:
            j += 1
        elif token1 < token2:
            i += 1
        else:
            long_matches += 1
            del tokens1[i]
            del tokens2[j]

    return long_matches


def _count_initial_matches(tokens1: List[str], tokens2: List[str]) -> Tuple[int, int, int]:
    """Pair the remaining tokens by their first letter.

    Returns:
        (long_matches, short_matches, cross_matches)
    """
    long_matches = short_matches = cross_matches = 0
    i = j = 0

    while i < len(tokens1) and j < len(tokens2):
        token1 = tokens1[i]
        token2 = tokens2[j]

        if token1[0] < token2[0]:
            i += 1
        elif token1[0] > token2[0]:
            j += 1
        elif token1 == token2:
            if len(token1) > 1:
                long_matches += 1
            else:
                short_matches += 1
            i += 1
            j += 1
        elif len(token1) == 1 or len(token2) == 1:
            # initial vs spelled-out token
            cross_matches += 1
            i += 1
            j += 1
        elif token1 < token2:
            i += 1
        else:
            j += 1

    return long_matches, short_matches, cross_matches


def compare(name1: Optional[str], name2: Optional[str]) -> Optional[float]:
    """Compare two person names token by token.

    Rules:
    - Both names need at least two tokens.
    - Token counts may differ by at most NUM_TOKEN_MAX_DIFF.
    - Full-word matches are taken first, then initials are paired with
      initials (short match) or with spelled-out tokens (cross match).
    - At least one full-word match is required, and every token of the
      shorter name must find a counterpart.

    Args:
        name1: First name, e.g. "Gabor L. Lövei"
        name2: Second name, e.g. "Gabor Lövei"

    Returns:
        Confidence in (0, 0.95], or None when the names don't match or
        can't be compared this way
    """
    if name1 is None or name2 is None:
        return None

    tokens1 = tokenize(name1)
    tokens2 = tokenize(name2)
    count1 = len(tokens1)
    count2 = len(tokens2)

    if count1 < 2 or count2 < 2:
        return None

    if abs(count1 - count2) > NUM_TOKEN_MAX_DIFF:
        return None

    long_matches = _remove_full_token_matches(tokens1, tokens2)
    extra_long, short_matches, cross_matches = _count_initial_matches(tokens1, tokens2)
    long_matches += extra_long

    if long_matches == 0:
        return None
    if long_matches + short_matches + cross_matches != min(count1, count2):
        return None

    score = (
        long_matches * LONG_MATCH_WEIGHT
        + short_matches * SHORT_MATCH_WEIGHT
        + cross_matches * CROSS_MATCH_WEIGHT
    ) / max(count1, count2)
    return score * SCORE_DAMPING
