"""
Similarity scoring between normalized company names.

Composite of three RapidFuzz scorers, each symmetric:
  0.35 x Jaro-Winkler    (typos, shared prefixes)
  0.35 x token_set_ratio (word order, one name extending the other)
  0.30 x ratio           (plain Indel similarity, penalizes extra words)
"""

from rapidfuzz import fuzz
from rapidfuzz.distance import JaroWinkler

MAX_SCORE = 100.0


def similarity_score(left: str, right: str) -> float:
    """Score two normalized names on a 0-100 scale, rounded to 2 decimals."""
    if not left or not right:
        return 0.0
    if left == right:
        return MAX_SCORE

    jw = JaroWinkler.similarity(left, right)
    tsr = fuzz.token_set_ratio(left, right) / 100.0
    ratio = fuzz.ratio(left, right) / 100.0
    score = (0.35 * jw + 0.35 * tsr + 0.30 * ratio) * 100.0
    return round(min(score, MAX_SCORE), 2)
