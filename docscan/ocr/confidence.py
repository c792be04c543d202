"""Rule-based OCR quality score.

The constants below are a compatibility contract with previously archived
records; changing any of them changes stored confidence values.
"""

import re

BASE_SCORE = 100
SHORT_TEXT_LENGTH = 50
SHORT_TEXT_PENALTY = 20
NOISE_RATIO_THRESHOLD = 0.3
NOISE_PENALTY = 30
REPEATED_RUN_PENALTY = 5
SENTENCE_BONUS = 10

_REPEATED_RUN_RE = re.compile(r"(.)\1{3,}", re.DOTALL)
_SENTENCE_END_RE = re.compile(r"[.!?]")


def noise_ratio(text: str) -> float:
    """Share of characters that are neither alphanumeric nor whitespace."""
    if not text:
        return 0.0
    noisy = sum(1 for ch in text if not ch.isalnum() and not ch.isspace())
    return noisy / len(text)


def count_repeated_runs(text: str) -> int:
    """Number of runs of four or more identical consecutive characters."""
    return sum(1 for _ in _REPEATED_RUN_RE.finditer(text))


def score_confidence(text: str) -> int:
    """Deterministic 0..100 quality score for recognized *text*."""
    score = BASE_SCORE
    if len(text) < SHORT_TEXT_LENGTH:
        score -= SHORT_TEXT_PENALTY
    if noise_ratio(text) > NOISE_RATIO_THRESHOLD:
        score -= NOISE_PENALTY
    score -= REPEATED_RUN_PENALTY * count_repeated_runs(text)
    if _SENTENCE_END_RE.search(text):
        score += SENTENCE_BONUS
    return max(0, min(100, score))
