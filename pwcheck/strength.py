import re
from typing import Any

from pwcheck.weaklists import BANNED_SUBSTRINGS, matches_weak_pattern

MAX_SCORE = 5

STRENGTH_LEVELS = [
    ("Very Weak", "strength-very-weak"),
    ("Weak", "strength-weak"),
    ("Fair", "strength-fair"),
    ("Good", "strength-good"),
    ("Strong", "strength-strong"),
    ("Very Strong", "strength-very-strong"),
]

_REPEAT = re.compile(r"(.)\1{2,}", re.DOTALL)
_ALL_DIGITS = re.compile(r"[0-9]+")
_ALL_LETTERS = re.compile(r"[a-zA-Z]+")


def score(password: Any) -> int:
    """Score a password from 0 (trivial) to 5 (strong).

    Length tiers and character classes add points, repeats and keyboard
    runs take them away, then the digit-only / letter-only overrides and
    the weak-pattern penalty are applied before clamping. Non-string and
    empty input score 0.
    """
    if not isinstance(password, str) or not password:
        return 0

    points = 0
    n = len(password)
    if n >= 8:
        points += 1
    if n >= 12:
        points += 2
    if n >= 16:
        points += 3

    if re.search(r"[a-z]", password):
        points += 1
    if re.search(r"[A-Z]", password):
        points += 1
    if re.search(r"[0-9]", password):
        points += 1
    if re.search(r"[^a-zA-Z0-9]", password):
        points += 2

    if _REPEAT.search(password):
        points -= 2
    lowered = password.lower()
    if any(s in lowered for s in BANNED_SUBSTRINGS):
        points -= 3

    letters_only = False
    if _ALL_DIGITS.fullmatch(password):
        points = 0
    elif _ALL_LETTERS.fullmatch(password):
        letters_only = True
        points = max(1, points)

    if matches_weak_pattern(password):
        points -= 2
        # letter-only passwords never drop below 1, even after the pattern penalty
        if letters_only:
            points = max(1, points)

    return max(0, min(MAX_SCORE, points))


def strength_label(value: int) -> str:
    return STRENGTH_LEVELS[max(0, min(MAX_SCORE, value))][0]


def strength_class(value: int) -> str:
    return STRENGTH_LEVELS[max(0, min(MAX_SCORE, value))][1]
