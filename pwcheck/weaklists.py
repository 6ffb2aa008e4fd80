"""Static weak-password data shared by the scorer and the leak oracle."""

import re
from typing import FrozenSet, List, Pattern

# Exact matches only, compared lower-cased.
COMMON_PASSWORDS: FrozenSet[str] = frozenset([
    # most common
    "password", "123456", "12345678", "1234", "qwerty",
    "admin", "welcome", "monkey", "password1", "1234567",
    "letmein", "football", "iloveyou", "admin123", "welcome123",
    "passw0rd", "123123", "12345", "123456789", "1234567890",
    # repeated digits
    "111111", "000000", "222222", "333333", "444444",
    "555555", "666666", "777777", "888888", "999999",
    # word + number
    "password123",
    "me2good@100%",
])

BANNED_SUBSTRINGS = ("123", "abc", "qwerty", "asdf", "zxcv")

# Matched in full against the lower-cased password.
WEAK_PATTERNS: List[Pattern[str]] = [
    re.compile(r"me\d+good@\d+%", re.ASCII),
    re.compile(r"password\d{1,4}", re.ASCII),
    re.compile(r"admin\d{1,4}", re.ASCII),
    re.compile(r"welcome\d{1,4}", re.ASCII),
    re.compile(r"1234567890*"),  # sequential digits
    re.compile(r"qwerty.*"),
    re.compile(r"letmein.*"),
    re.compile(r"iloveyou.*"),
    re.compile(r"monkey.*"),
    re.compile(r"sunshine.*"),
    re.compile(r"princess.*"),
    re.compile(r"superman.*"),
]


def is_common(password: str, common: FrozenSet[str] = COMMON_PASSWORDS) -> bool:
    return password.lower() in common


def matches_weak_pattern(password: str) -> bool:
    lowered = password.lower()
    return any(p.fullmatch(lowered) for p in WEAK_PATTERNS)
