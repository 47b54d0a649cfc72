"""
Label Normalization

Canonicalizes free-form course, level and timing labels so that catalog
values and student selections can be compared. Labels in the catalog are
bilingual and heavily decorated ("Level-1 (1A) مستوى أول"), so comparison
keys keep only their Latin/numeric backbone.
"""

import re
from typing import List, Optional

_NON_ALNUM = re.compile(r"[^a-z0-9]")
_NON_TIMING = re.compile(r"[^a-z0-9:.\-]")
_LEVEL_TOKEN = re.compile(r"level[\s\-_]?(\d{1,2})", re.IGNORECASE)


def normalize(value: Optional[str]) -> str:
    """
    Lower-case a label and drop everything except ASCII letters and digits.

    Args:
        value: Raw label (None is treated as empty)

    Returns:
        Comparison key, e.g. "Level-1 (1A) مستوى أول" -> "level11a"
    """
    return _NON_ALNUM.sub("", (value or "").lower())


def normalize_timing(value: Optional[str]) -> str:
    """Like normalize(), but keeps ':', '.' and '-' so "9:00" != "900"."""
    return _NON_TIMING.sub("", (value or "").lower())


def timings_match(first: Optional[str], second: Optional[str]) -> bool:
    """Fuzzy timing comparison: equal or contained after timing normalization."""
    a = normalize_timing(first)
    b = normalize_timing(second)
    return a == b or a in b or b in a


def extract_level_key(value: Optional[str]) -> Optional[str]:
    """
    Extract the canonical level key from a decorated level label.

    Examples:
        "Level-5 (1A) مستوى خامس" -> "level5"
        "LEVEL_12"                -> "level12"
        "Advanced"                -> None

    Returns:
        "level" + digits, or None if the label has no level token
    """
    if not value:
        return None
    match = _LEVEL_TOKEN.search(value)
    return f"level{match.group(1)}" if match else None


def split_level_labels(course_level: Optional[str]) -> List[str]:
    """Split a comma-separated level field into trimmed, non-blank labels."""
    return [part.strip() for part in (course_level or "").split(",") if part.strip()]
