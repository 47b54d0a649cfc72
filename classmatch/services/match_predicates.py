"""
Match Predicates

Answers "does a class attribute satisfy a student selection". These
predicates are shared by availability filtering, teacher lookup and
auto-enrollment; all three must apply the same strict-key-else-loose
policy for levels or the UI will offer options that enrollment rejects.
"""

from typing import Iterable, List, Optional, Set

from classmatch.services.normalizer import normalize, extract_level_key


def loose_match(first: Optional[str], second: Optional[str]) -> bool:
    """
    Symmetric fuzzy equality over normalized labels.

    True when the normalized forms are equal or either contains the other,
    e.g. loose_match("Advanced English", "advanced") is True.
    """
    a = normalize(first)
    b = normalize(second)
    return a == b or a in b or b in a


def level_keys(labels: Iterable[Optional[str]]) -> Set[str]:
    """Extract the set of level keys present in a list of labels."""
    keys = set()
    for label in labels:
        key = extract_level_key(label)
        if key:
            keys.add(key)
    return keys


def course_match(class_courses: Iterable[str], selected_courses: Iterable[str]) -> bool:
    """True if any selected course loosely matches any class course."""
    class_courses = list(class_courses)
    return any(
        loose_match(class_course, selected)
        for selected in selected_courses
        for class_course in class_courses
    )


def level_match(
    class_levels: Iterable[str],
    selected_levels: Iterable[str],
    class_courses: Iterable[str] = (),
) -> bool:
    """
    Decide whether a class serves any of the selected levels.

    If any selection carries a numeric level key, matching is key-based
    only: "Level 1" never matches "Level 10" through substring containment,
    and class levels without a key are ignored. Otherwise ("Advanced",
    "Beginner") selections loosely match the class's level labels, then
    its course labels, since some offerings embed the level in a course name.

    Args:
        class_levels: Raw level labels of the class
        selected_levels: Level values chosen by the student
        class_courses: Raw course labels of the class (fallback target)

    Returns:
        True if the class matches at least one selected level
    """
    class_levels = list(class_levels)
    selected_levels = [level for level in selected_levels if level and level.strip()]

    selected_keys = level_keys(selected_levels)
    if selected_keys:
        return not selected_keys.isdisjoint(level_keys(class_levels))

    targets: List[str] = class_levels + list(class_courses)
    return any(
        loose_match(target, selected)
        for selected in selected_levels
        for target in targets
    )


def exact_timing_match(class_timing: Optional[str], wanted_timing: Optional[str]) -> bool:
    """
    Exact timing equality used by auto-enrollment.

    A blank wanted timing matches every class.
    """
    if not wanted_timing:
        return True
    return class_timing == wanted_timing
