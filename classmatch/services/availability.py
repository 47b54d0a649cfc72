"""
Branch Option Availability

Computes which courses, levels and timings a student can still pick given
the active classes of their branch and what they have selected so far.
The registration UI disables every option outside these sets.

Rules:
- A class is eligible when it serves a selected level AND a selected course
  (an empty selection on either side does not constrain).
- Each facet is filtered by the *other* facets' selections, so choosing one
  course never disables the sibling courses offered at the same level.
- No branch selected: every catalog option is available (fail-open).
- Branch selected but nothing eligible: empty sets (fail-closed).
"""

import logging
from typing import Iterable, List, Optional, Sequence

from classmatch.schemas import AllowedOptions, ClassOffering, StudentSelection
from classmatch.services.normalizer import extract_level_key, normalize
from classmatch.services.match_predicates import course_match, level_match, loose_match

logger = logging.getLogger(__name__)


def _unique(values: Iterable) -> List:
    """De-duplicate preserving first-seen order, skipping empty values"""
    seen = set()
    result = []
    for value in values:
        if not value or value in seen:
            continue
        seen.add(value)
        result.append(value)
    return result


class AvailabilityComputer:
    """
    Derives allowed option sets from a branch's class snapshot.

    Stateless: every call receives the snapshot it works on.
    """

    def _active_in_branch(
        self,
        classes: Sequence[ClassOffering],
        branch_id: Optional[str]
    ) -> List[ClassOffering]:
        return [
            cls for cls in classes
            if cls.is_active and (branch_id is None or cls.branch_id == branch_id)
        ]

    def level_ok(self, cls: ClassOffering, selection: StudentSelection) -> bool:
        """True if no levels are selected or the class serves one of them"""
        selected = selection.level_values
        if not selected:
            return True
        return level_match(cls.levels, selected, cls.courses)

    def course_ok(self, cls: ClassOffering, selection: StudentSelection) -> bool:
        """True if no courses are selected or the class offers one of them"""
        selected = selection.course_values
        if not selected:
            return True
        return course_match(cls.courses, selected)

    def is_eligible(self, cls: ClassOffering, selection: StudentSelection) -> bool:
        return self.level_ok(cls, selection) and self.course_ok(cls, selection)

    def compute_allowed_timings(
        self,
        classes: Sequence[ClassOffering],
        selection: StudentSelection
    ) -> List[str]:
        """
        Timings of classes that satisfy both the level and course selections.

        Args:
            classes: Active classes of the student's branch
            selection: Current student selection

        Returns:
            De-duplicated, non-empty timing labels
        """
        eligible = [cls for cls in classes if self.is_eligible(cls, selection)]
        timings = _unique(cls.timing for cls in eligible)

        logger.debug(
            f"Allowed timings: levels={selection.level_values}, "
            f"courses={selection.course_values}, classes={len(classes)}, "
            f"matched={len(eligible)}, timings={timings}"
        )
        return timings

    def compute_allowed_courses(
        self,
        classes: Sequence[ClassOffering],
        selection: StudentSelection
    ) -> List[str]:
        """Trimmed course labels of classes serving the selected levels"""
        return _unique(
            course.strip()
            for cls in classes if self.level_ok(cls, selection)
            for course in cls.courses
        )

    def compute_allowed_levels(
        self,
        classes: Sequence[ClassOffering],
        selection: StudentSelection
    ) -> List[str]:
        """Level labels of classes offering the selected courses"""
        return _unique(
            level
            for cls in classes if self.course_ok(cls, selection)
            for level in cls.levels
        )

    def compute_allowed_level_keys(
        self,
        classes: Sequence[ClassOffering],
        selection: StudentSelection
    ) -> List[str]:
        """Level keys ("level1", ...) of the allowed levels"""
        return _unique(
            extract_level_key(level)
            for level in self.compute_allowed_levels(classes, selection)
        )

    def compute_allowed_options(
        self,
        classes: Sequence[ClassOffering],
        selection: StudentSelection,
        catalog: Optional[Sequence[ClassOffering]] = None
    ) -> AllowedOptions:
        """
        Build the full availability picture for a selection.

        Args:
            classes: Active classes of selection.branch_id (ignored when no
                branch is selected)
            selection: Current student selection
            catalog: Active classes across all branches, used for the
                all_* sets and the fail-open case; defaults to `classes`

        Returns:
            AllowedOptions with branch_selected telling fail-open apart from
            an empty (fail-closed) result
        """
        catalog_classes = self._active_in_branch(
            catalog if catalog is not None else classes, None
        )
        all_courses = _unique(c.strip() for cls in catalog_classes for c in cls.courses)
        all_levels = _unique(level for cls in catalog_classes for level in cls.levels)
        all_timings = _unique(cls.timing for cls in catalog_classes)
        all_programs = _unique(cls.program for cls in catalog_classes)

        if not selection.branch_id:
            logger.debug("No branch selected - all catalog options available")
            return AllowedOptions(
                branch_selected=False,
                allowed_courses=all_courses,
                allowed_levels=all_levels,
                allowed_level_keys=_unique(extract_level_key(level) for level in all_levels),
                allowed_timings=all_timings,
                allowed_programs=all_programs,
                all_courses=all_courses,
                all_levels=all_levels,
                all_timings=all_timings,
                all_programs=all_programs,
            )

        branch_classes = self._active_in_branch(classes, selection.branch_id)
        if not branch_classes:
            logger.warning(f"No active classes found for branch {selection.branch_id}")

        eligible = [cls for cls in branch_classes if self.is_eligible(cls, selection)]

        return AllowedOptions(
            branch_selected=True,
            allowed_courses=self.compute_allowed_courses(branch_classes, selection),
            allowed_levels=self.compute_allowed_levels(branch_classes, selection),
            allowed_level_keys=self.compute_allowed_level_keys(branch_classes, selection),
            allowed_timings=self.compute_allowed_timings(branch_classes, selection),
            allowed_programs=_unique(cls.program for cls in eligible),
            allowed_start_dates=sorted(_unique(cls.start_date for cls in eligible)),
            all_courses=all_courses,
            all_levels=all_levels,
            all_timings=all_timings,
            all_programs=all_programs,
        )


def is_level_available(level_value: str, options: AllowedOptions) -> bool:
    """
    Whether a configured level option should be enabled in the UI.

    Numeric levels are checked by key against allowed_level_keys; other
    labels loosely against allowed_levels.
    """
    if not options.branch_selected:
        return True
    key = extract_level_key(level_value)
    if key:
        return key in options.allowed_level_keys
    if not normalize(level_value):
        return level_value in options.allowed_levels
    return any(loose_match(allowed, level_value) for allowed in options.allowed_levels)


def is_course_available(course_value: str, options: AllowedOptions) -> bool:
    """Whether a configured course option should be enabled in the UI"""
    if not options.branch_selected:
        return True
    if not normalize(course_value):
        return course_value in options.allowed_courses
    return any(loose_match(allowed, course_value) for allowed in options.allowed_courses)


# Global computer instance
_computer: Optional[AvailabilityComputer] = None


def get_availability_computer() -> AvailabilityComputer:
    """Get or create global AvailabilityComputer instance."""
    global _computer
    if _computer is None:
        _computer = AvailabilityComputer()
    return _computer
