"""
Auto-Enrollment Engine

Enrolls a newly registered student into every active class of their branch
that matches their timing, courses and levels:

- Timing: exact equality when the student picked one (timing collisions
  matter operationally, so no fuzzy matching here)
- Courses: any student course loosely matches any class course
- Levels: any student level key ("level3") appears among the class's keys

Enrollment inserts go one at a time so a failure can report which classes
were already joined. Duplicate pairs mean the student was enrolled before
and count as success, which makes re-running the whole call safe.
"""

import logging
from typing import List, Optional, Protocol, Sequence, Set, Tuple

from classmatch.exceptions import EnrollmentWriteError
from classmatch.schemas import (
    AutoEnrollResult,
    ClassOffering,
    StudentProfile,
    resolve_course_selection,
)
from classmatch.services.normalizer import extract_level_key, split_level_labels
from classmatch.services.match_predicates import course_match, exact_timing_match, level_keys

logger = logging.getLogger(__name__)


class EnrollmentWriter(Protocol):
    """Enrollment store used by the engine"""

    async def insert_enrollment(self, student_id: str, class_id: str) -> bool:
        """Insert one pair; return False if it already existed."""
        ...

    async def link_teachers(self, student_id: str, teacher_ids: List[str]) -> int:
        """Create student->teacher visibility links; return links created."""
        ...


class AutoEnrollmentEngine:
    """Finds eligible classes for a student profile and records enrollments"""

    def student_courses(self, profile: StudentProfile) -> List[str]:
        """Course values from explicit courses, else from the legacy program field"""
        return resolve_course_selection(profile).as_list()

    def student_levels(self, profile: StudentProfile) -> Tuple[Set[str], List[str]]:
        """
        Split the profile's course_level field into level keys.

        Returns:
            (level keys, labels without a level token). The second list is
            only reported; it takes no part in matching.
        """
        labels = split_level_labels(profile.course_level)
        unmatched = [label for label in labels if extract_level_key(label) is None]
        return level_keys(labels), unmatched

    def candidate_pool(
        self,
        profile: StudentProfile,
        classes: Sequence[ClassOffering]
    ) -> List[ClassOffering]:
        """Active classes, restricted to the student's branch when set"""
        return [
            cls for cls in classes
            if cls.is_active and (not profile.branch_id or cls.branch_id == profile.branch_id)
        ]

    def is_eligible(
        self,
        cls: ClassOffering,
        courses: List[str],
        keys: Set[str],
        timing: Optional[str]
    ) -> bool:
        if not exact_timing_match(cls.timing, timing):
            return False
        if courses and not course_match(cls.courses, courses):
            return False
        if keys and keys.isdisjoint(level_keys(cls.levels)):
            return False
        return True

    def find_eligible_classes(
        self,
        profile: StudentProfile,
        classes: Sequence[ClassOffering]
    ) -> List[ClassOffering]:
        """
        Classes the student should be enrolled in, in snapshot order.

        Args:
            profile: Finalized student profile
            classes: Active classes of the student's branch

        Returns:
            Eligible class snapshots
        """
        courses = self.student_courses(profile)
        keys, _ = self.student_levels(profile)
        pool = self.candidate_pool(profile, classes)

        eligible = [
            cls for cls in pool
            if self.is_eligible(cls, courses, keys, profile.timing)
        ]

        logger.debug(
            f"Eligibility for student {profile.id}: courses={courses}, "
            f"level_keys={sorted(keys)}, timing={profile.timing!r}, "
            f"pool={len(pool)}, eligible={len(eligible)}"
        )
        return eligible

    async def auto_enroll(
        self,
        profile: StudentProfile,
        classes: Sequence[ClassOffering],
        writer: EnrollmentWriter
    ) -> AutoEnrollResult:
        """
        Enroll a student into every eligible class.

        Args:
            profile: Finalized student profile
            classes: Active class snapshot for the student's branch
            writer: Enrollment store

        Returns:
            AutoEnrollResult with eligible class ids and the earliest start date

        Raises:
            EnrollmentWriteError: If an insert fails for any reason other than
                an existing enrollment; carries the classes joined before it
        """
        _, unmatched_levels = self.student_levels(profile)
        if unmatched_levels:
            logger.info(
                f"Student {profile.id} has level labels without a level number: {unmatched_levels}"
            )

        eligible = self.find_eligible_classes(profile, classes)
        if not eligible:
            logger.info(f"No classes matching timing, courses and levels for student {profile.id}")
            return AutoEnrollResult(enrolled_count=0, unmatched_levels=unmatched_levels)

        enrolled_ids: List[str] = []
        already_enrolled: List[str] = []
        created = 0

        for cls in eligible:
            try:
                inserted = await writer.insert_enrollment(profile.id, cls.id)
            except Exception as e:
                logger.error(
                    f"Enrollment insert failed for student {profile.id} class {cls.id}: {e}",
                    exc_info=True
                )
                raise EnrollmentWriteError(profile.id, cls.id, enrolled_ids, cause=e) from e

            enrolled_ids.append(cls.id)
            if inserted:
                created += 1
            else:
                already_enrolled.append(cls.id)
                logger.debug(f"Student {profile.id} already enrolled in class {cls.id}")

        await self._link_teachers(profile, eligible, writer)

        earliest = min(
            (cls.start_date for cls in eligible if cls.start_date is not None),
            default=None
        )

        logger.info(
            f"Auto-enrolled student {profile.id} in {len(enrolled_ids)} class(es), "
            f"{created} new, earliest start {earliest}"
        )

        return AutoEnrollResult(
            enrolled_count=len(enrolled_ids),
            class_ids=enrolled_ids,
            earliest_start_date=earliest,
            created_count=created,
            already_enrolled_ids=already_enrolled,
            unmatched_levels=unmatched_levels,
        )

    async def _link_teachers(
        self,
        profile: StudentProfile,
        eligible: Sequence[ClassOffering],
        writer: EnrollmentWriter
    ) -> None:
        """Best-effort teacher visibility links; never fails the enrollment"""
        teacher_ids = []
        for cls in eligible:
            if cls.teacher_id and cls.teacher_id not in teacher_ids:
                teacher_ids.append(cls.teacher_id)
        if not teacher_ids:
            return

        try:
            await writer.link_teachers(profile.id, teacher_ids)
        except Exception as e:
            logger.warning(f"Teacher links skipped for student {profile.id}: {e}")


# Global engine instance
_engine: Optional[AutoEnrollmentEngine] = None


def get_auto_enrollment_engine() -> AutoEnrollmentEngine:
    """Get or create global AutoEnrollmentEngine instance."""
    global _engine
    if _engine is None:
        _engine = AutoEnrollmentEngine()
    return _engine
