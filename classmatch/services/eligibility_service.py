"""
Eligibility Service

Caller-facing entry points for the registration flow. Each call reads a
fresh class snapshot through the catalog reader and hands it to the pure
matching components:

- compute_allowed_options: which courses/levels/timings to enable
- build_teacher_mapping: teacher names and timings per level/course
- auto_enroll: enrollment at registration completion
"""

import logging
import time
from typing import Any, Dict, Optional

from classmatch.schemas import (
    AllowedOptions,
    AutoEnrollResult,
    StudentProfile,
    StudentSelection,
    TeacherCourseMap,
)
from classmatch.services.availability import AvailabilityComputer, get_availability_computer
from classmatch.services.auto_enrollment import (
    AutoEnrollmentEngine,
    EnrollmentWriter,
    get_auto_enrollment_engine,
)
from classmatch.services.class_catalog import ClassCatalogReader, get_catalog_reader
from classmatch.services.enrollment_store import get_enrollment_writer
from classmatch.services.teacher_mapping import TeacherCourseMapper, get_teacher_mapper

logger = logging.getLogger(__name__)


class EligibilityService:
    """Connects the catalog and enrollment stores to the matching engine"""

    def __init__(
        self,
        reader: ClassCatalogReader,
        writer: EnrollmentWriter,
        availability: Optional[AvailabilityComputer] = None,
        mapper: Optional[TeacherCourseMapper] = None,
        engine: Optional[AutoEnrollmentEngine] = None,
    ):
        self.reader = reader
        self.writer = writer
        self.availability = availability or get_availability_computer()
        self.mapper = mapper or get_teacher_mapper()
        self.engine = engine or get_auto_enrollment_engine()

    async def compute_allowed_options(
        self,
        branch_id: Optional[str],
        selection: StudentSelection
    ) -> AllowedOptions:
        """
        Allowed options for a selection in a branch.

        Args:
            branch_id: Branch to filter by; None means fail-open
            selection: Current selection (its branch_id is overridden)

        Raises:
            CatalogReadError: If classes cannot be loaded
        """
        selection = selection.model_copy(update={"branch_id": branch_id})
        catalog = await self.reader.fetch_all_active_classes()
        branch_classes = [cls for cls in catalog if cls.branch_id == branch_id] if branch_id else []

        return self.availability.compute_allowed_options(branch_classes, selection, catalog=catalog)

    async def build_teacher_mapping(self, branch_id: str) -> TeacherCourseMap:
        """
        Teacher and timing lookups for a branch.

        Raises:
            CatalogReadError: If classes cannot be loaded
        """
        classes = await self.reader.fetch_active_classes(branch_id)
        return self.mapper.build_mapping(classes)

    async def auto_enroll(self, profile: StudentProfile) -> AutoEnrollResult:
        """
        Enroll a finalized student into all matching classes.

        Raises:
            CatalogReadError: If classes cannot be loaded (nothing is written)
            EnrollmentWriteError: If an insert fails for a non-duplicate reason
        """
        classes = await self.reader.fetch_active_classes(profile.branch_id)
        if not classes:
            logger.info(f"No active classes found in branch {profile.branch_id} for auto-enrollment")
        return await self.engine.auto_enroll(profile, classes, self.writer)

    async def auto_enroll_student(self, student_id: str) -> AutoEnrollResult:
        """Auto-enroll a stored student by id"""
        profile = await self.reader.fetch_student(student_id)
        return await self.auto_enroll(profile)

    async def backfill_all_enrollments(self) -> Dict[str, Any]:
        """
        Re-run auto-enrollment for every stored student.

        Individual failures are logged and counted; the run continues.

        Returns:
            Summary with students_processed, students_failed, enrollments_created,
            duration_ms
        """
        start_time = time.time()

        students = await self.reader.fetch_all_students()
        processed = 0
        failed = 0
        created = 0

        for profile in students:
            try:
                result = await self.auto_enroll(profile)
                created += result.created_count
                processed += 1
            except Exception as e:
                failed += 1
                logger.warning(f"Auto-enroll failed for student {profile.id}: {e}")

        duration_ms = (time.time() - start_time) * 1000

        logger.info(
            f"Enrollment backfill complete: {processed} students, {failed} failed, "
            f"{created} enrollments created, {duration_ms:.2f}ms"
        )

        return {
            "students_processed": processed,
            "students_failed": failed,
            "enrollments_created": created,
            "duration_ms": round(duration_ms, 2)
        }


# Global service instance
_service: Optional[EligibilityService] = None


def get_eligibility_service() -> EligibilityService:
    """Get or create global EligibilityService instance."""
    global _service
    if _service is None:
        _service = EligibilityService(
            reader=get_catalog_reader(),
            writer=get_enrollment_writer(),
        )
    return _service
