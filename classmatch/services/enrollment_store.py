"""
Enrollment Store

Writes enrollment pairs one at a time. The (student_id, class_id) unique
constraint turns a repeated insert into an IntegrityError, which is reported
as "already enrolled" instead of a failure; any other error propagates.
"""

import logging
import uuid
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.exc import IntegrityError

from classmatch.database import AsyncSessionLocal
from classmatch.models.class_record import ClassRecord
from classmatch.models.enrollment import Enrollment
from classmatch.models.student_teacher import StudentTeacher

logger = logging.getLogger(__name__)

UNIQUE_VIOLATION_SQLSTATE = "23505"


def is_duplicate_key_error(exc: IntegrityError) -> bool:
    """True if an IntegrityError comes from a unique constraint violation"""
    orig = getattr(exc, "orig", None)
    if getattr(orig, "sqlstate", None) == UNIQUE_VIOLATION_SQLSTATE:
        return True
    message = str(orig if orig is not None else exc).lower()
    return "duplicate key" in message or "unique constraint" in message


class SqlEnrollmentWriter:
    """EnrollmentWriter backed by the enrollments and student_teachers tables"""

    async def insert_enrollment(self, student_id: str, class_id: str) -> bool:
        """
        Insert one enrollment in its own transaction.

        Returns:
            True if a row was created, False if the pair already existed

        Raises:
            IntegrityError: For constraint failures other than the duplicate pair
        """
        async with AsyncSessionLocal() as session:
            session.add(Enrollment(
                student_id=uuid.UUID(str(student_id)),
                class_id=uuid.UUID(str(class_id)),
            ))
            try:
                await session.commit()
            except IntegrityError as e:
                await session.rollback()
                if is_duplicate_key_error(e):
                    return False
                raise
        return True

    async def link_teachers(self, student_id: str, teacher_ids: List[str]) -> int:
        """Create student->teacher links, skipping ones that already exist"""
        if not teacher_ids:
            return 0

        rows = [
            {"student_id": uuid.UUID(str(student_id)), "teacher_id": uuid.UUID(str(tid))}
            for tid in teacher_ids
        ]
        stmt = pg_insert(StudentTeacher).values(rows).on_conflict_do_nothing(
            constraint="uq_student_teachers_pair"
        )
        async with AsyncSessionLocal() as session:
            result = await session.execute(stmt)
            await session.commit()

        return result.rowcount or 0

    async def sync_teacher_links(self) -> int:
        """
        Ensure every enrollment has a matching student->teacher link.

        Returns:
            Number of (student, teacher) pairs derived from enrollments
        """
        stmt = (
            select(Enrollment.student_id, ClassRecord.teacher_id)
            .join(ClassRecord, ClassRecord.id == Enrollment.class_id)
            .where(ClassRecord.teacher_id.is_not(None))
            .distinct()
        )
        async with AsyncSessionLocal() as session:
            pairs = (await session.execute(stmt)).all()
            if not pairs:
                return 0

            insert_stmt = pg_insert(StudentTeacher).values([
                {"student_id": student_id, "teacher_id": teacher_id}
                for student_id, teacher_id in pairs
            ]).on_conflict_do_nothing(constraint="uq_student_teachers_pair")
            await session.execute(insert_stmt)
            await session.commit()

        logger.info(f"Synced {len(pairs)} student-teacher links from enrollments")
        return len(pairs)


# Global writer instance
_writer: Optional[SqlEnrollmentWriter] = None


def get_enrollment_writer() -> SqlEnrollmentWriter:
    """Get or create global SqlEnrollmentWriter instance."""
    global _writer
    if _writer is None:
        _writer = SqlEnrollmentWriter()
    return _writer
