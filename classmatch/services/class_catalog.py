"""
Class Catalog Reader

Reads active class snapshots and stored student profiles. Each call opens
its own session and returns plain snapshot objects; nothing is cached, so
matching always runs on current catalog data.
"""

import logging
import uuid
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from classmatch.database import AsyncSessionLocal
from classmatch.exceptions import CatalogReadError, StudentNotFoundError
from classmatch.models.class_record import ClassRecord
from classmatch.models.student import Student
from classmatch.schemas import ClassOffering, ClassStatus, StudentProfile

logger = logging.getLogger(__name__)


def to_offering(record: ClassRecord) -> ClassOffering:
    """Convert an ORM class row into an engine snapshot"""
    return ClassOffering(
        id=str(record.id),
        branch_id=record.branch_id,
        status=record.status,
        timing=record.timing or "",
        levels=list(record.levels or []),
        courses=list(record.courses or []),
        start_date=record.start_date,
        teacher_id=str(record.teacher_id) if record.teacher_id else None,
        teacher_name=record.teacher.full_name if record.teacher else None,
        program=record.program,
        class_name=record.class_name,
    )


def to_profile(record: Student) -> StudentProfile:
    """Convert an ORM student row into a profile"""
    return StudentProfile(
        id=str(record.id),
        branch_id=record.branch_id,
        program=record.program,
        course_level=record.course_level,
        timing=record.timing,
    )


class ClassCatalogReader:
    """Read side of the class catalog and student store"""

    async def fetch_active_classes(self, branch_id: Optional[str] = None) -> List[ClassOffering]:
        """
        Fetch active classes, optionally for a single branch.

        Rows come back in creation order so first-writer-wins teacher mapping
        is deterministic.

        Raises:
            CatalogReadError: If the store cannot be read
        """
        stmt = select(ClassRecord).where(ClassRecord.status == ClassStatus.ACTIVE.value)
        if branch_id:
            stmt = stmt.where(ClassRecord.branch_id == branch_id)
        stmt = stmt.order_by(ClassRecord.created_at, ClassRecord.id)

        try:
            async with AsyncSessionLocal() as session:
                result = await session.execute(stmt)
                records = result.unique().scalars().all()
                offerings = [to_offering(record) for record in records]
        except SQLAlchemyError as e:
            logger.error(f"Failed to load active classes for branch {branch_id}: {e}", exc_info=True)
            raise CatalogReadError(branch_id=branch_id, cause=e) from e

        logger.debug(f"Loaded {len(offerings)} active classes for branch {branch_id}")
        return offerings

    async def fetch_all_active_classes(self) -> List[ClassOffering]:
        """Active classes across every branch"""
        return await self.fetch_active_classes(None)

    async def fetch_student(self, student_id: str) -> StudentProfile:
        """
        Load one stored student profile.

        Raises:
            StudentNotFoundError: If the id is malformed or unknown
            CatalogReadError: If the store cannot be read
        """
        try:
            key = uuid.UUID(str(student_id))
        except ValueError:
            raise StudentNotFoundError(student_id)

        try:
            async with AsyncSessionLocal() as session:
                record = await session.get(Student, key)
                profile = to_profile(record) if record is not None else None
        except SQLAlchemyError as e:
            logger.error(f"Failed to load student {student_id}: {e}", exc_info=True)
            raise CatalogReadError("Unable to load student profile, please retry", cause=e) from e

        if profile is None:
            raise StudentNotFoundError(student_id)
        return profile

    async def fetch_all_students(self) -> List[StudentProfile]:
        """All stored student profiles, oldest first"""
        stmt = select(Student).order_by(Student.created_at, Student.id)
        try:
            async with AsyncSessionLocal() as session:
                result = await session.execute(stmt)
                profiles = [to_profile(record) for record in result.scalars().all()]
        except SQLAlchemyError as e:
            logger.error(f"Failed to load students: {e}", exc_info=True)
            raise CatalogReadError("Unable to load students, please retry", cause=e) from e
        return profiles


# Global reader instance
_reader: Optional[ClassCatalogReader] = None


def get_catalog_reader() -> ClassCatalogReader:
    """Get or create global ClassCatalogReader instance."""
    global _reader
    if _reader is None:
        _reader = ClassCatalogReader()
    return _reader
