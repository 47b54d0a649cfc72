"""StudentTeacher model - Lets teachers see the students in their classes"""
from sqlalchemy import Column, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.sql import func
import uuid

from classmatch.database import Base


class StudentTeacher(Base):
    """Student-to-teacher visibility link derived from enrollments"""

    __tablename__ = "student_teachers"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    student_id = Column(UUID(as_uuid=True), nullable=False)
    teacher_id = Column(
        UUID(as_uuid=True),
        ForeignKey("teachers.id", ondelete="CASCADE"),
        nullable=False,
    )
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    __table_args__ = (
        UniqueConstraint("student_id", "teacher_id", name="uq_student_teachers_pair"),
    )

    def __repr__(self):
        return f"<StudentTeacher(student={self.student_id}, teacher={self.teacher_id})>"
