"""Student model - Registration profile used for auto-enrollment"""
from sqlalchemy import Column, String, Text, DateTime, Index
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.sql import func
import uuid

from classmatch.database import Base


class Student(Base):
    """Registered student with the program, levels and timing they picked"""

    __tablename__ = "students"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    branch_id = Column(String(100), nullable=True)
    # Legacy rows hold a JSON-encoded list, a bare course name or a comma list
    program = Column(Text, nullable=True)
    course_level = Column(Text, nullable=True)
    timing = Column(String(200), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    __table_args__ = (
        Index("idx_students_branch", "branch_id"),
    )

    def __repr__(self):
        return f"<Student(id={self.id}, branch={self.branch_id})>"
