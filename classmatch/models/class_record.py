"""ClassRecord model - Class offerings in the branch catalog"""
from sqlalchemy import Column, String, Date, DateTime, ForeignKey, CheckConstraint, Index
from sqlalchemy.dialects.postgresql import UUID, ARRAY
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import uuid

from classmatch.database import Base


class ClassRecord(Base):
    """Class offering with its timing, levels, courses and assigned teacher"""

    __tablename__ = "classes"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    branch_id = Column(String(100), nullable=True)
    class_name = Column(String(200), nullable=True)
    program = Column(String(200), nullable=True)
    status = Column(
        String(20),
        CheckConstraint("status IN ('active', 'completed', 'cancelled')"),
        nullable=False,
        server_default="active",
    )
    timing = Column(String(200), nullable=True)
    levels = Column(ARRAY(String), nullable=True)
    courses = Column(ARRAY(String), nullable=True)
    start_date = Column(Date, nullable=True)
    teacher_id = Column(
        UUID(as_uuid=True),
        ForeignKey("teachers.id", ondelete="SET NULL"),
        nullable=True,
    )
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    teacher = relationship("Teacher", lazy="joined")

    # Indexes for performance
    __table_args__ = (
        Index("idx_classes_branch_status", "branch_id", "status"),
        Index("idx_classes_teacher", "teacher_id"),
    )

    def __repr__(self):
        return f"<ClassRecord(id={self.id}, branch={self.branch_id}, timing={self.timing})>"
