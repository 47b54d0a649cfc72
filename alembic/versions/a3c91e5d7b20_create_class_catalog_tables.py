"""create class catalog and enrollment tables

Revision ID: a3c91e5d7b20
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = 'a3c91e5d7b20'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table('teachers',
    sa.Column('id', sa.UUID(), nullable=False),
    sa.Column('full_name', sa.String(length=200), nullable=False),
    sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
    sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
    sa.PrimaryKeyConstraint('id')
    )

    op.create_table('classes',
    sa.Column('id', sa.UUID(), nullable=False),
    sa.Column('branch_id', sa.String(length=100), nullable=True),
    sa.Column('class_name', sa.String(length=200), nullable=True),
    sa.Column('program', sa.String(length=200), nullable=True),
    sa.Column('status', sa.String(length=20), server_default='active', nullable=False),
    sa.Column('timing', sa.String(length=200), nullable=True),
    sa.Column('levels', postgresql.ARRAY(sa.String()), nullable=True),
    sa.Column('courses', postgresql.ARRAY(sa.String()), nullable=True),
    sa.Column('start_date', sa.Date(), nullable=True),
    sa.Column('teacher_id', sa.UUID(), nullable=True),
    sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
    sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
    sa.CheckConstraint("status IN ('active', 'completed', 'cancelled')"),
    sa.ForeignKeyConstraint(['teacher_id'], ['teachers.id'], ondelete='SET NULL'),
    sa.PrimaryKeyConstraint('id')
    )
    op.create_index('idx_classes_branch_status', 'classes', ['branch_id', 'status'], unique=False)
    op.create_index('idx_classes_teacher', 'classes', ['teacher_id'], unique=False)

    op.create_table('students',
    sa.Column('id', sa.UUID(), nullable=False),
    sa.Column('branch_id', sa.String(length=100), nullable=True),
    sa.Column('program', sa.Text(), nullable=True),
    sa.Column('course_level', sa.Text(), nullable=True),
    sa.Column('timing', sa.String(length=200), nullable=True),
    sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
    sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
    sa.PrimaryKeyConstraint('id')
    )
    op.create_index('idx_students_branch', 'students', ['branch_id'], unique=False)

    op.create_table('enrollments',
    sa.Column('id', sa.UUID(), nullable=False),
    sa.Column('student_id', sa.UUID(), nullable=False),
    sa.Column('class_id', sa.UUID(), nullable=False),
    sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
    sa.ForeignKeyConstraint(['class_id'], ['classes.id'], ondelete='CASCADE'),
    sa.PrimaryKeyConstraint('id'),
    sa.UniqueConstraint('student_id', 'class_id', name='uq_enrollments_student_class')
    )
    op.create_index('idx_enrollments_student', 'enrollments', ['student_id'], unique=False)
    op.create_index('idx_enrollments_class', 'enrollments', ['class_id'], unique=False)

    op.create_table('student_teachers',
    sa.Column('id', sa.UUID(), nullable=False),
    sa.Column('student_id', sa.UUID(), nullable=False),
    sa.Column('teacher_id', sa.UUID(), nullable=False),
    sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
    sa.ForeignKeyConstraint(['teacher_id'], ['teachers.id'], ondelete='CASCADE'),
    sa.PrimaryKeyConstraint('id'),
    sa.UniqueConstraint('student_id', 'teacher_id', name='uq_student_teachers_pair')
    )


def downgrade() -> None:
    op.drop_table('student_teachers')

    op.drop_index('idx_enrollments_class', table_name='enrollments')
    op.drop_index('idx_enrollments_student', table_name='enrollments')
    op.drop_table('enrollments')

    op.drop_index('idx_students_branch', table_name='students')
    op.drop_table('students')

    op.drop_index('idx_classes_teacher', table_name='classes')
    op.drop_index('idx_classes_branch_status', table_name='classes')
    op.drop_table('classes')

    op.drop_table('teachers')
