"""
Enrollment Backfill Script

Re-runs auto-enrollment for stored students and optionally re-syncs the
student->teacher links derived from existing enrollments. Safe to repeat:
existing enrollments are skipped.

Usage:
    python -m classmatch.scripts.backfill_enrollments
    python -m classmatch.scripts.backfill_enrollments --student-id <uuid>
    python -m classmatch.scripts.backfill_enrollments --sync-teachers
"""
import argparse
import asyncio
import logging
from typing import Optional

from classmatch.database import dispose_engine
from classmatch.services.eligibility_service import get_eligibility_service
from classmatch.services.enrollment_store import get_enrollment_writer

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)


async def run_backfill(student_id: Optional[str] = None, sync_teachers: bool = False) -> None:
    """
    Backfill enrollments for one student or all students.

    Args:
        student_id: Only process this student when given
        sync_teachers: Also rebuild student->teacher links from enrollments
    """
    service = get_eligibility_service()

    try:
        if student_id:
            print(f"Auto-enrolling student {student_id}...")
            result = await service.auto_enroll_student(student_id)
            print(f"  Eligible classes: {result.enrolled_count}")
            print(f"  New enrollments: {result.created_count}")
            print(f"  Earliest start date: {result.earliest_start_date or '-'}")
        else:
            print("Backfilling enrollments for all students...")
            summary = await service.backfill_all_enrollments()
            print(f"  Students processed: {summary['students_processed']}")
            print(f"  Students failed: {summary['students_failed']}")
            print(f"  Enrollments created: {summary['enrollments_created']}")
            print(f"  Duration: {summary['duration_ms']:.2f}ms")

        if sync_teachers:
            print("\nSyncing teacher links from enrollments...")
            links = await get_enrollment_writer().sync_teacher_links()
            print(f"  Links checked: {links}")
    finally:
        await dispose_engine()

    print("\n✓ Backfill complete!")


def main():
    """CLI entry point"""
    parser = argparse.ArgumentParser(description="Backfill class auto-enrollments")
    parser.add_argument(
        "--student-id",
        help="Only backfill this student"
    )
    parser.add_argument(
        "--sync-teachers",
        action="store_true",
        help="Rebuild student-teacher links from existing enrollments"
    )

    args = parser.parse_args()

    asyncio.run(run_backfill(student_id=args.student_id, sync_teachers=args.sync_teachers))


if __name__ == "__main__":
    main()
