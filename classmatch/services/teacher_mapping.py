"""
Teacher-Course Mapping

Builds the per-branch lookup the registration UI uses to show which teacher
runs a level or course, and at which timings it is offered. Rebuilt from a
fresh class snapshot on every request; never persisted.
"""

import logging
from typing import Dict, List, Optional, Sequence

from classmatch.schemas import ClassOffering, TeacherCourseMap

logger = logging.getLogger(__name__)


def _push_unique(table: Dict[str, List[str]], key: str, value: str) -> None:
    if not value:
        return
    bucket = table.setdefault(key, [])
    if value not in bucket:
        bucket.append(value)


class TeacherCourseMapper:
    """Builds TeacherCourseMap instances from class snapshots"""

    def build_mapping(self, classes: Sequence[ClassOffering]) -> TeacherCourseMap:
        """
        Map levels and courses to teacher names and offered timings.

        The first class (in input order) with a teacher name claims a level or
        course; later classes never overwrite it, even with another teacher.
        Timings accumulate across all classes, de-duplicated.

        Args:
            classes: Active classes of one branch

        Returns:
            TeacherCourseMap with level/course -> teacher and -> timings
        """
        level_teachers: Dict[str, str] = {}
        course_teachers: Dict[str, str] = {}
        level_timings: Dict[str, List[str]] = {}
        course_timings: Dict[str, List[str]] = {}

        for cls in classes:
            if not cls.is_active:
                continue
            teacher_name = (cls.teacher_name or "").strip()

            for level in cls.levels:
                level = (level or "").strip()
                if not level:
                    continue
                if teacher_name and level not in level_teachers:
                    level_teachers[level] = teacher_name
                _push_unique(level_timings, level, cls.timing)

            for course in cls.courses:
                course = (course or "").strip()
                if not course:
                    continue
                if teacher_name and course not in course_teachers:
                    course_teachers[course] = teacher_name
                _push_unique(course_timings, course, cls.timing)

        logger.debug(
            f"Teacher mapping built from {len(classes)} classes: "
            f"{len(level_teachers)} levels, {len(course_teachers)} courses"
        )

        return TeacherCourseMap(
            level_teachers=level_teachers,
            course_teachers=course_teachers,
            level_timings=level_timings,
            course_timings=course_timings,
        )


# Global mapper instance
_mapper: Optional[TeacherCourseMapper] = None


def get_teacher_mapper() -> TeacherCourseMapper:
    """Get or create global TeacherCourseMapper instance."""
    global _mapper
    if _mapper is None:
        _mapper = TeacherCourseMapper()
    return _mapper
