"""
Pydantic schemas for the eligibility engine.

These are the snapshot types the matching services consume and produce.
They double as request/response bodies for the API routes.
"""
import json
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple, Union

from pydantic import BaseModel, Field, field_validator

from classmatch.services.normalizer import extract_level_key


def _clean(values: Optional[List[str]]) -> List[str]:
    """Drop blank entries, keep display order"""
    return [v for v in (values or []) if isinstance(v, str) and v.strip()]


class ClassStatus(str, Enum):
    """Lifecycle status of a class offering"""
    ACTIVE = "active"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class ClassOffering(BaseModel):
    """Read-only snapshot of one class from the catalog"""
    id: str
    branch_id: Optional[str] = None
    status: ClassStatus = ClassStatus.ACTIVE
    timing: str = ""
    levels: List[str] = Field(default_factory=list)
    courses: List[str] = Field(default_factory=list)
    start_date: Optional[date] = None
    teacher_id: Optional[str] = None
    teacher_name: Optional[str] = None
    program: Optional[str] = None
    class_name: Optional[str] = None

    @field_validator("levels", "courses", mode="before")
    @classmethod
    def _none_to_empty_list(cls, value):
        return [] if value is None else value

    @field_validator("timing", mode="before")
    @classmethod
    def _none_to_empty_str(cls, value):
        return "" if value is None else value

    @property
    def is_active(self) -> bool:
        return self.status == ClassStatus.ACTIVE


class StudentSelection(BaseModel):
    """In-progress registration choices, narrowed branch -> level/course -> timing"""
    branch_id: Optional[str] = None
    selected_courses: List[str] = Field(default_factory=list)
    selected_levels: List[str] = Field(default_factory=list)
    timing: Optional[str] = None

    @property
    def course_values(self) -> List[str]:
        return _clean(self.selected_courses)

    @property
    def level_values(self) -> List[str]:
        return _clean(self.selected_levels)


class StudentProfile(BaseModel):
    """
    Finalized student record used for auto-enrollment.

    `program` is stored in several legacy shapes (JSON-encoded list, bare
    course name, or an actual list); use resolve_course_selection() to turn
    it into a course list.
    """
    id: str
    branch_id: Optional[str] = None
    program: Any = None
    course_level: Optional[str] = None
    timing: Optional[str] = None
    courses: Optional[List[str]] = None


@dataclass(frozen=True)
class ExplicitCourses:
    """Course list supplied directly by the registration flow"""
    courses: Tuple[str, ...]

    def as_list(self) -> List[str]:
        return _clean(list(self.courses))


@dataclass(frozen=True)
class LegacyProgram:
    """Raw `program` value in whatever shape it was stored"""
    raw: Any

    def as_list(self) -> List[str]:
        raw = self.raw
        if raw is None:
            return []
        if isinstance(raw, (list, tuple)):
            return _clean([str(item) for item in raw if item is not None])
        if isinstance(raw, str):
            if not raw.strip():
                return []
            try:
                parsed = json.loads(raw)
            except ValueError:
                return [raw]
            if isinstance(parsed, list):
                return _clean([str(item) for item in parsed if item is not None])
            return [raw]
        # Unknown shape (number, mapping, ...): use it as a single course value
        return [str(raw)]


CourseSelection = Union[ExplicitCourses, LegacyProgram]


def resolve_course_selection(profile: StudentProfile) -> CourseSelection:
    """Pick the course source for a profile: explicit courses win over program."""
    if profile.courses:
        return ExplicitCourses(tuple(profile.courses))
    return LegacyProgram(profile.program)


class AllowedOptions(BaseModel):
    """Options the registration UI may offer for the current selection"""
    branch_selected: bool
    allowed_courses: List[str] = Field(default_factory=list)
    allowed_levels: List[str] = Field(default_factory=list)
    allowed_level_keys: List[str] = Field(default_factory=list)
    allowed_timings: List[str] = Field(default_factory=list)
    allowed_programs: List[str] = Field(default_factory=list)
    allowed_start_dates: List[date] = Field(default_factory=list)
    all_courses: List[str] = Field(default_factory=list)
    all_levels: List[str] = Field(default_factory=list)
    all_timings: List[str] = Field(default_factory=list)
    all_programs: List[str] = Field(default_factory=list)


def _label_contains(stored: str, query: str) -> bool:
    """Case-insensitive containment in either direction on trimmed labels"""
    a = stored.lower().strip()
    b = query.lower().strip()
    if not a or not b:
        return False
    return a in b or b in a


def _find_for_level(table: Dict[str, Any], level_value: Optional[str]) -> Any:
    if not level_value:
        return None
    if level_value in table:
        return table[level_value]

    wanted_key = extract_level_key(level_value)
    if wanted_key:
        # Numeric levels match by key only, same as level_match()
        for stored, value in table.items():
            if extract_level_key(stored) == wanted_key:
                return value
        return None

    for stored, value in table.items():
        if _label_contains(stored, level_value):
            return value
    return None


def _find_for_course(table: Dict[str, Any], course_value: Optional[str]) -> Any:
    if not course_value:
        return None
    if course_value in table:
        return table[course_value]
    for stored, value in table.items():
        if _label_contains(stored, course_value):
            return value
    return None


class TeacherCourseMap(BaseModel):
    """Per-branch lookups from level/course to teacher name and offered timings"""
    level_teachers: Dict[str, str] = Field(default_factory=dict)
    course_teachers: Dict[str, str] = Field(default_factory=dict)
    level_timings: Dict[str, List[str]] = Field(default_factory=dict)
    course_timings: Dict[str, List[str]] = Field(default_factory=dict)

    def teacher_for_level(self, level_value: Optional[str]) -> Optional[str]:
        return _find_for_level(self.level_teachers, level_value)

    def teacher_for_course(self, course_value: Optional[str]) -> Optional[str]:
        return _find_for_course(self.course_teachers, course_value)

    def timings_for_level(self, level_value: Optional[str]) -> List[str]:
        return list(_find_for_level(self.level_timings, level_value) or [])

    def timings_for_course(self, course_value: Optional[str]) -> List[str]:
        return list(_find_for_course(self.course_timings, course_value) or [])


class AutoEnrollResult(BaseModel):
    """Outcome of auto-enrolling one student"""
    enrolled_count: int
    class_ids: List[str] = Field(default_factory=list)
    earliest_start_date: Optional[date] = None
    created_count: int = 0
    already_enrolled_ids: List[str] = Field(default_factory=list)
    unmatched_levels: List[str] = Field(default_factory=list)
