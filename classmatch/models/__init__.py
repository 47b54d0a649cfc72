"""SQLAlchemy ORM Models for the class catalog and enrollment store"""
from classmatch.models.teacher import Teacher
from classmatch.models.class_record import ClassRecord
from classmatch.models.student import Student
from classmatch.models.enrollment import Enrollment
from classmatch.models.student_teacher import StudentTeacher

__all__ = [
    "Teacher",
    "ClassRecord",
    "Student",
    "Enrollment",
    "StudentTeacher",
]
