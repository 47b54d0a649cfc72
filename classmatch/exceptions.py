"""
Application-level exceptions for the eligibility service.

Each exception carries a machine code and a suggested HTTP status so that
main.py can translate it into the standard error envelope:

    {"error": {"code": ..., "message": ..., "details": ...}}
"""
from typing import Any, Dict, List, Optional


class ClassMatchError(Exception):
    """Base exception with structured metadata for API responses"""

    code: str = "CLASSMATCH_ERROR"
    status_code: int = 500

    def __init__(
        self,
        message: str = "An application error occurred",
        *,
        details: Optional[Any] = None,
        cause: Optional[BaseException] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.details = details
        self.cause = cause

    def __str__(self) -> str:
        base = f"{self.__class__.__name__}({self.code}): {self.message}"
        if self.cause is not None:
            base += f" | cause={self.cause!r}"
        return base

    def to_dict(self) -> Dict[str, Any]:
        """Serializable error envelope"""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "details": self.details,
            }
        }


class CatalogReadError(ClassMatchError):
    """
    Raised when class or student records cannot be read from the store.

    Distinct from an empty result: no matching runs on partial data.
    """

    code = "CATALOG_UNAVAILABLE"
    status_code = 503

    def __init__(
        self,
        message: str = "Unable to load branch options, please retry",
        *,
        branch_id: Optional[str] = None,
        cause: Optional[BaseException] = None,
    ) -> None:
        super().__init__(
            message,
            details={"branch_id": branch_id} if branch_id else None,
            cause=cause,
        )
        self.branch_id = branch_id


class StudentNotFoundError(ClassMatchError):
    """Raised when a stored student profile cannot be located"""

    code = "STUDENT_NOT_FOUND"
    status_code = 404

    def __init__(self, student_id: str) -> None:
        super().__init__(
            f"Student {student_id} not found",
            details={"student_id": student_id},
        )
        self.student_id = student_id


class EnrollmentWriteError(ClassMatchError):
    """
    Raised when an enrollment insert fails for a reason other than a duplicate.

    Carries the class ids enrolled before the failing insert so the caller
    can flag the registration for review instead of rolling it back.
    """

    code = "ENROLLMENT_NEEDS_REVIEW"
    status_code = 500

    def __init__(
        self,
        student_id: str,
        failed_class_id: str,
        enrolled_class_ids: List[str],
        *,
        cause: Optional[BaseException] = None,
    ) -> None:
        super().__init__(
            "Your account was created but class enrollment needs review",
            details={
                "student_id": student_id,
                "failed_class_id": failed_class_id,
                "enrolled_class_ids": list(enrolled_class_ids),
            },
            cause=cause,
        )
        self.student_id = student_id
        self.failed_class_id = failed_class_id
        self.enrolled_class_ids = list(enrolled_class_ids)
