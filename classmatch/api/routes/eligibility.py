"""
Eligibility API Endpoints

POST /api/v1/eligibility/options - Allowed courses/levels/timings for a selection
GET  /api/v1/eligibility/branches/:branch_id/teacher-mapping - Teacher and timing lookups
POST /api/v1/eligibility/auto-enroll - Auto-enroll a finalized student profile
POST /api/v1/eligibility/students/:student_id/auto-enroll - Auto-enroll a stored student

Store failures surface as ClassMatchError subclasses and are rendered by the
application-level exception handler.
"""
import logging
import uuid
from datetime import datetime
from typing import Any, Dict

from fastapi import APIRouter, Depends, Path
from pydantic import BaseModel, field_validator

from classmatch.schemas import (
    AllowedOptions,
    AutoEnrollResult,
    StudentProfile,
    StudentSelection,
    TeacherCourseMap,
)
from classmatch.services.eligibility_service import EligibilityService, get_eligibility_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/eligibility", tags=["eligibility"])


class AutoEnrollRequest(StudentProfile):
    """Body for POST /eligibility/auto-enroll; stored student ids are UUIDs"""

    @field_validator("id")
    @classmethod
    def _id_must_be_uuid(cls, value: str) -> str:
        try:
            return str(uuid.UUID(value))
        except ValueError:
            raise ValueError("id must be a UUID")


class OptionsResponse(BaseModel):
    """Response for POST /eligibility/options"""
    data: AllowedOptions
    metadata: Dict[str, Any]


class TeacherMappingResponse(BaseModel):
    """Response for GET /eligibility/branches/:branch_id/teacher-mapping"""
    data: TeacherCourseMap
    metadata: Dict[str, Any]


class AutoEnrollResponse(BaseModel):
    """Response for the auto-enroll endpoints"""
    data: AutoEnrollResult
    metadata: Dict[str, Any]


@router.post("/options", response_model=OptionsResponse)
async def get_allowed_options(
    selection: StudentSelection,
    service: EligibilityService = Depends(get_eligibility_service)
):
    """
    Compute which options the registration form should enable.

    Without a branch every catalog option is returned (fail-open). With a
    branch, empty lists mean nothing is available there.

    Raises:
        503: If the class catalog cannot be read
    """
    options = await service.compute_allowed_options(selection.branch_id, selection)

    return OptionsResponse(
        data=options,
        metadata={
            "timestamp": datetime.utcnow().isoformat(),
            "branch_id": selection.branch_id,
        }
    )


@router.get("/branches/{branch_id}/teacher-mapping", response_model=TeacherMappingResponse)
async def get_teacher_mapping(
    branch_id: str = Path(..., description="Branch identifier"),
    service: EligibilityService = Depends(get_eligibility_service)
):
    """
    Level/course to teacher name and timing lookups for a branch.

    Raises:
        503: If the class catalog cannot be read
    """
    mapping = await service.build_teacher_mapping(branch_id)

    return TeacherMappingResponse(
        data=mapping,
        metadata={
            "timestamp": datetime.utcnow().isoformat(),
            "branch_id": branch_id,
        }
    )


@router.post("/auto-enroll", response_model=AutoEnrollResponse)
async def auto_enroll_profile(
    profile: AutoEnrollRequest,
    service: EligibilityService = Depends(get_eligibility_service)
):
    """
    Enroll a finalized student profile into all matching active classes.

    Raises:
        503: If the class catalog cannot be read (nothing written)
        422: If the profile id is not a UUID
        500: ENROLLMENT_NEEDS_REVIEW if an insert failed; details list the
            classes joined before the failure
    """
    result = await service.auto_enroll(profile)

    return AutoEnrollResponse(
        data=result,
        metadata={
            "timestamp": datetime.utcnow().isoformat(),
            "student_id": profile.id,
        }
    )


@router.post("/students/{student_id}/auto-enroll", response_model=AutoEnrollResponse)
async def auto_enroll_stored_student(
    student_id: str = Path(..., description="Student identifier"),
    service: EligibilityService = Depends(get_eligibility_service)
):
    """
    Auto-enroll a student already stored in the student table.

    Raises:
        404: If the student does not exist
        503: If the store cannot be read
    """
    result = await service.auto_enroll_student(student_id)

    return AutoEnrollResponse(
        data=result,
        metadata={
            "timestamp": datetime.utcnow().isoformat(),
            "student_id": student_id,
        }
    )
