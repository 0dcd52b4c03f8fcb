# coursereview/api/stats.py
"""
Course statistics and grade boundaries

Endpoints:
- GET /courses/{course_id}/stats - Aggregated review statistics
- GET /courses/{course_id}/grades - Letter-grade table
- GET /courses/{course_id}/grades/years - Years with submitted grade curves
- POST /courses/{course_id}/grades - Submit a grade curve
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from coursereview.database import get_db
from coursereview.models.user import User
from coursereview.schemas.grade import GradeBoundaries, GradeDistributionCreate, GradeYear
from coursereview.services import catalog_service, grade_service
from coursereview.utils.security import get_current_user

router = APIRouter(prefix="/courses", tags=["statistics"])


@router.get("/{course_id}/stats")
def get_course_stats(course_id: int, db: Session = Depends(get_db)):
    """
    Medians, histograms and categorical counts over a course's reviews.

    Below the minimum review count the response has ``available: false``
    and no statistics.
    """
    try:
        return catalog_service.get_course_stats_payload(db, course_id)
    except LookupError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.get("/{course_id}/grades", response_model=GradeBoundaries)
def get_grade_boundaries(
    course_id: int,
    academic_year: Optional[int] = Query(None, description="Omit for the latest year"),
    db: Session = Depends(get_db),
):
    try:
        return grade_service.get_grade_boundaries(db, course_id, academic_year)
    except LookupError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.get("/{course_id}/grades/years", response_model=List[GradeYear])
def get_grade_years(course_id: int, db: Session = Depends(get_db)):
    try:
        return grade_service.get_grade_years(db, course_id)
    except LookupError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.post("/{course_id}/grades", status_code=status.HTTP_201_CREATED)
def submit_grade_distribution(
    course_id: int,
    payload: GradeDistributionCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    try:
        return grade_service.submit_grade_distribution(
            db,
            course_id=course_id,
            user_id=current_user.id,
            academic_year=payload.academic_year,
            semester=payload.semester.value,
            exam_type=payload.exam_type.value,
            bounds=payload.columns(),
        )
    except LookupError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
