# coursereview/api/catalog.py
"""
Catalog API Router
Browsing faculties, departments, courses and instructors

Endpoints:
- GET /catalog/faculties - Faculties with course counts
- GET /catalog/faculties/top-level - Top-level faculties with department counts
- GET /catalog/faculties/{faculty_id} - Faculty with parent and departments
- GET /catalog/faculties/{faculty_id}/courses - Courses of a faculty
- GET /catalog/faculties/{faculty_id}/instructors - Instructors of a faculty
- GET /catalog/courses/{course_id} - Course detail
- GET /catalog/instructors/{instructor_id} - Instructor detail with rollup
- GET /catalog/search - Search courses and instructors
- POST /catalog/faculty-requests - Ask for a missing faculty to be added
"""

from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from coursereview.crud import catalog as catalog_crud
from coursereview.database import get_db
from coursereview.schemas.catalog import (
    CourseDetail,
    CourseSummary,
    FacultyDetail,
    FacultyRequestCreate,
    FacultySummary,
    InstructorDetail,
    InstructorWithCount,
    SearchResults,
)
from coursereview.services import catalog_service, moderation_service

router = APIRouter(prefix="/catalog", tags=["catalog"])


# ======================
# FACULTIES
# ======================
@router.get("/faculties", response_model=List[FacultySummary])
def list_faculties(hide_empty: bool = True, db: Session = Depends(get_db)):
    return catalog_crud.get_faculties(db, hide_empty=hide_empty)


@router.get("/faculties/top-level", response_model=List[FacultySummary])
def list_top_level_faculties(db: Session = Depends(get_db)):
    return catalog_crud.get_top_level_faculties(db)


@router.get("/faculties/{faculty_id}", response_model=FacultyDetail)
def get_faculty(faculty_id: int, db: Session = Depends(get_db)):
    try:
        return catalog_service.get_faculty_detail(db, faculty_id)
    except LookupError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.get("/faculties/{faculty_id}/courses", response_model=List[CourseSummary])
def list_faculty_courses(
    faculty_id: int,
    sort: str = Query("code", description="code, name, reviews or rating"),
    db: Session = Depends(get_db),
):
    """
    Courses of a faculty with review and file counts.

    Sorting by rating uses the overall score; courses below the review
    threshold have no score and come last.
    """
    try:
        return catalog_service.list_faculty_courses(db, faculty_id, sort)
    except LookupError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.get("/faculties/{faculty_id}/instructors", response_model=List[InstructorWithCount])
def list_faculty_instructors(faculty_id: int, db: Session = Depends(get_db)):
    return catalog_crud.get_instructors_by_faculty(db, faculty_id)


# ======================
# COURSES & INSTRUCTORS
# ======================
@router.get("/courses/{course_id}", response_model=CourseDetail)
def get_course(course_id: int, db: Session = Depends(get_db)):
    try:
        return catalog_service.get_course_detail(db, course_id)
    except LookupError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.get("/instructors/{instructor_id}", response_model=InstructorDetail)
def get_instructor(instructor_id: int, db: Session = Depends(get_db)):
    try:
        return catalog_service.get_instructor_detail(db, instructor_id)
    except LookupError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.get("/search", response_model=SearchResults)
def search(
    q: str = Query(..., description="At least 2 characters"),
    limit: int = Query(10, ge=1, le=50),
    db: Session = Depends(get_db),
):
    return catalog_service.search(db, q, limit)


# ======================
# FACULTY REQUESTS
# ======================
@router.post("/faculty-requests", status_code=status.HTTP_201_CREATED)
def submit_faculty_request(payload: FacultyRequestCreate, db: Session = Depends(get_db)):
    try:
        return moderation_service.submit_faculty_request(
            db,
            faculty_name=payload.faculty_name,
            major_name=payload.major_name,
            email=payload.email,
            message=payload.message,
        )
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
