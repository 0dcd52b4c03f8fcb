# coursereview/crud/catalog.py
"""
Catalog queries: faculties, departments, courses and instructors.
"""

from typing import Any, Dict, List, Optional

from sqlalchemy import func, or_
from sqlalchemy.orm import Session, selectinload

from coursereview.models.catalog import Course, CourseInstructor, Faculty, FacultyRequest, Instructor
from coursereview.models.file import CourseFile
from coursereview.models.review import Review

MIN_SEARCH_LENGTH = 2


def _course_counts(db: Session) -> Dict[int, int]:
    rows = db.query(Course.faculty_id, func.count(Course.id)).group_by(Course.faculty_id).all()
    return {faculty_id: count for faculty_id, count in rows}


def _child_counts(db: Session) -> Dict[int, int]:
    rows = (
        db.query(Faculty.parent_id, func.count(Faculty.id))
        .filter(Faculty.parent_id.isnot(None))
        .group_by(Faculty.parent_id)
        .all()
    )
    return {parent_id: count for parent_id, count in rows}


def _faculty_dict(faculty: Faculty, course_counts: Dict[int, int], child_counts: Dict[int, int]) -> Dict[str, Any]:
    return {
        "id": faculty.id,
        "name": faculty.name,
        "name_tr": faculty.name_tr,
        "parent_id": faculty.parent_id,
        "course_count": course_counts.get(faculty.id, 0),
        "child_count": child_counts.get(faculty.id, 0),
    }


# ======================
# FACULTIES
# ======================

def get_faculties(db: Session, hide_empty: bool = True) -> List[Dict[str, Any]]:
    course_counts = _course_counts(db)
    child_counts = _child_counts(db)
    faculties = db.query(Faculty).order_by(Faculty.name).all()
    result = [_faculty_dict(f, course_counts, child_counts) for f in faculties]
    if hide_empty:
        result = [f for f in result if f["course_count"] > 0]
    return result


def get_top_level_faculties(db: Session) -> List[Dict[str, Any]]:
    course_counts = _course_counts(db)
    child_counts = _child_counts(db)
    faculties = db.query(Faculty).filter(Faculty.parent_id.is_(None)).order_by(Faculty.name).all()
    return [_faculty_dict(f, course_counts, child_counts) for f in faculties]


def get_child_faculties(db: Session, parent_id: int) -> List[Dict[str, Any]]:
    course_counts = _course_counts(db)
    child_counts = _child_counts(db)
    faculties = db.query(Faculty).filter(Faculty.parent_id == parent_id).order_by(Faculty.name).all()
    return [_faculty_dict(f, course_counts, child_counts) for f in faculties]


def get_faculty(db: Session, faculty_id: int) -> Optional[Faculty]:
    return (
        db.query(Faculty)
        .options(selectinload(Faculty.parent))
        .filter(Faculty.id == faculty_id)
        .first()
    )


def create_faculty_request(
    db: Session,
    faculty_name: str,
    major_name: Optional[str] = None,
    email: Optional[str] = None,
    message: Optional[str] = None,
) -> FacultyRequest:
    request = FacultyRequest(
        faculty_name=faculty_name.strip(),
        major_name=major_name or None,
        email=email or None,
        message=message or None,
    )
    db.add(request)
    db.flush()
    return request


def get_faculty_requests(db: Session) -> List[FacultyRequest]:
    return db.query(FacultyRequest).order_by(FacultyRequest.created_at.desc(), FacultyRequest.id.desc()).all()


# ======================
# COURSES
# ======================

def _course_query(db: Session):
    return db.query(Course).options(
        selectinload(Course.faculty),
        selectinload(Course.course_instructors).selectinload(CourseInstructor.instructor),
    )


def get_course(db: Session, course_id: int) -> Optional[Course]:
    return _course_query(db).filter(Course.id == course_id).first()


def get_courses_by_faculty(db: Session, faculty_id: int) -> List[Course]:
    return _course_query(db).filter(Course.faculty_id == faculty_id).order_by(Course.code).all()


def get_courses_by_instructor(db: Session, instructor_id: int) -> List[Course]:
    return (
        _course_query(db)
        .join(CourseInstructor, CourseInstructor.course_id == Course.id)
        .filter(CourseInstructor.instructor_id == instructor_id)
        .order_by(Course.code)
        .all()
    )


def search_courses(db: Session, query: str, limit: int = 10) -> List[Course]:
    term = (query or "").strip()
    if len(term) < MIN_SEARCH_LENGTH:
        return []
    like = f"%{term}%"
    return (
        _course_query(db)
        .filter(or_(Course.name.ilike(like), Course.code.ilike(like)))
        .order_by(Course.code)
        .limit(limit)
        .all()
    )


def get_review_counts(db: Session, course_ids: List[int]) -> Dict[int, int]:
    if not course_ids:
        return {}
    rows = (
        db.query(Review.course_id, func.count(Review.id))
        .filter(Review.course_id.in_(course_ids), Review.is_hidden.is_(False))
        .group_by(Review.course_id)
        .all()
    )
    return {course_id: count for course_id, count in rows}


def get_file_counts(db: Session, course_ids: List[int]) -> Dict[int, int]:
    if not course_ids:
        return {}
    rows = (
        db.query(CourseFile.course_id, func.count(CourseFile.id))
        .filter(
            CourseFile.course_id.in_(course_ids),
            CourseFile.is_verified.is_(True),
            CourseFile.is_hidden.is_(False),
        )
        .group_by(CourseFile.course_id)
        .all()
    )
    return {course_id: count for course_id, count in rows}


# ======================
# INSTRUCTORS
# ======================

def get_instructor(db: Session, instructor_id: int) -> Optional[Instructor]:
    return db.query(Instructor).filter(Instructor.id == instructor_id).first()


def search_instructors(db: Session, query: str, limit: int = 10) -> List[Instructor]:
    term = (query or "").strip()
    if len(term) < MIN_SEARCH_LENGTH:
        return []
    return (
        db.query(Instructor)
        .filter(Instructor.name.ilike(f"%{term}%"))
        .order_by(Instructor.name)
        .limit(limit)
        .all()
    )


def get_instructors_by_faculty(db: Session, faculty_id: int) -> List[Dict[str, Any]]:
    """Instructors teaching in a faculty, with how many of its courses each teaches."""
    rows = (
        db.query(Instructor, func.count(CourseInstructor.course_id).label("course_count"))
        .join(CourseInstructor, CourseInstructor.instructor_id == Instructor.id)
        .join(Course, Course.id == CourseInstructor.course_id)
        .filter(Course.faculty_id == faculty_id)
        .group_by(Instructor.id)
        .order_by(Instructor.name)
        .all()
    )
    return [
        {
            "id": instructor.id,
            "name": instructor.name,
            "title": instructor.title,
            "course_count": course_count,
        }
        for instructor, course_count in rows
    ]
