# coursereview/services/catalog_service.py
"""
Catalog Service Layer
Faculty, course and instructor pages with their review rollups
"""

from typing import Any, Dict, List

from sqlalchemy.orm import Session

from coursereview.crud import catalog as catalog_crud
from coursereview.models.catalog import Course
from coursereview.services import stats_service

SORT_KEYS = ("code", "name", "reviews", "rating")


def _course_summaries(db: Session, courses: List[Course]) -> List[Dict[str, Any]]:
    course_ids = [c.id for c in courses]
    review_counts = catalog_crud.get_review_counts(db, course_ids)
    file_counts = catalog_crud.get_file_counts(db, course_ids)
    stats_map = stats_service.get_course_stats_map(db, course_ids)

    summaries = []
    for course in courses:
        stats = stats_map.get(course.id)
        summaries.append({
            "id": course.id,
            "code": course.code,
            "name": course.name,
            "faculty_id": course.faculty_id,
            "course_type": course.course_type,
            "semester": course.semester,
            "credit_theory": course.credit_theory,
            "review_count": review_counts.get(course.id, 0),
            "file_count": file_counts.get(course.id, 0),
            "overall_score": stats["overall_score"] if stats else None,
        })
    return summaries


def sort_courses(courses: List[Dict[str, Any]], sort: str = "code") -> List[Dict[str, Any]]:
    """
    Order course summaries.

    "reviews" and "rating" put the highest first; courses without a score
    go last.
    """
    if sort not in SORT_KEYS:
        raise ValueError(f"sort must be one of: {', '.join(SORT_KEYS)}")
    if sort == "reviews":
        return sorted(courses, key=lambda c: (-c["review_count"], c["code"]))
    if sort == "rating":
        return sorted(
            courses,
            key=lambda c: (c["overall_score"] is None, -(c["overall_score"] or 0), c["code"]),
        )
    return sorted(courses, key=lambda c: (c[sort] or "").lower())


def list_faculty_courses(db: Session, faculty_id: int, sort: str = "code") -> List[Dict[str, Any]]:
    if not catalog_crud.get_faculty(db, faculty_id):
        raise LookupError("Faculty not found")
    courses = catalog_crud.get_courses_by_faculty(db, faculty_id)
    return sort_courses(_course_summaries(db, courses), sort)


def get_faculty_detail(db: Session, faculty_id: int) -> Dict[str, Any]:
    faculty = catalog_crud.get_faculty(db, faculty_id)
    if not faculty:
        raise LookupError("Faculty not found")

    parent = None
    if faculty.parent is not None:
        parent = {
            "id": faculty.parent.id,
            "name": faculty.parent.name,
            "name_tr": faculty.parent.name_tr,
            "parent_id": faculty.parent.parent_id,
        }
    return {
        "id": faculty.id,
        "name": faculty.name,
        "name_tr": faculty.name_tr,
        "parent": parent,
        "children": catalog_crud.get_child_faculties(db, faculty.id),
    }


def get_course_detail(db: Session, course_id: int) -> Dict[str, Any]:
    course = catalog_crud.get_course(db, course_id)
    if not course:
        raise LookupError("Course not found")

    detail = _course_summaries(db, [course])[0]
    detail["faculty_name"] = course.faculty.name if course.faculty else None
    detail["instructors"] = [
        {"id": ci.instructor.id, "name": ci.instructor.name, "title": ci.instructor.title}
        for ci in course.course_instructors
        if ci.instructor is not None
    ]
    return detail


def get_instructor_detail(db: Session, instructor_id: int) -> Dict[str, Any]:
    """Instructor with their courses and a rollup of those courses' statistics."""
    instructor = catalog_crud.get_instructor(db, instructor_id)
    if not instructor:
        raise LookupError("Instructor not found")

    courses = catalog_crud.get_courses_by_instructor(db, instructor_id)
    stats_map = stats_service.get_course_stats_map(db, [c.id for c in courses])
    return {
        "id": instructor.id,
        "name": instructor.name,
        "title": instructor.title,
        "courses": _course_summaries(db, courses),
        "rollup": stats_service.instructor_rollup(stats_map.values()),
    }


def search(db: Session, query: str, limit: int = 10) -> Dict[str, Any]:
    courses = catalog_crud.search_courses(db, query, limit)
    instructors = catalog_crud.search_instructors(db, query, limit)
    return {
        "courses": _course_summaries(db, courses),
        "instructors": [{"id": i.id, "name": i.name, "title": i.title} for i in instructors],
    }


def get_course_stats_payload(db: Session, course_id: int) -> Dict[str, Any]:
    """Course statistics, or an "insufficient data" marker below the threshold."""
    if not catalog_crud.get_course(db, course_id):
        raise LookupError("Course not found")
    stats = stats_service.get_course_stats(db, course_id)
    if stats is None:
        return {
            "available": False,
            "total_reviews": catalog_crud.get_review_counts(db, [course_id]).get(course_id, 0),
            "stats": None,
        }
    return {"available": True, "total_reviews": stats["total_reviews"], "stats": stats}
