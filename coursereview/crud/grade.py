# coursereview/crud/grade.py
"""
Grade Distribution CRUD Operations
Submitted grade curves are insert-only; there is no update path.
"""

from typing import Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from coursereview.models.grade import GradeDistribution
from coursereview.models.review import Review


def get_grade_distributions(db: Session, course_id: int) -> List[GradeDistribution]:
    """All grade curves for a course, newest academic year first."""
    return (
        db.query(GradeDistribution)
        .filter(GradeDistribution.course_id == course_id)
        .order_by(
            GradeDistribution.academic_year.desc(),
            GradeDistribution.semester.asc(),
            GradeDistribution.id.desc(),
        )
        .all()
    )


def get_grade_distribution_for_scope(
    db: Session,
    course_id: int,
    academic_year: int,
    semester: str,
    exam_type: str,
) -> Optional[GradeDistribution]:
    return (
        db.query(GradeDistribution)
        .filter(
            GradeDistribution.course_id == course_id,
            GradeDistribution.academic_year == academic_year,
            GradeDistribution.semester == semester,
            GradeDistribution.exam_type == exam_type,
        )
        .first()
    )


def create_grade_distribution(
    db: Session,
    course_id: int,
    submitted_by: int,
    academic_year: int,
    semester: str,
    exam_type: str,
    bounds: Dict[str, int],
) -> GradeDistribution:
    """
    Insert a grade curve.

    Args:
        bounds: Mapping of column name (e.g. "aa_lower") to score
    """
    distribution = GradeDistribution(
        course_id=course_id,
        submitted_by=submitted_by,
        academic_year=academic_year,
        semester=semester,
        exam_type=exam_type,
        **bounds,
    )
    db.add(distribution)
    db.flush()
    return distribution


def average_grading_fairness(db: Session, course_id: int) -> Optional[float]:
    """Mean grading-fairness rating of a course's visible reviews."""
    result = (
        db.query(func.avg(Review.grading_fairness))
        .filter(
            Review.course_id == course_id,
            Review.is_hidden.is_(False),
            Review.grading_fairness.isnot(None),
        )
        .scalar()
    )
    return float(result) if result is not None else None
