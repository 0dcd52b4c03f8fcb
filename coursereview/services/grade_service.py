# coursereview/services/grade_service.py
"""
Grade Boundary Service
Builds the letter-grade table shown on a course page.

A table is either taken verbatim from a submitted grade curve or built
entirely from defaults (optionally shifted by the course's average
grading-fairness rating). The two are never mixed, and every table carries
a ``mode`` so the page can say where the numbers came from.
"""

import logging
import math
from collections import defaultdict
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy.orm import Session

from coursereview.config import settings
from coursereview.constants import (
    DEFAULT_GRADE_BOUNDARIES,
    FAIRNESS_POINTS_PER_STEP,
    GRADE_SHIFT_WEIGHTS,
    GRADES,
    NEUTRAL_FAIRNESS,
    ExamType,
    Semester,
)
from coursereview.crud import grade as grade_crud
from coursereview.models.catalog import Course

logger = logging.getLogger(__name__)


MODE_SUBMITTED = "submitted"
MODE_DEFAULT = "default"
MODE_HEURISTIC = "heuristic"


# ======================
# TABLE BUILDERS
# ======================

def _row(grade: str, lower: Any, upper: Any) -> Dict[str, str]:
    return {"grade": grade, "lower": str(int(lower)), "upper": str(int(upper))}


def boundaries_from_distribution(distribution: Any) -> List[Dict[str, str]]:
    """Eight rows copied verbatim from a submitted grade curve."""
    return [
        _row(
            grade,
            getattr(distribution, f"{grade.lower()}_lower"),
            getattr(distribution, f"{grade.lower()}_upper"),
        )
        for grade in GRADES
    ]


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def default_boundaries() -> List[Dict[str, str]]:
    return [_row(grade, *DEFAULT_GRADE_BOUNDARIES[grade]) for grade in GRADES]


def heuristic_boundaries(
    average_fairness: float,
    clamp_at_100: Optional[bool] = None,
) -> List[Dict[str, str]]:
    """
    Default boundaries shifted by the average grading-fairness rating.

    A harsh rating (below 3) raises every boundary, a lenient one lowers
    them. Better grades move further than worse ones. Halves round up.
    Only AA's upper bound is shifted on its own; every other upper bound is
    one below the next better grade's lower bound, so no score falls in two
    grades. Bounds never drop below 0; whether they are capped at 100 is
    controlled by GRADE_HEURISTIC_CLAMP_AT_100.
    """
    if clamp_at_100 is None:
        clamp_at_100 = settings.GRADE_HEURISTIC_CLAMP_AT_100

    adjustment = (average_fairness - NEUTRAL_FAIRNESS) * FAIRNESS_POINTS_PER_STEP

    def clamp(value: int) -> int:
        value = max(0, value)
        return min(100, value) if clamp_at_100 else value

    def shift(value: int, weight: float) -> int:
        return clamp(_round_half_up(value - adjustment * weight))

    rows = []
    better_lower = None
    for grade in GRADES:
        lower, upper = DEFAULT_GRADE_BOUNDARIES[grade]
        weight = GRADE_SHIFT_WEIGHTS[grade]
        new_lower = shift(lower, weight)
        if better_lower is None:
            new_upper = shift(upper, weight)
        else:
            new_upper = clamp(better_lower - 1)
        rows.append(_row(grade, new_lower, new_upper))
        better_lower = new_lower
    return rows


# ======================
# RECORD SELECTION
# ======================

def _submitted_order(distribution: Any):
    # created_at can tie at second resolution; id breaks the tie
    return (distribution.created_at is not None, distribution.created_at, distribution.id or 0)


def select_distribution(
    distributions: Iterable[Any],
    academic_year: Optional[int] = None,
) -> Optional[Any]:
    """
    Pick the grade curve to display for a scope.

    With a year, only that year's curves are considered. Without one, only
    the most recent year's curves are. Within the scope a "final" curve
    wins; otherwise the most recently submitted one is used.
    """
    candidates = list(distributions)
    if not candidates:
        return None

    if academic_year is None:
        academic_year = max(d.academic_year for d in candidates)
    candidates = [d for d in candidates if d.academic_year == academic_year]
    if not candidates:
        return None

    finals = [d for d in candidates if d.exam_type == ExamType.FINAL.value]
    pool = finals or candidates
    return max(pool, key=_submitted_order)


def estimate_grade_boundaries(
    distributions: Iterable[Any],
    academic_year: Optional[int] = None,
    average_fairness: Optional[float] = None,
) -> Dict[str, Any]:
    """
    Build the grade table for a course scope.

    Args:
        distributions: Submitted grade curves for the course
        academic_year: Restrict to one year; None means the latest year
        average_fairness: Average grading-fairness rating, if known

    Returns:
        Dictionary with "mode", "grades" (eight rows of string bounds) and
        the source curve's identity when mode is "submitted"
    """
    chosen = select_distribution(distributions, academic_year)
    if chosen is not None:
        return {
            "mode": MODE_SUBMITTED,
            "academic_year": chosen.academic_year,
            "semester": chosen.semester,
            "exam_type": chosen.exam_type,
            "distribution_id": chosen.id,
            "average_fairness": None,
            "grades": boundaries_from_distribution(chosen),
        }

    if average_fairness is not None:
        return {
            "mode": MODE_HEURISTIC,
            "academic_year": academic_year,
            "semester": None,
            "exam_type": None,
            "distribution_id": None,
            "average_fairness": round(average_fairness, 2),
            "grades": heuristic_boundaries(average_fairness),
        }

    return {
        "mode": MODE_DEFAULT,
        "academic_year": academic_year,
        "semester": None,
        "exam_type": None,
        "distribution_id": None,
        "average_fairness": None,
        "grades": default_boundaries(),
    }


def summarize_years(distributions: Iterable[Any]) -> List[Dict[str, Any]]:
    """Per-year overview of submitted curves, newest year first."""
    by_year = defaultdict(set)
    for distribution in distributions:
        by_year[distribution.academic_year].add(distribution.exam_type)

    return [
        {
            "academic_year": year,
            "exam_types": sorted(exam_types),
            "has_final": ExamType.FINAL.value in exam_types,
            "has_resit": ExamType.RESIT.value in exam_types,
        }
        for year, exam_types in sorted(by_year.items(), reverse=True)
    ]


# ======================
# DATABASE ENTRY POINTS
# ======================

def _require_course(db: Session, course_id: int) -> None:
    if not db.query(Course.id).filter(Course.id == course_id).first():
        raise LookupError("Course not found")


def get_grade_boundaries(
    db: Session,
    course_id: int,
    academic_year: Optional[int] = None,
) -> Dict[str, Any]:
    """
    Letter-grade table for a course.

    Raises:
        LookupError: If the course does not exist
    """
    _require_course(db, course_id)
    distributions = grade_crud.get_grade_distributions(db, course_id)
    fairness = grade_crud.average_grading_fairness(db, course_id)
    return estimate_grade_boundaries(distributions, academic_year, fairness)


def get_grade_years(db: Session, course_id: int) -> List[Dict[str, Any]]:
    _require_course(db, course_id)
    return summarize_years(grade_crud.get_grade_distributions(db, course_id))


def submit_grade_distribution(
    db: Session,
    course_id: int,
    user_id: int,
    academic_year: int,
    semester: str,
    exam_type: str,
    bounds: Dict[str, int],
) -> Dict[str, Any]:
    """
    Store a user-submitted grade curve.

    Raises:
        LookupError: If the course does not exist
        ValueError: If bounds are inconsistent or the scope already has a curve
    """
    _require_course(db, course_id)

    if semester not in {s.value for s in Semester}:
        raise ValueError(f"semester must be one of: {', '.join(s.value for s in Semester)}")
    if exam_type not in {e.value for e in ExamType}:
        raise ValueError(f"exam_type must be one of: {', '.join(e.value for e in ExamType)}")

    columns = {}
    for grade in GRADES:
        lower = bounds.get(f"{grade.lower()}_lower")
        upper = bounds.get(f"{grade.lower()}_upper")
        if lower is None or upper is None:
            raise ValueError(f"{grade} bounds are required")
        if not (0 <= lower <= 100 and 0 <= upper <= 100):
            raise ValueError(f"{grade} bounds must be between 0 and 100")
        if lower > upper:
            raise ValueError(f"{grade} lower bound cannot exceed its upper bound")
        columns[f"{grade.lower()}_lower"] = lower
        columns[f"{grade.lower()}_upper"] = upper

    existing = grade_crud.get_grade_distribution_for_scope(
        db, course_id, academic_year, semester, exam_type
    )
    if existing:
        raise ValueError("A grade distribution for this year, semester and exam already exists")

    try:
        distribution = grade_crud.create_grade_distribution(
            db,
            course_id=course_id,
            submitted_by=user_id,
            academic_year=academic_year,
            semester=semester,
            exam_type=exam_type,
            bounds=columns,
        )
        db.commit()
        db.refresh(distribution)
    except Exception:
        db.rollback()
        raise

    logger.info(
        "Grade distribution %s submitted for course %s (%s %s %s)",
        distribution.id,
        course_id,
        academic_year,
        semester,
        exam_type,
    )
    return {
        "id": distribution.id,
        "course_id": course_id,
        "academic_year": distribution.academic_year,
        "semester": distribution.semester,
        "exam_type": distribution.exam_type,
        "grades": boundaries_from_distribution(distribution),
    }
