# coursereview/services/stats_service.py
"""
Course Statistics Service
Aggregates raw review rows into medians, rating histograms and
categorical counts for the course detail page.

Statistics are computed fresh on every call; a course with fewer than
MIN_REVIEWS_FOR_DISPLAY visible reviews gets no statistics at all.
"""

import logging
from statistics import median
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy.orm import Session

from coursereview.config import settings
from coursereview.constants import (
    MAX_RATING,
    MIN_RATING,
    UNSPECIFIED,
    DifficultyValueAlignment,
    ExamFormat,
    ExtraAssessment,
)
from coursereview.models.review import Review

logger = logging.getLogger(__name__)


# Scored 1-5 dimensions, in display order
RATING_DIMENSIONS = (
    "difficulty",
    "usefulness",
    "workload",
    "material_relevance",
    "exam_predictability",
    "attendance",
    "grading_fairness",
)

# Single-choice categorical fields and the values they accept
CATEGORICAL_FIELDS = {
    "difficulty_value_alignment": tuple(o.value for o in DifficultyValueAlignment),
    "midterm_format": tuple(o.value for o in ExamFormat),
    "final_format": tuple(o.value for o in ExamFormat),
}

EXTRA_ASSESSMENT_OPTIONS = tuple(o.value for o in ExtraAssessment)


# ======================
# PURE HELPERS
# ======================

def _field(record: Any, name: str) -> Any:
    """Read a field from an ORM row or a plain mapping."""
    if isinstance(record, dict):
        return record.get(name)
    return getattr(record, name, None)


def _rating_values(records: List[Any], dimension: str) -> List[int]:
    values = []
    for record in records:
        value = _field(record, dimension)
        if value is None:
            continue
        value = int(value)
        if MIN_RATING <= value <= MAX_RATING:
            values.append(value)
    return values


def compute_median(values: Iterable[float]) -> Optional[float]:
    """
    Median of the given values, or None for an empty input.

    An even-sized input yields the mean of the two middle values.
    """
    values = list(values)
    if not values:
        return None
    return float(median(values))


def rating_distribution(values: Iterable[int]) -> Dict[int, int]:
    """Count of each rating 1-5."""
    distribution = {rating: 0 for rating in range(MIN_RATING, MAX_RATING + 1)}
    for value in values:
        distribution[value] += 1
    return distribution


def categorical_counts(values: Iterable[Optional[str]], options: Iterable[str]) -> Dict[str, int]:
    """
    Count occurrences of each known option.

    Missing, empty or unknown values land in the "unspecified" bucket so
    that percentages computed from these counts always add up to 100.
    """
    options = tuple(options)
    counts = {option: 0 for option in options}
    counts[UNSPECIFIED] = 0
    for value in values:
        key = value.strip() if isinstance(value, str) else value
        if key in options:
            counts[key] += 1
        else:
            counts[UNSPECIFIED] += 1
    return counts


def distribution_percentages(counts: Dict[Any, int]) -> Dict[Any, float]:
    total = sum(counts.values())
    return {
        key: round(count / total * 100, 1) if total > 0 else 0.0
        for key, count in counts.items()
    }


def overall_score(
    median_difficulty: Optional[float],
    median_usefulness: Optional[float],
    median_workload: Optional[float],
) -> Optional[float]:
    """
    Combined 0-5 quality score where 5 is best.

    Difficulty and workload are inverted (lower is better) before being
    averaged with usefulness.
    """
    if median_difficulty is None or median_usefulness is None or median_workload is None:
        return None
    return ((5 - median_difficulty) + median_usefulness + (5 - median_workload)) / 3


# ======================
# AGGREGATION
# ======================

def compute_course_stats(reviews: Iterable[Any]) -> Dict[str, Any]:
    """
    Aggregate a course's reviews into a fixed-shape statistics mapping.

    Args:
        reviews: Review rows (ORM objects or dicts) for a single course

    Returns:
        Dictionary with total_reviews, per-dimension medians, response
        counts and distributions, categorical counts and the overall score.
        Medians of dimensions without any answers are None.
    """
    records = list(reviews)
    stats: Dict[str, Any] = {"total_reviews": len(records)}

    for dimension in RATING_DIMENSIONS:
        values = _rating_values(records, dimension)
        stats[f"median_{dimension}"] = compute_median(values)
        stats[f"{dimension}_responses"] = len(values)
        stats[f"{dimension}_distribution"] = rating_distribution(values)

    for field_name, options in CATEGORICAL_FIELDS.items():
        stats[f"{field_name}_counts"] = categorical_counts(
            (_field(record, field_name) for record in records),
            options,
        )

    extra_counts = {option: 0 for option in EXTRA_ASSESSMENT_OPTIONS}
    extra_counts[UNSPECIFIED] = 0
    for record in records:
        for item in _field(record, "extra_assessments") or []:
            if item in EXTRA_ASSESSMENT_OPTIONS:
                extra_counts[item] += 1
            else:
                extra_counts[UNSPECIFIED] += 1
    stats["extra_assessments_counts"] = extra_counts

    stats["overall_score"] = overall_score(
        stats["median_difficulty"],
        stats["median_usefulness"],
        stats["median_workload"],
    )
    return stats


def meets_display_threshold(stats: Dict[str, Any], minimum: Optional[int] = None) -> bool:
    if minimum is None:
        minimum = settings.MIN_REVIEWS_FOR_DISPLAY
    return stats["total_reviews"] >= minimum


def instructor_rollup(course_stats: Iterable[Optional[Dict[str, Any]]]) -> Optional[Dict[str, Any]]:
    """
    Roll course statistics up to an instructor summary.

    Headline medians are averaged across courses weighted by each course's
    review count. Courses without displayable stats are skipped.
    """
    entries = [s for s in course_stats if s and s["total_reviews"] > 0]
    if not entries:
        return None

    total_reviews = sum(s["total_reviews"] for s in entries)
    rollup: Dict[str, Any] = {
        "course_count": len(entries),
        "total_reviews": total_reviews,
    }
    for dimension in ("difficulty", "usefulness", "workload"):
        weighted = [
            (s[f"median_{dimension}"], s["total_reviews"])
            for s in entries
            if s[f"median_{dimension}"] is not None
        ]
        weight = sum(count for _, count in weighted)
        rollup[f"avg_{dimension}"] = (
            sum(value * count for value, count in weighted) / weight if weight else None
        )

    rollup["overall_score"] = overall_score(
        rollup["avg_difficulty"],
        rollup["avg_usefulness"],
        rollup["avg_workload"],
    )
    return rollup


# ======================
# DATABASE ENTRY POINTS
# ======================

def get_visible_reviews(db: Session, course_id: int) -> List[Review]:
    return (
        db.query(Review)
        .filter(Review.course_id == course_id, Review.is_hidden.is_(False))
        .all()
    )


def get_course_stats(
    db: Session,
    course_id: int,
    min_reviews: Optional[int] = None,
) -> Optional[Dict[str, Any]]:
    """
    Statistics for a course, or None when it has too few reviews.

    Args:
        db: Database session
        course_id: Course identifier
        min_reviews: Override for the display threshold

    Returns:
        Statistics dictionary, or None below the threshold
    """
    stats = compute_course_stats(get_visible_reviews(db, course_id))
    if not meets_display_threshold(stats, min_reviews):
        logger.debug(
            "Course %s has %s reviews; statistics withheld",
            course_id,
            stats["total_reviews"],
        )
        return None
    return stats


def get_course_stats_map(db: Session, course_ids: Iterable[int]) -> Dict[int, Optional[Dict[str, Any]]]:
    """Displayable statistics per course id (None where withheld)."""
    return {course_id: get_course_stats(db, course_id) for course_id in course_ids}
