from typing import Dict, List, Optional

from pydantic import BaseModel, Field, field_validator

from coursereview.constants import GRADES, ExamType, Semester


class GradeRow(BaseModel):
    grade: str
    lower: str
    upper: str


class GradeBoundaries(BaseModel):
    """
    Letter-grade table for a course.

    ``mode`` tells which source produced the numbers: "submitted" data,
    the "default" table, or the "heuristic" shift from grading fairness.
    """
    mode: str
    academic_year: Optional[int] = None
    semester: Optional[str] = None
    exam_type: Optional[str] = None
    distribution_id: Optional[int] = None
    average_fairness: Optional[float] = None
    grades: List[GradeRow]


class GradeYear(BaseModel):
    academic_year: int
    exam_types: List[str]
    has_final: bool
    has_resit: bool


class GradeBound(BaseModel):
    lower: int = Field(..., ge=0, le=100)
    upper: int = Field(..., ge=0, le=100)


class GradeDistributionCreate(BaseModel):
    academic_year: int = Field(..., ge=2000, le=2100)
    semester: Semester
    exam_type: ExamType
    # Keyed by letter grade: {"AA": {"lower": 88, "upper": 100}, ...}
    bounds: Dict[str, GradeBound]

    @field_validator("bounds")
    @classmethod
    def validate_grades(cls, v):
        missing = [g for g in GRADES if g not in v]
        if missing:
            raise ValueError(f"Missing bounds for: {', '.join(missing)}")
        return v

    def columns(self) -> Dict[str, int]:
        """Flatten to column names, e.g. {"aa_lower": 88, "aa_upper": 100}"""
        flat = {}
        for grade in GRADES:
            flat[f"{grade.lower()}_lower"] = self.bounds[grade].lower
            flat[f"{grade.lower()}_upper"] = self.bounds[grade].upper
        return flat
