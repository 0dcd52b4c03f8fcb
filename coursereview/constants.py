# coursereview/constants.py
"""Fixed vocabularies shared by models, schemas and services."""

import enum


class ModerationStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class VoteType(str, enum.Enum):
    HELPFUL = "helpful"
    MISSING_PARTS = "missing_parts"
    TOTALLY_WRONG = "totally_wrong"
    RAGE_BAIT = "rage_bait"


class TagType(str, enum.Enum):
    POSITIVE = "positive"
    NEGATIVE = "negative"


class FileType(str, enum.Enum):
    EXAM = "exam"
    NOTES = "notes"
    OTHER = "other"


class DifficultyValueAlignment(str, enum.Enum):
    WELL_BALANCED = "well_balanced"
    TOO_DIFFICULT = "too_difficult"
    TOO_EASY = "too_easy"


class ExamFormat(str, enum.Enum):
    CLASSICAL = "classical"
    TEST = "test"
    MIX = "mix"


class ExtraAssessment(str, enum.Enum):
    PROJECT = "project"
    LAB = "lab"
    QUIZ = "quiz"
    HOMEWORK = "homework"


class Semester(str, enum.Enum):
    FALL = "fall"
    SPRING = "spring"
    SUMMER = "summer"


class ExamType(str, enum.Enum):
    FINAL = "final"
    RESIT = "resit"
    MIDTERM = "midterm"


MIN_RATING = 1
MAX_RATING = 5

# Attendance is a yes/no question stored on the 1-5 scale
ATTENDANCE_NOT_REQUIRED = 1
ATTENDANCE_REQUIRED = 5

UNSPECIFIED = "unspecified"

# Letter grades, best first
GRADES = ("AA", "BA", "BB", "CB", "CC", "DC", "DD", "FF")

DEFAULT_GRADE_BOUNDARIES = {
    "AA": (90, 100),
    "BA": (85, 89),
    "BB": (80, 84),
    "CB": (75, 79),
    "CC": (70, 74),
    "DC": (65, 69),
    "DD": (60, 64),
    "FF": (0, 59),
}

# How strongly a grading-fairness shift moves each letter grade
GRADE_SHIFT_WEIGHTS = {
    "AA": 1.2,
    "BA": 1.1,
    "BB": 1.0,
    "CB": 0.9,
    "CC": 0.8,
    "DC": 0.7,
    "DD": 0.6,
    "FF": 0.6,
}

NEUTRAL_FAIRNESS = 3
FAIRNESS_POINTS_PER_STEP = 5
