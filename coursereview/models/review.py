# coursereview/models/review.py
from sqlalchemy import (
    Column, Integer, String, Text, Boolean, ForeignKey, TIMESTAMP, JSON,
    CheckConstraint, UniqueConstraint, func,
)
from sqlalchemy.orm import relationship
from coursereview.database import Base


class Review(Base):
    __tablename__ = "reviews"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    course_id = Column(Integer, ForeignKey("courses.id", ondelete="CASCADE"), nullable=False, index=True)
    instructor_id = Column(Integer, ForeignKey("instructors.id", ondelete="SET NULL"), nullable=True)

    difficulty = Column(Integer, nullable=False)
    usefulness = Column(Integer, nullable=False)
    workload = Column(Integer, nullable=False)
    # Added after launch; older rows may not carry them
    material_relevance = Column(Integer)
    exam_predictability = Column(Integer)
    attendance = Column(Integer)
    grading_fairness = Column(Integer)

    difficulty_value_alignment = Column(String(20))
    midterm_format = Column(String(20))
    final_format = Column(String(20))
    extra_assessments = Column(JSON, default=list)

    comment = Column(Text)
    survival_guide = Column(Text)
    is_hidden = Column(Boolean, default=False, nullable=False)
    report_count = Column(Integer, default=0, nullable=False)
    created_at = Column(TIMESTAMP, server_default=func.now())
    updated_at = Column(TIMESTAMP, server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        UniqueConstraint("user_id", "course_id", name="uq_review_user_course"),
        CheckConstraint("difficulty >= 1 AND difficulty <= 5", name="check_difficulty_range"),
        CheckConstraint("usefulness >= 1 AND usefulness <= 5", name="check_usefulness_range"),
        CheckConstraint("workload >= 1 AND workload <= 5", name="check_workload_range"),
    )

    user = relationship("User", back_populates="reviews")
    course = relationship("Course", back_populates="reviews")
    instructor = relationship("Instructor")
    review_tags = relationship("ReviewTag", back_populates="review", cascade="all, delete-orphan")
    votes = relationship("ReviewVote", back_populates="review", cascade="all, delete-orphan")
    reports = relationship("ReviewReport", back_populates="review", cascade="all, delete-orphan")


class ReviewVote(Base):
    __tablename__ = "review_votes"

    id = Column(Integer, primary_key=True, index=True)
    review_id = Column(Integer, ForeignKey("reviews.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    vote_type = Column(String(20), nullable=False)
    created_at = Column(TIMESTAMP, server_default=func.now())

    __table_args__ = (
        UniqueConstraint("review_id", "user_id", name="uq_review_vote_user"),
    )

    review = relationship("Review", back_populates="votes")


class ReviewReport(Base):
    __tablename__ = "review_reports"

    id = Column(Integer, primary_key=True, index=True)
    review_id = Column(Integer, ForeignKey("reviews.id", ondelete="CASCADE"), nullable=False, index=True)
    reporter_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    reason = Column(Text)
    created_at = Column(TIMESTAMP, server_default=func.now(), nullable=False)

    review = relationship("Review", back_populates="reports")
    reporter = relationship("User")
