# coursereview/models/grade.py
from sqlalchemy import Column, Integer, String, ForeignKey, TIMESTAMP, UniqueConstraint, func
from sqlalchemy.orm import relationship
from coursereview.database import Base


class GradeDistribution(Base):
    __tablename__ = "course_grade_distributions"

    id = Column(Integer, primary_key=True, index=True)
    course_id = Column(Integer, ForeignKey("courses.id", ondelete="CASCADE"), nullable=False, index=True)
    academic_year = Column(Integer, nullable=False)
    semester = Column(String(10), nullable=False)
    exam_type = Column(String(10), nullable=False)

    aa_lower = Column(Integer, nullable=False)
    aa_upper = Column(Integer, nullable=False)
    ba_lower = Column(Integer, nullable=False)
    ba_upper = Column(Integer, nullable=False)
    bb_lower = Column(Integer, nullable=False)
    bb_upper = Column(Integer, nullable=False)
    cb_lower = Column(Integer, nullable=False)
    cb_upper = Column(Integer, nullable=False)
    cc_lower = Column(Integer, nullable=False)
    cc_upper = Column(Integer, nullable=False)
    dc_lower = Column(Integer, nullable=False)
    dc_upper = Column(Integer, nullable=False)
    dd_lower = Column(Integer, nullable=False)
    dd_upper = Column(Integer, nullable=False)
    ff_lower = Column(Integer, nullable=False)
    ff_upper = Column(Integer, nullable=False)

    submitted_by = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(TIMESTAMP, server_default=func.now())

    __table_args__ = (
        UniqueConstraint(
            "course_id", "academic_year", "semester", "exam_type",
            name="uq_grade_distribution_scope",
        ),
    )

    course = relationship("Course", back_populates="grade_distributions")
