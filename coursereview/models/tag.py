# coursereview/models/tag.py
from sqlalchemy import Column, Integer, String, Boolean, ForeignKey, TIMESTAMP, UniqueConstraint, func
from sqlalchemy.orm import relationship
from coursereview.database import Base


class Tag(Base):
    __tablename__ = "tags"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(60), nullable=False, index=True)
    name_tr = Column(String(60))
    type = Column(String(20), nullable=False)  # 'positive' or 'negative'
    is_verified = Column(Boolean, default=False, nullable=False)
    created_by = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(TIMESTAMP, server_default=func.now())

    review_tags = relationship("ReviewTag", back_populates="tag", cascade="all, delete-orphan")


class ReviewTag(Base):
    __tablename__ = "review_tags"

    id = Column(Integer, primary_key=True, index=True)
    review_id = Column(Integer, ForeignKey("reviews.id", ondelete="CASCADE"), nullable=False, index=True)
    tag_id = Column(Integer, ForeignKey("tags.id", ondelete="CASCADE"), nullable=False, index=True)

    __table_args__ = (
        UniqueConstraint("review_id", "tag_id", name="uq_review_tag"),
    )

    review = relationship("Review", back_populates="review_tags")
    tag = relationship("Tag", back_populates="review_tags")


class PendingTag(Base):
    __tablename__ = "pending_tags"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(60), nullable=False)
    suggested_type = Column(String(20), nullable=False)
    submitted_by = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    course_id = Column(Integer, ForeignKey("courses.id", ondelete="SET NULL"), nullable=True)
    status = Column(String(20), nullable=False, default="pending", index=True)
    created_at = Column(TIMESTAMP, server_default=func.now(), nullable=False)
    reviewed_at = Column(TIMESTAMP, nullable=True)
    reviewed_by = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    course = relationship("Course")
