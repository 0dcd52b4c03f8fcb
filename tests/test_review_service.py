# tests/test_review_service.py
"""
Review submission, updates, deletion, reporting and tag links.
"""

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from coursereview.crud import review as review_crud
from coursereview.database import Base
from coursereview.models.catalog import Course, Faculty
from coursereview.models.review import Review
from coursereview.models.survival_guide import PendingSurvivalGuide
from coursereview.models.tag import Tag
from coursereview.models.user import User
from coursereview.services import review_service, vote_service


# ======================
# TEST DATABASE SETUP
# ======================

@pytest.fixture
def db_session():
    """Create test database session"""
    engine = create_engine("sqlite:///:memory:")
    Base.metadata.create_all(engine)
    SessionLocal = sessionmaker(bind=engine)
    session = SessionLocal()

    yield session

    session.close()


@pytest.fixture
def setup_data(db_session):
    """Two students and one course"""
    author = User(name="Ayse", email="ayse@ogr.iuc.edu.tr", password_hash="hash")
    other = User(name="Mehmet", email="mehmet@ogr.iuc.edu.tr", password_hash="hash")
    faculty = Faculty(name="Engineering")
    db_session.add_all([author, other, faculty])
    db_session.flush()
    course = Course(faculty_id=faculty.id, code="CENG101", name="Intro to Programming")
    db_session.add(course)
    db_session.commit()
    return {"author": author, "other": other, "course": course}


def _fields(**overrides):
    fields = {
        "difficulty": 3,
        "usefulness": 4,
        "workload": 2,
        "material_relevance": 4,
        "exam_predictability": 3,
        "attendance": 5,
        "difficulty_value_alignment": "well_balanced",
        "midterm_format": "classical",
        "final_format": "mix",
        "extra_assessments": ["project"],
        "comment": "Solid course",
    }
    fields.update(overrides)
    return fields


# ======================
# SUBMISSION
# ======================

def test_submit_review_success(db_session, setup_data):
    result = review_service.submit_review(
        db_session,
        user_id=setup_data["author"].id,
        course_id=setup_data["course"].id,
        fields=_fields(),
    )

    review = result["review"]
    assert review["difficulty"] == 3
    assert review["extra_assessments"] == ["project"]
    assert review["vote_counts"] == {"helpful": 0, "missing_parts": 0, "totally_wrong": 0, "rage_bait": 0}
    assert result["survival_guide_pending"] is False


def test_second_review_for_same_course_rejected(db_session, setup_data):
    author, course = setup_data["author"], setup_data["course"]
    review_service.submit_review(db_session, author.id, course.id, _fields())

    with pytest.raises(ValueError, match="already reviewed"):
        review_service.submit_review(db_session, author.id, course.id, _fields())

    assert db_session.query(Review).count() == 1


@pytest.mark.parametrize(
    "overrides, message",
    [
        ({"difficulty": 6}, "difficulty must be between 1 and 5"),
        ({"usefulness": None}, "usefulness is required"),
        ({"attendance": 3}, "attendance must be"),
        ({"midterm_format": "oral"}, "midterm_format must be one of"),
        ({"difficulty_value_alignment": None}, "difficulty_value_alignment is required"),
        ({"extra_assessments": ["essay"]}, "Unknown extra assessment"),
        ({"comment": "x" * 301}, "300 characters"),
    ],
)
def test_submit_review_validation(db_session, setup_data, overrides, message):
    with pytest.raises(ValueError, match=message):
        review_service.submit_review(
            db_session, setup_data["author"].id, setup_data["course"].id, _fields(**overrides)
        )


def test_submit_review_unknown_course(db_session, setup_data):
    with pytest.raises(LookupError):
        review_service.submit_review(db_session, setup_data["author"].id, 999, _fields())


def test_survival_guide_is_queued_not_published(db_session, setup_data):
    author, course = setup_data["author"], setup_data["course"]

    result = review_service.submit_review(
        db_session, author.id, course.id, _fields(), survival_guide="Solve past exams"
    )

    assert result["survival_guide_pending"] is True
    assert result["review"]["survival_guide"] is None
    guide = db_session.query(PendingSurvivalGuide).one()
    assert guide.status == "pending"
    assert guide.survival_guide == "Solve past exams"


def test_resubmitted_guide_updates_pending_entry(db_session, setup_data):
    author, course = setup_data["author"], setup_data["course"]

    review_service.submit_survival_guide(db_session, author.id, course.id, "First draft")
    review_service.submit_survival_guide(db_session, author.id, course.id, "Second draft")

    guides = review_service.get_my_pending_guides(db_session, author.id, course.id)
    assert len(guides) == 1
    assert guides[0]["survival_guide"] == "Second draft"


def test_survival_guide_length_limit(db_session, setup_data):
    with pytest.raises(ValueError, match="280"):
        review_service.submit_survival_guide(
            db_session, setup_data["author"].id, setup_data["course"].id, "x" * 281
        )


def test_tags_linked_after_submit(db_session, setup_data):
    tag = Tag(name="Fair exams", type="positive", is_verified=True)
    db_session.add(tag)
    db_session.commit()

    result = review_service.submit_review(
        db_session,
        setup_data["author"].id,
        setup_data["course"].id,
        _fields(),
        tag_ids=[tag.id, 12345],
    )

    assert [t["name"] for t in result["review"]["tags"]] == ["Fair exams"]


def test_tag_link_failure_keeps_review(db_session, setup_data, monkeypatch):
    def explode(*args, **kwargs):
        raise RuntimeError("link table unavailable")

    monkeypatch.setattr(review_crud, "replace_review_tags", explode)

    result = review_service.submit_review(
        db_session, setup_data["author"].id, setup_data["course"].id, _fields(), tag_ids=[1]
    )

    assert result["review"]["tags"] == []
    assert db_session.query(Review).count() == 1


# ======================
# UPDATE / DELETE
# ======================

def test_update_own_review(db_session, setup_data):
    author, course = setup_data["author"], setup_data["course"]
    created = review_service.submit_review(db_session, author.id, course.id, _fields())

    result = review_service.update_review(
        db_session, created["review"]["id"], author.id, {"difficulty": 5, "comment": "Harder than expected"}
    )

    assert result["review"]["difficulty"] == 5
    assert result["review"]["usefulness"] == 4
    assert result["review"]["comment"] == "Harder than expected"


def test_update_someone_elses_review_rejected(db_session, setup_data):
    created = review_service.submit_review(
        db_session, setup_data["author"].id, setup_data["course"].id, _fields()
    )

    with pytest.raises(ValueError, match="your own"):
        review_service.update_review(db_session, created["review"]["id"], setup_data["other"].id, {"difficulty": 1})


def test_delete_permissions(db_session, setup_data):
    author, other, course = setup_data["author"], setup_data["other"], setup_data["course"]
    created = review_service.submit_review(db_session, author.id, course.id, _fields())
    review_id = created["review"]["id"]

    with pytest.raises(ValueError):
        review_service.delete_review(db_session, review_id, other.id)

    result = review_service.delete_review(db_session, review_id, other.id, is_admin=True)
    assert result["review_id"] == review_id

    with pytest.raises(LookupError):
        review_service.delete_review(db_session, review_id, author.id)


# ======================
# LISTING & REPORTS
# ======================

def test_course_listing_hides_hidden_reviews_and_shows_user_vote(db_session, setup_data):
    author, other, course = setup_data["author"], setup_data["other"], setup_data["course"]
    first = review_service.submit_review(db_session, author.id, course.id, _fields())
    second = review_service.submit_review(db_session, other.id, course.id, _fields())

    vote_service.toggle_vote(db_session, first["review"]["id"], other.id, "helpful")
    hidden = db_session.get(Review, second["review"]["id"])
    hidden.is_hidden = True
    db_session.commit()

    listing = review_service.list_course_reviews(db_session, course.id, current_user_id=other.id)

    assert [r["id"] for r in listing] == [first["review"]["id"]]
    assert listing[0]["vote_counts"]["helpful"] == 1
    assert listing[0]["user_vote"] == "helpful"


def test_report_review_increments_count_once_per_user(db_session, setup_data):
    created = review_service.submit_review(
        db_session, setup_data["author"].id, setup_data["course"].id, _fields()
    )
    review_id = created["review"]["id"]

    result = review_service.report_review(db_session, review_id, setup_data["other"].id, "Offensive")
    assert result["report_count"] == 1

    with pytest.raises(ValueError, match="already reported"):
        review_service.report_review(db_session, review_id, setup_data["other"].id)
