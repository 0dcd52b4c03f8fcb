# tests/test_votes.py
"""
Vote toggling on the server and the optimistic client-side state.
"""

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from coursereview.database import Base
from coursereview.models.catalog import Course, Faculty
from coursereview.models.review import Review, ReviewVote
from coursereview.models.user import User
from coursereview.services import vote_service
from coursereview.services.optimistic import OptimisticAction, VoteState, apply_vote, run_optimistic


@pytest.fixture
def db_session():
    engine = create_engine("sqlite:///:memory:")
    Base.metadata.create_all(engine)
    SessionLocal = sessionmaker(bind=engine)
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def review(db_session):
    author = User(name="Author", email="author@ogr.iuc.edu.tr", password_hash="hash")
    voter = User(name="Voter", email="voter@ogr.iuc.edu.tr", password_hash="hash")
    faculty = Faculty(name="Science")
    db_session.add_all([author, voter, faculty])
    db_session.flush()
    course = Course(faculty_id=faculty.id, code="MATH101", name="Calculus I")
    db_session.add(course)
    db_session.flush()
    review = Review(user_id=author.id, course_id=course.id, difficulty=4, usefulness=4, workload=4)
    db_session.add(review)
    db_session.commit()
    return {"review": review, "voter": voter}


# ======================
# SERVER TOGGLE
# ======================

def test_toggle_vote_add_change_remove(db_session, review):
    review_id, voter_id = review["review"].id, review["voter"].id

    added = vote_service.toggle_vote(db_session, review_id, voter_id, "helpful")
    assert added["action"] == "added"
    assert added["vote_type"] == "helpful"
    assert added["counts"]["helpful"] == 1

    changed = vote_service.toggle_vote(db_session, review_id, voter_id, "rage_bait")
    assert changed["action"] == "changed"
    assert changed["counts"]["helpful"] == 0
    assert changed["counts"]["rage_bait"] == 1

    removed = vote_service.toggle_vote(db_session, review_id, voter_id, "rage_bait")
    assert removed["action"] == "removed"
    assert removed["vote_type"] is None
    assert db_session.query(ReviewVote).count() == 0


def test_toggle_vote_rejects_unknown_type(db_session, review):
    with pytest.raises(ValueError):
        vote_service.toggle_vote(db_session, review["review"].id, review["voter"].id, "funny")


def test_toggle_vote_unknown_review(db_session, review):
    with pytest.raises(LookupError):
        vote_service.toggle_vote(db_session, 999, review["voter"].id, "helpful")


# ======================
# OPTIMISTIC STATE
# ======================

def test_apply_vote_mirrors_server_rules():
    empty = VoteState()

    voted = apply_vote(empty, "helpful")
    assert voted.user_vote == "helpful"
    assert voted.counts["helpful"] == 1

    switched = apply_vote(voted, "missing_parts")
    assert switched.counts["helpful"] == 0
    assert switched.counts["missing_parts"] == 1

    cleared = apply_vote(switched, "missing_parts")
    assert cleared.user_vote is None
    assert cleared.counts["missing_parts"] == 0

    # inputs untouched
    assert empty.counts["helpful"] == 0
    assert voted.user_vote == "helpful"


def test_run_optimistic_commits_on_success():
    seen = []
    action = OptimisticAction.vote(VoteState(), "helpful")

    result = run_optimistic(action, lambda: None, on_change=seen.append)

    assert result == action.next
    assert seen == [action.next]


def test_run_optimistic_rolls_back_on_failure():
    seen = []
    start = VoteState(counts={"helpful": 2, "missing_parts": 0, "totally_wrong": 0, "rage_bait": 0})
    action = OptimisticAction.vote(start, "helpful")

    def remote():
        raise ConnectionError("offline")

    result = run_optimistic(action, remote, on_change=seen.append)

    assert result == start
    assert seen == [action.next, start]


def test_run_optimistic_can_reraise():
    action = OptimisticAction.vote(VoteState(), "helpful")

    def remote():
        raise ConnectionError("offline")

    with pytest.raises(ConnectionError):
        run_optimistic(action, remote, reraise=True)
