# coursereview/services/optimistic.py
"""
Optimistic vote state for API clients.

The vote counts shown next to a review change the moment a user clicks,
before the server answers. ``OptimisticAction`` keeps the state from before
the click so it can be restored when the remote call fails.
"""

import logging
from dataclasses import dataclass, field, replace
from typing import Callable, Dict, Optional, TypeVar

from coursereview.constants import VoteType

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _empty_counts() -> Dict[str, int]:
    return {v.value: 0 for v in VoteType}


@dataclass(frozen=True)
class VoteState:
    counts: Dict[str, int] = field(default_factory=_empty_counts)
    user_vote: Optional[str] = None


def apply_vote(state: VoteState, vote_type: str) -> VoteState:
    """Next state after the user clicks ``vote_type``; the input is not modified."""
    counts = dict(state.counts)
    if state.user_vote == vote_type:
        counts[vote_type] = max(0, counts.get(vote_type, 0) - 1)
        return replace(state, counts=counts, user_vote=None)

    if state.user_vote is not None:
        counts[state.user_vote] = max(0, counts.get(state.user_vote, 0) - 1)
    counts[vote_type] = counts.get(vote_type, 0) + 1
    return replace(state, counts=counts, user_vote=vote_type)


@dataclass(frozen=True)
class OptimisticAction:
    previous: VoteState
    next: VoteState

    @classmethod
    def vote(cls, state: VoteState, vote_type: str) -> "OptimisticAction":
        return cls(previous=state, next=apply_vote(state, vote_type))


def run_optimistic(
    action: OptimisticAction,
    remote: Callable[[], T],
    on_change: Optional[Callable[[VoteState], None]] = None,
    reraise: bool = False,
) -> VoteState:
    """
    Show ``action.next`` right away, then perform ``remote``.

    ``on_change`` receives every state that becomes visible. If ``remote``
    raises, the previous state is restored and returned; the error is logged
    and re-raised only when ``reraise`` is set.
    """
    if on_change:
        on_change(action.next)
    try:
        remote()
    except Exception:
        logger.exception("Remote update failed; restoring previous vote state")
        if on_change:
            on_change(action.previous)
        if reraise:
            raise
        return action.previous
    return action.next
