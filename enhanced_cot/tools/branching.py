"""Branch suggestion, identifier allocation, and the branch index."""

from __future__ import annotations

import itertools
import re
import string
import time

from loguru import logger

from enhanced_cot.tools.cot_types import (
    BranchSuggestion,
    ChainState,
    ProblemType,
    ThoughtRecord,
)

_EXPLORATION = re.compile(r"\bor\b|\balternatively\b|\bhowever\b", re.IGNORECASE)
_UNCERTAINTY = re.compile(r"\b(?:maybe|possibly|might)\b", re.IGNORECASE)

SINGLE_LETTER_IDS: tuple[str, ...] = tuple(string.ascii_uppercase)
TWO_LETTER_IDS: tuple[str, ...] = tuple(
    a + b for a, b in itertools.product(string.ascii_uppercase, repeat=2)
)


def suggest_branching(
    record: ThoughtRecord,
    problem_type: ProblemType | None,
    has_active_branches: bool,
    next_branch_id: str = "A",
) -> BranchSuggestion | None:
    """Suggest forking the chain at ``record``.

    Only the first matching rule fires:
    alternatives mentioned, then hedging words, then analysis/planning from
    the second thought while no branch exists, then creative from the third.
    """
    n = record.thought_number
    if _EXPLORATION.search(record.text):
        return BranchSuggestion(
            reason="exploration",
            message=f"Alternatives mentioned; branch from thought {n} to explore each one",
            suggested_branch_id=next_branch_id,
        )
    if _UNCERTAINTY.search(record.text):
        return BranchSuggestion(
            reason="uncertainty",
            message=f"Uncertainty at thought {n}; a branch can test the competing hypothesis",
            suggested_branch_id=next_branch_id,
        )
    if (
        problem_type in (ProblemType.ANALYSIS, ProblemType.PLANNING)
        and n >= 2
        and not has_active_branches
    ):
        return BranchSuggestion(
            reason="structured",
            message=(
                f"Structured {problem_type.value} problem; "
                "compare options in parallel branches"
            ),
            suggested_branch_id=next_branch_id,
        )
    if problem_type == ProblemType.CREATIVE and n >= 3:
        return BranchSuggestion(
            reason="creative",
            message="Creative problem; branch to develop a divergent idea",
            suggested_branch_id=next_branch_id,
        )
    return None


def _live_ids(state: ChainState) -> set[str]:
    return set(state.branches) | state.allocated_branch_ids


def _first_free(live: set[str]) -> str:
    for candidate in itertools.chain(SINGLE_LETTER_IDS, TWO_LETTER_IDS):
        if candidate not in live:
            return candidate
    stamp = int(time.time() * 1000)
    candidate = f"branch_{stamp}"
    suffix = 0
    while candidate in live:
        suffix += 1
        candidate = f"branch_{stamp}_{suffix}"
    return candidate


def next_free_branch_id(state: ChainState) -> str:
    """Peek at the id ``allocate_branch_id`` would return, without reserving it."""
    return _first_free(_live_ids(state))


def allocate_branch_id(state: ChainState) -> str:
    """Reserve and return the smallest unused branch id.

    Order: A..Z, then AA..ZZ, then a time-based tag.
    """
    branch_id = _first_free(_live_ids(state))
    state.allocated_branch_ids.add(branch_id)
    return branch_id


def attach_to_branch(state: ChainState, record: ThoughtRecord) -> bool:
    """Index a stored record under its branch, creating the branch if needed."""
    if record.branch_from_thought is None or not record.branch_id:
        return False
    state.branches.setdefault(record.branch_id, []).append(record)
    state.allocated_branch_ids.add(record.branch_id)
    return True


def prune_branches(state: ChainState, target: int) -> list[str]:
    """Drop branch members rooted after ``target``; delete emptied branches.

    Returns:
        Ids of deleted branches.

    """
    removed: list[str] = []
    for branch_id in list(state.branches):
        kept = [
            m
            for m in state.branches[branch_id]
            if m.branch_from_thought is None or m.branch_from_thought <= target
        ]
        if kept:
            state.branches[branch_id] = kept
        else:
            del state.branches[branch_id]
            state.allocated_branch_ids.discard(branch_id)
            removed.append(branch_id)
    if removed:
        logger.debug(f"Session {state.session_id}: pruned branches {removed}")
    return removed
