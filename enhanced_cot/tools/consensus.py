"""Self-consistency consensus over synthesized reasoning paths.

A submission with ``pathCount > 1`` is rewritten into ``pathCount`` variants
by fixed templates, each variant is classified and measured on its own, and
the variants vote on shared key concepts. The vote is a deterministic
single-process heuristic; paths are discarded after the result is built.
"""

from __future__ import annotations

import re
from collections import Counter
from collections.abc import Sequence

from enhanced_cot.tools.classifier import count_words, estimate_token_count, resolve_mode
from enhanced_cot.tools.cot_types import (
    DEFAULT_THRESHOLDS,
    ConsensusResult,
    ProblemType,
    ReasoningMode,
    ThoughtRecord,
    Thresholds,
)
from enhanced_cot.tools.validation import ThoughtInput
from enhanced_cot.utils.errors import ConsensusError

# Template markers are listed so variant prefixes never win the vote
STOP_WORDS: frozenset[str] = frozenset(
    {
        "about",
        "after",
        "also",
        "been",
        "before",
        "being",
        "could",
        "does",
        "each",
        "from",
        "have",
        "into",
        "just",
        "more",
        "most",
        "only",
        "other",
        "over",
        "should",
        "some",
        "such",
        "than",
        "that",
        "their",
        "them",
        "then",
        "there",
        "these",
        "they",
        "this",
        "those",
        "very",
        "were",
        "what",
        "when",
        "where",
        "which",
        "will",
        "with",
        "would",
        "your",
        # variant template markers
        "alternatively",
        "considering",
        "carefully",
        "path",
    }
)

_PUNCTUATION = re.compile(r"[^\w\s]")


def variant_text(text: str, index: int) -> str:
    """Rewrite ``text`` for path ``index`` (0-based)."""
    if index == 0:
        return text
    if index == 1:
        return f"Alternatively: {text}"
    if index == 2:
        return f"Considering carefully: {text}"
    return f"Path {index + 1}: {text}"


def synthesize_paths(
    base: ThoughtInput,
    path_count: int,
    current_mode: ReasoningMode,
    problem_type: ProblemType | None,
    thresholds: Thresholds = DEFAULT_THRESHOLDS,
) -> list[list[ThoughtRecord]]:
    """Build one single-record path per index, each classified independently."""
    paths: list[list[ThoughtRecord]] = []
    for index in range(path_count):
        text = variant_text(base.thought, index)
        paths.append(
            [
                ThoughtRecord(
                    thought_number=base.thought_number,
                    text=text,
                    total_thoughts=max(base.total_thoughts, base.thought_number),
                    mode=resolve_mode(text, current_mode, problem_type, thresholds),
                    word_count=count_words(text),
                    token_count=estimate_token_count(text),
                    next_thought_needed=base.next_thought_needed,
                    problem_type=problem_type,
                )
            ]
        )
    return paths


def extract_concepts(
    text: str, thresholds: Thresholds = DEFAULT_THRESHOLDS
) -> tuple[str, ...]:
    """Distinct key terms of ``text`` in first-seen order."""
    cleaned = _PUNCTUATION.sub("", text.lower())
    concepts = (
        token
        for token in cleaned.split()
        if len(token) >= thresholds.concept_min_length and token not in STOP_WORDS
    )
    return tuple(dict.fromkeys(concepts))


def _statement(top: Sequence[tuple[str, int]], path_count: int) -> str:
    if not top:
        return f"No consensus found: 0/{path_count} paths share a key concept"
    aligned = top[0][1]
    if len(top) == 1:
        return f"Consensus on '{top[0][0]}' ({aligned}/{path_count} paths aligned)"
    return f"Consensus on '{top[0][0]}' and '{top[1][0]}' ({aligned}/{path_count} paths aligned)"


def build_consensus(
    paths: Sequence[Sequence[ThoughtRecord]],
    thresholds: Thresholds = DEFAULT_THRESHOLDS,
) -> ConsensusResult:
    """Aggregate paths into a vote-based consensus.

    Args:
        paths: Synthesized paths; only each path's final variant votes.
        thresholds: Heuristic cutoffs.

    Returns:
        ConsensusResult with statement, confidence, and agreement score.

    Raises:
        ConsensusError: If ``paths`` is empty.

    """
    if not paths:
        raise ConsensusError("Cannot build consensus from zero paths", {"pathCount": 0})

    path_count = len(paths)
    per_path = [extract_concepts(p[-1].text, thresholds) if p else () for p in paths]

    tally: Counter[str] = Counter()
    first_seen: dict[str, int] = {}
    for concepts in per_path:
        for concept in concepts:
            tally[concept] += 1
            first_seen.setdefault(concept, len(first_seen))

    ranked = sorted(tally.items(), key=lambda item: (-item[1], first_seen[item[0]]))
    top = ranked[: thresholds.consensus_top_concepts]

    agreement = top[0][1] / path_count if top else 0.0
    confidence = min(agreement * thresholds.consensus_confidence_boost, 1.0)
    top_names = {name for name, _ in top}
    voting = {
        f"path_{i + 1}": sum(1 for c in concepts if c in top_names)
        for i, concepts in enumerate(per_path)
    }

    return ConsensusResult(
        paths=[list(p) for p in paths],
        statement=_statement(top, path_count),
        confidence=confidence,
        agreement_score=agreement,
        path_count=path_count,
        voting_results=voting,
        top_concepts=list(top),
    )
