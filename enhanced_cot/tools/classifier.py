"""Mode and problem-type classification heuristics.

All functions here are pure: they read text, a mode/problem type, and
optionally a history slice, and return a value. Callers apply the results
to chain state.

Keyword sets are matched case-insensitively against word starts, so
``plan`` matches "planning" but not "explain".
"""

from __future__ import annotations

import math
import re
from collections.abc import Sequence

from enhanced_cot.tools.cot_types import (
    DEFAULT_THRESHOLDS,
    MODE_CONFIGS,
    ProblemType,
    ReasoningMode,
    ThoughtRecord,
    Thresholds,
    build_mode_configs,
)

# =============================================================================
# Patterns
# =============================================================================

_ARITH_EXPR = r"\d+\s*[+\-*/=]\s*\d+"

# analyze_for_auto patterns
AUTO_ARITHMETIC_PATTERN = re.compile(
    rf"{_ARITH_EXPR}|\b(?:calculat\w*|solv\w*|equations?|formulas?|math\w*)\b",
    re.IGNORECASE,
)
AUTO_LOGIC_PATTERN = re.compile(
    r"\bif\b.*\bthen\b|\b(?:because|therefore|thus|hence|impl(?:y|ies)|logic\w*|reason\w*)\b",
    re.IGNORECASE,
)
AUTO_CREATIVE_PATTERN = re.compile(
    r"\b(?:story|stories|creative\w*|imagin\w*|design\w*|brainstorm\w*|ideas?|innovat\w*)\b",
    re.IGNORECASE,
)
ANALYSIS_PATTERN = re.compile(
    r"\b(?:analy[sz]\w*|compar\w*|evaluat\w*|assess\w*|consider\w*|examin\w*)\b"
    r"|\bpros\b.*\bcons\b",
    re.IGNORECASE,
)

COMPLEXITY_INDICATORS: tuple[str, ...] = (
    "however",
    "although",
    "furthermore",
    "moreover",
    "nevertheless",
    "complex",
    "detailed",
    "thoroughly",
    "multiple considerations",
    "systematically",
)

# detect_problem_type patterns, checked in this order
PROBLEM_TYPE_PATTERNS: tuple[tuple[ProblemType, re.Pattern[str]], ...] = (
    (
        ProblemType.ARITHMETIC,
        re.compile(
            rf"{_ARITH_EXPR}|\b(?:calculat\w*|solv\w*|equations?|formulas?|math\w*"
            r"|arithmetic|numbers?|sum|sums|products?|divid\w*)\b",
            re.IGNORECASE,
        ),
    ),
    (
        ProblemType.LOGICAL,
        re.compile(
            r"\bif\b.*\bthen\b|\b(?:because|therefore|thus|hence|impl(?:y|ies)|logic\w*"
            r"|reason\w*|premises?|conclusions?|valid|invalid)\b",
            re.IGNORECASE,
        ),
    ),
    (
        ProblemType.CREATIVE,
        re.compile(
            r"\b(?:story|stories|creative\w*|imagin\w*|design\w*|brainstorm\w*|ideas?"
            r"|innovat\w*|art|write|writing|compos\w*|invent\w*)\b",
            re.IGNORECASE,
        ),
    ),
    (
        ProblemType.PLANNING,
        re.compile(
            r"\b(?:plan\w*|schedul\w*|organi[sz]\w*|strateg\w*|steps|process\w*"
            r"|workflows?|timelines?|roadmaps?|goals?)\b",
            re.IGNORECASE,
        ),
    ),
    (
        ProblemType.ANALYSIS,
        re.compile(
            ANALYSIS_PATTERN.pattern + r"|\b(?:advantages|disadvantages|review\w*)\b",
            re.IGNORECASE,
        ),
    ),
)

_MATH_DIGIT = re.compile(r"\d")
_MATH_SYMBOL = re.compile(r"[+\-*/=<>]")
_DETAIL_WORDS: tuple[str, ...] = ("explain", "why", "how")


# =============================================================================
# Measurements
# =============================================================================


def count_words(text: str) -> int:
    """Count non-empty whitespace-delimited tokens."""
    return len(text.split())


def estimate_token_count(text: str) -> int:
    """Rough token estimate: one token per four characters, rounded up."""
    return math.ceil(len(text) / 4)


def mode_word_ceiling(mode: ReasoningMode, thresholds: Thresholds = DEFAULT_THRESHOLDS) -> float:
    """Maximum expected words for ``mode``; unbounded for standard and auto."""
    configs = MODE_CONFIGS if thresholds == DEFAULT_THRESHOLDS else build_mode_configs(thresholds)
    return configs[mode].max_words


def calculate_efficiency(
    history: Sequence[ThoughtRecord], thresholds: Thresholds = DEFAULT_THRESHOLDS
) -> float:
    """Ratio of the standard CoT baseline to the average words per thought.

    Values above 1.0 mean the chain is terser than standard chain-of-thought.
    """
    if not history:
        return 1.0
    avg_words = sum(t.word_count for t in history) / len(history)
    return thresholds.standard_avg_words / max(avg_words, 1.0)


# =============================================================================
# Classification
# =============================================================================


def resolve_mode(
    text: str,
    current_mode: ReasoningMode,
    problem_type: ProblemType | None,
    thresholds: Thresholds = DEFAULT_THRESHOLDS,
) -> ReasoningMode:
    """Resolve the concrete mode for a thought.

    An explicit (non-auto) mode is sticky and returned unchanged.

    Args:
        text: Thought text.
        current_mode: Session mode.
        problem_type: Session problem type.
        thresholds: Heuristic cutoffs.

    Returns:
        draft, concise or standard; never auto.

    """
    if current_mode != ReasoningMode.AUTO:
        return current_mode
    # Creative work always gets full reasoning, even for short numeric text
    if problem_type == ProblemType.CREATIVE:
        return ReasoningMode.STANDARD

    words = count_words(text)
    lowered = text.lower()
    math_logical = bool(_MATH_DIGIT.search(text) and _MATH_SYMBOL.search(text)) or (
        problem_type in (ProblemType.ARITHMETIC, ProblemType.LOGICAL)
    )
    needs_detail = any(word in lowered for word in _DETAIL_WORDS)

    if math_logical and words <= thresholds.draft_max_words:
        return ReasoningMode.DRAFT
    if not needs_detail and words <= thresholds.concise_max_words:
        return ReasoningMode.CONCISE
    return ReasoningMode.STANDARD


def has_complexity_indicator(text: str) -> bool:
    lowered = text.lower()
    return any(indicator in lowered for indicator in COMPLEXITY_INDICATORS)


def analyze_for_auto(text: str, thresholds: Thresholds = DEFAULT_THRESHOLDS) -> ReasoningMode:
    """Suggest a mode from content alone, for auto-CoT.

    Rules are checked in a fixed priority order; the first that fires wins.
    """
    words = count_words(text)
    complex_text = has_complexity_indicator(text)

    if AUTO_ARITHMETIC_PATTERN.search(text) and words <= thresholds.auto_arithmetic_max_words:
        return ReasoningMode.DRAFT
    if AUTO_LOGIC_PATTERN.search(text) and words <= thresholds.auto_logic_max_words:
        return ReasoningMode.CONCISE
    if AUTO_CREATIVE_PATTERN.search(text):
        return ReasoningMode.STANDARD
    if ANALYSIS_PATTERN.search(text):
        if complex_text or words > thresholds.auto_complexity_words:
            return ReasoningMode.STANDARD
        return ReasoningMode.CONCISE

    if complex_text or words > thresholds.auto_complexity_words:
        return ReasoningMode.STANDARD
    if words <= thresholds.auto_draft_max_words:
        return ReasoningMode.DRAFT
    return ReasoningMode.CONCISE


def detect_problem_type(text: str) -> ProblemType:
    """Return the first matching problem type, general if none match."""
    for problem_type, pattern in PROBLEM_TYPE_PATTERNS:
        if pattern.search(text):
            return problem_type
    return ProblemType.GENERAL


def suggest_mode_switch(
    latest: ThoughtRecord,
    history: Sequence[ThoughtRecord],
    thresholds: Thresholds = DEFAULT_THRESHOLDS,
) -> ReasoningMode | None:
    """Suggest a cheaper mode when the chain's shape warrants it.

    Args:
        latest: The thought about to be appended, with its resolved mode.
        history: Accepted thoughts before ``latest``.
        thresholds: Heuristic cutoffs.

    Returns:
        The suggested mode, or None.

    """
    current = latest.mode
    recent = history[-thresholds.mode_switch_window :]

    if (
        current == ReasoningMode.STANDARD
        and all(t.word_count < thresholds.short_thought_words for t in recent)
    ):
        return ReasoningMode.CONCISE
    if (
        current == ReasoningMode.DRAFT
        and latest.word_count > mode_word_ceiling(ReasoningMode.DRAFT, thresholds)
    ):
        return ReasoningMode.CONCISE
    if (
        current == ReasoningMode.STANDARD
        and calculate_efficiency(history, thresholds) < thresholds.efficiency_floor
    ):
        return ReasoningMode.CONCISE
    return None
