"""Chain-of-thought types and data structures.

This module contains the enums, dataclasses, and tunable constants shared by
the classifier, store, branching, consensus, and rollback modules.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Literal

# =============================================================================
# Enums
# =============================================================================


class ReasoningMode(str, Enum):
    """Verbosity policy for a thought."""

    DRAFT = "draft"  # Ultra-concise, Chain of Draft style
    CONCISE = "concise"  # Short but readable
    STANDARD = "standard"  # Full chain-of-thought
    AUTO = "auto"  # Resolved per thought, never stored on a record


class ProblemType(str, Enum):
    """Problem category used by the mode heuristics."""

    ARITHMETIC = "arithmetic"
    LOGICAL = "logical"
    CREATIVE = "creative"
    PLANNING = "planning"
    ANALYSIS = "analysis"
    GENERAL = "general"


# =============================================================================
# Tunable thresholds
# =============================================================================


@dataclass(frozen=True, slots=True)
class Thresholds:
    """Heuristic cutoffs used across the reasoning modules.

    Defaults reproduce the reference behaviour; tests and callers may pass a
    modified copy to any function that accepts ``thresholds``.
    """

    draft_max_words: int = 5
    concise_max_words: int = 15
    auto_arithmetic_max_words: int = 10
    auto_logic_max_words: int = 20
    auto_complexity_words: int = 20
    auto_draft_max_words: int = 8
    short_thought_words: int = 10
    mode_switch_window: int = 3
    efficiency_floor: float = 0.5
    standard_avg_words: int = 50
    template_match_cutoff: float = 1.5
    consensus_top_concepts: int = 3
    consensus_confidence_boost: float = 1.2
    concept_min_length: int = 4
    max_path_count: int = 10


DEFAULT_THRESHOLDS = Thresholds()


@dataclass(frozen=True, slots=True)
class ModeConfig:
    """Static description of a reasoning mode."""

    max_words: float
    description: str
    token_multiplier: float


def build_mode_configs(
    thresholds: Thresholds = DEFAULT_THRESHOLDS,
) -> dict[ReasoningMode, ModeConfig]:
    """Mode catalog whose word ceilings come from ``thresholds``."""
    return {
        ReasoningMode.DRAFT: ModeConfig(
            max_words=thresholds.draft_max_words,
            description=(
                f"Ultra-concise reasoning (<={thresholds.draft_max_words} words) "
                "inspired by Chain of Draft"
            ),
            token_multiplier=0.2,
        ),
        ReasoningMode.CONCISE: ModeConfig(
            max_words=thresholds.concise_max_words,
            description=(
                f"Concise reasoning (<={thresholds.concise_max_words} words) "
                "balancing clarity and efficiency"
            ),
            token_multiplier=0.4,
        ),
        ReasoningMode.STANDARD: ModeConfig(
            max_words=float("inf"),
            description="Standard Chain of Thought with detailed reasoning",
            token_multiplier=1.0,
        ),
        ReasoningMode.AUTO: ModeConfig(
            max_words=float("inf"),
            description="Adaptive mode that switches based on problem complexity",
            token_multiplier=0.6,
        ),
    }


MODE_CONFIGS = build_mode_configs()

BranchReason = Literal["exploration", "uncertainty", "structured", "creative"]


# =============================================================================
# Data Classes
# =============================================================================


@dataclass(frozen=True, slots=True)
class BranchSuggestion:
    """Non-binding hint that the chain could fork here."""

    reason: BranchReason
    message: str
    suggested_branch_id: str

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "reason": self.reason,
            "message": self.message,
            "suggestedBranchId": self.suggested_branch_id,
        }


@dataclass
class ThoughtRecord:
    """A single accepted thought.

    Derived fields (word/token counts and the two suggestions) are filled in
    once, when the record is built, from the chain state before insertion.
    """

    thought_number: int
    text: str
    total_thoughts: int
    mode: ReasoningMode
    word_count: int
    token_count: int
    next_thought_needed: bool
    timestamp: datetime = field(default_factory=datetime.now)
    problem_type: ProblemType | None = None
    is_revision: bool | None = None
    revises_thought: int | None = None
    branch_from_thought: int | None = None
    branch_id: str | None = None
    needs_more_thoughts: bool | None = None
    confidence: float | None = None
    suggested_mode_switch: ReasoningMode | None = None
    suggested_branching: BranchSuggestion | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        result: dict[str, Any] = {
            "thoughtNumber": self.thought_number,
            "thought": self.text,
            "totalThoughts": self.total_thoughts,
            "mode": self.mode.value,
            "wordCount": self.word_count,
            "tokenCount": self.token_count,
            "nextThoughtNeeded": self.next_thought_needed,
            "timestamp": self.timestamp.isoformat(),
        }
        optional = {
            "problemType": self.problem_type.value if self.problem_type else None,
            "isRevision": self.is_revision,
            "revisesThought": self.revises_thought,
            "branchFromThought": self.branch_from_thought,
            "branchId": self.branch_id,
            "needsMoreThoughts": self.needs_more_thoughts,
            "confidence": self.confidence,
            "suggestedModeSwitch": (
                self.suggested_mode_switch.value if self.suggested_mode_switch else None
            ),
            "suggestedBranching": (
                self.suggested_branching.to_dict() if self.suggested_branching else None
            ),
        }
        result.update({k: v for k, v in optional.items() if v is not None})
        return result


@dataclass
class ChainMetrics:
    """Aggregate metrics recomputed from the current history."""

    total_tokens: int
    total_words: int
    average_words_per_thought: float
    efficiency: float
    latency_ms: int
    mode_distribution: dict[str, int]

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "totalTokens": self.total_tokens,
            "totalWords": self.total_words,
            "averageWordsPerThought": round(self.average_words_per_thought, 1),
            "efficiency": round(self.efficiency, 2),
            "latency": self.latency_ms,
            "modeDistribution": dict(self.mode_distribution),
        }


@dataclass(frozen=True)
class ChainTemplate:
    """Static example reasoning template."""

    name: str
    problem_type: ProblemType
    mode: ReasoningMode
    description: str
    example_thoughts: tuple[str, ...]

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "name": self.name,
            "problemType": self.problem_type.value,
            "mode": self.mode.value,
            "description": self.description,
            "exampleThoughts": list(self.example_thoughts),
        }


@dataclass
class ConsensusResult:
    """Vote-based aggregation over synthesized reasoning paths.

    ``paths`` are transient variants and are never merged into history.
    """

    paths: list[list[ThoughtRecord]]
    statement: str
    confidence: float
    agreement_score: float
    path_count: int
    voting_results: dict[str, int]
    top_concepts: list[tuple[str, int]] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "statement": self.statement,
            "confidence": round(self.confidence, 3),
            "agreementScore": round(self.agreement_score, 3),
            "pathCount": self.path_count,
            "votingResults": dict(self.voting_results),
            "topConcepts": [{"concept": c, "votes": n} for c, n in self.top_concepts],
            "pathModes": [path[-1].mode.value for path in self.paths if path],
        }


@dataclass
class RollbackEntry:
    """Audit record of one rollback."""

    rollback_id: str
    previous_states: list[ThoughtRecord]
    reason: str
    corrected_thought: ThoughtRecord
    timestamp: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "rollbackId": self.rollback_id,
            "reason": self.reason,
            "rolledBackTo": self.corrected_thought.thought_number,
            "previousHistoryLength": len(self.previous_states),
            "timestamp": self.timestamp.isoformat(),
        }


@dataclass(frozen=True)
class AutoCoTConfig:
    """Switches for automatic chain-of-thought suggestions."""

    trigger: str = "Let's think step by step"
    diversity_sampling: bool = True
    template_suggestion: bool = True
    context_aware: bool = True


@dataclass
class ChainState:
    """All mutable state of one reasoning session.

    Exactly one in-flight call mutates a given instance.
    """

    session_id: str = "default"
    history: list[ThoughtRecord] = field(default_factory=list)
    branches: dict[str, list[ThoughtRecord]] = field(default_factory=dict)
    allocated_branch_ids: set[str] = field(default_factory=set)
    rollback_log: list[RollbackEntry] = field(default_factory=list)
    snapshots: dict[int, list[ThoughtRecord]] = field(default_factory=dict)
    current_mode: ReasoningMode = ReasoningMode.AUTO
    current_problem_type: ProblemType = ProblemType.GENERAL
    start_time: datetime = field(default_factory=datetime.now)
    updated_at: datetime = field(default_factory=datetime.now)


@dataclass
class OperationResult:
    """Uniform success/failure envelope returned by every engine entry point."""

    status: Literal["success", "failed"]
    data: dict[str, Any] | None = None
    error: str | None = None
    operation: str | None = None
    details: dict[str, Any] = field(default_factory=dict)
    # Stored record, handed to the presentation layer; never serialized
    record: ThoughtRecord | None = field(default=None, repr=False)

    @property
    def ok(self) -> bool:
        """True when the operation succeeded."""
        return self.status == "success"

    @classmethod
    def success(
        cls, data: dict[str, Any], record: ThoughtRecord | None = None
    ) -> OperationResult:
        return cls(status="success", data=data, record=record)

    @classmethod
    def failure(
        cls,
        error: str,
        operation: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> OperationResult:
        return cls(status="failed", error=error, operation=operation, details=details or {})

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        if self.ok:
            return {"status": self.status, "data": self.data or {}}
        result: dict[str, Any] = {"status": self.status, "error": self.error}
        if self.operation:
            result["operation"] = self.operation
        result.update(self.details)
        return result
