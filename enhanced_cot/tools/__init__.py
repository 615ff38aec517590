"""Enhanced CoT reasoning tools - Chain state, classification, branching and consensus."""

from .chain import ChainOfThoughtEngine, ChainSessionManager, get_chain_manager
from .cot_types import (
    AutoCoTConfig,
    BranchSuggestion,
    ChainMetrics,
    ChainState,
    ChainTemplate,
    ConsensusResult,
    OperationResult,
    ProblemType,
    ReasoningMode,
    RollbackEntry,
    ThoughtRecord,
    Thresholds,
)
from .templates import CHAIN_TEMPLATES

__all__ = [
    # Engine
    "ChainOfThoughtEngine",
    "ChainSessionManager",
    "get_chain_manager",
    # Types
    "AutoCoTConfig",
    "BranchSuggestion",
    "ChainMetrics",
    "ChainState",
    "ChainTemplate",
    "ConsensusResult",
    "OperationResult",
    "ProblemType",
    "ReasoningMode",
    "RollbackEntry",
    "ThoughtRecord",
    "Thresholds",
    # Catalog
    "CHAIN_TEMPLATES",
]
