"""Chain-of-thought engine and session registry.

The engine is a STATE MANAGER, not a reasoner. The calling LLM provides
thoughts; the engine classifies, measures, and organizes them.

Every entry point takes the session's ``ChainState`` explicitly and returns
an ``OperationResult``; validation and operational failures never escape.

Submission flow:
    1. Parse input (no state touched on failure)
    2. Rollback requests are handled exclusively and return
    3. Auto-CoT may supply a mode/problem type the caller left out
    4. Resolve the concrete mode
    5. Optional multi-path consensus
    6. Branch and mode-switch suggestions from pre-insertion state
    7. Append, index branch, snapshot
    8. Recompute metrics and build the response
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Any

from loguru import logger

from enhanced_cot.tools.auto_cot import handle_auto_cot
from enhanced_cot.tools.branching import (
    allocate_branch_id,
    attach_to_branch,
    next_free_branch_id,
    suggest_branching,
)
from enhanced_cot.tools.classifier import (
    count_words,
    estimate_token_count,
    mode_word_ceiling,
    resolve_mode,
    suggest_mode_switch,
)
from enhanced_cot.tools.consensus import build_consensus, synthesize_paths
from enhanced_cot.tools.cot_types import (
    DEFAULT_THRESHOLDS,
    AutoCoTConfig,
    ChainState,
    ChainTemplate,
    OperationResult,
    ThoughtRecord,
    Thresholds,
)
from enhanced_cot.tools.rollback import available_snapshots, rollback, save_snapshot
from enhanced_cot.tools.store import append_thought, compute_metrics
from enhanced_cot.tools.templates import CHAIN_TEMPLATES, find_template, template_names
from enhanced_cot.tools.validation import (
    DEFAULT_ROLLBACK_REASON,
    ThoughtInput,
    parse_thought_input,
)
from enhanced_cot.utils.errors import EnhancedCoTException, TemplateNotFoundError
from enhanced_cot.utils.session import SessionManager

DEFAULT_SESSION_ID = "default"
SUMMARY_PREVIEW_CHARS = 50


def preview(text: str, limit: int = SUMMARY_PREVIEW_CHARS) -> str:
    """Truncate to ``limit`` characters, adding an ellipsis when cut."""
    return text[:limit] + "..." if len(text) > limit else text


def _failure(exc: EnhancedCoTException) -> OperationResult:
    operation = getattr(exc, "operation", None)
    details = dict(getattr(exc, "details", {}) or {})
    field = getattr(exc, "field", None)
    if field:
        details["field"] = field
    return OperationResult.failure(str(exc), operation=operation, details=details)


class ChainOfThoughtEngine:
    """Applies submissions, summaries, template loads and resets to a ChainState."""

    def __init__(
        self,
        auto_cot: AutoCoTConfig | None = None,
        templates: tuple[ChainTemplate, ...] = CHAIN_TEMPLATES,
        thresholds: Thresholds = DEFAULT_THRESHOLDS,
    ) -> None:
        self.auto_cot = auto_cot or AutoCoTConfig()
        self.templates = templates
        self.thresholds = thresholds

    # -------------------------------------------------------------------------
    # submitThought
    # -------------------------------------------------------------------------

    def submit_thought(self, state: ChainState, raw: Any) -> OperationResult:
        """Validate and apply one submission.

        Args:
            state: Session state to mutate.
            raw: Decoded tool arguments.

        Returns:
            OperationResult with the response payload or a normalized error.

        """
        outcome = parse_thought_input(raw)
        if not outcome.ok:
            assert outcome.error is not None
            logger.debug(f"Session {state.session_id}: rejected input: {outcome.error}")
            return OperationResult.failure(
                str(outcome.error),
                operation="validate",
                details={"field": outcome.error.field},
            )

        thought_input = outcome.value
        assert thought_input is not None
        try:
            if thought_input.wants_rollback:
                return self._apply_rollback(state, thought_input)
            return self._apply_thought(state, thought_input)
        except EnhancedCoTException as e:
            logger.warning(f"Session {state.session_id}: {e}")
            return _failure(e)

    def _apply_rollback(self, state: ChainState, thought_input: ThoughtInput) -> OperationResult:
        target = thought_input.rollback_to_thought
        assert target is not None
        reason = thought_input.rollback_reason or DEFAULT_ROLLBACK_REASON
        entry = rollback(state, target, reason)
        return OperationResult.success(
            {
                "operation": "rollback",
                "rolledBackTo": target,
                "reason": reason,
                "rollbackId": entry.rollback_id,
                "restoredThought": entry.corrected_thought.text,
                "currentHistoryLength": len(state.history),
                "rollbackCount": len(state.rollback_log),
                "availableSnapshots": available_snapshots(state),
                "branches": list(state.branches),
            }
        )

    def _apply_thought(self, state: ChainState, thought_input: ThoughtInput) -> OperationResult:
        th = self.thresholds
        text = thought_input.thought

        suggestions = handle_auto_cot(
            thought_input, state.current_mode, self.auto_cot, self.templates, th
        )
        mode = thought_input.mode or (suggestions.suggested_mode if suggestions else None)
        problem_type = thought_input.problem_type or (
            suggestions.detected_problem_type if suggestions else None
        )
        current_mode = mode or state.current_mode
        current_problem_type = problem_type or state.current_problem_type

        actual_mode = resolve_mode(text, current_mode, current_problem_type, th)

        consensus = None
        if thought_input.wants_consensus:
            assert thought_input.path_count is not None
            paths = synthesize_paths(
                thought_input, thought_input.path_count, current_mode, current_problem_type, th
            )
            consensus = build_consensus(paths, th)

        word_count = count_words(text)
        ceiling = mode_word_ceiling(actual_mode, th)
        if word_count > ceiling:
            logger.warning(
                f"Thought exceeds {actual_mode.value} mode limit "
                f"({word_count}/{int(ceiling)} words)"
            )

        # Nothing below can fail; state changes start here
        branch_id = thought_input.branch_id
        if thought_input.branch_from_thought is not None and not branch_id:
            branch_id = allocate_branch_id(state)

        record = ThoughtRecord(
            thought_number=thought_input.thought_number,
            text=text,
            total_thoughts=thought_input.total_thoughts,
            mode=actual_mode,
            word_count=word_count,
            token_count=estimate_token_count(text),
            next_thought_needed=thought_input.next_thought_needed,
            problem_type=problem_type,
            is_revision=thought_input.is_revision,
            revises_thought=thought_input.revises_thought,
            branch_from_thought=thought_input.branch_from_thought,
            branch_id=branch_id,
            needs_more_thoughts=thought_input.needs_more_thoughts,
            confidence=thought_input.confidence,
        )
        record.suggested_mode_switch = suggest_mode_switch(record, state.history, th)
        record.suggested_branching = suggest_branching(
            record,
            current_problem_type,
            has_active_branches=bool(state.branches),
            next_branch_id=next_free_branch_id(state),
        )

        state.current_mode = current_mode
        state.current_problem_type = current_problem_type
        append_thought(state, record)
        attach_to_branch(state, record)
        save_snapshot(state, record.thought_number)

        metrics = compute_metrics(state, thresholds=th)
        data: dict[str, Any] = {
            "thoughtNumber": record.thought_number,
            "totalThoughts": record.total_thoughts,
            "nextThoughtNeeded": record.next_thought_needed,
            "currentMode": record.mode.value,
            "metrics": {
                "wordCount": record.word_count,
                "tokenCount": record.token_count,
                "totalWords": metrics.total_words,
                "totalTokens": metrics.total_tokens,
                "efficiency": round(metrics.efficiency, 2),
                "averageWordsPerThought": round(metrics.average_words_per_thought, 1),
            },
            "branches": list(state.branches),
            "thoughtHistoryLength": len(state.history),
        }
        if record.branch_id:
            data["branchId"] = record.branch_id
        if record.suggested_mode_switch:
            data["suggestedMode"] = record.suggested_mode_switch.value
        if record.suggested_branching:
            data["suggestedBranching"] = record.suggested_branching.to_dict()
        if suggestions:
            data["autoCoT"] = suggestions.to_dict()
        if consensus:
            data["consensus"] = consensus.to_dict()
        return OperationResult.success(data, record=record)

    # -------------------------------------------------------------------------
    # summarize / loadTemplate / reset
    # -------------------------------------------------------------------------

    def summarize(self, state: ChainState) -> OperationResult:
        """Summarize the chain: metrics, mode usage, branches and a transcript."""
        metrics = compute_metrics(state, thresholds=self.thresholds)
        return OperationResult.success(
            {
                "totalThoughts": len(state.history),
                "metrics": metrics.to_dict(),
                "modeUsage": dict(metrics.mode_distribution),
                "branchCount": len(state.branches),
                "branches": list(state.branches),
                "problemType": state.current_problem_type.value,
                "currentMode": state.current_mode.value,
                "rollbackCount": len(state.rollback_log),
                "rollbacks": [entry.to_dict() for entry in state.rollback_log],
                "thoughtChain": [
                    {
                        "number": t.thought_number,
                        "mode": t.mode.value,
                        "words": t.word_count,
                        "thought": preview(t.text),
                    }
                    for t in state.history
                ],
            }
        )

    def load_template(self, state: ChainState, name: str) -> OperationResult:
        """Adopt a catalog template's mode and problem type for the session."""
        template = find_template(name, self.templates)
        if template is None:
            return _failure(
                TemplateNotFoundError(
                    f"Template '{name}' not found",
                    {"availableTemplates": template_names(self.templates)},
                )
            )

        state.current_mode = template.mode
        state.current_problem_type = template.problem_type
        state.updated_at = datetime.now()
        logger.debug(f"Session {state.session_id}: loaded template '{template.name}'")
        return OperationResult.success(
            {
                "loaded": template.name,
                "mode": template.mode.value,
                "problemType": template.problem_type.value,
                "description": template.description,
                "exampleThoughts": list(template.example_thoughts),
            }
        )

    def reset(self, state: ChainState) -> OperationResult:
        """Replace every piece of session state with a fresh one."""
        vars(state).update(vars(ChainState(session_id=state.session_id)))
        logger.debug(f"Session {state.session_id}: reset")
        return OperationResult.success(
            {
                "reset": True,
                "message": "Chain of thought history, branches, and rollback data cleared",
            }
        )


class ChainSessionManager(SessionManager[ChainState]):
    """Registry of isolated chain sessions keyed by session id.

    Sessions are created on first use. Sessions idle longer than
    ``max_age`` are dropped whenever a session is looked up.
    """

    def __init__(
        self,
        engine: ChainOfThoughtEngine | None = None,
        max_age: timedelta = timedelta(minutes=30),
    ) -> None:
        super().__init__()
        self.engine = engine or ChainOfThoughtEngine()
        self.max_age = max_age

    def get_or_create(self, session_id: str = DEFAULT_SESSION_ID) -> ChainState:
        """Return the session's state, creating it if absent."""
        with self._lock:
            removed = self.cleanup_stale(
                self.max_age, predicate=lambda s: s.session_id != session_id
            )
            if removed:
                logger.debug(f"Dropped {len(removed)} stale chain session(s)")
            if session_id not in self._sessions:
                self._register_session(session_id, ChainState(session_id=session_id))
            return self._sessions[session_id]

    def history_length(self, session_id: str = DEFAULT_SESSION_ID) -> int:
        return len(self.get_or_create(session_id).history)

    def submit_thought(self, raw: Any, session_id: str = DEFAULT_SESSION_ID) -> OperationResult:
        self.get_or_create(session_id)
        with self.session(session_id) as state:
            return self.engine.submit_thought(state, raw)

    def summarize(self, session_id: str = DEFAULT_SESSION_ID) -> OperationResult:
        self.get_or_create(session_id)
        with self.session(session_id) as state:
            return self.engine.summarize(state)

    def load_template(self, name: str, session_id: str = DEFAULT_SESSION_ID) -> OperationResult:
        self.get_or_create(session_id)
        with self.session(session_id) as state:
            return self.engine.load_template(state, name)

    def reset(self, session_id: str = DEFAULT_SESSION_ID) -> OperationResult:
        self.get_or_create(session_id)
        with self.session(session_id) as state:
            return self.engine.reset(state)


_chain_manager: ChainSessionManager | None = None


def get_chain_manager() -> ChainSessionManager:
    """Get the global chain session manager, built from configuration."""
    global _chain_manager
    if _chain_manager is None:
        from enhanced_cot.config import get_config

        cfg = get_config()
        _chain_manager = ChainSessionManager(
            engine=ChainOfThoughtEngine(auto_cot=cfg.auto_cot.to_auto_cot_config()),
            max_age=timedelta(minutes=cfg.session.max_age_minutes),
        )
    return _chain_manager


def reset_chain_manager() -> None:
    """Drop the global manager (for testing)."""
    global _chain_manager
    _chain_manager = None
