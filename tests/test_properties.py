"""Property-based tests for chain invariants using Hypothesis."""

from __future__ import annotations

import math

from hypothesis import HealthCheck, given, settings
from hypothesis import strategies as st

from enhanced_cot.tools.branching import allocate_branch_id
from enhanced_cot.tools.chain import ChainOfThoughtEngine
from enhanced_cot.tools.classifier import count_words, estimate_token_count, resolve_mode
from enhanced_cot.tools.cot_types import ChainState, ProblemType, ReasoningMode
from tests.conftest import make_input

text_strategy = st.text(
    alphabet=st.characters(whitelist_categories=("L", "N", "P", "S"), whitelist_characters=" "),
    max_size=200,
)
modes = st.sampled_from(list(ReasoningMode))
problem_types = st.one_of(st.none(), st.sampled_from(list(ProblemType)))


class TestMeasurementProperties:
    """Properties of word and token counts."""

    @given(text=st.text(max_size=300))
    @settings(max_examples=50, suppress_health_check=[HealthCheck.function_scoped_fixture])
    def test_word_count_matches_split(self, text: str) -> None:
        """Word count is the number of non-empty whitespace tokens."""
        assert count_words(text) == len([t for t in text.split() if t])

    @given(text=st.text(max_size=300))
    @settings(max_examples=50, suppress_health_check=[HealthCheck.function_scoped_fixture])
    def test_token_estimate(self, text: str) -> None:
        """Token estimate is ceil(length / 4)."""
        assert estimate_token_count(text) == math.ceil(len(text) / 4)


class TestResolveModeProperties:
    """Properties of mode resolution."""

    @given(text=text_strategy, mode=modes, problem_type=problem_types)
    @settings(max_examples=100, suppress_health_check=[HealthCheck.function_scoped_fixture])
    def test_never_auto_and_deterministic(
        self, text: str, mode: ReasoningMode, problem_type: ProblemType | None
    ) -> None:
        """Resolution is concrete and repeatable."""
        first = resolve_mode(text, mode, problem_type)
        assert first != ReasoningMode.AUTO
        assert resolve_mode(text, mode, problem_type) == first

    @given(text=text_strategy)
    @settings(max_examples=50, suppress_health_check=[HealthCheck.function_scoped_fixture])
    def test_creative_always_standard(self, text: str) -> None:
        """Creative problems in auto mode always resolve to standard."""
        mode = resolve_mode(text, ReasoningMode.AUTO, ProblemType.CREATIVE)
        assert mode == ReasoningMode.STANDARD


class TestSubmissionProperties:
    """Properties of accepted submissions."""

    @given(
        text=text_strategy,
        number=st.integers(min_value=1, max_value=50),
        total=st.integers(min_value=1, max_value=50),
    )
    @settings(max_examples=50, suppress_health_check=[HealthCheck.function_scoped_fixture])
    def test_total_at_least_number(self, text: str, number: int, total: int) -> None:
        """totalThoughts after insertion is at least thoughtNumber."""
        state = ChainState()
        result = ChainOfThoughtEngine().submit_thought(state, make_input(text, number, total))
        assert result.ok
        assert result.data is not None
        assert result.data["totalThoughts"] >= number
        assert state.history[-1].total_thoughts >= number

    @given(text=text_strategy, path_count=st.integers(min_value=1, max_value=10))
    @settings(max_examples=50, suppress_health_check=[HealthCheck.function_scoped_fixture])
    def test_consensus_only_when_meaningful(self, text: str, path_count: int) -> None:
        """Consensus appears exactly when pathCount > 1 and text is not blank."""
        result = ChainOfThoughtEngine().submit_thought(
            ChainState(), make_input(text, pathCount=path_count)
        )
        assert result.data is not None
        expected = path_count > 1 and bool(text.strip())
        assert ("consensus" in result.data) == expected


class TestBranchIdProperties:
    """Properties of branch id allocation."""

    @given(count=st.integers(min_value=1, max_value=60))
    @settings(max_examples=20, suppress_health_check=[HealthCheck.function_scoped_fixture])
    def test_ids_unique(self, count: int) -> None:
        """Allocated ids never repeat."""
        state = ChainState()
        ids = [allocate_branch_id(state) for _ in range(count)]
        assert len(set(ids)) == count
        assert ids[0] == "A"
