"""Unit tests for Auto-CoT detection and template suggestion."""

from __future__ import annotations

from enhanced_cot.tools.auto_cot import (
    detect_trigger,
    generate_diverse_examples,
    handle_auto_cot,
    score_template,
    suggest_template,
)
from enhanced_cot.tools.cot_types import AutoCoTConfig, ProblemType, ReasoningMode
from enhanced_cot.tools.templates import find_template
from enhanced_cot.tools.validation import ThoughtInput
from tests.conftest import make_input


def _input(text: str, **extra: object) -> ThoughtInput:
    return ThoughtInput.model_validate(make_input(text, **extra))


class TestDetectTrigger:
    """Tests for trigger phrase detection."""

    def test_configured_trigger(self) -> None:
        """The configured phrase triggers, case-insensitively."""
        assert detect_trigger("let's THINK step by step about it", AutoCoTConfig())

    def test_paraphrase(self) -> None:
        """Known paraphrases trigger too."""
        assert detect_trigger("Let me break this down", AutoCoTConfig())

    def test_plain_text(self) -> None:
        """Ordinary text does not trigger."""
        assert not detect_trigger("The sum is 12", AutoCoTConfig())

    def test_empty_trigger_disables(self) -> None:
        """An empty trigger turns detection off."""
        assert not detect_trigger("Let's think step by step", AutoCoTConfig(trigger=""))


class TestTemplates:
    """Tests for template scoring and examples."""

    def test_score_counts_long_words(self) -> None:
        """Description words count 1, example words 0.5."""
        gsm8k = find_template("GSM8K Math")
        assert gsm8k is not None
        assert score_template("math word problem", gsm8k) == 3.0

    def test_suggest_above_cutoff(self) -> None:
        """A strong keyword match suggests the template."""
        template = suggest_template(
            "Math word problem solving", ProblemType.ARITHMETIC, AutoCoTConfig()
        )
        assert template is not None
        assert template.name == "GSM8K Math"

    def test_suggest_below_cutoff(self) -> None:
        """Weak matches suggest nothing."""
        assert suggest_template("12 + 4", ProblemType.ARITHMETIC, AutoCoTConfig()) is None

    def test_suggestion_disabled(self) -> None:
        """template_suggestion=False suppresses suggestions."""
        config = AutoCoTConfig(template_suggestion=False)
        assert suggest_template("Math word problem solving", ProblemType.ARITHMETIC, config) is None

    def test_diverse_examples(self) -> None:
        """Diversity sampling adds problem-type prompts."""
        gsm8k = find_template("GSM8K Math")
        assert gsm8k is not None
        assert generate_diverse_examples(gsm8k, AutoCoTConfig()) == [
            "20 - x = 12",
            "Calculate systematically",
            "Solve step-by-step",
        ]
        assert generate_diverse_examples(gsm8k, AutoCoTConfig(), count=2) == [
            "20 - x = 12",
            "Calculate systematically",
        ]

    def test_diversity_off(self) -> None:
        """Without diversity sampling only the first example is returned."""
        gsm8k = find_template("GSM8K Math")
        assert gsm8k is not None
        examples = generate_diverse_examples(gsm8k, AutoCoTConfig(diversity_sampling=False))
        assert examples == ["20 - x = 12"]


class TestHandleAutoCoT:
    """Tests for the combined Auto-CoT step."""

    def test_inactive_without_trigger_or_flag(self) -> None:
        """No trigger and no autoMode means no suggestions."""
        assert handle_auto_cot(_input("2 + 2 = 4"), ReasoningMode.AUTO, AutoCoTConfig()) is None

    def test_auto_mode_flag(self) -> None:
        """autoMode requests suggestions even without a trigger."""
        result = handle_auto_cot(
            _input("Calculate 15 + 27", autoMode=True), ReasoningMode.AUTO, AutoCoTConfig()
        )
        assert result is not None
        assert result.auto_trigger_detected is False
        assert result.suggested_mode == ReasoningMode.DRAFT
        assert result.detected_problem_type == ProblemType.ARITHMETIC

    def test_explicit_problem_type_kept(self) -> None:
        """A supplied problem type is reported instead of a detected one."""
        result = handle_auto_cot(
            _input("Let's think step by step", problemType="planning"),
            ReasoningMode.AUTO,
            AutoCoTConfig(),
        )
        assert result is not None
        assert result.auto_trigger_detected is True
        assert result.detected_problem_type == ProblemType.PLANNING

    def test_context_unaware_keeps_mode(self) -> None:
        """context_aware=False suggests the current mode."""
        result = handle_auto_cot(
            _input("Calculate 15 + 27", autoMode=True),
            ReasoningMode.STANDARD,
            AutoCoTConfig(context_aware=False),
        )
        assert result is not None
        assert result.suggested_mode == ReasoningMode.STANDARD

    def test_to_dict_with_template(self) -> None:
        """Suggested templates carry name, description and examples."""
        result = handle_auto_cot(
            _input("Math word problem solving", autoMode=True),
            ReasoningMode.AUTO,
            AutoCoTConfig(),
        )
        assert result is not None
        data = result.to_dict()
        assert data["suggestedTemplate"]["name"] == "GSM8K Math"
        assert len(data["suggestedTemplate"]["exampleThoughts"]) == 3
