"""Automatic chain-of-thought (Auto-CoT) trigger detection and suggestions.

Suggestions are advisory. The chain engine applies a suggested mode or
problem type only when the caller did not supply one explicitly.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from enhanced_cot.tools.classifier import analyze_for_auto, detect_problem_type
from enhanced_cot.tools.cot_types import (
    DEFAULT_THRESHOLDS,
    AutoCoTConfig,
    ChainTemplate,
    ProblemType,
    ReasoningMode,
    Thresholds,
)
from enhanced_cot.tools.templates import CHAIN_TEMPLATES
from enhanced_cot.tools.validation import ThoughtInput

TRIGGER_PATTERNS: tuple[str, ...] = (
    "let me think",
    "let's think",
    "thinking step by step",
    "step by step",
    "let me work through this",
    "let me break this down",
    "let's work through",
    "let's break this down",
)

# Problem-type specific prompts appended to a template's first example
DIVERSE_PROMPTS: dict[ProblemType, tuple[str, str]] = {
    ProblemType.ARITHMETIC: ("Calculate systematically", "Solve step-by-step"),
    ProblemType.LOGICAL: ("Apply logical reasoning", "Consider premises and conclusions"),
    ProblemType.CREATIVE: ("Explore creative possibilities", "Generate innovative solutions"),
    ProblemType.PLANNING: (
        "Break down into actionable steps",
        "Consider resources and constraints",
    ),
    ProblemType.ANALYSIS: ("Examine from multiple angles", "Compare different perspectives"),
    ProblemType.GENERAL: ("Think systematically", "Consider all aspects"),
}

_MIN_KEYWORD_LENGTH = 4


@dataclass
class AutoCoTSuggestions:
    """Advisory output of Auto-CoT for one submission."""

    auto_trigger_detected: bool
    suggested_mode: ReasoningMode
    detected_problem_type: ProblemType
    suggested_template: ChainTemplate | None = None
    template_examples: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        result: dict[str, Any] = {
            "autoTriggerDetected": self.auto_trigger_detected,
            "suggestedMode": self.suggested_mode.value,
            "detectedProblemType": self.detected_problem_type.value,
        }
        if self.suggested_template is not None:
            result["suggestedTemplate"] = {
                "name": self.suggested_template.name,
                "description": self.suggested_template.description,
                "exampleThoughts": list(self.template_examples),
            }
        return result


def detect_trigger(text: str, config: AutoCoTConfig) -> bool:
    """Check for the configured trigger phrase or a known paraphrase.

    An empty configured trigger disables detection entirely.
    """
    if not config.trigger:
        return False
    lowered = text.lower()
    if config.trigger.lower() in lowered:
        return True
    return any(pattern in lowered for pattern in TRIGGER_PATTERNS)


def _keyword_score(lowered: str, phrase: str, weight: float) -> float:
    return sum(
        weight
        for word in phrase.lower().split(" ")
        if len(word) >= _MIN_KEYWORD_LENGTH and word in lowered
    )


def score_template(text: str, template: ChainTemplate) -> float:
    """Keyword overlap: 1 per description word, 0.5 per example word found in ``text``."""
    lowered = text.lower()
    score = _keyword_score(lowered, template.description, 1.0)
    for example in template.example_thoughts:
        score += _keyword_score(lowered, example, 0.5)
    return score


def suggest_template(
    text: str,
    problem_type: ProblemType,
    config: AutoCoTConfig,
    templates: tuple[ChainTemplate, ...] = CHAIN_TEMPLATES,
    thresholds: Thresholds = DEFAULT_THRESHOLDS,
) -> ChainTemplate | None:
    """Return the best-scoring template of ``problem_type`` above the match cutoff."""
    if not config.template_suggestion:
        return None
    candidates = [t for t in templates if t.problem_type == problem_type]
    if not candidates:
        return None
    best = max(candidates, key=lambda t: score_template(text, t))
    if score_template(text, best) > thresholds.template_match_cutoff:
        return best
    return None


def generate_diverse_examples(
    template: ChainTemplate, config: AutoCoTConfig, count: int = 3
) -> list[str]:
    """Example prompts for a suggested template, varied by problem type."""
    if not config.diversity_sampling or count <= 1:
        return list(template.example_thoughts[:1])
    base = template.example_thoughts[0] if template.example_thoughts else "Think step by step"
    examples = [base, *DIVERSE_PROMPTS[template.problem_type]]
    return examples[: min(count, 3)]


def handle_auto_cot(
    thought_input: ThoughtInput,
    current_mode: ReasoningMode,
    config: AutoCoTConfig,
    templates: tuple[ChainTemplate, ...] = CHAIN_TEMPLATES,
    thresholds: Thresholds = DEFAULT_THRESHOLDS,
) -> AutoCoTSuggestions | None:
    """Produce suggestions when triggered by text or requested via ``autoMode``.

    Returns:
        Suggestions, or None when Auto-CoT is not active for this submission.

    """
    text = thought_input.thought
    triggered = detect_trigger(text, config)
    if not thought_input.auto_mode and not triggered:
        return None

    suggested_mode = analyze_for_auto(text, thresholds) if config.context_aware else current_mode
    problem_type = thought_input.problem_type or detect_problem_type(text)
    template = suggest_template(text, problem_type, config, templates, thresholds)

    return AutoCoTSuggestions(
        auto_trigger_detected=triggered,
        suggested_mode=suggested_mode,
        detected_problem_type=problem_type,
        suggested_template=template,
        template_examples=generate_diverse_examples(template, config) if template else [],
    )
