"""Static catalog of example reasoning templates."""

from __future__ import annotations

from enhanced_cot.tools.cot_types import ChainTemplate, ProblemType, ReasoningMode

CHAIN_TEMPLATES: tuple[ChainTemplate, ...] = (
    ChainTemplate(
        name="GSM8K Math",
        problem_type=ProblemType.ARITHMETIC,
        mode=ReasoningMode.DRAFT,
        description="Math word problem solving using minimal notation",
        example_thoughts=("20 - x = 12", "x = 8", "#### 8"),
    ),
    ChainTemplate(
        name="Coin Flip",
        problem_type=ProblemType.LOGICAL,
        mode=ReasoningMode.DRAFT,
        description="Tracking state changes with minimal notation",
        example_thoughts=("H→T (flip)", "T→H (flip)", "H (no flip)", "#### heads"),
    ),
    ChainTemplate(
        name="Creative Writing",
        problem_type=ProblemType.CREATIVE,
        mode=ReasoningMode.STANDARD,
        description="Detailed creative process with full reasoning",
        example_thoughts=(
            "Setting: A mysterious library that appears only at midnight",
            "Protagonist: Young librarian discovers ancient texts that predict the future",
            "Conflict: Each prediction read alters reality, creating paradoxes",
            "Theme: The weight of knowledge and free will vs determinism",
        ),
    ),
    ChainTemplate(
        name="Tree Exploration",
        problem_type=ProblemType.ANALYSIS,
        mode=ReasoningMode.CONCISE,
        description="Systematic tree-like exploration of options with branching",
        example_thoughts=(
            "Root: Problem space analysis",
            "Branch A: Option 1 feasibility",
            "Branch B: Option 2 constraints",
            "Branch A1: Implementation path",
            "Branch A2: Alternative approach",
            "Merge: Best solution synthesis",
        ),
    ),
    ChainTemplate(
        name="Decision Tree",
        problem_type=ProblemType.PLANNING,
        mode=ReasoningMode.CONCISE,
        description="Structured decision making with clear branching points",
        example_thoughts=(
            "Root: Core decision criteria",
            "If condition A → Branch left",
            "If condition B → Branch right",
            "Left branch: Pros/cons analysis",
            "Right branch: Risk assessment",
            "Final: Optimal path selection",
        ),
    ),
    ChainTemplate(
        name="Debugging Tree",
        problem_type=ProblemType.LOGICAL,
        mode=ReasoningMode.CONCISE,
        description="Systematic debugging with hypothesis branching",
        example_thoughts=(
            "Error: Initial problem statement",
            "Hypothesis A: Network issue",
            "Hypothesis B: Logic error",
            "Test A: Network diagnostics",
            "Test B: Code review",
            "Branch A failed → Try B",
            "Solution: Root cause found",
        ),
    ),
    ChainTemplate(
        name="Research Tree",
        problem_type=ProblemType.ANALYSIS,
        mode=ReasoningMode.STANDARD,
        description="Multi-perspective research with branching viewpoints",
        example_thoughts=(
            "Topic: Central research question",
            "Branch 1: Academic perspective with detailed literature review",
            "Branch 2: Industry perspective with market analysis",
            "Branch 3: User perspective with behavioral insights",
            "Cross-analysis: Connecting patterns across branches",
            "Synthesis: Integrated understanding and conclusions",
        ),
    ),
    ChainTemplate(
        name="Feature Design Tree",
        problem_type=ProblemType.CREATIVE,
        mode=ReasoningMode.STANDARD,
        description="Feature development with architectural branching",
        example_thoughts=(
            "Feature goal: Core user need identification",
            "UI Branch: Interface design considerations and user flow",
            "Backend Branch: Data models and API requirements",
            "Performance Branch: Optimization and scaling concerns",
            "Integration points: How branches connect and dependencies",
            "MVP definition: Minimal viable implementation path",
        ),
    ),
    ChainTemplate(
        name="Learning Tree",
        problem_type=ProblemType.GENERAL,
        mode=ReasoningMode.CONCISE,
        description="Knowledge acquisition with concept branching",
        example_thoughts=(
            "Core concept: Foundation",
            "Branch 1: Practical applications",
            "Branch 2: Theoretical depth",
            "Branch 3: Related concepts",
            "Connections: Links between branches",
            "Mastery: Integrated understanding",
        ),
    ),
)


def find_template(
    name: str, templates: tuple[ChainTemplate, ...] = CHAIN_TEMPLATES
) -> ChainTemplate | None:
    """Look up a template by exact name."""
    return next((t for t in templates if t.name == name), None)


def template_names(templates: tuple[ChainTemplate, ...] = CHAIN_TEMPLATES) -> list[str]:
    return [t.name for t in templates]
