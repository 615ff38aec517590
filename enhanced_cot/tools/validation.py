"""Typed parse step for thought submissions.

Raw tool arguments are parsed into a frozen ``ThoughtInput`` before any
state is touched. Parsing never raises; it returns a ``ParseOutcome``
holding either the value or the first field error.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

from enhanced_cot.tools.cot_types import DEFAULT_THRESHOLDS, ProblemType, ReasoningMode
from enhanced_cot.utils.errors import InputValidationError

DEFAULT_ROLLBACK_REASON = "Manual rollback"

StrictPositiveInt = Annotated[int, Field(strict=True, ge=1)]
StrictFlag = Annotated[bool, Field(strict=True)]

# Human-readable constraint per wire field, used in error messages
FIELD_CONSTRAINTS: dict[str, str] = {
    "thought": "must be a string",
    "thoughtNumber": "must be a number >= 1",
    "totalThoughts": "must be a number >= 1",
    "nextThoughtNeeded": "must be a boolean",
    "mode": "must be one of " + ", ".join(m.value for m in ReasoningMode),
    "problemType": "must be one of " + ", ".join(p.value for p in ProblemType),
    "isRevision": "must be a boolean",
    "revisesThought": "must be a number >= 1",
    "branchFromThought": "must be a number >= 1",
    "branchId": "must be a non-empty string",
    "needsMoreThoughts": "must be a boolean",
    "confidence": "must be a number between 0 and 1",
    "pathCount": f"must be an integer between 1 and {DEFAULT_THRESHOLDS.max_path_count}",
    "rollbackToThought": "must be a number >= 1",
    "rollbackReason": "must be a string",
    "autoMode": "must be a boolean",
}


class ThoughtInput(BaseModel):
    """A validated thought submission.

    Accepts camelCase wire names (``thoughtNumber``) and snake_case field
    names alike.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        frozen=True,
    )

    thought: Annotated[str, Field(strict=True)]
    thought_number: StrictPositiveInt
    total_thoughts: StrictPositiveInt
    next_thought_needed: StrictFlag
    mode: ReasoningMode | None = None
    problem_type: ProblemType | None = None
    is_revision: StrictFlag | None = None
    revises_thought: StrictPositiveInt | None = None
    branch_from_thought: StrictPositiveInt | None = None
    branch_id: Annotated[str, Field(strict=True, min_length=1)] | None = None
    needs_more_thoughts: StrictFlag | None = None
    confidence: Annotated[float, Field(strict=True, ge=0.0, le=1.0)] | None = None
    path_count: (
        Annotated[int, Field(strict=True, ge=1, le=DEFAULT_THRESHOLDS.max_path_count)] | None
    ) = None
    rollback_to_thought: StrictPositiveInt | None = None
    rollback_reason: Annotated[str, Field(strict=True)] | None = None
    auto_mode: StrictFlag | None = None

    @property
    def wants_rollback(self) -> bool:
        return self.rollback_to_thought is not None

    @property
    def wants_consensus(self) -> bool:
        """Consensus needs more than one path and non-blank text."""
        return (self.path_count or 0) > 1 and bool(self.thought.strip())


@dataclass(frozen=True)
class ParseOutcome:
    """Result of parsing raw input: exactly one of value/error is set."""

    value: ThoughtInput | None = None
    error: InputValidationError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def _first_error(exc: ValidationError) -> InputValidationError:
    err = exc.errors()[0]
    loc = err.get("loc") or ("input",)
    field = str(loc[0])
    if field in ThoughtInput.model_fields:
        field = ThoughtInput.model_fields[field].alias or field
    constraint = FIELD_CONSTRAINTS.get(field, err.get("msg", "invalid value"))
    if err.get("type") == "missing":
        constraint = f"required field, {constraint}"
    return InputValidationError(field, constraint)


def parse_thought_input(raw: Any) -> ParseOutcome:
    """Parse an untrusted mapping into a ``ThoughtInput``.

    Args:
        raw: Decoded tool arguments.

    Returns:
        ParseOutcome with either the parsed input or the first field error.

    """
    if not isinstance(raw, Mapping):
        return ParseOutcome(error=InputValidationError("input", "expected an object"))
    # Explicit nulls are treated as omitted optional fields
    cleaned = {k: v for k, v in raw.items() if v is not None}
    try:
        return ParseOutcome(value=ThoughtInput.model_validate(cleaned))
    except ValidationError as e:
        return ParseOutcome(error=_first_error(e))
