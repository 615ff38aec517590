"""Console rendering of accepted thoughts.

Pure functions of a ThoughtRecord; callers decide whether and where to emit
the result.
"""

from __future__ import annotations

from enhanced_cot.tools.cot_types import ThoughtRecord


def thought_header(record: ThoughtRecord) -> str:
    """One-line header: kind, position, context and size."""
    if record.is_revision:
        prefix = "🔄 Revision"
        context = f" (revising thought {record.revises_thought})"
    elif record.branch_from_thought:
        prefix = "🌿 Branch"
        context = f" (from thought {record.branch_from_thought}, ID: {record.branch_id})"
    else:
        prefix = f"💭 {record.mode.value.upper()}"
        context = ""

    metrics = f"[{record.word_count} words, ~{record.token_count} tokens]"
    return f"{prefix} {record.thought_number}/{record.total_thoughts}{context} {metrics}"


def format_thought(record: ThoughtRecord) -> str:
    """Render a thought as a bordered box, with any mode-switch hint underneath."""
    header = thought_header(record)
    width = max(len(header), len(record.text)) + 4
    border = "─" * width

    lines = [
        f"┌{border}┐",
        f"│ {header.ljust(width - 2)} │",
        f"├{border}┤",
        f"│ {record.text.ljust(width - 2)} │",
    ]
    if record.suggested_mode_switch:
        lines.append(f"│ 💡 Consider switching to {record.suggested_mode_switch.value} mode")
    lines.append(f"└{border}┘")
    return "\n".join(lines)
