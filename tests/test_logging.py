"""Tests for structured logging and thought rendering."""

from __future__ import annotations

from typing import Any
from unittest.mock import patch

import pytest
from loguru import logger

from enhanced_cot.tools.cot_types import ReasoningMode, ThoughtRecord
from enhanced_cot.utils.formatting import format_thought, thought_header
from enhanced_cot.utils.logging import (
    LogFormat,
    LogLevel,
    StructuredLogger,
    get_logger,
    get_session_id,
    get_tool_name,
)


@pytest.fixture
def captured() -> Any:
    """Configure a logger and capture its records."""
    log = StructuredLogger("test", level=LogLevel.DEBUG)
    records: list[dict[str, Any]] = []
    handler_id = logger.add(lambda msg: records.append(msg.record), level="DEBUG")
    yield log, records
    logger.remove(handler_id)


class TestStructuredLogger:
    """Tests for StructuredLogger."""

    def test_string_settings_parsed(self) -> None:
        """Level and format accept plain strings."""
        log = StructuredLogger("test", level="WARNING", log_format="json")
        assert log.level == LogLevel.WARNING
        assert log.log_format == LogFormat.JSON

    def test_kwargs_bound_as_extra(self, captured: Any) -> None:
        """Keyword arguments land in the record's extra."""
        log, records = captured
        log.info("Thought accepted", thought_number=3)
        assert records[-1]["message"] == "Thought accepted"
        assert records[-1]["extra"]["thought_number"] == 3
        assert records[-1]["extra"]["logger_name"] == "test"

    def test_context_injected(self, captured: Any) -> None:
        """Session and tool context tag every record inside the block."""
        log, records = captured
        with log.context(session_id="s-1", tool_name="chainofthought"):
            assert get_session_id() == "s-1"
            assert get_tool_name() == "chainofthought"
            logger.info("inside")
        logger.info("outside")
        assert records[-2]["extra"]["session_id"] == "s-1"
        assert records[-2]["extra"]["tool"] == "chainofthought"
        assert records[-1]["extra"]["session_id"] == "-"
        assert get_session_id() is None

    def test_get_logger_reads_env(self) -> None:
        """get_logger honours LOG_LEVEL and LOG_FORMAT."""
        with patch.dict("os.environ", {"LOG_LEVEL": "error", "LOG_FORMAT": "JSON"}):
            log = get_logger("env-test")
        assert log.level == LogLevel.ERROR
        assert log.log_format == LogFormat.JSON


def _record(**overrides: Any) -> ThoughtRecord:
    fields: dict[str, Any] = {
        "thought_number": 2,
        "text": "x = 8",
        "total_thoughts": 3,
        "mode": ReasoningMode.DRAFT,
        "word_count": 3,
        "token_count": 2,
        "next_thought_needed": True,
    }
    fields.update(overrides)
    return ThoughtRecord(**fields)


class TestFormatThought:
    """Tests for the console renderer."""

    def test_mode_header(self) -> None:
        """Plain thoughts show their mode and size."""
        assert thought_header(_record()) == "💭 DRAFT 2/3 [3 words, ~2 tokens]"

    def test_revision_header(self) -> None:
        """Revisions name the revised thought."""
        header = thought_header(_record(is_revision=True, revises_thought=1))
        assert header.startswith("🔄 Revision 2/3 (revising thought 1)")

    def test_branch_header(self) -> None:
        """Branches name their fork point and id."""
        header = thought_header(_record(branch_from_thought=1, branch_id="A"))
        assert "(from thought 1, ID: A)" in header

    def test_box(self) -> None:
        """The box has aligned borders and the thought text."""
        lines = format_thought(_record()).splitlines()
        assert lines[0].startswith("┌") and lines[-1].startswith("└")
        assert len(lines[0]) == len(lines[1]) == len(lines[3]) == len(lines[-1])
        assert "x = 8" in lines[3]

    def test_mode_switch_hint(self) -> None:
        """A suggested mode switch adds a hint line."""
        text = format_thought(_record(suggested_mode_switch=ReasoningMode.CONCISE))
        assert "Consider switching to concise mode" in text
