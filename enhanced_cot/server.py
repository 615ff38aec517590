"""Enhanced CoT MCP Server.

FastMCP 2.0 implementation of a session-scoped chain-of-thought tracker.
The calling LLM does all reasoning; these tools classify, measure, branch,
vote over and roll back the thoughts it submits.

Tools:
1. chainofthought - Submit a thought (or a rollback request)
2. chainsummary - Summarize the chain
3. loadtemplate - Adopt a template's mode and problem type
4. resetchain - Clear the session

Run with: enhanced-cot
Or: python -m enhanced_cot.server
"""

# Note: We intentionally do NOT use `from __future__ import annotations` here
# because it causes issues with Pydantic/FastMCP type resolution at decorator time.

from typing import Any, Literal

import orjson
from dotenv import load_dotenv
from fastmcp import Context, FastMCP
from loguru import logger

from enhanced_cot.config import get_config
from enhanced_cot.tools.chain import DEFAULT_SESSION_ID, get_chain_manager
from enhanced_cot.tools.cot_types import OperationResult
from enhanced_cot.utils.errors import ToolExecutionError
from enhanced_cot.utils.formatting import format_thought
from enhanced_cot.utils.logging import get_default_logger

# Load environment variables from .env file (for local development)
load_dotenv()


def _json(data: dict[str, Any] | None, *, indent: bool = True) -> str:
    """Serialize data to JSON string with proper typing.

    Type-safe wrapper around orjson.dumps that returns str.
    """
    if data is None:
        data = {}
    opts = orjson.OPT_INDENT_2 if indent else 0
    result: bytes = orjson.dumps(data, option=opts, default=str)
    return result.decode("utf-8")


def _result_json(result: OperationResult) -> str:
    return _json(result.to_dict(), indent=result.ok)


mcp = FastMCP(
    name=get_config().server.name,
    instructions="""Enhanced CoT MCP Server - Adaptive chain-of-thought tracker.

ARCHITECTURE: You (the LLM) do ALL reasoning. These tools TRACK and ORGANIZE it.

=== MODES ===
  draft     <=5 words per thought, for arithmetic and short logic
  concise   <=15 words per thought
  standard  full chain-of-thought
  auto      resolved per thought from its content (default)

=== WORKFLOW ===
1. chainofthought(thought, thought_number, total_thoughts, next_thought_needed)
   - Optional: mode, problem_type, is_revision/revises_thought,
     branch_from_thought/branch_id, confidence
   - path_count > 1 synthesizes variant paths and reports a consensus
   - rollback_to_thought truncates history back to that thought
   - auto_mode=true (or "Let's think step by step") returns Auto-CoT suggestions
2. chainsummary() - metrics, mode usage, branches, rollbacks
3. loadtemplate(name) - e.g. "GSM8K Math", "Decision Tree"
4. resetchain() - clear history, branches, and rollback data

Every tool accepts an optional session_id to keep chains isolated.
""",
)


# =============================================================================
# Input Validation Helpers (CWE-400 Prevention)
# =============================================================================


def _validate_input_sizes(thought: str | None = None) -> dict[str, Any] | None:
    """Validate input sizes to prevent resource exhaustion.

    Returns:
        None if valid, or dict with error details if invalid.

    """
    max_size = get_config().input_limits.max_thought_size
    if thought and len(thought) > max_size:
        return {
            "status": "failed",
            "error": "input_too_large",
            "field": "thought",
            "max_size": max_size,
            "actual_size": len(thought),
            "message": f"Thought exceeds maximum size ({max_size:,} chars)",
        }
    return None


def _check_history_limit(session_id: str) -> dict[str, Any] | None:
    limit = get_config().input_limits.max_thoughts_per_session
    length = get_chain_manager().history_length(session_id)
    if length >= limit:
        return {
            "status": "failed",
            "error": "history_limit",
            "max_thoughts": limit,
            "current_length": length,
            "message": f"Session has reached {limit:,} thoughts; roll back or reset the chain",
        }
    return None


# =============================================================================
# TOOL 1: CHAINOFTHOUGHT
# =============================================================================


@mcp.tool
async def chainofthought(
    thought: str,
    thought_number: int,
    total_thoughts: int,
    next_thought_needed: bool,
    mode: Literal["draft", "concise", "standard", "auto"] | None = None,
    problem_type: (
        Literal["arithmetic", "logical", "creative", "planning", "analysis", "general"] | None
    ) = None,
    is_revision: bool | None = None,
    revises_thought: int | None = None,
    branch_from_thought: int | None = None,
    branch_id: str | None = None,
    needs_more_thoughts: bool | None = None,
    confidence: float | None = None,
    path_count: int | None = None,
    rollback_to_thought: int | None = None,
    rollback_reason: str | None = None,
    auto_mode: bool | None = None,
    session_id: str = DEFAULT_SESSION_ID,
    ctx: Context | None = None,
) -> str:
    """Record one reasoning step and get mode, metric and branching feedback.

    Args:
        thought: Your current thinking step (may be empty with path_count)
        thought_number: Position of this thought (>= 1)
        total_thoughts: Your current estimate of the chain length (>= 1)
        next_thought_needed: Whether another thought will follow
        mode: Verbosity policy; auto resolves per thought
        problem_type: Problem category; steers auto-mode resolution
        is_revision: This thought revises an earlier one
        revises_thought: Which thought is being revised
        branch_from_thought: Fork point; a branch id is allocated if branch_id is omitted
        branch_id: Explicit branch identifier
        needs_more_thoughts: The estimate was too low
        confidence: Your confidence in this step (0.0-1.0)
        path_count: 2-10 synthesizes variant paths and returns a consensus
        rollback_to_thought: Truncate history back to this thought instead of adding one
        rollback_reason: Why the rollback happened (default "Manual rollback")
        auto_mode: Request Auto-CoT suggestions
        session_id: Chain session (default "default")

    Returns:
        JSON with status and data (currentMode, metrics, branches, optional
        suggestedMode, suggestedBranching, autoCoT and consensus), or a
        rollback report, or an error.

    """
    with get_default_logger().context(session_id=session_id, tool_name="chainofthought"):
        try:
            validation_error = _validate_input_sizes(thought=thought)
            if validation_error:
                return _json(validation_error, indent=False)

            if rollback_to_thought is None:
                limit_error = _check_history_limit(session_id)
                if limit_error:
                    return _json(limit_error, indent=False)

            raw = {
                "thought": thought,
                "thought_number": thought_number,
                "total_thoughts": total_thoughts,
                "next_thought_needed": next_thought_needed,
                "mode": mode,
                "problem_type": problem_type,
                "is_revision": is_revision,
                "revises_thought": revises_thought,
                "branch_from_thought": branch_from_thought,
                "branch_id": branch_id,
                "needs_more_thoughts": needs_more_thoughts,
                "confidence": confidence,
                "path_count": path_count,
                "rollback_to_thought": rollback_to_thought,
                "rollback_reason": rollback_reason,
                "auto_mode": auto_mode,
            }
            result = get_chain_manager().submit_thought(raw, session_id=session_id)

            if result.record is not None and not get_config().display.disable_thought_logging:
                logger.info("\n" + format_thought(result.record))

            if ctx and result.ok and result.data:
                if "rolledBackTo" in result.data:
                    await ctx.info(f"Rolled back to thought {result.data['rolledBackTo']}")
                elif suggested := result.data.get("suggestedMode"):
                    await ctx.info(f"Consider switching to {suggested} mode")

            return _result_json(result)

        except Exception as e:
            error = ToolExecutionError(
                "chainofthought", str(e), {"thought_number": thought_number}
            )
            logger.error(f"Chain of thought failed: {e}")
            return _json(error.to_dict(), indent=False)


# =============================================================================
# TOOL 2: CHAINSUMMARY
# =============================================================================


@mcp.tool
async def chainsummary(session_id: str = DEFAULT_SESSION_ID) -> str:
    """Summarize the chain: metrics, mode usage, branches, rollbacks and a transcript.

    Args:
        session_id: Chain session (default "default")

    """
    with get_default_logger().context(session_id=session_id, tool_name="chainsummary"):
        try:
            return _result_json(get_chain_manager().summarize(session_id=session_id))
        except Exception as e:
            error = ToolExecutionError("chainsummary", str(e))
            logger.error(f"Chain summary failed: {e}")
            return _json(error.to_dict(), indent=False)


# =============================================================================
# TOOL 3: LOADTEMPLATE
# =============================================================================


@mcp.tool
async def loadtemplate(name: str, session_id: str = DEFAULT_SESSION_ID) -> str:
    """Load a reasoning template, adopting its mode and problem type.

    Available templates: GSM8K Math, Coin Flip, Creative Writing, Tree
    Exploration, Decision Tree, Debugging Tree, Research Tree, Feature Design
    Tree, Learning Tree.

    Args:
        name: Exact template name
        session_id: Chain session (default "default")

    """
    with get_default_logger().context(session_id=session_id, tool_name="loadtemplate"):
        try:
            return _result_json(get_chain_manager().load_template(name, session_id=session_id))
        except Exception as e:
            error = ToolExecutionError("loadtemplate", str(e), {"name": name})
            logger.error(f"Load template failed: {e}")
            return _json(error.to_dict(), indent=False)


# =============================================================================
# TOOL 4: RESETCHAIN
# =============================================================================


@mcp.tool
async def resetchain(session_id: str = DEFAULT_SESSION_ID) -> str:
    """Clear the session's history, branches, snapshots and rollback log.

    Args:
        session_id: Chain session (default "default")

    """
    with get_default_logger().context(session_id=session_id, tool_name="resetchain"):
        try:
            return _result_json(get_chain_manager().reset(session_id=session_id))
        except Exception as e:
            error = ToolExecutionError("resetchain", str(e))
            logger.error(f"Reset chain failed: {e}")
            return _json(error.to_dict(), indent=False)


# =============================================================================
# SERVER ENTRY POINT
# =============================================================================


def main() -> None:
    """Run the Enhanced CoT MCP server."""
    get_default_logger()
    cfg = get_config()
    server = cfg.server
    logger.info(f"Starting {server.name} (transport: {server.transport})")
    logger.debug(f"Configuration: {cfg.to_dict()}")

    if server.transport == "stdio":
        mcp.run(transport="stdio")
    elif server.transport == "http":
        mcp.run(transport="streamable-http", host=server.host, port=server.port)
    elif server.transport == "sse":
        mcp.run(transport="sse", host=server.host, port=server.port)
    else:
        logger.warning(f"Unknown transport '{server.transport}', falling back to stdio")
        mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
