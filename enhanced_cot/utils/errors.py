"""Custom exceptions for Enhanced CoT MCP."""

from __future__ import annotations

from typing import Any


class EnhancedCoTException(Exception):
    """Base exception for Enhanced CoT MCP."""

    pass


class InputValidationError(EnhancedCoTException):
    """Raised for a malformed, missing, or out-of-range input field."""

    def __init__(self, field: str, message: str) -> None:
        self.field = field
        self.message = message
        super().__init__(f"Invalid {field}: {message}")


class ChainOperationError(EnhancedCoTException):
    """Raised when a well-formed request cannot be carried out.

    Always recoverable; tagged with the operation that failed.
    """

    operation = "chain"

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(message)


class RollbackError(ChainOperationError):
    """Raised when a rollback target is out of range or cannot be located."""

    operation = "rollback"


class ConsensusError(ChainOperationError):
    """Raised when consensus is requested over zero paths."""

    operation = "consensus"


class TemplateNotFoundError(ChainOperationError):
    """Raised when a template name is not in the catalog."""

    operation = "load_template"


class ToolExecutionError(Exception):
    """Raised when tool execution fails in MCP context.

    Provides structured error information that can be returned
    to the LLM client in a parseable format.
    """

    def __init__(
        self,
        tool_name: str,
        error_message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize tool execution error.

        Args:
            tool_name: Name of the tool that failed.
            error_message: Human-readable error message.
            details: Optional dictionary with additional error details.

        """
        self.tool_name = tool_name
        self.error_message = error_message
        self.details = details or {}
        super().__init__(f"Tool {tool_name} failed: {error_message}")

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization.

        Returns:
            Dictionary representation of the error.

        """
        return {
            "status": "failed",
            "error": self.error_message,
            "tool": self.tool_name,
            "details": self.details,
        }
