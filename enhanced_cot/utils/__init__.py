"""Utility modules for Enhanced CoT MCP."""

from .errors import (
    ChainOperationError,
    ConsensusError,
    EnhancedCoTException,
    InputValidationError,
    RollbackError,
    TemplateNotFoundError,
    ToolExecutionError,
)
from .session import SessionManager, SessionNotFoundError

__all__ = [
    # Errors
    "ChainOperationError",
    "ConsensusError",
    "EnhancedCoTException",
    "InputValidationError",
    "RollbackError",
    "TemplateNotFoundError",
    "ToolExecutionError",
    # Sessions
    "SessionManager",
    "SessionNotFoundError",
]
