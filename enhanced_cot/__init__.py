"""Enhanced CoT MCP - Adaptive chain-of-thought state manager."""

__version__ = "1.0.0"
