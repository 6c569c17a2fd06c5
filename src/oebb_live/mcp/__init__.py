"""MCP server for ÖBB live data."""

from .server import OebbMCPServer, main, main_sync

__all__ = ["OebbMCPServer", "main", "main_sync"]
