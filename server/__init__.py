"""MCP stdio server exposing Gmail tools."""

__version__ = "1.0.0"
