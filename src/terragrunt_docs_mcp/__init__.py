"""Terragrunt documentation MCP server.

Exposes the Terragrunt documentation tree and open GitHub issues to AI agents
as MCP tools.
"""

__version__ = "0.1.0"
