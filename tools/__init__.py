"""
Tools package for headspace-pco2-mcp.

Contains MCP tool implementations for FastMCP server.
"""

from .headspace_calculation import (
    headspace_pco2,
    headspace_pco2_table,
    list_constant_sets,
    solve_batch,
    solve_sample,
)

__all__ = [
    "headspace_pco2",
    "headspace_pco2_table",
    "list_constant_sets",
    "solve_batch",
    "solve_sample",
]
