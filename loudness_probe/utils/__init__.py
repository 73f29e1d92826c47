"""Utility modules."""

from loudness_probe.utils.conversion import parse_seconds, seconds_to_microseconds
from loudness_probe.utils.tools import ToolResult, ToolRunner, check_tool, run_tool

__all__ = [
    "parse_seconds",
    "seconds_to_microseconds",
    "ToolResult",
    "ToolRunner",
    "check_tool",
    "run_tool",
]
