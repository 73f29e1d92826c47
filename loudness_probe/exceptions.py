"""
Exception classes for loudness-probe.

Every failure of a probe surfaces as a single LoudnessProbeError subclass;
no partial report is ever returned.
"""
from typing import Optional


class LoudnessProbeError(Exception):
    """Base exception for all loudness-probe errors."""
    pass


class ProbeConfigurationError(LoudnessProbeError):
    """Raised when probe options or the duration pattern are invalid."""
    pass


class TempResourceError(LoudnessProbeError):
    """Raised when the temporary directory for the filtered copy cannot be created."""
    pass


class ToolError(LoudnessProbeError):
    """Raised when an external tool fails to start or exits non-zero."""

    def __init__(
        self,
        message: str,
        tool: str = "",
        stderr: str = "",
        returncode: Optional[int] = None,
    ):
        super().__init__(message)
        self.tool = tool
        self.stderr = stderr
        self.returncode = returncode


class ToolNotFoundError(ToolError):
    """Raised when an external tool cannot be launched."""
    pass


class ToolTimeoutError(ToolError):
    """Raised when an external tool exceeds its deadline."""
    pass


class DurationToolError(ToolError):
    """Raised when the statistics tool (sox) fails."""
    pass


class LoudnessToolError(ToolError):
    """Raised when the loudness tool (bs1770gain) fails."""
    pass


class OutputParseError(LoudnessProbeError):
    """Raised when tool output cannot be interpreted."""
    pass


class DurationNotFoundError(OutputParseError):
    """Raised when the statistics output has no length line."""
    pass


class DurationParseError(OutputParseError):
    """Raised when the captured length is not a number."""
    pass


class LoudnessParseError(OutputParseError):
    """Raised when the loudness XML does not match the expected schema."""
    pass


__all__ = [
    "LoudnessProbeError",
    "ProbeConfigurationError",
    "TempResourceError",
    "ToolError",
    "ToolNotFoundError",
    "ToolTimeoutError",
    "DurationToolError",
    "LoudnessToolError",
    "OutputParseError",
    "DurationNotFoundError",
    "DurationParseError",
    "LoudnessParseError",
]
