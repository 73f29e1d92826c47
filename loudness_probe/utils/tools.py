"""External tool subprocess utilities."""

import logging
import shutil
import subprocess
from dataclasses import dataclass
from typing import Optional, Protocol

from loudness_probe.exceptions import ToolNotFoundError, ToolTimeoutError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ToolResult:
    """Captured outcome of one external tool invocation."""

    args: tuple[str, ...]
    returncode: int
    stdout: str
    stderr: str

    @property
    def ok(self) -> bool:
        return self.returncode == 0


class ToolRunner(Protocol):
    """Anything that can run a command line and hand back its captured output."""

    def __call__(
        self,
        args: list[str],
        input_data: Optional[bytes] = None,
        timeout: Optional[float] = None,
    ) -> ToolResult: ...


def check_tool(name: str) -> bool:
    """Check if an external tool is available in PATH.

    Args:
        name: Executable name (e.g. 'sox')

    Returns:
        True if the tool is available, False otherwise
    """
    return shutil.which(name) is not None


def get_tool_path(name: str) -> str:
    """Get the path to an external tool executable.

    Args:
        name: Executable name

    Returns:
        Path to the executable

    Raises:
        ToolNotFoundError: If the tool is not found
    """
    path = shutil.which(name)
    if path is None:
        raise ToolNotFoundError(
            f"{name} not found. Please install {name} and ensure it's in your PATH.",
            tool=name,
        )
    return path


def run_tool(
    args: list[str],
    input_data: Optional[bytes] = None,
    timeout: Optional[float] = None,
) -> ToolResult:
    """Run an external tool and capture its output.

    A non-zero exit is returned, not raised; callers decide what it means.

    Args:
        args: Command line, executable first
        input_data: Optional bytes to pipe to stdin
        timeout: Optional timeout in seconds

    Returns:
        ToolResult with decoded stdout, stderr and return code

    Raises:
        ToolNotFoundError: If the executable is not in PATH or cannot be launched
        ToolTimeoutError: If the command times out (the process is killed)
    """
    tool = args[0]
    cmd = [get_tool_path(tool)] + list(args[1:])
    logger.debug("Running %s", " ".join(cmd))

    try:
        result = subprocess.run(
            cmd,
            input=input_data,
            capture_output=True,
            timeout=timeout,
        )
    except subprocess.TimeoutExpired as e:
        raise ToolTimeoutError(
            f"{tool} did not finish within {timeout} seconds",
            tool=tool,
            stderr=_decode(e.stderr),
        ) from e
    except OSError as e:
        raise ToolNotFoundError(f"Cannot run {tool}: {e}", tool=tool) from e

    logger.debug("%s exited with code %d", tool, result.returncode)

    return ToolResult(
        args=tuple(args),
        returncode=result.returncode,
        stdout=_decode(result.stdout),
        stderr=_decode(result.stderr),
    )


def _decode(data: Optional[bytes]) -> str:
    if not data:
        return ""
    return data.decode("utf-8", errors="replace")
