"""BS.1770 loudness measurement using bs1770gain and sox."""

import logging
import tempfile
from contextlib import contextmanager
from decimal import Decimal
from pathlib import Path
from typing import Iterator, Optional, Type, Union

from loudness_probe.config import (
    BS1770GAIN_BASE_FLAGS,
    BS1770GAIN_MAXIMA_FLAGS,
    BS1770GAIN_OUTPUT_ARGS,
    TEMP_DIR_PREFIX,
)
from loudness_probe.core.parser import LoudnessMetrics, parse_loudness_xml
from loudness_probe.core.report import DurationUnit, LoudnessReport, ProbeOptions
from loudness_probe.exceptions import (
    DurationNotFoundError,
    DurationParseError,
    DurationToolError,
    LoudnessToolError,
    TempResourceError,
    ToolError,
    ToolNotFoundError,
)
from loudness_probe.utils.conversion import parse_seconds, seconds_to_microseconds
from loudness_probe.utils.tools import ToolResult, ToolRunner, run_tool

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


@contextmanager
def filtered_copy(file_path: PathLike) -> Iterator[Path]:
    """Yield a path for a temporary copy of file_path inside a fresh private directory.

    The copy keeps the original file name so sox picks the same output format.
    Both the file and its directory are removed on exit, whatever happened
    inside the block. Cleanup failures are logged and never raised.

    Raises:
        TempResourceError: If the temporary directory cannot be created
    """
    try:
        tmp_dir = Path(tempfile.mkdtemp(prefix=TEMP_DIR_PREFIX))
    except OSError as e:
        raise TempResourceError(f"Error creating temporary directory: {e}") from e

    tmp_path = tmp_dir / Path(file_path).name
    try:
        yield tmp_path
    finally:
        try:
            tmp_path.unlink(missing_ok=True)
        except OSError as e:
            logger.debug("Could not remove temporary file %s: %s", tmp_path, e)
        try:
            tmp_dir.rmdir()
        except OSError as e:
            logger.debug("Could not remove temporary directory %s: %s", tmp_dir, e)


class LoudnessProbe:
    """Measure loudness and length of audio files with bs1770gain and sox.

    The options pick the variant: plain integrated loudness, true peak and
    range of the file as is, or, with highpass enabled, of a copy filtered at
    150 Hz so bass-heavy material does not skew the measurement.
    """

    def __init__(
        self,
        options: Optional[ProbeOptions] = None,
        runner: Optional[ToolRunner] = None,
    ):
        self.options = options or ProbeOptions()
        self.runner = runner or run_tool
        self._duration_pattern = self.options.compile_duration_pattern()

    def compute_loudness(self, file_path: PathLike) -> LoudnessReport:
        """Analyze an audio file and return its loudness report.

        Args:
            file_path: Path to the audio file, passed to the tools unchecked

        Returns:
            LoudnessReport with all requested measurements

        Raises:
            LoudnessProbeError: On any failure, no partial report is returned
        """
        file_path = Path(file_path)

        if self.options.highpass:
            with filtered_copy(file_path) as tmp_path:
                seconds = self._measure_duration(file_path, output_path=tmp_path)
                metrics = self._measure_loudness(tmp_path)
        else:
            seconds = None
            if self.options.measure_duration:
                seconds = self._measure_duration(file_path)
            metrics = self._measure_loudness(file_path)

        return self._assemble(metrics, seconds)

    def _measure_duration(
        self,
        file_path: Path,
        output_path: Optional[Path] = None,
    ) -> Decimal:
        """Run `sox ... stat` and read the length from its stderr.

        With output_path set, sox also writes a highpass-filtered copy there.
        """
        sox = self.options.sox_binary
        if output_path is None:
            args = [sox, str(file_path), "-n", "stat"]
        else:
            args = [
                sox,
                str(file_path),
                str(output_path),
                "highpass",
                f"{self.options.highpass_cutoff_hz:g}",
                "stat",
            ]

        result = self._run(args, DurationToolError, "Cannot measure audio length")

        # sox prints stat output on stderr
        match = self._duration_pattern.search(result.stderr)
        if match is None:
            raise DurationNotFoundError("Cannot get audio length: regex did not match")

        length = match.group("length")
        try:
            return parse_seconds(length)
        except ValueError as e:
            raise DurationParseError(f"Cannot parse audio length: {e}") from e

    def _measure_loudness(self, file_path: Path) -> LoudnessMetrics:
        """Run bs1770gain in XML mode and parse its stdout."""
        flags = BS1770GAIN_BASE_FLAGS
        if self.options.include_maxima:
            flags += BS1770GAIN_MAXIMA_FLAGS

        args = [self.options.bs1770gain_binary, flags, *BS1770GAIN_OUTPUT_ARGS, str(file_path)]
        result = self._run(args, LoudnessToolError, "Cannot calculate loudness")

        return parse_loudness_xml(result.stdout, include_maxima=self.options.include_maxima)

    def _run(
        self,
        args: list[str],
        error_cls: Type[ToolError],
        message: str,
    ) -> ToolResult:
        tool = args[0]
        try:
            result = self.runner(args, timeout=self.options.timeout)
        except ToolNotFoundError as e:
            raise error_cls(f"{message}: {e}", tool=tool, stderr=e.stderr) from e

        if not result.ok:
            stderr = result.stderr.strip()
            detail = f": {stderr}" if stderr else ""
            raise error_cls(
                f"{message}: {tool} exited with code {result.returncode}{detail}",
                tool=tool,
                stderr=result.stderr,
                returncode=result.returncode,
            )
        return result

    def _assemble(
        self,
        metrics: LoudnessMetrics,
        seconds: Optional[Decimal],
    ) -> LoudnessReport:
        duration = None
        duration_unit = None
        if seconds is not None:
            duration_unit = self.options.duration_unit
            if duration_unit == DurationUnit.microseconds:
                duration = seconds_to_microseconds(seconds)
            else:
                duration = float(seconds)

        return LoudnessReport(
            integrated_loudness=metrics.integrated,
            true_peak=metrics.true_peak,
            loudness_range=metrics.range,
            momentary_maximum=metrics.momentary,
            shortterm_maximum=metrics.shortterm_maximum,
            duration=duration,
            duration_unit=duration_unit,
        )


def compute_loudness(
    file_path: PathLike,
    options: Optional[ProbeOptions] = None,
    runner: Optional[ToolRunner] = None,
) -> LoudnessReport:
    """Measure a single file with a one-off LoudnessProbe."""
    return LoudnessProbe(options, runner).compute_loudness(file_path)
