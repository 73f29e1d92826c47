"""Data models for probe options and loudness reports."""

import math
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Union

from loudness_probe.config import (
    BS1770GAIN_BINARY,
    DURATION_PATTERN,
    HIGHPASS_CUTOFF_HZ,
    SOX_BINARY,
)
from loudness_probe.exceptions import ProbeConfigurationError


class DurationUnit(str, Enum):
    """Unit the report's duration is expressed in."""
    seconds = "seconds"
    microseconds = "microseconds"


@dataclass(frozen=True)
class ProbeOptions:
    """Selects which variant of the measurement pipeline runs."""

    measure_duration: bool = True
    """Run sox to measure the file length."""

    highpass: bool = False
    """Measure loudness on a highpass-filtered temporary copy."""

    highpass_cutoff_hz: float = HIGHPASS_CUTOFF_HZ
    """Cutoff of the highpass filter in Hz."""

    include_maxima: bool = False
    """Also request momentary and short-term maximum loudness."""

    duration_unit: DurationUnit = DurationUnit.seconds
    """Seconds as a float, or whole microseconds as an int."""

    timeout: Optional[float] = None
    """Deadline per subprocess in seconds (None waits forever)."""

    sox_binary: str = SOX_BINARY
    bs1770gain_binary: str = BS1770GAIN_BINARY

    duration_pattern: str = field(default=DURATION_PATTERN, repr=False)
    """Regex with a 'length' group, matched against sox's stderr."""

    def __post_init__(self):
        if self.highpass and not self.measure_duration:
            raise ProbeConfigurationError(
                "highpass requires measure_duration: the filtered copy is "
                "written by the same sox invocation that measures length"
            )
        if not math.isfinite(self.highpass_cutoff_hz) or self.highpass_cutoff_hz <= 0:
            raise ProbeConfigurationError(
                f"highpass_cutoff_hz must be a positive number, got {self.highpass_cutoff_hz}"
            )
        if self.timeout is not None and (not math.isfinite(self.timeout) or self.timeout <= 0):
            raise ProbeConfigurationError(
                f"timeout must be a positive number, got {self.timeout}"
            )
        # Accept plain strings such as "microseconds"
        try:
            unit = DurationUnit(self.duration_unit)
        except ValueError as e:
            raise ProbeConfigurationError(f"Unknown duration unit: {e}") from e
        object.__setattr__(self, "duration_unit", unit)

    def compile_duration_pattern(self) -> "re.Pattern[str]":
        """Compile the duration pattern.

        Raises:
            ProbeConfigurationError: If the pattern is invalid or has no 'length' group
        """
        try:
            pattern = re.compile(self.duration_pattern)
        except re.error as e:
            raise ProbeConfigurationError(f"Cannot compile duration pattern: {e}") from e
        if "length" not in pattern.groupindex:
            raise ProbeConfigurationError(
                f"Duration pattern {self.duration_pattern!r} has no 'length' group"
            )
        return pattern

    @classmethod
    def minimal(cls, **overrides) -> "ProbeOptions":
        """Integrated loudness, true peak and range of the unfiltered file, length in seconds."""
        return cls(**overrides)

    @classmethod
    def richest(cls, **overrides) -> "ProbeOptions":
        """All metrics of a highpass-filtered copy, length in microseconds."""
        settings = {
            "highpass": True,
            "include_maxima": True,
            "duration_unit": DurationUnit.microseconds,
        }
        settings.update(overrides)
        return cls(**settings)


@dataclass(frozen=True)
class LoudnessReport:
    """Loudness and duration of one audio file."""

    integrated_loudness: float
    """Integrated loudness in LUFS."""

    true_peak: float
    """Maximum true peak, as reported by bs1770gain's tpfs attribute."""

    loudness_range: float
    """Loudness range in LU."""

    momentary_maximum: Optional[float] = None
    """Maximum momentary loudness (400ms window) in LUFS."""

    shortterm_maximum: Optional[float] = None
    """Maximum short-term loudness (3s window) in LUFS."""

    duration: Optional[Union[float, int]] = None
    """Length in seconds (float) or microseconds (int), see duration_unit."""

    duration_unit: Optional[DurationUnit] = None

    @property
    def duration_seconds(self) -> Optional[float]:
        """Length in seconds regardless of the unit it was recorded in."""
        if self.duration is None:
            return None
        if self.duration_unit == DurationUnit.microseconds:
            return self.duration / 1_000_000
        return float(self.duration)

    def to_dict(self) -> dict:
        """JSON-ready mapping of the report."""
        return {
            "integrated_loudness": self.integrated_loudness,
            "true_peak": self.true_peak,
            "loudness_range": self.loudness_range,
            "momentary_maximum": self.momentary_maximum,
            "shortterm_maximum": self.shortterm_maximum,
            "duration": self.duration,
            "duration_unit": self.duration_unit.value if self.duration_unit else None,
        }

    def __str__(self) -> str:
        parts = [
            f"Integrated: {self.integrated_loudness:.1f} LUFS",
            f"TP: {self.true_peak:.1f}",
            f"LRA: {self.loudness_range:.1f} LU",
        ]
        if self.momentary_maximum is not None:
            parts.append(f"Max M: {self.momentary_maximum:.1f} LUFS")
        if self.shortterm_maximum is not None:
            parts.append(f"Max S: {self.shortterm_maximum:.1f} LUFS")
        if self.duration_seconds is not None:
            parts.append(f"Length: {self.duration_seconds:.2f} s")
        return " | ".join(parts)
