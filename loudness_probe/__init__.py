"""Loudness and length measurement of audio files via bs1770gain and sox."""

from loudness_probe.core import (
    DurationUnit,
    LoudnessProbe,
    LoudnessReport,
    ProbeOptions,
    compute_loudness,
)
from loudness_probe.exceptions import LoudnessProbeError

__version__ = "0.1.0"

__all__ = [
    "DurationUnit",
    "LoudnessProbe",
    "LoudnessReport",
    "ProbeOptions",
    "compute_loudness",
    "LoudnessProbeError",
]
